from .extract import DocumentExtractionError, extract_text, extract_text_from_path
from .models import ExtractedDocument

__all__ = ["DocumentExtractionError", "ExtractedDocument", "extract_text", "extract_text_from_path"]
