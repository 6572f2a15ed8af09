from __future__ import annotations

import codecs
import logging
from io import BytesIO
from pathlib import Path
from typing import Literal

from jd2resume.core.config import settings
from .models import ExtractedDocument

logger = logging.getLogger(__name__)

ExtractionFailure = Literal["empty_file", "file_too_large", "unreadable", "unsupported_format", "no_text"]

TEXT_EXTENSIONS = {"txt", "md"}
MEANINGFUL_TEXT_MIN_CHARS = 50


class DocumentExtractionError(ValueError):
    def __init__(self, message: str, *, reason: ExtractionFailure):
        super().__init__(message)
        self.reason = reason


def _is_meaningful(text: str) -> bool:
    cleaned = text.strip()
    return len(cleaned) >= MEANINGFUL_TEXT_MIN_CHARS and any(ch.isalnum() for ch in cleaned)


def _extract_txt(content: bytes) -> tuple[str, int | None, list[str]]:
    if content.startswith((codecs.BOM_UTF16_LE, codecs.BOM_UTF16_BE)):
        try:
            return content.decode("utf-16"), None, []
        except UnicodeDecodeError as exc:
            raise DocumentExtractionError(
                "Failed to parse text file. Please ensure it's a valid text file.",
                reason="unreadable",
            ) from exc
    try:
        return content.decode("utf-8-sig"), None, []
    except UnicodeDecodeError:
        # latin-1 maps every byte
        return content.decode("latin-1"), None, ["Text was not valid UTF-8 and was read as Latin-1."]


def _extract_pdf(content: bytes, max_pages: int) -> tuple[str, int | None, list[str]]:
    from pypdf import PdfReader
    from pypdf.errors import PdfReadError

    warnings: list[str] = []
    try:
        reader = PdfReader(BytesIO(content))
        if reader.is_encrypted and not reader.decrypt(""):
            raise DocumentExtractionError(
                "Failed to parse PDF file. The PDF is password-protected. "
                "Please remove the password and try again.",
                reason="unreadable",
            )
        page_count = len(reader.pages)
    except DocumentExtractionError:
        raise
    except (PdfReadError, ValueError, OSError, KeyError, IndexError, TypeError) as exc:
        raise DocumentExtractionError(
            "Failed to parse PDF file. The file appears to be corrupted or not a valid PDF.",
            reason="unreadable",
        ) from exc

    if page_count > max_pages:
        warnings.append(f"Only the first {max_pages} of {page_count} pages were read.")

    parts: list[str] = []
    for index, page in enumerate(reader.pages[:max_pages], start=1):
        try:
            page_text = (page.extract_text() or "").strip()
        except Exception as exc:  # noqa: BLE001
            logger.warning("pdf_page_extract_failed page=%s: %s", index, exc)
            warnings.append(f"Page {index} could not be read.")
            continue
        if page_text:
            parts.append(page_text)

    text = "\n".join(parts)
    if text.strip() and not _is_meaningful(text):
        warnings.append("Very little text was found. The PDF may be a scanned image.")
    return text, page_count, warnings


def _extract_docx(content: bytes) -> tuple[str, int | None, list[str]]:
    try:
        from docx import Document

        document = Document(BytesIO(content))
    except Exception as exc:  # python-docx raises several unrelated types for bad archives
        raise DocumentExtractionError(
            "Failed to parse DOCX file. Please ensure it's a valid Word document.",
            reason="unreadable",
        ) from exc
    paragraphs = [p.text.strip() for p in document.paragraphs if p.text and p.text.strip()]
    return "\n".join(paragraphs), None, []


def extract_text(
    filename: str,
    content: bytes,
    *,
    max_bytes: int | None = None,
    max_pages: int | None = None,
) -> ExtractedDocument:
    limit = settings.max_upload_bytes if max_bytes is None else max_bytes
    page_limit = settings.max_pdf_pages if max_pages is None else max_pages

    if not content:
        raise DocumentExtractionError(
            "File appears to be empty. Please select a valid file.", reason="empty_file"
        )
    if len(content) > limit:
        raise DocumentExtractionError(
            f"File is too large. Please select a file smaller than {limit // (1024 * 1024)}MB.",
            reason="file_too_large",
        )

    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    if ext in TEXT_EXTENSIONS:
        source_type = "txt"
        text, page_count, warnings = _extract_txt(content)
    elif ext == "pdf":
        source_type = "pdf"
        text, page_count, warnings = _extract_pdf(content, page_limit)
    elif ext == "docx":
        source_type = "docx"
        text, page_count, warnings = _extract_docx(content)
    elif ext == "doc":
        raise DocumentExtractionError(
            "Legacy .doc is not supported. Convert to .docx.", reason="unsupported_format"
        )
    else:
        raise DocumentExtractionError(
            f"Unsupported file type '.{ext}'. Supported types: .txt, .md, .pdf, .docx",
            reason="unsupported_format",
        )

    text = text.strip()
    if not text:
        raise DocumentExtractionError(
            f"No text could be extracted from '{filename}'. "
            "Please ensure it contains readable text or try a different format.",
            reason="no_text",
        )

    for warning in warnings:
        logger.info("document_extraction_warning file=%s: %s", filename, warning)
    return ExtractedDocument(
        filename=filename,
        source_type=source_type,
        text=text,
        page_count=page_count,
        warnings=warnings,
    )


def extract_text_from_path(file_path: str | Path, **kwargs) -> ExtractedDocument:
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"Input document not found: '{path}'")
    return extract_text(path.name, path.read_bytes(), **kwargs)
