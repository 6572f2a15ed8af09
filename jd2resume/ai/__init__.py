from .errors import (
    AIInvocationError,
    ConfigurationError,
    InvalidResponseError,
    ResolutionError,
    UpstreamError,
    classify_failure,
)
from .factory import build_strategies
from .orchestrator import InvocationOrchestrator
from .sanitize import parse_model_json, sanitize_json_text
from .types import FailureKind, ModelTransport

__all__ = [
    "AIInvocationError",
    "ConfigurationError",
    "InvalidResponseError",
    "ResolutionError",
    "UpstreamError",
    "classify_failure",
    "build_strategies",
    "InvocationOrchestrator",
    "parse_model_json",
    "sanitize_json_text",
    "FailureKind",
    "ModelTransport",
]
