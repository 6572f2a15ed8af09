"""Failure taxonomy for model invocations.

Transports raise raw errors (:class:`UpstreamError`, ``httpx`` exceptions,
timeouts). :func:`classify_failure` is the only place that turns those into a
:class:`FailureKind`; the orchestrator's retry policy and the relay's status
mapping are both driven by it.

Classification is substring based because neither the provider nor the relay
return structured error codes. The checks run in a fixed order (rate limit,
service unavailable, safety, network) and the first match wins, so an error
mentioning both "429" and "network" is a rate limit.
The word checks are case-sensitive; only the safety check on a 400 status
ignores case.
"""

from __future__ import annotations

import asyncio
from typing import Any

import httpx

from jd2resume.ai.types import FailureKind

USER_MESSAGES: dict[FailureKind, str] = {
    FailureKind.RATE_LIMITED: (
        "You have exceeded your API quota. Please check your plan and billing details, or try again later."
    ),
    FailureKind.SERVICE_UNAVAILABLE: "The AI service is currently overloaded. Please try again in a few moments.",
    FailureKind.SAFETY_BLOCKED: "The request was blocked due to safety settings. Please modify your input.",
    FailureKind.NETWORK_ERROR: (
        "Network connectivity issue. Please check your internet connection and try again."
    ),
    FailureKind.CONFIGURATION_ERROR: "The AI service is not configured. Please provide an API key and try again.",
    FailureKind.INVALID_RESPONSE: "Failed to generate content from AI after multiple attempts.",
    FailureKind.UNKNOWN: "Failed to generate content from AI after multiple attempts.",
}

NO_STRATEGIES_MESSAGE = "All API calling methods failed. Please try again later."


class AIInvocationError(RuntimeError):
    def __init__(self, message: str, *, kind: FailureKind = FailureKind.UNKNOWN):
        super().__init__(message)
        self.kind = kind


class ConfigurationError(AIInvocationError):
    def __init__(self, message: str):
        super().__init__(message, kind=FailureKind.CONFIGURATION_ERROR)


class InvalidResponseError(AIInvocationError):
    def __init__(self, message: str, *, raw_text: str = ""):
        super().__init__(message, kind=FailureKind.INVALID_RESPONSE)
        self.raw_text = raw_text


class ResolutionError(AIInvocationError):
    """Final, user-facing failure of a whole resolution."""

    def __init__(self, kind: FailureKind, message: str | None = None):
        super().__init__(message or user_message(kind), kind=kind)


class UpstreamError(RuntimeError):
    """Unclassified failure reported by a transport."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        raw_response: str | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.raw_response = raw_response


def user_message(kind: FailureKind) -> str:
    return USER_MESSAGES.get(kind, USER_MESSAGES[FailureKind.UNKNOWN])


def _status_code(exc: BaseException) -> int | None:
    status = getattr(exc, "status_code", None)
    if isinstance(status, int):
        return status
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code
    return None


def classify_failure(exc: BaseException) -> FailureKind:
    if isinstance(exc, AIInvocationError):
        return exc.kind

    text = str(exc)
    lowered = text.lower()
    status = _status_code(exc)

    if status == 429 or "429" in text or "quota" in text:
        return FailureKind.RATE_LIMITED
    if status == 503 or "503" in text or "overloaded" in text:
        return FailureKind.SERVICE_UNAVAILABLE
    if "SAFETY" in text or (status == 400 and "safety" in lowered):
        return FailureKind.SAFETY_BLOCKED
    if (
        status == 502
        or "network" in text
        or "fetch" in text
        or isinstance(exc, (httpx.TransportError, asyncio.TimeoutError))
    ):
        return FailureKind.NETWORK_ERROR
    if getattr(exc, "raw_response", None) is not None:
        return FailureKind.INVALID_RESPONSE
    return FailureKind.UNKNOWN


def error_payload(exc: BaseException) -> dict[str, Any]:
    payload: dict[str, Any] = {"error": str(exc), "kind": classify_failure(exc).value}
    raw_text = getattr(exc, "raw_text", None) or getattr(exc, "raw_response", None)
    if raw_text:
        payload["rawResponse"] = raw_text
    return payload
