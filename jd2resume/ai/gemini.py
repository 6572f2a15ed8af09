"""Minimal REST client for the Gemini generate-content endpoint.

Used by the direct transport with the client-side key and by the relay
service with the server-side key. It performs a single request and never
retries; retry policy lives in :mod:`jd2resume.ai.orchestrator`.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from jd2resume.ai.errors import ConfigurationError, UpstreamError

logger = logging.getLogger(__name__)

GENERATION_CONFIG: dict[str, Any] = {
    "temperature": 0,
    "topP": 0.95,
    "topK": 64,
    "maxOutputTokens": 8192,
    "responseMimeType": "application/json",
}

HARM_CATEGORIES = (
    "HARM_CATEGORY_HARASSMENT",
    "HARM_CATEGORY_HATE_SPEECH",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT",
    "HARM_CATEGORY_DANGEROUS_CONTENT",
)

SAFETY_SETTINGS: list[dict[str, str]] = [
    {"category": category, "threshold": "BLOCK_MEDIUM_AND_ABOVE"} for category in HARM_CATEGORIES
]


def build_generate_content_body(prompt: str) -> dict[str, Any]:
    return {
        "contents": [{"role": "user", "parts": [{"text": prompt}]}],
        "generationConfig": dict(GENERATION_CONFIG),
        "safetySettings": [dict(item) for item in SAFETY_SETTINGS],
    }


def _provider_error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text[:500]
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict):
            return str(error.get("message") or error.get("status") or "")
        if error:
            return str(error)
    return ""


def extract_response_text(data: Any) -> str:
    """Return ``candidates[0].content.parts[0].text`` or raise ``UpstreamError``."""
    if not isinstance(data, dict):
        raise UpstreamError("No response text received from API")

    candidates = data.get("candidates") or []
    first = candidates[0] if candidates and isinstance(candidates[0], dict) else {}
    parts = (first.get("content") or {}).get("parts") or []
    text = parts[0].get("text") if parts and isinstance(parts[0], dict) else None
    if text:
        return str(text)

    block_reason = (data.get("promptFeedback") or {}).get("blockReason")
    finish_reason = first.get("finishReason")
    if block_reason or finish_reason == "SAFETY":
        raise UpstreamError(f"Response blocked: {block_reason or finish_reason}")
    raise UpstreamError("No response text received from API")


class GeminiRestClient:
    def __init__(
        self,
        *,
        api_key: str | None,
        model: str,
        api_base: str,
        timeout_s: float = 60.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        self._api_key = (api_key or "").strip()
        self._model = model
        self._api_base = api_base.rstrip("/")
        self._timeout_s = timeout_s
        self._http_client = http_client

    @property
    def endpoint(self) -> str:
        return f"{self._api_base}/models/{self._model}:generateContent"

    async def _post(self, client: httpx.AsyncClient, body: dict[str, Any]) -> httpx.Response:
        return await client.post(
            self.endpoint,
            params={"key": self._api_key},
            json=body,
            headers={"Content-Type": "application/json"},
        )

    async def generate_text(self, prompt: str) -> str:
        if not self._api_key:
            raise ConfigurationError("Missing API key: aborting external Gemini call")

        body = build_generate_content_body(prompt)
        logger.debug("gemini_request model=%s prompt_len=%s", self._model, len(prompt))
        if self._http_client is not None:
            response = await self._post(self._http_client, body)
        else:
            async with httpx.AsyncClient(timeout=self._timeout_s) as client:
                response = await self._post(client, body)

        if not response.is_success:
            detail = _provider_error_message(response)
            message = f"HTTP error {response.status_code}"
            if detail:
                message = f"{message}: {detail}"
            raise UpstreamError(message, status_code=response.status_code)

        try:
            data = response.json()
        except ValueError as exc:
            raise UpstreamError(
                "Provider returned a non-JSON body",
                status_code=response.status_code,
                raw_response=response.text[:2000],
            ) from exc
        return extract_response_text(data)
