from __future__ import annotations

import logging
from typing import Any

import httpx

from jd2resume.ai.errors import ConfigurationError, UpstreamError

logger = logging.getLogger(__name__)


def _error_body(response: httpx.Response) -> dict[str, Any]:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


class RelayTransport:
    """Posts the prompt to the trusted relay, which holds the provider key."""

    name = "relay"

    def __init__(
        self,
        *,
        relay_url: str,
        timeout_s: float = 60.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        self._relay_url = (relay_url or "").strip()
        self._timeout_s = timeout_s
        self._http_client = http_client

    async def _post(self, client: httpx.AsyncClient, prompt: str) -> httpx.Response:
        return await client.post(
            self._relay_url,
            json={"prompt": prompt},
            headers={"Content-Type": "application/json"},
        )

    async def invoke(self, prompt: str) -> str:
        if not self._relay_url:
            raise ConfigurationError("Relay URL is not configured")

        if self._http_client is not None:
            response = await self._post(self._http_client, prompt)
        else:
            async with httpx.AsyncClient(timeout=self._timeout_s) as client:
                response = await self._post(client, prompt)

        if not response.is_success:
            body = _error_body(response)
            error = str(body.get("error") or f"HTTP error! status: {response.status_code}")
            raw_response = body.get("rawResponse")
            logger.debug("relay_error status=%s error=%s", response.status_code, error)
            raise UpstreamError(
                f"Relay error {response.status_code}: {error}",
                status_code=response.status_code,
                raw_response=str(raw_response) if raw_response is not None else None,
            )
        return response.text
