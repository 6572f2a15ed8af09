from __future__ import annotations

import httpx

from jd2resume.ai.gemini import GeminiRestClient


class DirectTransport:
    """Calls the provider straight from the client with the client-side key.

    Only meant for development setups where that key is already exposed to
    the caller.
    """

    name = "direct"

    def __init__(
        self,
        *,
        api_key: str | None,
        model: str,
        api_base: str,
        timeout_s: float = 60.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        self._client = GeminiRestClient(
            api_key=api_key,
            model=model,
            api_base=api_base,
            timeout_s=timeout_s,
            http_client=http_client,
        )

    async def invoke(self, prompt: str) -> str:
        return await self._client.generate_text(prompt)
