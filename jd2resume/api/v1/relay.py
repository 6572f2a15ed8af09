import logging

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from jd2resume.ai.errors import ConfigurationError, InvalidResponseError, classify_failure
from jd2resume.ai.gemini import GeminiRestClient
from jd2resume.ai.sanitize import parse_model_json
from jd2resume.ai.types import FailureKind
from jd2resume.core.config import settings
from jd2resume.core.cors import relay_cors_headers
from jd2resume.core.rate_limit import rate_limit

logger = logging.getLogger(__name__)

router = APIRouter()

RELAY_ERRORS: dict[FailureKind, tuple[int, str]] = {
    FailureKind.RATE_LIMITED: (status.HTTP_429_TOO_MANY_REQUESTS, "API quota exceeded"),
    FailureKind.SERVICE_UNAVAILABLE: (status.HTTP_503_SERVICE_UNAVAILABLE, "Service temporarily unavailable"),
    FailureKind.SAFETY_BLOCKED: (status.HTTP_400_BAD_REQUEST, "Request blocked due to safety settings"),
    FailureKind.NETWORK_ERROR: (status.HTTP_502_BAD_GATEWAY, "Network connectivity issue"),
}
UNEXPECTED_ERROR = (status.HTTP_500_INTERNAL_SERVER_ERROR, "An unexpected error occurred")


class RelayRequest(BaseModel):
    prompt: str = ""


def get_gemini_client() -> GeminiRestClient:
    return GeminiRestClient(
        api_key=settings.gemini_api_key,
        model=settings.gemini_model,
        api_base=settings.gemini_api_base,
        timeout_s=settings.ai_request_timeout_s,
    )


def _json(status_code: int, content) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=content, headers=relay_cors_headers())


@router.options("/gemini-proxy", include_in_schema=False)
async def gemini_proxy_preflight():
    return Response(status_code=status.HTTP_204_NO_CONTENT, headers=relay_cors_headers())


@router.post(
    "/gemini-proxy",
    summary="Gemini relay",
    description="Forward a prompt to Gemini with the server-side key and return the parsed JSON answer.",
)
@rate_limit()
async def gemini_proxy(
    request: Request,
    payload: RelayRequest,
    client: GeminiRestClient = Depends(get_gemini_client),
):
    _ = request
    prompt = payload.prompt.strip()
    if not prompt:
        return _json(status.HTTP_400_BAD_REQUEST, {"error": "Prompt is required"})

    try:
        text = await client.generate_text(prompt)
    except ConfigurationError:
        logger.error("relay_configuration_error: GEMINI_API_KEY is not set")
        return _json(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            {"error": "Server configuration error: API key not configured"},
        )
    except Exception as exc:
        kind = classify_failure(exc)
        status_code, message = RELAY_ERRORS.get(kind, UNEXPECTED_ERROR)
        logger.warning("relay_upstream_failed kind=%s status=%s error=%s", kind.value, status_code, exc)
        return _json(status_code, {"error": message})

    try:
        parsed = parse_model_json(text)
    except InvalidResponseError as exc:
        return _json(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            {"error": "Invalid JSON response from Gemini API", "rawResponse": exc.raw_text},
        )
    return _json(status.HTTP_200_OK, parsed)
