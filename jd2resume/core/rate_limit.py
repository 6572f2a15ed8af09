from __future__ import annotations

import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from jd2resume.core.config import settings
from jd2resume.core.cors import relay_cors_headers

logger = logging.getLogger(__name__)


def relay_client_key(request: Request) -> str:
    if settings.trust_x_forwarded_for:
        forwarded_for = request.headers.get("x-forwarded-for", "").strip()
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()
    return get_remote_address(request) or "unknown"


limiter = Limiter(key_func=relay_client_key)


def rate_limit(limit: str | None = None):
    if settings.rate_limit_enabled:
        return limiter.limit(limit or settings.rate_limit)

    def decorator(func):
        return func

    return decorator


def relay_rate_limit_exceeded(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning("relay_rate_limited client=%s limit=%s", relay_client_key(request), exc.detail)
    return JSONResponse(
        status_code=429,
        content={"error": "Too many requests. Please wait a moment and try again."},
        headers=relay_cors_headers(),
    )
