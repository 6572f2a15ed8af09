import logging

from fastapi import FastAPI
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
import sentry_sdk

from jd2resume.api.v1.health import router as health_router
from jd2resume.api.v1.relay import router as relay_router
from jd2resume.core.rate_limit import limiter, relay_rate_limit_exceeded
from jd2resume.core.config import settings

logging.basicConfig(level=settings.log_level, format="%(message)s")
if settings.sentry_dsn:
    sentry_sdk.init(dsn=settings.sentry_dsn)

# CORS headers are set by the relay routes themselves so that preflight
# answers 204 and error bodies carry them too.
app = FastAPI(title="JD2Resume Gemini Relay", version="0.1.0")

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, relay_rate_limit_exceeded)
app.add_middleware(SlowAPIMiddleware)

app.include_router(health_router, prefix="/v1", tags=["Health"])
app.include_router(relay_router, prefix="/v1", tags=["Relay"])
