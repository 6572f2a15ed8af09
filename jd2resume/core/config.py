from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()

APP_ENVIRONMENTS = {"development", "production"}


def _get_env(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value


def _get_env_bool(name: str, default: bool) -> bool:
    raw = _get_env(name, None)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _get_env_int(name: str, default: int) -> int:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_env_float(name: str, default: float) -> float:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    app_env: str
    gemini_api_key: str | None
    client_gemini_api_key: str | None
    gemini_model: str
    gemini_api_base: str
    relay_url: str
    ai_retries: int
    ai_base_delay_ms: int
    ai_attempt_timeout_s: float | None
    ai_request_timeout_s: float
    log_level: str
    sentry_dsn: str | None
    rate_limit: str
    rate_limit_enabled: bool
    trust_x_forwarded_for: bool
    max_upload_bytes: int
    max_pdf_pages: int

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"

    @property
    def ai_base_delay_s(self) -> float:
        return self.ai_base_delay_ms / 1000.0


def load_settings() -> Settings:
    attempt_timeout = _get_env_float("AI_ATTEMPT_TIMEOUT_S", 0.0)
    return Settings(
        app_env=(_get_env("APP_ENV", "production") or "production").strip().lower(),
        gemini_api_key=_get_env("GEMINI_API_KEY"),
        client_gemini_api_key=_get_env("CLIENT_GEMINI_API_KEY"),
        gemini_model=(_get_env("GEMINI_MODEL", "gemini-2.5-flash") or "gemini-2.5-flash").strip(),
        gemini_api_base=(
            _get_env("GEMINI_API_BASE", "https://generativelanguage.googleapis.com/v1beta")
            or "https://generativelanguage.googleapis.com/v1beta"
        ).rstrip("/"),
        relay_url=_get_env("RELAY_URL", "http://localhost:8000/v1/gemini-proxy")
        or "http://localhost:8000/v1/gemini-proxy",
        ai_retries=max(1, _get_env_int("AI_RETRIES", 3)),
        ai_base_delay_ms=max(0, _get_env_int("AI_BASE_DELAY_MS", 2000)),
        ai_attempt_timeout_s=attempt_timeout if attempt_timeout > 0 else None,
        ai_request_timeout_s=_get_env_float("AI_REQUEST_TIMEOUT_S", 60.0),
        log_level=_get_env("LOG_LEVEL", "INFO") or "INFO",
        sentry_dsn=_get_env("SENTRY_DSN"),
        rate_limit=_get_env("RATE_LIMIT", "30/minute") or "30/minute",
        rate_limit_enabled=_get_env_bool("RATE_LIMIT_ENABLED", True),
        trust_x_forwarded_for=_get_env_bool("TRUST_X_FORWARDED_FOR", False),
        max_upload_bytes=_get_env_int("MAX_UPLOAD_BYTES", 50 * 1024 * 1024),
        max_pdf_pages=_get_env_int("MAX_PDF_PAGES", 10),
    )


settings = load_settings()

if settings.app_env not in APP_ENVIRONMENTS:
    raise RuntimeError("APP_ENV must be either 'development' or 'production'.")
