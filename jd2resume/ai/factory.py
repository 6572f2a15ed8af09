from __future__ import annotations

import httpx

from jd2resume.ai.transports import DirectTransport, RelayTransport
from jd2resume.ai.types import ModelTransport, StrategyName
from jd2resume.core.config import Settings, settings as default_settings

STRATEGY_ORDER: dict[str, tuple[StrategyName, ...]] = {
    "development": ("direct", "relay"),
    "production": ("relay",),
}


def strategy_order(environment: str) -> tuple[StrategyName, ...]:
    key = (environment or "").strip().lower()
    if key not in STRATEGY_ORDER:
        raise ValueError(f"Unsupported environment '{environment}'")
    return STRATEGY_ORDER[key]


def build_transport(
    name: StrategyName,
    cfg: Settings,
    http_client: httpx.AsyncClient | None = None,
) -> ModelTransport:
    if name == "direct":
        return DirectTransport(
            api_key=cfg.client_gemini_api_key,
            model=cfg.gemini_model,
            api_base=cfg.gemini_api_base,
            timeout_s=cfg.ai_request_timeout_s,
            http_client=http_client,
        )
    if name == "relay":
        return RelayTransport(
            relay_url=cfg.relay_url,
            timeout_s=cfg.ai_request_timeout_s,
            http_client=http_client,
        )
    raise ValueError(f"Unsupported strategy '{name}'")


def build_strategies(
    environment: str | None = None,
    cfg: Settings | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> list[ModelTransport]:
    cfg = cfg or default_settings
    order = strategy_order(environment or cfg.app_env)
    return [build_transport(name, cfg, http_client) for name in order]
