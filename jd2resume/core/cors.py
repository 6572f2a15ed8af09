from __future__ import annotations

# The relay is called from browsers on any origin; it never uses cookies.
RELAY_ALLOWED_ORIGINS = ["*"]
RELAY_ALLOWED_METHODS = ["POST", "OPTIONS"]
RELAY_ALLOWED_HEADERS = ["Content-Type"]


def relay_cors_headers() -> dict[str, str]:
    return {
        "Access-Control-Allow-Origin": RELAY_ALLOWED_ORIGINS[0],
        "Access-Control-Allow-Methods": ", ".join(RELAY_ALLOWED_METHODS),
        "Access-Control-Allow-Headers": ", ".join(RELAY_ALLOWED_HEADERS),
    }
