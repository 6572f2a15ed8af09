from __future__ import annotations

import json
import logging
import re
from typing import Any

from jd2resume.ai.errors import InvalidResponseError

logger = logging.getLogger(__name__)

_FENCE_JSON = "```json"
_FENCE = "```"
# Best effort only: a string value containing 'x': is rewritten as well.
_SINGLE_QUOTED_KEY_RE = re.compile(r"'([^']+)'\s*:")
_TRAILING_COMMA_OBJECT_RE = re.compile(r",\s*}")
_TRAILING_COMMA_ARRAY_RE = re.compile(r",\s*]")


def strip_code_fences(raw: str) -> str:
    return (raw or "").replace(_FENCE_JSON, "").replace(_FENCE, "").strip()


def sanitize_json_text(raw: str) -> str:
    cleaned = strip_code_fences(raw)
    fixed = _SINGLE_QUOTED_KEY_RE.sub(r'"\1":', cleaned)
    fixed = _TRAILING_COMMA_OBJECT_RE.sub("}", fixed)
    return _TRAILING_COMMA_ARRAY_RE.sub("]", fixed)


def parse_model_json(raw: str) -> Any:
    cleaned = strip_code_fences(raw)
    fixed = sanitize_json_text(raw)
    try:
        return json.loads(fixed)
    except json.JSONDecodeError as exc:
        logger.warning("model_json_parse_failed error=%s cleaned=%r", exc, cleaned[:2000])
        raise InvalidResponseError(
            f"Invalid JSON response from model: {exc}",
            raw_text=cleaned,
        ) from exc
