"""Locate the JSON object inside free-form model output.

Providers are asked for raw JSON but routinely wrap it in markdown
fences or surround it with prose.  ``extract_json_text`` is a heuristic
that maximises the odds of a strict parse succeeding; it never parses
anything itself.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

_LEADING_FENCE = re.compile(r"^```(?:json)?", re.IGNORECASE)
_TRAILING_FENCE = "```"


def extract_json_text(raw: Any) -> str:
    """Return the substring of ``raw`` most likely to parse as a JSON object."""
    if not isinstance(raw, str):
        return ""

    text = _LEADING_FENCE.sub("", raw.strip())
    if text.endswith(_TRAILING_FENCE):
        text = text[: -len(_TRAILING_FENCE)]

    first_open = text.find("{")
    last_close = text.rfind("}")
    if first_open != -1 and last_close > first_open:
        text = text[first_open : last_close + 1]

    return text.strip()


def load_json_object(raw: Any) -> dict[str, Any]:
    """Strictly decode a JSON object from model output.

    Raises ``ValueError`` (``json.JSONDecodeError`` included) when the
    extracted text is not valid JSON or does not decode to an object.
    """
    parsed = json.loads(extract_json_text(raw))
    if not isinstance(parsed, dict):
        raise ValueError(f"Expected a JSON object, got {type(parsed).__name__}")
    return parsed


def parse_partial(raw: Any) -> dict[str, Any]:
    """Best-effort decode: any failure yields an empty partial payload."""
    try:
        return load_json_object(raw)
    except ValueError as e:
        logger.warning("Discarding unparsable provider output: %s", e)
        return {}
