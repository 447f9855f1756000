"""Schema normalizer — reconcile untrusted provider JSON with the defaults.

``normalize`` is the single point of schema enforcement: it walks the
default record section by section, takes a value from the partial
payload only when it is present *and* of a plausible type, and keeps
the default otherwise.  Nested sections are merged recursively, so a
half-populated section never erases siblings that the defaults supply.

Properties relied on elsewhere:
  - total: never raises, whatever the input;
  - complete: every default field is present in the output;
  - idempotent: ``normalize(normalize(x)) == normalize(x)``.
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Iterable, Mapping
from typing import Any

from voxhealth.models.schema import (
    ANALYSIS_ERROR_SUSPECT,
    URGENCY_LEVELS,
    CanonicalRecord,
    QuestionnaireData,
    QuestionResponse,
    default_record,
)

logger = logging.getLogger(__name__)

_MISSING: Any = object()

_URGENCY_PATH = ("frontend_state", "urgency")
_UNIT_INTERVAL_PATHS = frozenset(
    ("clinical_inference", "confidence_metrics", name)
    for name in ("audio_confidence", "symptom_alignment", "aggregate_score")
)


def normalize(raw_partial: Any) -> CanonicalRecord:
    """Merge an arbitrary partial payload onto the default record."""
    partial = raw_partial if isinstance(raw_partial, Mapping) else {}
    record: dict[str, Any] = _merge(dict(default_record()), partial, ())

    questionnaire = _normalize_questionnaire(partial.get("questionnaire_data"))
    if questionnaire is not None:
        record["questionnaire_data"] = questionnaire
    return record  # type: ignore[return-value]


def normalize_responses(items: Iterable[Any]) -> list[QuestionResponse]:
    """Keep only well-formed ``{question, answer}`` entries, in order."""
    responses: list[QuestionResponse] = []
    for item in items:
        if not isinstance(item, Mapping):
            continue
        question, answer = item.get("question"), item.get("answer")
        if isinstance(question, str) and isinstance(answer, str):
            responses.append({"question": question, "answer": answer})
    return responses


def analysis_failure_record(
    reason: str,
    responses: Iterable[QuestionResponse] = (),
) -> CanonicalRecord:
    """Build the clearly-labelled report used when analysis fails outright."""
    record = default_record()
    record["header"]["report_id"] = f"ERR-{int(time.time() * 1000)}"
    inference = record["clinical_inference"]
    inference["primary_suspect"] = ANALYSIS_ERROR_SUSPECT
    inference["differential_diagnosis"] = {
        "ruled_out": [],
        "exclusion_logic": f"System Error: {reason}. Please check API Key and Quotas.",
    }
    record["frontend_state"]["urgency"] = "Low"
    record["questionnaire_data"] = {"responses": normalize_responses(responses)}
    return record


# ── Merge internals ───────────────────────────────────────────────────────


def _merge(defaults: Mapping[str, Any], partial: Mapping[str, Any], path: tuple[str, ...]) -> dict[str, Any]:
    merged: dict[str, Any] = {}
    for key, default in defaults.items():
        field_path = path + (key,)
        if key not in partial:
            merged[key] = default
            continue

        value = partial[key]
        if isinstance(default, Mapping):
            if isinstance(value, Mapping):
                merged[key] = _merge(default, value, field_path)
            else:
                logger.debug("Section %s has wrong shape; using defaults", ".".join(field_path))
                merged[key] = default
            continue

        coerced = _coerce_leaf(default, value, field_path)
        merged[key] = default if coerced is _MISSING else coerced
    return merged


def _coerce_leaf(default: Any, value: Any, path: tuple[str, ...]) -> Any:
    # bool before float: bool is an int subclass
    if isinstance(default, bool):
        return _as_bool(value)
    if isinstance(default, float):
        number = _as_float(value)
        if number is not _MISSING and path in _UNIT_INTERVAL_PATHS:
            number = max(0.0, min(1.0, number))
        return number
    if isinstance(default, list):
        return _as_str_list(value)
    if path == _URGENCY_PATH:
        return _as_urgency(value)
    return _as_str(value)


def _as_bool(value: Any) -> Any:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    return _MISSING


def _as_float(value: Any) -> Any:
    if isinstance(value, bool):
        return _MISSING
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return _MISSING
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return _MISSING
    else:
        return _MISSING
    return number if math.isfinite(number) else _MISSING


def _as_str(value: Any) -> Any:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return str(value)
        except ValueError:
            # int above the interpreter's digit limit
            return _MISSING
    return _MISSING


def _as_str_list(value: Any) -> Any:
    if not isinstance(value, (list, tuple)):
        return _MISSING
    items = (_as_str(item) for item in value)
    return [item for item in items if item is not _MISSING]


def _as_urgency(value: Any) -> Any:
    if not isinstance(value, str):
        return _MISSING
    wanted = value.strip().lower()
    for level in URGENCY_LEVELS:
        if level.lower() == wanted:
            return level
    return _MISSING


def _normalize_questionnaire(value: Any) -> QuestionnaireData | None:
    if not isinstance(value, Mapping):
        return None
    responses = value.get("responses")
    if not isinstance(responses, (list, tuple)):
        return None
    return {"responses": normalize_responses(responses)}
