"""Scan result assembly and the history read-back filter."""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from typing import Any

from voxhealth.extraction.normalizer import normalize
from voxhealth.models.schema import CanonicalRecord, ScanResult

_REQUIRED_BRANCHES = ("frontend_state", "clinical_inference")


def assemble_scan_result(
    record: CanonicalRecord | Mapping[str, Any],
    created_at: datetime | None = None,
) -> ScanResult:
    """Wrap a report into the persisted unit ``{id, date, data}``.

    The scan id is always a fresh uuid4. The provider's report id is
    untrusted and not unique, so it stays inside ``data["header"]``.
    """
    data = normalize(record)
    created = created_at or datetime.now(timezone.utc)
    return {"id": str(uuid.uuid4()), "date": created.isoformat(), "data": data}


def is_complete_scan(entry: Any) -> bool:
    """True when a stored entry still has the branches the UI needs.

    Guards history listing against corrupt entries written by older
    versions or truncated by hand.
    """
    if not isinstance(entry, Mapping):
        return False
    data = entry.get("data")
    if not isinstance(data, Mapping):
        return False
    return all(isinstance(data.get(branch), Mapping) for branch in _REQUIRED_BRANCHES)


def history_view(entries: Iterable[Any], limit: int | None = None) -> list[ScanResult]:
    """Complete entries only, newest first, capped at ``limit``."""
    complete = [entry for entry in entries if is_complete_scan(entry)]
    complete.sort(key=lambda entry: str(entry.get("date", "")), reverse=True)
    return complete[:limit] if limit is not None else complete
