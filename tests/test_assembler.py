"""Tests for scan assembly and the history corruption filter."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from voxhealth.extraction.normalizer import normalize
from voxhealth.models.schema import DEFAULT_REPORT_ID
from voxhealth.scans.assembler import assemble_scan_result, history_view, is_complete_scan


def _scan(scan_id: str, date: str) -> dict:
    return {"id": scan_id, "date": date, "data": normalize({})}


class TestAssemble:
    def test_uuid_id_and_timestamp(self):
        record = normalize({"header": {"report_id": "VX-2026-4821"}})
        created = datetime(2026, 10, 17, 9, 30, tzinfo=timezone.utc)
        scan = assemble_scan_result(record, created_at=created)
        uuid.UUID(scan["id"])
        assert scan["date"] == "2026-10-17T09:30:00+00:00"
        assert scan["data"] == record
        assert scan["data"]["header"]["report_id"] == "VX-2026-4821"

    def test_same_report_id_gives_distinct_scan_ids(self):
        record = normalize({"header": {"report_id": "VX-2026-1234"}})
        first, second = assemble_scan_result(record), assemble_scan_result(record)
        assert first["id"] != second["id"]

    def test_placeholder_report_id_gets_uuid(self):
        scan = assemble_scan_result(normalize({}))
        assert scan["id"] != DEFAULT_REPORT_ID
        uuid.UUID(scan["id"])

    def test_partial_record_is_completed(self):
        scan = assemble_scan_result({"frontend_state": {"urgency": "High"}})
        assert scan["data"]["frontend_state"]["urgency"] == "High"
        assert "clinical_inference" in scan["data"]


class TestIsCompleteScan:
    def test_complete_entry(self):
        assert is_complete_scan(_scan("a", "2026-01-01"))

    def test_missing_clinical_inference(self):
        entry = _scan("a", "2026-01-01")
        del entry["data"]["clinical_inference"]
        assert not is_complete_scan(entry)

    def test_missing_frontend_state(self):
        entry = _scan("a", "2026-01-01")
        entry["data"]["frontend_state"] = None
        assert not is_complete_scan(entry)

    def test_missing_data(self):
        assert not is_complete_scan({"id": "a", "date": "2026-01-01"})

    def test_non_mapping(self):
        assert not is_complete_scan(None)
        assert not is_complete_scan("scan")


class TestHistoryView:
    def test_newest_first_and_filtered(self):
        broken = _scan("broken", "2026-03-01")
        del broken["data"]["clinical_inference"]
        entries = [_scan("old", "2026-01-01"), broken, _scan("new", "2026-02-01"), None]
        assert [s["id"] for s in history_view(entries)] == ["new", "old"]

    def test_limit(self):
        entries = [_scan(str(i), f"2026-01-{i:02d}") for i in range(1, 6)]
        assert [s["id"] for s in history_view(entries, limit=2)] == ["5", "4"]
