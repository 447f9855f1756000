"""Local JSON-file scan store — fallback when Neo4j is unavailable.

Implements the same interface as ``Neo4jScanStore`` but keeps every
owner's history in a single JSON file (``data/scans.json`` by default).
This lets the system run with zero infrastructure (just an OpenAI key).

File layout::

    {"<owner_id>": [<ScanResult>, ...], ...}
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any

from voxhealth import settings
from voxhealth.models.schema import ScanResult
from voxhealth.paths import scans_path
from voxhealth.scans.assembler import history_view

logger = logging.getLogger(__name__)

# Serializes read-modify-write cycles across request threads.
_WRITE_LOCK = threading.Lock()


class LocalScanStore:
    def __init__(self, path: Path | None = None) -> None:
        self.path = path or scans_path()

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Corrupt scan history at %s (%s); treating as empty", self.path, e)
            return {}
        if not isinstance(data, dict):
            logger.error("Unexpected scan history layout at %s; treating as empty", self.path)
            return {}
        return data

    def _write(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=self.path.parent,
            prefix=self.path.name + ".",
            suffix=".tmp",
            delete=False,
        ) as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        try:
            os.replace(f.name, self.path)
        except OSError:
            os.unlink(f.name)
            raise

    def _entries(self, data: dict[str, Any], owner_id: str) -> list[Any]:
        entries = data.get(owner_id)
        return entries if isinstance(entries, list) else []

    def save(self, owner_id: str, scan: ScanResult) -> None:
        with _WRITE_LOCK:
            data = self._load()
            data[owner_id] = [scan, *self._entries(data, owner_id)]
            self._write(data)
        logger.info("[store] Saved scan %s locally", scan["id"])

    def list(self, owner_id: str) -> list[ScanResult]:
        return history_view(self._entries(self._load(), owner_id), settings.HISTORY_LIMIT)

    def delete(self, owner_id: str, scan_id: str) -> None:
        with _WRITE_LOCK:
            data = self._load()
            entries = self._entries(data, owner_id)
            kept = [
                entry for entry in entries
                if not (isinstance(entry, dict) and entry.get("id") == scan_id)
            ]
            if len(kept) == len(entries):
                return
            data[owner_id] = kept
            self._write(data)
        logger.info("[store] Deleted scan %s locally", scan_id)
