"""Persistence port for scan history."""

from __future__ import annotations

from typing import Protocol

from voxhealth.models.schema import ScanResult


class ScanStore(Protocol):
    """Append / list / remove-by-id over one owner's scan history.

    ``list`` returns structurally complete entries only, newest first.
    """

    def save(self, owner_id: str, scan: ScanResult) -> None: ...

    def list(self, owner_id: str) -> list[ScanResult]: ...

    def delete(self, owner_id: str, scan_id: str) -> None: ...
