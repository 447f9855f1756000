"""Centralized path constants for the project."""

from __future__ import annotations

import os
from pathlib import Path

PROJECT_ROOT: Path = Path(__file__).resolve().parents[1]
DATA_DIR: Path = PROJECT_ROOT / "data"


def scans_path() -> Path:
    """Location of the local scan-history file (``VOX_SCANS_PATH`` overrides)."""
    override = os.getenv("VOX_SCANS_PATH")
    return Path(override) if override else DATA_DIR / "scans.json"
