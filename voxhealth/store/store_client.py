"""Scan store selection: Neo4j when configured and reachable, else local JSON."""

from __future__ import annotations

import logging
import os

from voxhealth.store.base import ScanStore

logger = logging.getLogger(__name__)

_STORE: ScanStore | None = None


def reset() -> None:
    """Clear the cached backend decision — call from tests."""
    global _STORE  # noqa: PLW0603
    _STORE = None


def remote_configured() -> bool:
    """True when a real (non-placeholder) Neo4j URI is set."""
    uri = os.getenv("NEO4J_URI", "").strip()
    return bool(uri) and not uri.startswith("neo4j+s://xxxxxxxx")


def _check_neo4j() -> bool:
    """Try Neo4j connectivity once."""
    if not remote_configured():
        return False
    try:
        from voxhealth.store.neo4j_store import get_driver

        with get_driver() as driver:
            driver.verify_connectivity()
        logger.info("[store] Connected to Neo4j")
        return True
    except Exception as e:  # noqa: BLE001  any failure falls back to local JSON
        logger.warning("[store] Neo4j unavailable (%s), using local JSON fallback.", e)
        return False


def get_scan_store() -> ScanStore:
    """Return the process-wide scan store, choosing the backend once."""
    global _STORE  # noqa: PLW0603
    if _STORE is not None:
        return _STORE

    if _check_neo4j():
        from voxhealth.store.neo4j_store import Neo4jScanStore

        _STORE = Neo4jScanStore()
    else:
        from voxhealth.store.local_store import LocalScanStore

        _STORE = LocalScanStore()
    return _STORE
