"""Neo4j scan store: connection helper and history queries.

Graph layout::

    (:User {uid})-[:HAS_SCAN]->(:Scan {id, date, data})

``data`` holds the canonical record serialized as JSON text.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Callable
from typing import Any

from neo4j import Driver, GraphDatabase

from voxhealth import settings
from voxhealth.models.schema import ScanResult
from voxhealth.scans.assembler import history_view

logger = logging.getLogger(__name__)


def get_driver() -> Driver:
    """Return a Neo4j driver instance (caller must close it or use ``with``).

    Connection parameters are read lazily from environment variables
    on each call — never cached at module level.
    """
    uri = os.getenv("NEO4J_URI", "neo4j+s://localhost:7687")
    user = os.getenv("NEO4J_USERNAME", "neo4j")
    pwd = os.getenv("NEO4J_PASSWORD", "")
    return GraphDatabase.driver(uri, auth=(user, pwd))


def _decode_data(raw: Any) -> Any:
    if not isinstance(raw, str):
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("[store] Skipping scan with undecodable data")
        return None


class Neo4jScanStore:
    def __init__(self, driver_factory: Callable[[], Driver] = get_driver) -> None:
        self._driver_factory = driver_factory

    def save(self, owner_id: str, scan: ScanResult) -> None:
        with self._driver_factory() as driver:
            driver.execute_query(
                """
                MERGE (u:User {uid: $owner})
                CREATE (u)-[:HAS_SCAN]->(:Scan {id: $id, date: $date, data: $data})
                """,
                owner=owner_id,
                id=scan["id"],
                date=scan["date"],
                data=json.dumps(scan["data"], ensure_ascii=False),
                database_="neo4j",
            )
        logger.info("[store] Saved scan %s to Neo4j", scan["id"])

    def list(self, owner_id: str) -> list[ScanResult]:
        with self._driver_factory() as driver:
            records, _, _ = driver.execute_query(
                """
                MATCH (:User {uid: $owner})-[:HAS_SCAN]->(s:Scan)
                WHERE s.data IS NOT NULL
                RETURN s.id AS id, s.date AS date, s.data AS data
                ORDER BY s.date DESC
                """,
                owner=owner_id,
                database_="neo4j",
            )
        entries = [
            {"id": r["id"], "date": r["date"], "data": _decode_data(r["data"])}
            for r in records
        ]
        # the cap counts complete scans only
        return history_view(entries, settings.HISTORY_LIMIT)

    def delete(self, owner_id: str, scan_id: str) -> None:
        with self._driver_factory() as driver:
            driver.execute_query(
                """
                MATCH (:User {uid: $owner})-[:HAS_SCAN]->(s:Scan {id: $id})
                DETACH DELETE s
                """,
                owner=owner_id,
                id=scan_id,
                database_="neo4j",
            )
        logger.info("[store] Deleted scan %s from Neo4j", scan_id)
