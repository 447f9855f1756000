"""Root logging setup for the CLI and the web app.

``setup_logging()`` runs once per entrypoint; modules only call
``logging.getLogger(__name__)``.

Environment:
    LOG_LEVEL    root level (default INFO)
    LOG_FORMAT   ``text`` or ``json`` (one object per line)
    LOG_LEVELS   per-logger overrides, e.g. ``voxhealth.store=DEBUG,neo4j=INFO``
"""

from __future__ import annotations

import json
import logging
import os
import sys

_NOISY_LOGGERS = ("httpx", "httpcore", "openai", "neo4j")
_TEXT_FORMAT = "%(asctime)s  %(levelname)-8s  %(name)s  %(message)s"
_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"


class JsonFormatter(logging.Formatter):
    """One JSON object per record; messages are escaped properly."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": self.formatTime(record, _DATE_FORMAT),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def _level(name: str, default: int = logging.INFO) -> int:
    value = logging.getLevelName(name.strip().upper())
    return value if isinstance(value, int) else default


def parse_level_overrides(spec: str) -> dict[str, int]:
    """Parse ``name=LEVEL,...``; malformed or unknown entries are ignored."""
    overrides: dict[str, int] = {}
    for item in spec.split(","):
        name, sep, level = item.partition("=")
        if not sep or not name.strip():
            continue
        value = _level(level, default=-1)
        if value >= 0:
            overrides[name.strip()] = value
    return overrides


def setup_logging() -> None:
    handler = logging.StreamHandler(sys.stderr)
    if os.getenv("LOG_FORMAT", "text").strip().lower() == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(_TEXT_FORMAT, datefmt=_DATE_FORMAT))

    logging.basicConfig(
        level=_level(os.getenv("LOG_LEVEL", "INFO")),
        handlers=[handler],
        force=True,
    )

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    for name, level in parse_level_overrides(os.getenv("LOG_LEVELS", "")).items():
        logging.getLogger(name).setLevel(level)
