"""Logging setup for the app and CLI."""
from __future__ import annotations

import json
import logging
import sys
from typing import Any


def configure_logging(level: str = "INFO", json_format: bool = False) -> None:
    """Configure root logging with a deterministic format."""
    level_value = getattr(logging, str(level).upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    if json_format:
        handler.setFormatter(_JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                datefmt="%Y-%m-%dT%H:%M:%S",
            )
        )
    logging.basicConfig(level=level_value, handlers=[handler], force=True)


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "name": record.name,
            "msg": record.getMessage(),
        }
        return json.dumps(payload, sort_keys=True)
