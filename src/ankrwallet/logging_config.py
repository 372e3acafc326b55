"""
Logging configuration for the wallet CLI.

Two output formats, both on stderr so command output stays clean:
  - **human** – single-line, readable
  - **json**  – newline-delimited JSON
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone


class _JSONFormatter(logging.Formatter):
    """Emit each log record as a single JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info and record.exc_info[1]:
            log_obj["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_obj, default=str)


class _HumanFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        return f"{ts} [{record.levelname:<7}] {record.name}: {record.getMessage()}"


def setup_logging(level: str = "WARNING", fmt: str = "human") -> None:
    """
    Configure the ``ankrwallet`` logger.

    Args:
        level: One of DEBUG, INFO, WARNING, ERROR, CRITICAL
        fmt: ``"human"`` or ``"json"``
    """
    logger = logging.getLogger("ankrwallet")
    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))
    logger.handlers.clear()

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(_JSONFormatter() if fmt == "json" else _HumanFormatter())
    logger.addHandler(console)
