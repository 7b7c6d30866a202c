"""Structured JSON logging for bitbucket-mcp.

Writes JSONL to <log_dir>/bitbucket.log with rotation (5MB, 3 backups).
Never logs to stdout, which carries the stdio MCP stream.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

LOGGER_NAME = "bitbucket_mcp"
_LOG_FILENAME = "bitbucket.log"
_setup_lock = threading.Lock()
_MAX_BYTES = 5 * 1024 * 1024  # 5MB
_BACKUP_COUNT = 3

# LogRecord attribute (from ``extra=``) -> JSON key
_EXTRA_FIELDS = (
    ("tool", "tool"),
    ("args_data", "args"),
    ("duration_ms", "duration_ms"),
    ("kind", "kind"),
    ("error", "error"),
)


class _JsonFormatter(logging.Formatter):
    """Format log records as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for attr, key in _EXTRA_FIELDS:
            if hasattr(record, attr):
                entry[key] = getattr(record, attr)
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = str(record.exc_info[1])
        return json.dumps(entry, default=str)


def setup_logging(log_dir: Path) -> logging.Logger:
    """Set up structured JSON logging to <log_dir>/bitbucket.log.

    Returns the package logger. Calling again with the same directory is a
    no-op; a different directory replaces the previous file handler.
    """
    logger = logging.getLogger(LOGGER_NAME)
    log_path = log_dir / _LOG_FILENAME
    target_filename = os.path.abspath(str(log_path))

    with _setup_lock:
        for h in logger.handlers[:]:
            if not isinstance(h, RotatingFileHandler):
                continue
            if h.baseFilename == target_filename:
                return logger
            # Different path — remove stale handler to avoid leaks / duplicates.
            logger.removeHandler(h)
            h.close()

        log_dir.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            str(log_path),
            maxBytes=_MAX_BYTES,
            backupCount=_BACKUP_COUNT,
        )
        handler.setFormatter(_JsonFormatter())
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
    return logger
