"""Console logging helper for tagged tracker messages.

Every component logs through ``log_event`` with its own tag so a session
transcript reads like ``[INFO][Persistence] CSV data saved | path=...``.
Degraded-mode diagnostics that must appear only once per component go
through a ``LogOnce`` owned by that component.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

_FORMAT = "[%(levelname)s][%(tag)s] %(message)s"

_logger = logging.getLogger("trackerlog")
if not _logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_FORMAT))
    _logger.addHandler(handler)
    _logger.setLevel(logging.INFO)


class _TagAdapter(logging.LoggerAdapter):
    def process(self, msg: Any, kwargs: dict[str, Any]):
        tag = kwargs.pop("tag", "Tracker")
        kwargs.setdefault("extra", {})["tag"] = tag
        return msg, kwargs


_logger_adapter = _TagAdapter(_logger, {})


def log_event(level: str, tag: str, message: str, **fields: Any) -> None:
    """Log a message with level+tag, appending key=value fields when provided."""
    if fields:
        extras = " ".join(f"{k}={v}" for k, v in fields.items())
        message = f"{message} | {extras}"
    level_name = level.upper()
    level_val = getattr(logging, level_name, logging.INFO)
    _logger_adapter.log(level_val, message, tag=tag)


class LogOnce:
    """Emits each keyed message at most once for the owner's lifetime."""

    def __init__(self):
        self._seen: set[str] = set()

    def __call__(self, key: str, level: str, tag: str, message: str, **fields: Any) -> bool:
        if key in self._seen:
            return False
        self._seen.add(key)
        log_event(level, tag, message, **fields)
        return True


def add_file_log(path: Path) -> logging.Handler:
    """Mirror log output into a UTF-8 file (e.g. next to the CSV recording)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(path, encoding="utf-8")
    file_handler.setFormatter(logging.Formatter("%(asctime)s " + _FORMAT))
    _logger.addHandler(file_handler)
    return file_handler


def set_log_level(level: str) -> None:
    """Set global log level (DEBUG/INFO/WARNING/ERROR)."""
    level_name = (level or "INFO").upper()
    level_val = getattr(logging, level_name, logging.INFO)
    _logger.setLevel(level_val)


def get_log_level() -> str:
    """Return current global log level name."""
    return logging.getLevelName(_logger.level)
