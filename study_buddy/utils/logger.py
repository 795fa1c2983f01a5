"""
Logging setup for the study buddy API.

Every record carries the id of the HTTP request it was emitted under (see the
middleware in main.py). Console lines are for people: `extra={...}` fields
are appended as key=value pairs. The rotating file gets one JSON object per
line so it can be shipped to a log store as-is.
"""
from __future__ import annotations

import contextvars
import json
import logging
import logging.handlers
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

CONSOLE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s%(request_id_part)s"
CONSOLE_DATEFMT = "%Y-%m-%d %H:%M:%S"
DEFAULT_LOG_FILE = "study_buddy.log"

request_id: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar("request_id", default=None)

# LogRecord attributes that are never treated as `extra` fields
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "message", "asctime", "request_id", "request_id_part",
}


def set_request_id(rid: Optional[str]) -> None:
    request_id.set(rid)


def clear_request_id() -> None:
    request_id.set(None)


def _extras(record: logging.LogRecord) -> Dict[str, Any]:
    return {k: v for k, v in record.__dict__.items() if k not in _RECORD_ATTRS}


class RequestIDFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id.get()
        return True


class ConsoleFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        rid = getattr(record, "request_id", None)
        record.request_id_part = f" [request_id={rid}]" if rid else ""
        line = super().format(record)
        extras = _extras(record)
        if extras:
            line += " " + " ".join(f"{k}={v}" for k, v in extras.items())
        return line


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
            "request_id": getattr(record, "request_id", None),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        for k, v in _extras(record).items():
            try:
                json.dumps(v)
            except (TypeError, ValueError):
                v = str(v)
            payload[k] = v
        return json.dumps(payload, ensure_ascii=False)


def _log_dir() -> Path:
    # LOG_DIR, else <project root>/logs
    return Path(os.getenv("LOG_DIR", Path(__file__).resolve().parents[2] / "logs"))


def init_logging(
    *,
    level: Optional[int] = None,
    log_dir: Optional[Path] = None,
    filename: Optional[str] = None,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5,
) -> None:
    """Install console and JSON file handlers on the root logger.

    Existing root handlers are replaced, so calling this again reconfigures
    rather than duplicating output. `level` defaults to LOG_LEVEL (INFO) and
    `filename` to LOG_FILE.
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    if level is None:
        level = getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)
    root.setLevel(level)
    request_filter = RequestIDFilter()

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(ConsoleFormatter(CONSOLE_FORMAT, CONSOLE_DATEFMT))
    console.addFilter(request_filter)
    root.addHandler(console)

    target = Path(log_dir) if log_dir is not None else _log_dir()
    try:
        target.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            str(target / (filename or os.getenv("LOG_FILE", DEFAULT_LOG_FILE))),
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
    except OSError:
        root.warning("Log directory %s is not writable; logging to console only", target, exc_info=True)
        return
    file_handler.setFormatter(JsonFormatter())
    file_handler.addFilter(request_filter)
    root.addHandler(file_handler)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    if not logging.getLogger().handlers:
        init_logging()
    return logging.getLogger(name)
