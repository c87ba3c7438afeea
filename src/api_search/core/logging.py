"""Structured logging with JSON output and request ID correlation.

Every log line emitted while serving a request (including lines from the
indexing and verification worker threads) carries the request id set by
``RequestIDMiddleware`` or ``LogContext``.

Example:
    from api_search.core.logging import configure_logging, LogContext

    configure_logging(level="INFO", json_format=True)
    with LogContext("refresh-1"):
        engine.refresh_index(endpoints)
"""

import json
import logging
import sys
import time
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, Optional

PACKAGE_LOGGER = "api_search"

_request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

# Attributes every LogRecord has; anything else came in through ``extra``.
_RECORD_ATTRS = frozenset({
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "taskName", "message",
})


def get_request_id() -> Optional[str]:
    return _request_id_var.get()


def set_request_id(request_id: Optional[str] = None) -> str:
    """Set the request ID for the current context.

    Args:
        request_id: Request ID to use. If None, a short UUID is generated.

    Returns:
        The request ID that was set.
    """
    if request_id is None:
        request_id = uuid.uuid4().hex[:8]
    _request_id_var.set(request_id)
    return request_id


def clear_request_id() -> None:
    _request_id_var.set(None)


def _extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    extra = {}
    for key, value in record.__dict__.items():
        if key in _RECORD_ATTRS or key.startswith("_"):
            continue
        try:
            json.dumps(value)
            extra[key] = value
        except (TypeError, ValueError):
            extra[key] = str(value)
    return extra


class JSONFormatter(logging.Formatter):
    """One JSON object per line.

    {"timestamp": "...", "level": "INFO", "logger": "api_search.search.engine",
     "message": "...", "request_id": "ab12cd34", "extra": {...}}
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = get_request_id()
        if request_id:
            entry["request_id"] = request_id

        if record.levelno <= logging.DEBUG:
            entry["source"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        extra = _extra_fields(record)
        if extra:
            entry["extra"] = extra

        return json.dumps(entry, default=str)


class StandardFormatter(logging.Formatter):
    """Readable text: ``timestamp [LEVEL] [request_id] logger - message``."""

    def format(self, record: logging.LogRecord) -> str:
        request_id = get_request_id()
        prefix = f"[{request_id}] " if request_id else ""
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        line = f"{timestamp} [{record.levelname:8}] {prefix}{record.name} - {record.getMessage()}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def configure_logging(
    level: str = "INFO",
    json_format: bool = False,
    include_uvicorn: bool = True,
) -> None:
    """Install a single stdout handler on the package logger.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_format: Use ``JSONFormatter`` instead of ``StandardFormatter``.
        include_uvicorn: Route uvicorn's loggers through the same handler.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(JSONFormatter() if json_format else StandardFormatter())

    names = [PACKAGE_LOGGER]
    if include_uvicorn:
        names += ["uvicorn", "uvicorn.access", "uvicorn.error"]

    for name in names:
        target = logging.getLogger(name)
        target.handlers.clear()
        target.addHandler(handler)
        target.setLevel(log_level)
        target.propagate = False


class LogContext:
    """Scope a request ID to a block.

    Example:
        with LogContext() as request_id:
            logger.info("refreshing index")
    """

    def __init__(self, request_id: Optional[str] = None):
        self._request_id = request_id
        self._token = None

    def __enter__(self) -> str:
        request_id = self._request_id or uuid.uuid4().hex[:8]
        self._token = _request_id_var.set(request_id)
        return request_id

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        _request_id_var.reset(self._token)


def log_event(
    logger: logging.Logger,
    level: int,
    event: str,
    **kwargs,
) -> None:
    """Log a named event with structured context.

    Example:
        log_event(logger, logging.INFO, "index_refreshed", documents=12)
    """
    logger.log(level, event, extra=kwargs)


@contextmanager
def log_duration(logger: logging.Logger, event: str, **kwargs) -> Iterator[None]:
    """Log ``event`` with ``duration_ms`` once the block finishes."""
    start = time.perf_counter()
    try:
        yield
    finally:
        duration_ms = round((time.perf_counter() - start) * 1000, 2)
        log_event(logger, logging.INFO, event, duration_ms=duration_ms, **kwargs)
