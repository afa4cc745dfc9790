"""
ProjectHub Backend: Structured Logging
======================================

What:  Process-wide leveled logger plus the request-summary and slow-operation
       helpers used by the request wrapper and services.
How:   Thin facade over the standard `logging` module. Structured metadata
       travels on the LogRecord (`data`, `context`, `error` attributes) and is
       rendered by one of two formatters installed by `setup_logging()`:

           JsonLogFormatter   one JSON object per line (production default)
           TextLogFormatter   readable single line plus indented metadata

Every call is synchronous and fire-and-forget; there is no buffering and no
flush contract beyond what the stdout handler provides.

Usage:
    from projecthub.logger import log

    log.info("Project created", {"project_id": pid})
    log.error("Upload failed", exc, {"task_id": tid})
    log.log_slow_operation("Fetch notifications", duration_ms)
"""

import json
import logging
import sys
import traceback
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from projecthub.config import settings
from projecthub.middleware.request_id import request_id_var

_RESERVED = ("data", "context", "error")


def describe_error(error: BaseException) -> Dict[str, Any]:
    """Name, message and stack of an exception, kept apart from metadata."""
    return {
        "name": type(error).__name__,
        "message": str(error),
        "stack": "".join(
            traceback.format_exception(type(error), error, error.__traceback__)
        ).rstrip(),
    }


class RequestIDFilter(logging.Filter):
    """Stamps the current request ID (or "-") onto every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get("") or "-"
        return True


class JsonLogFormatter(logging.Formatter):
    """Renders records as single-line JSON documents."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", "-"),
        }
        for attr in _RESERVED:
            value = getattr(record, attr, None)
            if value is not None:
                entry[attr] = value
        if "error" not in entry and record.exc_info and record.exc_info[1] is not None:
            entry["error"] = describe_error(record.exc_info[1])
        return json.dumps(entry, default=str)


class TextLogFormatter(logging.Formatter):
    """Human-readable format for development consoles."""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s [%(levelname)s] %(name)s [%(request_id)s] %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, "request_id"):
            record.request_id = "-"
        line = super().format(record)
        extras = []
        data = getattr(record, "data", None)
        if data:
            extras.append(f"  data: {data}")
        context = getattr(record, "context", None)
        if context:
            extras.append(f"  context: {context}")
        error = getattr(record, "error", None)
        if error and not record.exc_info:
            extras.append(f"  error: {error['name']}: {error['message']}")
        return "\n".join([line, *extras])


def setup_logging() -> None:
    """
    Configure the root logger for the whole application.

    Called once during app startup, before any other initialization.
    Writes to stdout; the formatter depends on `settings.use_json_logs`.
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestIDFilter())
    handler.setFormatter(JsonLogFormatter() if settings.use_json_logs else TextLogFormatter())

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        handlers=[handler],
        force=True,
    )

    # Third-party libraries that log every operation at INFO/DEBUG
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


class StructuredLogger:
    """
    Leveled logging with structured metadata.

    `debug`, `info` and `warn` take a message and an optional metadata
    mapping (rendered under `data`). `error` keeps the exception's name,
    message and stack under `error` and arbitrary metadata under `context`.
    """

    def __init__(self, name: str = "projecthub") -> None:
        self._logger = logging.getLogger(name)

    @property
    def name(self) -> str:
        return self._logger.name

    def debug(self, message: str, data: Optional[Mapping[str, Any]] = None) -> None:
        self._logger.debug(message, extra={"data": _copy(data)})

    def info(self, message: str, data: Optional[Mapping[str, Any]] = None) -> None:
        self._logger.info(message, extra={"data": _copy(data)})

    def warn(self, message: str, data: Optional[Mapping[str, Any]] = None) -> None:
        self._logger.warning(message, extra={"data": _copy(data)})

    warning = warn

    def error(
        self,
        message: str,
        error: Optional[BaseException] = None,
        context: Optional[Mapping[str, Any]] = None,
    ) -> None:
        extra: Dict[str, Any] = {"context": _copy(context)}
        if error is not None:
            extra["error"] = describe_error(error)
        self._logger.error(message, extra=extra)

    def log_request(
        self,
        method: str,
        path: str,
        status_code: int,
        duration_ms: Optional[float] = None,
    ) -> None:
        """One-line summary per request. Level follows the status class."""
        if status_code >= 500:
            level = logging.ERROR
        elif status_code >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO

        data: Dict[str, Any] = {"method": method, "path": path, "status": status_code}
        if duration_ms is None:
            self._logger.log(level, "%s %s - %d", method, path, status_code, extra={"data": data})
            return
        data["duration_ms"] = round(duration_ms, 2)
        self._logger.log(
            level,
            "%s %s - %d (%.0fms)",
            method,
            path,
            status_code,
            duration_ms,
            extra={"data": data},
        )

    def log_slow_operation(
        self,
        operation: str,
        duration_ms: float,
        threshold_ms: Optional[float] = None,
    ) -> bool:
        """
        Warn when `duration_ms` exceeds the threshold; no-op otherwise.

        The threshold defaults to `settings.slow_operation_threshold_ms`.
        Returns True when a slow-operation entry was written.
        """
        threshold = settings.slow_operation_threshold_ms if threshold_ms is None else threshold_ms
        if duration_ms <= threshold:
            return False
        self._logger.warning(
            "Slow operation detected: %s took %.0fms",
            operation,
            duration_ms,
            extra={
                "data": {
                    "operation": operation,
                    "duration_ms": round(duration_ms, 2),
                    "threshold_ms": threshold,
                }
            },
        )
        return True

    log_slow_query = log_slow_operation


def _copy(data: Optional[Mapping[str, Any]]) -> Optional[Dict[str, Any]]:
    return dict(data) if data else None


log = StructuredLogger("projecthub")
