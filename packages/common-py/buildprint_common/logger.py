"""
Structured Logging for buildprint

Thin wrapper around the standard ``logging`` module that renders each record
as a single JSON object and carries keyword context along with every call.

Usage:
    from buildprint_common.logger import get_logger

    logger = get_logger("sdk.digest")
    logger.info("Digest computed", recipe="Dockerfile", files=12)

    # Derived loggers keep their own context
    run_logger = logger.with_context(recipe="Dockerfile")
    run_logger.debug("Resolving references", workers=4)
"""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .constants import LOG_LEVELS, LogDefaults

_request_id: ContextVar[Optional[str]] = ContextVar("buildprint_request_id", default=None)

_ROOT_LOGGER_NAME = "buildprint"


def set_request_id(request_id: str) -> None:
    """Attach a request ID to every record logged in the current context."""
    _request_id.set(request_id)


def get_request_id() -> Optional[str]:
    """Return the request ID of the current context, if any."""
    return _request_id.get()


def clear_request_id() -> None:
    """Remove the request ID from the current context."""
    _request_id.set(None)


class JSONFormatter(logging.Formatter):
    """Render log records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "service": getattr(record, "service", record.name),
            "message": record.getMessage(),
        }
        request_id = get_request_id()
        if request_id:
            payload["request_id"] = request_id
        context = getattr(record, "context", None)
        if context:
            payload["context"] = context
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class _StderrHandler(logging.Handler):
    """Writes each record to whatever sys.stderr is at emit time."""

    terminator = "\n"

    def emit(self, record: logging.LogRecord) -> None:
        try:
            stream = sys.stderr
            stream.write(self.format(record) + self.terminator)
            stream.flush()
        except Exception:
            self.handleError(record)


def _handler() -> logging.Handler:
    root = logging.getLogger(_ROOT_LOGGER_NAME)
    for existing in root.handlers:
        if isinstance(existing.formatter, JSONFormatter):
            return existing

    # stdout carries command output, so records go to stderr
    handler = _StderrHandler()
    handler.setFormatter(JSONFormatter())
    root.addHandler(handler)
    root.propagate = False
    return handler


def _validate_level(log_level: str) -> str:
    level = log_level.upper()
    if level not in LOG_LEVELS:
        raise ValueError(f"Invalid log level: '{log_level}'. Valid levels: {', '.join(LOG_LEVELS)}")
    return level


class BuildprintLogger:
    """
    Logger that accepts keyword context on every call.

    Attributes:
        service_name: Logical component name, shown as ``service`` in records
        context: Key/value pairs attached to every record from this logger
    """

    def __init__(
        self,
        service_name: str,
        log_level: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.service_name = service_name
        self.context: Dict[str, Any] = dict(context or {})
        self._logger = logging.getLogger(f"{_ROOT_LOGGER_NAME}.{service_name}")
        _handler()
        if log_level is not None:
            self._logger.setLevel(_validate_level(log_level))

    def with_context(self, **context: Any) -> "BuildprintLogger":
        """Return a new logger whose context extends this one."""
        derived = BuildprintLogger.__new__(BuildprintLogger)
        derived.service_name = self.service_name
        derived.context = {**self.context, **context}
        derived._logger = self._logger
        return derived

    def _log(self, level: int, message: str, exc_info: bool = False, **kwargs: Any) -> None:
        if not self._logger.isEnabledFor(level):
            return
        self._logger.log(
            level,
            message,
            exc_info=exc_info,
            extra={"service": self.service_name, "context": {**self.context, **kwargs}},
        )

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log(logging.WARNING, message, **kwargs)

    warn = warning

    def error(self, message: str, **kwargs: Any) -> None:
        self._log(logging.ERROR, message, **kwargs)

    def critical(self, message: str, **kwargs: Any) -> None:
        self._log(logging.CRITICAL, message, **kwargs)

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log at error level with the active exception's traceback."""
        self._log(logging.ERROR, message, exc_info=True, **kwargs)


def get_logger(service_name: str, log_level: Optional[str] = None) -> BuildprintLogger:
    """
    Create a structured logger for a component.

    Args:
        service_name: Component name, e.g. ``"sdk.resolver"``
        log_level: Optional level override for this component

    Returns:
        BuildprintLogger instance
    """
    return BuildprintLogger(service_name, log_level=log_level)


def configure_logging(service_name: str = LogDefaults.SERVICE_NAME, log_level: str = LogDefaults.LEVEL) -> BuildprintLogger:
    """
    Set the level for every buildprint logger and return one for ``service_name``.

    Args:
        service_name: Name of the calling component
        log_level: One of DEBUG, INFO, WARNING, ERROR, CRITICAL

    Returns:
        BuildprintLogger for the caller
    """
    level = _validate_level(log_level)
    _handler()
    logging.getLogger(_ROOT_LOGGER_NAME).setLevel(level)
    return BuildprintLogger(service_name)
