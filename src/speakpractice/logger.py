"""Service-wide logging setup.

Every module obtains its logger with ``get_logger(__name__)``. Loggers
under the ``speakpractice`` namespace write to stderr with their own
handler and do not propagate, so output does not depend on how uvicorn or
a host application configures the root logger.

Two output formats exist:

- ``standard``: one human-readable line per record; at DEBUG the line also
  carries the source location.
- ``json``: one JSON object per line for log shippers.

Defaults come from ``SPEAKPRACTICE_LOG_LEVEL`` (INFO) and
``SPEAKPRACTICE_LOG_FORMAT`` (standard). ``set_log_level`` retunes every
package logger at runtime, which the CLI does after loading settings.
"""

import json
import logging
import os
import sys
from typing import Any

ROOT_LOGGER_NAME = "speakpractice"

LEVEL_ENV_VAR = "SPEAKPRACTICE_LOG_LEVEL"
FORMAT_ENV_VAR = "SPEAKPRACTICE_LOG_FORMAT"

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

_LINE_FORMATS = {
    "standard": "%(asctime)s.%(msecs)03d %(levelname)-8s %(name)s - %(message)s",
    "debug": (
        "%(asctime)s.%(msecs)03d %(levelname)-8s %(name)s "
        "[%(filename)s:%(lineno)d %(funcName)s] - %(message)s"
    ),
}

# Attributes every LogRecord has; anything else was passed through ``extra``.
_RECORD_ATTRIBUTES = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    """Render each record as a single-line JSON object.

    Fields: ``timestamp``, ``level``, ``logger``, ``message``, ``location``
    and, when present, ``exception`` plus any values supplied via
    ``extra``.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        for key, value in vars(record).items():
            if key not in _RECORD_ATTRIBUTES and not key.startswith("_"):
                payload[key] = value
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def _level_from(value: int | str | None) -> int:
    if value is None:
        value = os.getenv(LEVEL_ENV_VAR, "INFO")
    if isinstance(value, int):
        return value
    resolved = logging.getLevelName(value.strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def _format_from(value: str | None) -> str:
    chosen = (value or os.getenv(FORMAT_ENV_VAR, "standard")).strip().lower()
    return chosen if chosen == "json" else "standard"


def _make_formatter(format_type: str, level: int) -> logging.Formatter:
    if format_type == "json":
        return JSONFormatter(datefmt=TIMESTAMP_FORMAT)
    line = _LINE_FORMATS["debug" if level <= logging.DEBUG else "standard"]
    return logging.Formatter(line, datefmt=TIMESTAMP_FORMAT)


def configure_logger(
    name: str,
    level: int | str | None = None,
    format_type: str | None = None,
    handler: logging.Handler | None = None,
) -> logging.Logger:
    """Attach the service handler to a logger once.

    A logger that already has handlers is returned untouched, so calling
    this at import time in every module is safe.

    Args:
        name: Logger name, normally the module's ``__name__``.
        level: Level name or number; the environment default when None.
        format_type: "standard" or "json"; the environment default when None.
        handler: Destination handler; stderr when None.

    Returns:
        The configured logger.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    resolved_level = _level_from(level)
    target = handler or logging.StreamHandler(sys.stderr)
    target.setLevel(resolved_level)
    target.setFormatter(_make_formatter(_format_from(format_type), resolved_level))

    logger.setLevel(resolved_level)
    logger.addHandler(target)
    logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    """Return the logger for a module, configured from the environment."""
    return configure_logger(name)


def _package_loggers() -> list[logging.Logger]:
    prefix = f"{ROOT_LOGGER_NAME}."
    return [
        candidate
        for name, candidate in list(logging.Logger.manager.loggerDict.items())
        if isinstance(candidate, logging.Logger)
        and (name == ROOT_LOGGER_NAME or name.startswith(prefix))
    ]


def set_log_level(level: int | str, format_type: str | None = None) -> None:
    """Change level and format of every ``speakpractice`` logger.

    Loggers outside the package namespace are left alone.

    Args:
        level: Level name or number.
        format_type: "standard" or "json"; the environment default when None.
    """
    resolved_level = _level_from(level)
    resolved_format = _format_from(format_type)

    for logger in _package_loggers():
        logger.setLevel(resolved_level)
        for handler in logger.handlers:
            handler.setLevel(resolved_level)
            handler.setFormatter(_make_formatter(resolved_format, resolved_level))


def mask_sensitive(value: str, prefix_len: int = 4, suffix_len: int = 4) -> str:
    """Hide the middle of a credential before it is logged or printed.

    Values too short to keep both ends are hidden entirely.

    Example:
        >>> mask_sensitive("sk-test-0123456789abcdef")
        'sk-t***cdef'
    """
    if len(value) <= prefix_len + suffix_len:
        return "***"
    return value[:prefix_len] + "***" + value[-suffix_len:]
