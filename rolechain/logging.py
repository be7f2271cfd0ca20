"""Logging configuration for rolechain."""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

_LOG_CONFIGURED = False


class _StderrWriter:
    """File-like writer that resolves sys.stderr on every write."""

    def write(self, text: str) -> int:
        return sys.stderr.write(text)

    def flush(self) -> None:
        sys.stderr.flush()


def configure_logging(level: str = "INFO", fmt: str = "console") -> None:
    """Configure structlog once per process."""
    global _LOG_CONFIGURED
    if _LOG_CONFIGURED:
        return

    log_level = getattr(logging, str(level or "INFO").upper(), logging.INFO)

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if fmt == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=_StderrWriter()),
        cache_logger_on_first_use=True,
    )
    _LOG_CONFIGURED = True


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    if name:
        return structlog.get_logger(name)
    return structlog.get_logger()
