"""Structured logging configuration using structlog.

Provides JSON output for production (parseable by ELK, Loki, CloudWatch)
and plain console output for development.

Loggers are explicit instances with a level fixed at construction; they are
injected into ResilientExecutor / OCRSpaceClient instead of reading a level
from global state at import time.
"""

import logging
import sys
from typing import Any, TextIO

import structlog
from structlog.types import EventDict, WrappedLogger


# Above CRITICAL; loggers built at this level drop every event
SILENT = logging.CRITICAL + 10


def add_app_context(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add application context to all log events."""
    event_dict["app"] = "resilient-ocr"
    return event_dict


def drop_event(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    raise structlog.DropEvent


def level_to_int(log_level: str) -> int:
    """Map a level name (DEBUG ... CRITICAL, SILENT) to its numeric value.

    Unknown names fall back to INFO.
    """
    name = log_level.upper()
    if name == "SILENT":
        return SILENT
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def build_logger(
    name: str,
    log_level: str = "INFO",
    environment: str = "development",
    stream: TextIO | None = None,
    **initial_values: Any,
) -> structlog.types.FilteringBoundLogger:
    """Build a standalone logger whose level is fixed at construction.

    The returned logger does not depend on structlog's global configuration,
    so two instances with different levels can coexist (e.g. one per test).

    Args:
        name: Logger name, rendered as ``logger`` on every event
        log_level: Minimum level emitted by this instance ("SILENT" emits nothing)
        environment: "production" renders JSON, anything else console text
        stream: Output stream (default: stderr at construction time)
        **initial_values: Context bound on every event

    In production mode:
        - JSON output for machine parsing
        - ISO timestamps
        - Exception info included
    """
    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        add_app_context,
    ]
    if environment.lower() == "production":
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    level = level_to_int(log_level)
    if level == SILENT:
        # Filtering loggers only exist for the stdlib levels
        processors.insert(0, drop_event)
        level = logging.CRITICAL

    logger = structlog.wrap_logger(
        structlog.PrintLogger(file=stream or sys.stderr),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        processors=processors,
    )
    return logger.bind(logger=name, **initial_values)
