"""Logging for build runs: structlog events rendered through stdlib logging.

The updater runs inside a host build, so only the ``flowdeps`` logger tree is
given a handler; the root logger and whatever the host has set up on it are
left alone.
"""

from __future__ import annotations

import logging
import logging.config
import os
import sys

import structlog

LOGGER_NAME = "flowdeps"
LOG_FORMATS = ("console", "json")


def _shared_processors(log_format: str) -> list[structlog.types.Processor]:
    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
    ]
    # build consoles stamp their own lines; machine readable output needs a time
    if log_format == "json":
        processors.append(structlog.processors.TimeStamper(fmt="iso", utc=True))
    processors += [
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    return processors


def _renderer(log_format: str) -> structlog.types.Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def setup_logging(level: str | None = None, log_format: str | None = None, *, force: bool = False) -> bool:
    """Route flowdeps log events to stderr for a build run.

    Reads from environment variables:
        FLOWDEPS_LOG_LEVEL : log level (default: INFO), overridden by *level*
        FLOWDEPS_LOG_FORMAT: console | json (default: console), overridden by *log_format*

    When the host process has already configured structlog nothing is
    changed unless *force* is set. Returns True when logging was configured.

    Raises:
        ValueError: unknown log format.
    """
    if structlog.is_configured() and not force:
        return False

    log_level = (level or os.environ.get("FLOWDEPS_LOG_LEVEL", "INFO")).upper()
    log_format = (log_format or os.environ.get("FLOWDEPS_LOG_FORMAT", "console")).lower()
    if log_format not in LOG_FORMATS:
        raise ValueError(f"unknown log format {log_format!r}, expected one of {', '.join(LOG_FORMATS)}")

    shared_processors = _shared_processors(log_format)
    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "build": {
                    "()": structlog.stdlib.ProcessorFormatter,
                    "foreign_pre_chain": shared_processors,
                    "processors": [
                        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                        _renderer(log_format),
                    ],
                },
            },
            "handlers": {
                "build": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stderr",
                    "formatter": "build",
                },
            },
            "loggers": {
                LOGGER_NAME: {"handlers": ["build"], "level": log_level, "propagate": False},
            },
        }
    )
    return True
