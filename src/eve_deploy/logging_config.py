"""Structured logging configuration using structlog.

Human-readable console output by default, JSON when json_logs is set.
Everything is written to stderr: stdout is left to the caller for the
final broadcast result, and the operator preview goes to its own stream.
Every record emitted during a submission carries its submission_id.

Usage:
    from eve_deploy.logging_config import setup_logging, get_logger
    setup_logging(log_level="DEBUG")
    logger = get_logger(__name__)
    logger.info("tx.assembled", messages=1, gas_limit=150000)
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from eve_deploy.config import Settings

# httpx logs every request at INFO; one per poll attempt is too chatty.
_NOISY_LOGGERS = ("httpx", "httpcore")


def setup_logging(log_level: str = "INFO", json_logs: bool = False) -> None:
    """Route structlog through a single stderr handler on the root logger.

    Args:
        log_level: Standard level name (DEBUG, INFO, WARNING, ...).
            Unknown names fall back to INFO.
        json_logs: Emit one JSON object per line instead of console text.
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    final_processors: list[structlog.types.Processor] = [
        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
    ]
    if json_logs:
        final_processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        final_processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=final_processors,
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def setup_logging_from_settings(settings: Settings) -> None:
    """Apply LOG_LEVEL / AKASH_LOG_JSON from the loaded settings."""
    setup_logging(log_level=settings.log_level, json_logs=settings.log_json)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
