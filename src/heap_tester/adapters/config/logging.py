# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Yakov Shkolnikov and contributors
"""Structured logging configuration."""

import logging
import sys
from collections.abc import Callable, Sequence
from typing import Any, cast

import structlog
from structlog.typing import EventDict, WrappedLogger

VALID_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def normalize_level(log_level: str) -> str:
    """Upper-case a level name, falling back to INFO for unknown names."""
    normalized_level = log_level.upper()
    if normalized_level not in VALID_LEVELS:
        logging.warning(
            f"Invalid log level '{log_level}', defaulting to INFO. "
            f"Valid levels: {', '.join(sorted(VALID_LEVELS))}"
        )
        return "INFO"
    return normalized_level


def configure_logging(log_level: str = "INFO", json_output: bool = False) -> None:
    """Configure structured logging.

    Log records go to stderr so command output on stdout stays readable
    while a driver prints samples.
    """
    normalized_level = normalize_level(log_level)

    # Configure stdlib logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, normalized_level),
    )

    processors: Sequence[Callable[[WrappedLogger, str, EventDict], Any]]
    if json_output:
        processors = [
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, normalized_level)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        # Module-level loggers must follow reconfiguration (one per CLI run).
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    if name:
        return cast(structlog.BoundLogger, structlog.get_logger(name))
    return cast(structlog.BoundLogger, structlog.get_logger())
