"""
vincent.core.logging_config - Structured Logging Setup
========================================================

Every module logs through ``structlog.get_logger()`` and binds a
``component`` key. This module wires structlog onto stdlib logging once,
at process start, using the level and renderer from ``VincentConfig``.

Usage:
    >>> from vincent.core.config import get_default_config
    >>> from vincent.core.logging_config import configure_from_config
    >>> configure_from_config(get_default_config())
"""

from __future__ import annotations

import logging
import sys

import structlog

from vincent.core.config import VincentConfig


def configure_logging(level: str = "INFO", json_logs: bool = False) -> None:
    """Configure stdlib logging and structlog.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
            Unknown names fall back to INFO.
        json_logs: Render JSON lines instead of the human console format.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(console_handler)

    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def configure_from_config(config: VincentConfig) -> None:
    """Configure logging from a ``VincentConfig``."""
    configure_logging(level=config.log_level, json_logs=config.log_json)
