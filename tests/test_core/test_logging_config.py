"""
Tests for vincent.core.logging_config
=======================================
"""

import logging

import structlog

from vincent.core.config import VincentConfig
from vincent.core.logging_config import configure_from_config, configure_logging


class TestConfigureLogging:
    """Logging setup from explicit arguments and from VincentConfig."""

    def test_sets_root_level(self) -> None:
        configure_logging(level="DEBUG")
        assert logging.getLogger().level == logging.DEBUG

    def test_unknown_level_falls_back_to_info(self) -> None:
        configure_logging(level="CHATTY")
        assert logging.getLogger().level == logging.INFO

    def test_single_handler_after_reconfigure(self) -> None:
        configure_logging()
        configure_logging()
        assert len(logging.getLogger().handlers) == 1

    def test_json_renderer_from_config(self) -> None:
        configure_from_config(VincentConfig(log_json=True, log_level="WARNING"))

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)
        assert logging.getLogger().level == logging.WARNING
