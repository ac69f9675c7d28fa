"""Tests for logging configuration."""

import sys
from io import StringIO
from unittest.mock import patch

from ytcaptions.logging import configure_logging, logger


class TestConfigureLogging:
    """Tests for configure_logging function."""

    def test_default_filters_debug(self) -> None:
        """Default mode filters DEBUG messages."""
        stderr = StringIO()
        with patch.object(sys, "stderr", stderr):
            configure_logging()
            logger.debug("debug message")
            logger.info("info message")

        output = stderr.getvalue()
        assert "debug message" not in output
        assert "info message" in output

    def test_verbose_shows_debug_with_module(self) -> None:
        """Verbose mode shows DEBUG messages with the module name."""
        stderr = StringIO()
        with patch.object(sys, "stderr", stderr):
            configure_logging(verbose=True)
            logger.debug("debug message")

        output = stderr.getvalue()
        assert "debug message" in output
        assert "test_logging" in output

    def test_quiet_shows_only_warnings(self) -> None:
        """Quiet mode hides INFO."""
        stderr = StringIO()
        with patch.object(sys, "stderr", stderr):
            configure_logging(quiet=True)
            logger.info("info message")
            logger.warning("warning message")

        output = stderr.getvalue()
        assert "info message" not in output
        assert "warning message" in output

    def test_verbose_overrides_quiet(self) -> None:
        """Verbose wins when both flags are set."""
        stderr = StringIO()
        with patch.object(sys, "stderr", stderr):
            configure_logging(verbose=True, quiet=True)
            logger.debug("debug message")

        assert "debug message" in stderr.getvalue()

    def test_logger_exported(self) -> None:
        """Logger is accessible from module."""
        from ytcaptions.logging import logger as imported_logger

        assert hasattr(imported_logger, "debug")
        assert hasattr(imported_logger, "warning")
