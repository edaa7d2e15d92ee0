import logging

import pytest

from logger import ConsoleFormatter, LOGGER_NAME, get_log_file_path, setup_logging


def make_record(level, message):
    return logging.LogRecord(LOGGER_NAME, level, __file__, 1, message, None, None)


class TestConsoleFormatter:
    """Tests for ConsoleFormatter."""

    def test_info_is_bare(self):
        """Test listing lines are printed without a prefix."""
        formatter = ConsoleFormatter()

        assert formatter.format(make_record(logging.INFO, "  Electronics")) == "  Electronics"

    def test_warning_is_prefixed(self):
        """Test warnings and errors carry their level."""
        formatter = ConsoleFormatter()

        assert formatter.format(make_record(logging.ERROR, "boom")) == "ERROR - boom"
        assert formatter.format(make_record(logging.WARNING, "hm")) == "WARNING - hm"


class TestSetupLogging:
    """Tests for setup_logging."""

    @pytest.fixture(autouse=True)
    def reset_handlers(self):
        yield
        for handler in logging.getLogger(LOGGER_NAME).handlers:
            handler.close()
        logging.getLogger(LOGGER_NAME).handlers.clear()

    def test_writes_utf8_log_file(self, test_config):
        """Test accented names survive in the log file."""
        logger = setup_logging(test_config)

        logger.info("Created category 'Café'")
        for handler in logger.handlers:
            handler.flush()

        content = get_log_file_path(test_config).read_text(encoding="utf-8")
        assert "Created category 'Café'" in content
        assert "stockpilot - INFO" in content

    def test_repeated_setup_replaces_handlers(self, test_config):
        """Test calling setup twice does not duplicate output."""
        setup_logging(test_config)
        logger = setup_logging(test_config)

        assert len(logger.handlers) == 2
