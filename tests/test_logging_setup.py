"""Tests for proxy logging configuration."""

import logging
from datetime import datetime

import pytest

from slim_mcp.logging_setup import configure_logging, log_file_name


@pytest.fixture
def slim_logger():
    """Restore the slim_mcp logger after each test."""
    logger = logging.getLogger("slim_mcp")
    saved = (logger.level, logger.propagate, list(logger.handlers))
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        if handler not in saved[2]:
            handler.close()
    logger.setLevel(saved[0])
    logger.propagate = saved[1]
    for handler in saved[2]:
        logger.addHandler(handler)


class TestLogFileName:
    def test_format(self):
        name = log_file_name(datetime(2025, 3, 4, 5, 6, 7, 890000))
        assert name == "mcp-2025-03-04T05-06-07-890.log"

    def test_no_colons(self):
        assert ":" not in log_file_name()


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_stderr_only(self, slim_logger):
        assert configure_logging("DEBUG", None) is None
        assert slim_logger.level == logging.DEBUG
        assert len(slim_logger.handlers) == 1
        assert not slim_logger.propagate

    def test_file_logging(self, slim_logger, tmp_path):
        log_dir = tmp_path / "logs"
        log_file = configure_logging("info", log_dir)
        assert log_file is not None
        assert log_file.parent == log_dir
        assert log_file.name.startswith("mcp-")

        logging.getLogger("slim_mcp.proxy.server").info("Upstream server started (pid=42)")
        for handler in slim_logger.handlers:
            handler.flush()
        content = log_file.read_text()
        assert "slim_mcp.proxy.server - INFO - Upstream server started (pid=42)" in content

    def test_reconfigure_replaces_handlers(self, slim_logger, tmp_path):
        configure_logging("INFO", tmp_path)
        configure_logging("WARNING", None)
        assert len(slim_logger.handlers) == 1
        assert slim_logger.level == logging.WARNING

    def test_unwritable_dir_falls_back(self, slim_logger, tmp_path):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("")
        assert configure_logging("INFO", blocker / "logs") is None
        assert len(slim_logger.handlers) == 1
