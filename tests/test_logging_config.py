"""Tests for setup_logging (console + file handlers)."""

import logging

import pytest

from subsidy_scraper.logging_config import setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    yield root
    for handler in root.handlers:
        handler.close()
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)


class TestSetupLogging:
    def test_creates_timestamped_log_file(self, tmp_path, restore_root_logger):
        log_file = setup_logging(tmp_path / "logs")
        assert log_file.parent == tmp_path / "logs"
        assert log_file.name.startswith("run-")
        assert log_file.suffix == ".log"

    def test_debug_goes_to_file_only(self, tmp_path, restore_root_logger):
        log_file = setup_logging(tmp_path / "logs")
        console, file_handler = restore_root_logger.handlers
        assert console.level == logging.INFO
        assert file_handler.level == logging.DEBUG

        logging.getLogger("subsidy_scraper.test").debug("polling page source")
        file_handler.flush()
        assert "polling page source" in log_file.read_text(encoding="utf-8")

    def test_repeated_calls_do_not_duplicate_handlers(self, tmp_path, restore_root_logger):
        setup_logging(tmp_path / "a")
        setup_logging(tmp_path / "b")
        assert len(restore_root_logger.handlers) == 2

    def test_third_party_loggers_quieted(self, tmp_path, restore_root_logger):
        setup_logging(tmp_path)
        assert logging.getLogger("nodriver").level == logging.WARNING
        assert logging.getLogger("urllib3").level == logging.WARNING
