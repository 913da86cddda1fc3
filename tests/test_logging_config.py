"""
Tests for logging setup and environment-file selection.
"""

import logging
import threading

from config import env_file_path
from logging_config import (
    APP_LOGGER_NAME,
    ThreadContextFilter,
    get_job_logger,
    get_logger,
    set_thread_name,
    setup_logging,
)


class TestLogging:
    """Tests for logging_config helpers."""

    def test_get_logger_is_namespaced(self):
        assert get_logger("services.print_service").name == "printu_kiosk.services.print_service"
        assert get_logger("printu_kiosk.core").name == "printu_kiosk.core"

    def test_job_logger_uses_token_prefix(self):
        assert get_job_logger("a1b2c3d4e5f6").name == "printu_kiosk.job.a1b2c3d4"

    def test_filter_adds_thread_name(self):
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)
        results = {}

        def worker():
            set_thread_name("Notify")
            ThreadContextFilter().filter(record)
            results["name"] = record.thread_name

        thread = threading.Thread(target=worker)
        thread.start()
        thread.join()

        assert results["name"] == "Notify"

    def test_file_logging_writes_main_and_error_logs(self, tmp_path):
        logger = setup_logging(app_name="kiosk_test", log_dir=tmp_path, enable_file_logging=True)
        try:
            logger.error("spooler exploded")
            for handler in logger.handlers:
                handler.flush()

            assert "spooler exploded" in (tmp_path / "kiosk_test.log").read_text()
            assert "spooler exploded" in (tmp_path / "kiosk_test_error.log").read_text()
        finally:
            for handler in list(logger.handlers):
                handler.close()
                logger.removeHandler(handler)

    def test_setup_replaces_handlers(self):
        setup_logging(enable_file_logging=False)
        logger = setup_logging(enable_file_logging=False)
        assert logger.name == APP_LOGGER_NAME
        assert len(logger.handlers) == 1


class TestEnvFile:
    """Tests for .env selection."""

    def test_prefers_env_local(self, tmp_path):
        (tmp_path / ".env").write_text("PORT=1\n")
        (tmp_path / ".env.local").write_text("PORT=2\n")
        assert env_file_path(tmp_path) == tmp_path / ".env.local"

    def test_falls_back_to_env(self, tmp_path):
        (tmp_path / ".env").write_text("PORT=1\n")
        assert env_file_path(tmp_path) == tmp_path / ".env"
