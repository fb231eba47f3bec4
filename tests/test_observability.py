"""
Tests for logging configuration.
"""

import logging

import pytest

from node_exporter_installer.core.observability.logging_config import resolve_level, setup_logging


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestResolveLevel:
    def test_default(self, monkeypatch):
        monkeypatch.delenv("NEI_LOG_LEVEL", raising=False)
        assert resolve_level() == "WARNING"

    def test_env_var(self, monkeypatch):
        monkeypatch.setenv("NEI_LOG_LEVEL", "INFO")
        assert resolve_level() == "INFO"

    def test_flags_beat_env(self, monkeypatch):
        monkeypatch.setenv("NEI_LOG_LEVEL", "INFO")
        assert resolve_level(debug=True) == "DEBUG"
        assert resolve_level(quiet=True) == "ERROR"

    def test_debug_beats_verbose(self):
        assert resolve_level(debug=True, verbose=True) == "DEBUG"
        assert resolve_level(verbose=True, quiet=True) == "INFO"


class TestSetupLogging:
    def test_console_level(self):
        setup_logging(level="INFO")
        root = logging.getLogger()
        assert root.level == logging.INFO
        assert len(root.handlers) == 1

    def test_unknown_level_falls_back(self):
        setup_logging(level="chatty")
        assert logging.getLogger().level == logging.WARNING

    def test_log_file(self, tmp_path):
        log_file = tmp_path / "installer.log"
        setup_logging(level="WARNING", log_file=str(log_file), log_file_level="DEBUG")
        assert logging.getLogger().level == logging.DEBUG

        logging.getLogger("node_exporter_installer.test").debug("written to file only")
        for handler in logging.getLogger().handlers:
            handler.flush()
        assert "written to file only" in log_file.read_text()
