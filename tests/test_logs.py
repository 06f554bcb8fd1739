"""Tests for the logging setup."""

import logging
import logging.handlers

import pytest

from taskboard import logs


@pytest.fixture
def restore_logging():
    yield
    logs.setup_logging()


class TestConsoleLevel:
    """Console threshold taken from the environment."""

    def test_default_is_warning(self, monkeypatch):
        """Without any variable only warnings reach the console."""
        monkeypatch.delenv(logs.DEBUG_ENV, raising=False)
        monkeypatch.delenv(logs.LOG_LEVEL_ENV, raising=False)
        assert logs.console_level() == logging.WARNING

    def test_named_level(self, monkeypatch):
        """TASKBOARD_LOG_LEVEL accepts level names in any case."""
        monkeypatch.delenv(logs.DEBUG_ENV, raising=False)
        monkeypatch.setenv(logs.LOG_LEVEL_ENV, "info")
        assert logs.console_level() == logging.INFO

    def test_unknown_level_falls_back(self, monkeypatch):
        """An unknown level name behaves like no setting."""
        monkeypatch.delenv(logs.DEBUG_ENV, raising=False)
        monkeypatch.setenv(logs.LOG_LEVEL_ENV, "chatty")
        assert logs.console_level() == logging.WARNING

    def test_debug_wins(self, monkeypatch):
        """TASKBOARD_DEBUG overrides the named level."""
        monkeypatch.setenv(logs.DEBUG_ENV, "true")
        monkeypatch.setenv(logs.LOG_LEVEL_ENV, "error")
        assert logs.console_level() == logging.DEBUG


class TestSetup:
    """Handlers attached to the taskboard logger."""

    def test_handlers(self, tmp_path, restore_logging):
        """A rotating file handler and a console handler are attached."""
        logger = logs.setup_logging(logging.ERROR, tmp_path)
        kinds = {type(h) for h in logger.handlers}
        assert logging.handlers.RotatingFileHandler in kinds
        assert logger.propagate is False

        logs.get_logger("engine").debug("written to file only")
        for handler in logger.handlers:
            handler.flush()
        assert "written to file only" in (tmp_path / logs.LOG_FILE).read_text()

    def test_unwritable_dir_skips_file(self, tmp_path, restore_logging):
        """A log directory that cannot be created leaves only the console."""
        blocker = tmp_path / "file"
        blocker.write_text("")
        logger = logs.setup_logging(logging.WARNING, blocker / "logs")
        assert [h.name for h in logger.handlers] == ["console"]

    def test_set_console_level(self, tmp_path, restore_logging):
        """Only the console threshold changes."""
        logger = logs.setup_logging(logging.WARNING, tmp_path)
        logs.set_console_level(logging.INFO)
        levels = {h.name: h.level for h in logger.handlers}
        assert levels["console"] == logging.INFO
        assert logging.DEBUG in levels.values()

    def test_child_loggers(self):
        """Module loggers live under the taskboard namespace."""
        assert logs.get_logger("store.io").name == "taskboard.store.io"
        assert logs.get_logger().name == "taskboard"
