"""Tests for the logging configuration."""

import io
import logging

import pytest

from playlist_sync.utils.logging_config import (
    NOISY_LOGGERS,
    RESET,
    SyncLogFormatter,
    configure_third_party_loggers,
    setup_logging,
    stream_supports_color,
)


@pytest.fixture
def root_logger():
    """Restore the root logger after a test replaces its handlers."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield root
    for handler in root.handlers:
        handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def quiet_levels():
    """Restore the levels of the library loggers."""
    levels = {name: logging.getLogger(name).level for name in NOISY_LOGGERS}
    yield
    for name, level in levels.items():
        logging.getLogger(name).setLevel(level)


def make_record(level=logging.WARNING, message="Exported %s"):
    """Create a log record from this module."""
    return logging.LogRecord(
        name="playlist_sync.core.sync.exporter",
        level=level,
        pathname="/src/playlist_sync/core/sync/exporter.py",
        lineno=42,
        msg=message,
        args=("Mix",),
        exc_info=None,
    )


class TestSyncLogFormatter:
    """Test SyncLogFormatter."""

    def test_plain_output(self):
        """Test the location field and no color codes by default."""
        formatter = SyncLogFormatter("%(location)s %(levelname)s %(message)s")

        output = formatter.format(make_record())

        assert output == "exporter.py:42 WARNING Exported Mix"
        assert "\033[" not in output

    def test_colored_output_restores_levelname(self):
        """Test colors are applied to the output only."""
        formatter = SyncLogFormatter("%(levelname)s %(message)s", use_color=True)
        record = make_record(logging.ERROR)

        output = formatter.format(record)

        assert output.startswith("\033[31mERROR   " + RESET)
        assert record.levelname == "ERROR"

    def test_thread_name_in_file_format(self):
        """Test the default format names the logging thread."""
        record = make_record()
        record.threadName = "PlaylistSync"

        assert "PlaylistSync" in SyncLogFormatter().format(record)


class TestStreamSupportsColor:
    """Test terminal detection."""

    def test_plain_stream(self, monkeypatch):
        """Test streams that are not terminals get no colors."""
        monkeypatch.delenv("NO_COLOR", raising=False)

        assert stream_supports_color(io.StringIO()) is False

    def test_no_color_variable(self, monkeypatch):
        """Test NO_COLOR disables colors even on a terminal."""

        class Terminal(io.StringIO):
            def isatty(self):
                return True

        monkeypatch.delenv("NO_COLOR", raising=False)
        assert stream_supports_color(Terminal()) is True

        monkeypatch.setenv("NO_COLOR", "1")
        assert stream_supports_color(Terminal()) is False


class TestSetupLogging:
    """Test setup_logging."""

    def test_console_output(self, root_logger):
        """Test console lines are written without colors to a plain stream."""
        stream = io.StringIO()
        setup_logging("INFO", stream=stream)

        logging.getLogger("playlist_sync.test").info("Scan finished")

        output = stream.getvalue()
        assert "Scan finished" in output
        assert "MainThread" in output
        assert "\033[" not in output
        assert root_logger.level == logging.INFO

    def test_level_filters_messages(self, root_logger):
        """Test messages below the configured level are dropped."""
        stream = io.StringIO()
        setup_logging("WARNING", stream=stream)

        logging.getLogger("playlist_sync.test").info("hidden")
        logging.getLogger("playlist_sync.test").warning("shown")

        assert "hidden" not in stream.getvalue()
        assert "shown" in stream.getvalue()

    def test_unknown_level_defaults_to_info(self, root_logger):
        """Test an invalid level name falls back to INFO."""
        setup_logging("LOUD", console_output=False)

        assert root_logger.level == logging.INFO

    def test_file_output(self, root_logger, tmp_path):
        """Test the rotating log file is created and written."""
        log_file = tmp_path / "logs" / "sync.log"
        setup_logging("INFO", log_file=log_file, console_output=False)

        logging.getLogger("playlist_sync.test").warning("Failed to back up Mix")
        for handler in root_logger.handlers:
            handler.flush()

        content = log_file.read_text(encoding="utf-8")
        assert "Failed to back up Mix" in content
        assert "WARNING " in content
        assert "test_logging_config.py:" in content

    def test_replaces_existing_handlers(self, root_logger):
        """Test calling setup twice leaves a single console handler."""
        setup_logging("INFO", stream=io.StringIO())
        setup_logging("INFO", stream=io.StringIO())

        assert len(root_logger.handlers) == 1


class TestConfigureThirdPartyLoggers:
    """Test configure_third_party_loggers."""

    def test_library_loggers_raised_to_warning(self, quiet_levels):
        """Test library loggers and their children only pass warnings."""
        configure_third_party_loggers()

        for name in NOISY_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING
        assert not logging.getLogger("sqlalchemy.engine").isEnabledFor(logging.INFO)
        assert logging.getLogger("watchdog.observers").isEnabledFor(logging.WARNING)
