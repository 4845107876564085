"""Unit tests for logging setup utilities."""

import io
import logging
import logging.handlers

import pytest

from agenda.config import AgendaSettings
from agenda.utils.logging import (
    VERBOSE,
    AutoColoredFormatter,
    get_log_level,
    get_logger,
    setup_logging,
)


class TestLogLevels:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [("verbose", VERBOSE), ("DEBUG", logging.DEBUG), ("Info", logging.INFO)],
    )
    def test_get_log_level(self, name, expected):
        assert get_log_level(name) == expected

    def test_unknown_level(self):
        with pytest.raises(AttributeError):
            get_log_level("chatty")

    def test_verbose_method(self, caplog):
        logger = logging.getLogger("agenda.tests.verbose")
        caplog.set_level(VERBOSE, logger="agenda.tests.verbose")

        logger.verbose("capped at %d", 365)

        assert caplog.records[-1].levelname == "VERBOSE"
        assert caplog.records[-1].getMessage() == "capped at 365"


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_console_only(self, quiet_agenda_logger):
        logger = setup_logging(log_level="WARNING")

        assert logger.name == "agenda"
        assert len(logger.handlers) == 1
        assert logger.handlers[0].level == logging.WARNING

    def test_settings_drive_levels(self, quiet_agenda_logger, tmp_path):
        settings = AgendaSettings(
            logging={"console_level": "VERBOSE"}, _config_file=tmp_path / "none"
        )

        logger = setup_logging(settings)

        assert logger.handlers[0].level == VERBOSE

    def test_file_logging_from_settings(self, quiet_agenda_logger, tmp_path):
        settings = AgendaSettings(
            data_dir=tmp_path,
            logging={"file_enabled": True, "file_prefix": "test-agenda"},
            _config_file=tmp_path / "none",
        )

        logger = setup_logging(settings)
        get_logger("store").debug("written to file")
        for handler in logger.handlers:
            handler.flush()

        file_handlers = [
            h for h in logger.handlers if isinstance(h, logging.handlers.RotatingFileHandler)
        ]
        assert len(file_handlers) == 1
        log_path = tmp_path / "logs" / "test-agenda.log"
        assert "written to file" in log_path.read_text()

    def test_repeated_setup_does_not_duplicate_handlers(self, quiet_agenda_logger):
        setup_logging(log_level="INFO")
        logger = setup_logging(log_level="INFO")

        assert len(logger.handlers) == 1


class TestGetLogger:
    def test_prefixes_namespace(self):
        assert get_logger("store.database").name == "agenda.store.database"

    def test_keeps_qualified_names(self):
        assert get_logger("agenda.layout").name == "agenda.layout"
        assert get_logger("agenda").name == "agenda"


class TestAutoColoredFormatter:
    @pytest.fixture
    def record(self):
        return logging.LogRecord("agenda", logging.ERROR, __file__, 1, "boom", None, None)

    def test_no_colors_when_disabled(self, record):
        formatter = AutoColoredFormatter("%(levelname)s %(message)s", enable_colors=False)

        assert formatter.format(record) == "ERROR boom"

    def test_basic_colors(self, record):
        formatter = AutoColoredFormatter("%(levelname)s %(message)s")
        formatter.color_mode = "basic"

        assert formatter.format(record) == "\033[31mERROR\033[0m boom"

    def test_no_colors_without_terminal(self, monkeypatch):
        monkeypatch.setattr("sys.stdout", io.StringIO())

        assert AutoColoredFormatter()._detect_color_support() == "none"
