"""Tests for davbackup.logger module."""

import json
import logging
import os
from unittest import mock

import pytest

from davbackup.logger import (
    Logger,
    StructuredLogger,
    create_logger,
    get_logger,
)


class TestLoggerInterface:
    """Tests for the Logger abstract interface."""

    def test_logger_is_abstract(self):
        """Test that Logger cannot be instantiated directly."""
        with pytest.raises(TypeError):
            Logger()  # type: ignore

    @pytest.mark.parametrize("method", ["debug", "info", "warning", "error", "get_session_id"])
    def test_logger_has_required_methods(self, method):
        assert hasattr(Logger, method)


class TestStructuredLogger:
    """Tests for the StructuredLogger implementation."""

    def test_creates_session_id(self):
        """Test that StructuredLogger creates a short session ID."""
        logger = StructuredLogger(name="test-structured")
        assert len(logger.get_session_id()) == 8
        assert logger.name == "test-structured"

    def test_different_instances_have_different_session_ids(self):
        assert (
            StructuredLogger(name="test-a").get_session_id()
            != StructuredLogger(name="test-b").get_session_id()
        )

    def test_text_format(self, capsys):
        """Test that StructuredLogger outputs text format by default."""
        logger = StructuredLogger(name="test-text")
        logger.info("Backup written")

        captured = capsys.readouterr()
        assert "INFO" in captured.out
        assert "Backup written" in captured.out
        assert "test-text" in captured.out
        assert f"session:{logger.get_session_id()}" in captured.out

    def test_text_includes_extras(self, capsys):
        """Test that text format appends kwargs as key=value."""
        logger = StructuredLogger(name="test-text-extras")
        logger.info("Renamed existing file", path="/backups/data.json.20240101080000")

        captured = capsys.readouterr()
        assert "path=/backups/data.json.20240101080000" in captured.out

    def test_json_format(self, capsys):
        """Test that StructuredLogger can output JSON format."""
        logger = StructuredLogger(name="test-json", json_format=True)
        logger.info("Backup written", path="/backups/data.json", deleted=3)

        log_entry = json.loads(capsys.readouterr().out.strip())
        assert log_entry["level"] == "INFO"
        assert log_entry["message"] == "Backup written"
        assert log_entry["logger"] == "test-json"
        assert log_entry["session_id"] == logger.get_session_id()
        assert log_entry["path"] == "/backups/data.json"
        assert log_entry["deleted"] == 3

    def test_handles_reserved_kwargs(self, capsys):
        """Test that reserved kwargs are prefixed to avoid conflicts."""
        logger = StructuredLogger(name="test-reserved", json_format=True)
        # "filename" is a LogRecord attribute
        logger.info("Test", filename="data.json")

        log_entry = json.loads(capsys.readouterr().out.strip())
        assert log_entry["_filename"] == "data.json"

    def test_file_output(self, tmp_path):
        """Test that StructuredLogger can write to a file."""
        log_file = tmp_path / "davbackup.log"
        logger = StructuredLogger(name="test-file", log_file=str(log_file))
        logger.warning("File test message")

        for handler in logger._logger.handlers:
            handler.flush()

        assert "File test message" in log_file.read_text()

    def test_all_levels(self, capsys):
        logger = StructuredLogger(name="test-levels", level=logging.DEBUG)

        logger.debug("Debug message")
        logger.info("Info message")
        logger.warning("Warning message")
        logger.error("Error message")

        out = capsys.readouterr().out
        for level in ("DEBUG", "INFO", "WARNING", "ERROR"):
            assert level in out

    def test_recreating_does_not_duplicate_output(self, capsys):
        StructuredLogger(name="test-dupe")
        logger = StructuredLogger(name="test-dupe")
        logger.info("once")

        assert capsys.readouterr().out.count("once") == 1


class TestLoggerFactoryFunctions:
    """Tests for create_logger and get_logger factory functions."""

    def test_create_logger_returns_logger(self):
        assert isinstance(create_logger(name="test-factory"), Logger)

    def test_create_logger_respects_level(self, capsys):
        logger = create_logger(name="test-level-factory", level=logging.WARNING)
        logger.info("Should not appear")
        logger.warning("Should appear")

        out = capsys.readouterr().out
        assert "Should not appear" not in out
        assert "Should appear" in out

    def test_get_logger_reads_env_level(self, capsys):
        """Test that get_logger reads log level from environment."""
        with mock.patch.dict(os.environ, {"TEST_PROJECT_LOG_LEVEL": "WARNING"}):
            logger = get_logger("test-project")
        logger.info("Should not appear")
        logger.warning("Should appear")

        out = capsys.readouterr().out
        assert "Should not appear" not in out
        assert "Should appear" in out

    def test_get_logger_reads_env_json(self, capsys):
        with mock.patch.dict(os.environ, {"TEST_JSON_ENV_LOG_JSON": "true"}):
            logger = get_logger("test-json-env")
        logger.info("JSON env test")

        assert json.loads(capsys.readouterr().out.strip())["message"] == "JSON env test"

    def test_get_logger_reads_env_file(self, tmp_path):
        log_file = tmp_path / "env.log"
        with mock.patch.dict(os.environ, {"TEST_FILE_ENV_LOG_FILE": str(log_file)}):
            logger = get_logger("test-file-env")
        logger.info("to file")

        for handler in logger._logger.handlers:
            handler.flush()
        assert "to file" in log_file.read_text()

    def test_env_prefix_conversion(self):
        """Test that dashed logger names map to underscored env prefixes."""
        with mock.patch.dict(os.environ, {"DAVBACKUP_STORE_LOG_LEVEL": "DEBUG"}):
            logger = get_logger("davbackup-store")
        assert logger._logger.level == logging.DEBUG

    def test_default_level_is_info(self, capsys):
        logger = get_logger("test-default-level")
        logger.debug("Debug should not appear")
        logger.info("Info should appear")

        out = capsys.readouterr().out
        assert "Debug should not appear" not in out
        assert "Info should appear" in out
