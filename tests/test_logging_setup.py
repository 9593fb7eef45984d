"""Tests for logging configuration."""

import json
import logging

import pytest

from isolink.utils.logging_setup import JSONFormatter, get_logger, log_operation, setup_logging


@pytest.fixture
def logger_name(request):
    name = f"isolink-test-{request.node.name}"
    yield name
    logger = logging.getLogger(name)
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()


class TestSetupLogging:
    """Test setup_logging handler wiring."""

    def test_console_only(self, logger_name):
        """Test that no file handler is attached without a log dir."""
        logger = setup_logging(logger_name, level="info")

        assert logger.level == logging.INFO
        assert logger.propagate is False
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0], logging.StreamHandler)

    def test_repeated_setup_replaces_handlers(self, logger_name):
        """Test that calling setup twice does not duplicate handlers."""
        setup_logging(logger_name)
        logger = setup_logging(logger_name)
        assert len(logger.handlers) == 1

    def test_json_file(self, logger_name, tmp_path):
        """Test JSON lines written to the log directory."""
        logger = setup_logging(logger_name, level="DEBUG", log_dir=tmp_path, console=False)
        log_operation(logger, "run", scenario="render.yaml")
        for handler in logger.handlers:
            handler.flush()

        files = list(tmp_path.glob("isolink_*.jsonl"))
        assert len(files) == 1
        record = json.loads(files[0].read_text().splitlines()[0])
        assert record['level'] == "INFO"
        assert record['operation'] == "run"
        assert record['scenario'] == "render.yaml"
        assert record['message'] == "Starting operation: run"

    def test_get_logger_reuses_configured(self, logger_name):
        """Test that get_logger keeps existing handlers."""
        configured = setup_logging(logger_name, level="ERROR")
        handler = configured.handlers[0]

        assert get_logger(logger_name) is configured
        assert configured.handlers == [handler]


class TestJSONFormatter:
    """Test structured formatting."""

    def test_component_id_field(self):
        """Test that known context attributes are copied into the record."""
        record = logging.LogRecord(
            "isolink.engine", logging.WARNING, __file__, 10, "rejected %s", ("destroy",), None
        )
        record.component_id = 7

        data = json.loads(JSONFormatter().format(record))

        assert data['message'] == "rejected destroy"
        assert data['component_id'] == 7
        assert data['logger'] == "isolink.engine"
