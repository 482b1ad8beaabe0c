"""Tests for logging configuration, formatters and component loggers."""

import json
import logging
import math
import sys

import pytest

from reconciler.config.models import SourceTag
from reconciler.logging import ComponentLoggerAdapter, get_logger
from reconciler.logging.config import (
    SERVICE_NAME,
    ContextualFilter,
    JSONFormatter,
    KeyValueFormatter,
    configure_logging,
)
from reconciler.logging.context import log_context


@pytest.fixture
def logger():
    """A dedicated logger whose handlers are removed after the test."""
    test_logger = logging.getLogger("reconciler.tests")
    test_logger.setLevel(logging.DEBUG)
    test_logger.handlers.clear()

    yield test_logger

    test_logger.handlers.clear()


@pytest.fixture
def restore_root_logger():
    """Restore root logger handlers and level replaced by configure_logging."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level

    yield root

    root.handlers[:] = handlers
    root.setLevel(level)


def make_record(logger, message="Merge completed", **extra):
    return logger.makeRecord(
        "reconciler.matching.engine", logging.INFO, "engine.py", 1, message, (), None, extra=extra or None
    )


class TestJSONFormatter:
    """Test suite for JSONFormatter."""

    def test_mandatory_fields(self, logger):
        log_obj = json.loads(JSONFormatter().format(make_record(logger)))

        assert log_obj["level"] == "INFO"
        assert log_obj["logger"] == "reconciler.matching.engine"
        assert log_obj["message"] == "Merge completed"
        assert log_obj["timestamp"].endswith("Z")
        assert len(log_obj["timestamp"]) == 24

    def test_extra_fields(self, logger):
        record = make_record(logger, event="matching.merge.completed", group_count=3, cleaned=True)

        log_obj = json.loads(JSONFormatter().format(record))

        assert log_obj["event"] == "matching.merge.completed"
        assert log_obj["group_count"] == 3
        assert log_obj["cleaned"] is True

    def test_standard_attributes_not_duplicated(self, logger):
        log_obj = json.loads(JSONFormatter().format(make_record(logger, event="x")))

        assert "name" not in log_obj
        assert "msg" not in log_obj
        assert "levelno" not in log_obj

    def test_awkward_values_are_serializable(self, logger):
        record = make_record(logger, source=SourceTag.HEMNET, diff=math.inf, path=object)

        log_obj = json.loads(JSONFormatter().format(record))

        assert log_obj["source"] == "hemnet"
        assert log_obj["diff"] == "inf"
        assert isinstance(log_obj["path"], str)

    def test_exception_info(self, logger):
        try:
            raise ValueError("bad input")
        except ValueError:
            record = logger.makeRecord(
                "test", logging.ERROR, "test.py", 1, "Failed", (), sys.exc_info()
            )

        log_obj = json.loads(JSONFormatter().format(record))

        assert "ValueError: bad input" in log_obj["exc_info"]


class TestKeyValueFormatter:
    """Test suite for KeyValueFormatter."""

    @pytest.fixture
    def formatter(self):
        """KeyValueFormatter with the production format string."""
        return KeyValueFormatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def test_basic_line(self, formatter, logger):
        output = formatter.format(make_record(logger))

        assert "[INFO]" in output
        assert "reconciler.matching.engine: Merge completed" in output

    def test_extras_sorted_key_value(self, formatter, logger):
        output = formatter.format(make_record(logger, group_count=2, event="matching.merge.completed"))

        assert output.endswith("event=matching.merge.completed group_count=2")

    def test_value_formatting(self, formatter, logger):
        output = formatter.format(
            make_record(logger, cleaned=False, primary_id=None, reason="too far", source=SourceTag.BOOLI)
        )

        assert "cleaned=false" in output
        assert "primary_id=null" in output
        assert 'reason="too far"' in output
        assert "source=booli" in output

    def test_static_fields_skipped(self, formatter, logger):
        record = make_record(logger)
        ContextualFilter(environment="test").filter(record)

        output = formatter.format(record)

        assert "service=" not in output
        assert "environment=" not in output


class TestContextualFilter:
    """Test suite for ContextualFilter."""

    def test_static_fields(self, logger):
        record = make_record(logger)

        assert ContextualFilter(environment="staging").filter(record) is True
        assert record.service == SERVICE_NAME
        assert record.environment == "staging"

    def test_context_fields(self, logger):
        with log_context(run_id="abc123", source_id="hemnet"):
            record = make_record(logger)
            ContextualFilter().filter(record)

        assert record.run_id == "abc123"
        assert record.source_id == "hemnet"

    def test_call_site_extra_wins_over_context(self, logger):
        with log_context(source_id="hemnet"):
            record = make_record(logger, source_id="booli")
            ContextualFilter().filter(record)

        assert record.source_id == "booli"

    def test_full_json_line(self, logger):
        with log_context(run_id="abc123"):
            record = make_record(logger, event="pipeline.run.started")
            ContextualFilter(environment="test").filter(record)
            log_obj = json.loads(JSONFormatter().format(record))

        assert log_obj["service"] == SERVICE_NAME
        assert log_obj["environment"] == "test"
        assert log_obj["run_id"] == "abc123"
        assert log_obj["event"] == "pipeline.run.started"


class TestConfigureLogging:
    """Test suite for configure_logging."""

    def test_invalid_level(self):
        with pytest.raises(ValueError, match="Invalid log level"):
            configure_logging(level="LOUD")

    def test_invalid_format(self):
        with pytest.raises(ValueError, match="Invalid log format"):
            configure_logging(format_type="xml")

    def test_json_format(self, restore_root_logger):
        configure_logging(level="DEBUG", format_type="json", environment="test")

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JSONFormatter)

    def test_key_value_format_writes_to_stderr(self, restore_root_logger):
        configure_logging(level="warning", format_type="key-value")

        handler = logging.getLogger().handlers[0]
        assert isinstance(handler.formatter, KeyValueFormatter)
        assert handler.stream is sys.stderr

    def test_repeated_calls_replace_handler(self, restore_root_logger):
        configure_logging()
        configure_logging()

        assert len(logging.getLogger().handlers) == 1


class TestGetLogger:
    """Test suite for get_logger."""

    def test_plain_logger(self):
        assert isinstance(get_logger("reconciler.tests"), logging.Logger)

    def test_component_adapter(self, caplog):
        adapter = get_logger("reconciler.tests", component="matching")

        with caplog.at_level(logging.INFO, logger="reconciler.tests"):
            adapter.info("Merged", extra={"event": "matching.merge.completed"})

        assert isinstance(adapter, ComponentLoggerAdapter)
        record = caplog.records[-1]
        assert record.component == "matching"
        assert record.event == "matching.merge.completed"

    def test_call_site_component_wins(self, caplog):
        adapter = get_logger("reconciler.tests", component="matching")

        with caplog.at_level(logging.INFO, logger="reconciler.tests"):
            adapter.info("Override", extra={"component": "cleaning"})

        assert caplog.records[-1].component == "cleaning"
