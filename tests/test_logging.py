"""
Tests for the log formatters and configure_logging.
"""
import json
import logging
import sys

import pytest

from taskflow.core.logging import JSONFormatter, TextFormatter, configure_logging


def _record(msg: str = "Rule fired", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="taskflow.services.engine",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    def test_basic_fields(self):
        data = json.loads(JSONFormatter().format(_record()))
        assert data["level"] == "INFO"
        assert data["logger"] == "taskflow.services.engine"
        assert data["message"] == "Rule fired"
        assert "timestamp" in data

    def test_optional_fields(self):
        data = json.loads(JSONFormatter().format(_record(project_id="p1", rule_id="r1")))
        assert data["project_id"] == "p1"
        assert data["rule_id"] == "r1"
        assert "task_id" not in data

    def test_exception_included(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = _record()
            record.exc_info = sys.exc_info()
        data = json.loads(JSONFormatter().format(record))
        assert "RuntimeError: boom" in data["exception"]


class TestTextFormatter:
    def test_format(self):
        line = TextFormatter().format(_record())
        assert " - taskflow.services.engine - INFO - Rule fired" in line


class TestConfigureLogging:
    @pytest.fixture(autouse=True)
    def restore_root(self):
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        yield
        root.handlers[:] = handlers
        root.setLevel(level)

    def test_json_handler_installed(self):
        configure_logging(level="debug", format="json")
        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert isinstance(root.handlers[-1].formatter, JSONFormatter)
        assert logging.getLogger("apscheduler").level == logging.WARNING

    def test_text_is_default(self):
        configure_logging()
        assert isinstance(logging.getLogger().handlers[-1].formatter, TextFormatter)
