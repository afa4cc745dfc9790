"""
ProjectHub Backend: Structured Logger Tests
===========================================

What we test:
    ✅ Level methods carry metadata on the record
    ✅ error() keeps exception details apart from context
    ✅ Slow-operation threshold (strictly greater than)
    ✅ Request summary level follows status class
    ✅ JSON and text formatters
"""

import json
import logging

import pytest

from projecthub.logger import (
    JsonLogFormatter,
    RequestIDFilter,
    StructuredLogger,
    TextLogFormatter,
    describe_error,
)
from projecthub.middleware.request_id import request_id_var


@pytest.fixture
def logger():
    return StructuredLogger("projecthub.test")


def _records(caplog, name="projecthub.test"):
    return [r for r in caplog.records if r.name == name]


class TestLevels:

    def test_info_carries_data(self, logger, caplog):
        caplog.set_level(logging.DEBUG, logger="projecthub.test")
        logger.info("Project created", {"project_id": "p1"})

        [record] = _records(caplog)
        assert record.levelno == logging.INFO
        assert record.getMessage() == "Project created"
        assert record.data == {"project_id": "p1"}

    def test_debug_and_warn(self, logger, caplog):
        caplog.set_level(logging.DEBUG, logger="projecthub.test")
        logger.debug("details")
        logger.warn("careful", {"k": 1})

        levels = [r.levelno for r in _records(caplog)]
        assert levels == [logging.DEBUG, logging.WARNING]

    def test_metadata_is_copied(self, logger, caplog):
        caplog.set_level(logging.INFO, logger="projecthub.test")
        data = {"a": 1}
        logger.info("msg", data)
        data["a"] = 2

        assert _records(caplog)[0].data == {"a": 1}

    def test_error_separates_exception_from_context(self, logger, caplog):
        caplog.set_level(logging.INFO, logger="projecthub.test")
        try:
            raise RuntimeError("db exploded")
        except RuntimeError as exc:
            logger.error("Query failed", exc, {"user_id": "u1"})

        [record] = _records(caplog)
        assert record.levelno == logging.ERROR
        assert record.context == {"user_id": "u1"}
        assert record.error["name"] == "RuntimeError"
        assert record.error["message"] == "db exploded"
        assert "db exploded" in record.error["stack"]

    def test_error_without_exception(self, logger, caplog):
        caplog.set_level(logging.INFO, logger="projecthub.test")
        logger.error("Something odd")
        assert getattr(_records(caplog)[0], "error", None) is None


class TestSlowOperation:

    def test_above_threshold_warns(self, logger, caplog):
        caplog.set_level(logging.INFO, logger="projecthub.test")
        assert logger.log_slow_operation("Fetch notifications", 750, threshold_ms=500) is True

        [record] = _records(caplog)
        assert record.levelno == logging.WARNING
        assert "Slow operation detected: Fetch notifications took 750ms" == record.getMessage()
        assert record.data["operation"] == "Fetch notifications"

    def test_at_threshold_is_silent(self, logger, caplog):
        caplog.set_level(logging.DEBUG, logger="projecthub.test")
        assert logger.log_slow_operation("op", 500, threshold_ms=500) is False
        assert logger.log_slow_operation("op", 499) is False
        assert _records(caplog) == []

    def test_default_threshold_from_settings(self, logger, caplog, monkeypatch):
        from projecthub.config import settings

        monkeypatch.setattr(settings, "slow_operation_threshold_ms", 100)
        caplog.set_level(logging.INFO, logger="projecthub.test")
        assert logger.log_slow_operation("op", 150) is True

    def test_slow_query_alias(self, logger):
        assert StructuredLogger.log_slow_query is StructuredLogger.log_slow_operation


class TestLogRequest:

    @pytest.mark.parametrize(
        "status, level",
        [(200, logging.INFO), (302, logging.INFO), (404, logging.WARNING), (503, logging.ERROR)],
    )
    def test_level_by_status(self, logger, caplog, status, level):
        caplog.set_level(logging.INFO, logger="projecthub.test")
        logger.log_request("GET", "/api/notifications", status, 12.4)

        [record] = _records(caplog)
        assert record.levelno == level
        assert record.getMessage() == f"GET /api/notifications - {status} (12ms)"
        assert record.data["duration_ms"] == 12.4

    def test_without_duration(self, logger, caplog):
        caplog.set_level(logging.INFO, logger="projecthub.test")
        logger.log_request("POST", "/api/x", 201)
        assert _records(caplog)[0].getMessage() == "POST /api/x - 201"


class TestFormatters:

    def _record(self, **extra):
        record = logging.LogRecord("projecthub", logging.WARNING, __file__, 1, "hello %s", ("world",), None)
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_json_formatter(self):
        record = self._record(data={"a": 1}, context=None, error=None, request_id="abc123")
        entry = json.loads(JsonLogFormatter().format(record))

        assert entry["message"] == "hello world"
        assert entry["level"] == "warning"
        assert entry["request_id"] == "abc123"
        assert entry["data"] == {"a": 1}
        assert "context" not in entry

    def test_json_formatter_includes_error(self):
        error = describe_error(ValueError("bad"))
        entry = json.loads(JsonLogFormatter().format(self._record(error=error)))
        assert entry["error"]["name"] == "ValueError"

    def test_text_formatter(self):
        record = self._record(data={"a": 1}, request_id="r1")
        text = TextLogFormatter().format(record)
        first, second = text.split("\n")
        assert "[WARNING] projecthub [r1] hello world" in first
        assert second == "  data: {'a': 1}"

    def test_request_id_filter_uses_context(self):
        record = self._record()
        token = request_id_var.set("req-42")
        try:
            RequestIDFilter().filter(record)
        finally:
            request_id_var.reset(token)
        assert record.request_id == "req-42"

        RequestIDFilter().filter(record)
        assert record.request_id == "-"
