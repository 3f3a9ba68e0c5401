"""Tests for the JSON log formatter and request log context."""

from __future__ import annotations

import json
import logging
import sys

import pytest

from scholar_service.infra.logging import (
    ContextInjectingFilter,
    JSONFormatter,
    clear_log_context,
    get_log_context,
    set_log_context,
)


def make_record(message: str = "Flushing %s", *args: object, **extra: object) -> logging.LogRecord:
    record = logging.LogRecord(
        name="scholar_service.core.batching.loaders",
        level=logging.DEBUG,
        pathname=__file__,
        lineno=1,
        msg=message,
        args=args,
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture(autouse=True)
def _clean_context():
    clear_log_context()
    yield
    clear_log_context()


class TestJSONFormatter:
    def test_core_fields(self) -> None:
        data = json.loads(JSONFormatter().format(make_record("Flushing %s", "record(Item, id)")))

        assert data["level"] == "DEBUG"
        assert data["logger"] == "scholar_service.core.batching.loaders"
        assert data["message"] == "Flushing record(Item, id)"
        assert data["timestamp"].endswith("Z")

    def test_extra_and_static_fields(self) -> None:
        formatter = JSONFormatter(static={"service": "scholar-service"})

        data = json.loads(formatter.format(make_record(loader="group(ItemAuthor)", keys=12)))

        assert data["service"] == "scholar-service"
        assert data["loader"] == "group(ItemAuthor)"
        assert data["keys"] == 12

    def test_exception_kept_on_one_line(self) -> None:
        try:
            raise ValueError("bad cursor")
        except ValueError:
            record = make_record("failed")
            record.exc_info = sys.exc_info()

        output = JSONFormatter().format(record)

        assert "\n" not in output
        assert "ValueError: bad cursor" in json.loads(output)["exception"]


class TestLogContext:
    def test_context_merges_and_clears(self) -> None:
        set_log_context(request_id="req-1")
        set_log_context(operation="items")

        assert get_log_context() == {"request_id": "req-1", "operation": "items"}
        clear_log_context()
        assert get_log_context() == {}

    def test_filter_injects_without_overwriting(self) -> None:
        set_log_context(request_id="req-1", logger_hint="ctx")
        record = make_record(logger_hint="record")

        assert ContextInjectingFilter().filter(record)

        assert record.request_id == "req-1"
        assert record.logger_hint == "record"
