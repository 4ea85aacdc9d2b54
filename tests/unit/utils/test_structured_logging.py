from __future__ import annotations

import json
import logging
import sys
from collections.abc import Generator

import pytest

from resilex.utils.structured_logging import (
    StructuredFormatter,
    clear_execution_id,
    get_execution_id,
    log_structured,
    set_execution_id,
)


@pytest.fixture(autouse=True)
def _reset_execution_id() -> Generator[None, None, None]:
    clear_execution_id()
    yield
    clear_execution_id()


def _record(message: str = "attempt failed", **extra: object) -> logging.LogRecord:
    record = logging.LogRecord(
        name="resilex.retry",
        level=logging.WARNING,
        pathname=__file__,
        lineno=42,
        msg=message,
        args=(),
        exc_info=None,
    )
    record.__dict__.update(extra)
    return record


##################################
#     Tests for execution id     #
##################################


def test_execution_id_default_none() -> None:
    assert get_execution_id() is None


def test_set_execution_id() -> None:
    set_execution_id("exec-1")
    assert get_execution_id() == "exec-1"


def test_clear_execution_id_restores_previous() -> None:
    set_execution_id("outer")
    token = set_execution_id("inner")
    clear_execution_id(token)
    assert get_execution_id() == "outer"
    clear_execution_id()
    assert get_execution_id() is None


#########################################
#     Tests for StructuredFormatter     #
#########################################


def test_structured_formatter_fields() -> None:
    data = json.loads(StructuredFormatter().format(_record()))
    assert data["level"] == "WARNING"
    assert data["logger"] == "resilex.retry"
    assert data["message"] == "attempt failed"
    assert data["line"] == 42
    assert data["timestamp"].endswith("Z")
    assert "execution_id" not in data


def test_structured_formatter_execution_id() -> None:
    set_execution_id("abc123")
    assert json.loads(StructuredFormatter().format(_record()))["execution_id"] == "abc123"


def test_structured_formatter_extra_fields() -> None:
    data = json.loads(StructuredFormatter().format(_record(attempt=2, delay=0.5)))
    assert data["attempt"] == 2
    assert data["delay"] == 0.5


def test_structured_formatter_non_json_extra() -> None:
    data = json.loads(StructuredFormatter().format(_record(error=ValueError("bad"))))
    assert data["error"] == "bad"


def test_structured_formatter_exception() -> None:
    try:
        raise ValueError("boom")
    except ValueError:
        record = _record()
        record.exc_info = sys.exc_info()
    data = json.loads(StructuredFormatter().format(record))
    assert "ValueError: boom" in data["exception"]


def test_log_structured(caplog: pytest.LogCaptureFixture) -> None:
    logger = logging.getLogger("resilex.test")
    with caplog.at_level(logging.INFO, logger="resilex.test"):
        log_structured(logger, logging.INFO, "retrying", attempt=3)
    assert caplog.records[0].attempt == 3
    assert caplog.records[0].getMessage() == "retrying"
