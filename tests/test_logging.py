"""Tests for the structured logging helpers."""

from __future__ import annotations

import json
import logging

import numpy as np

from cachematrix.errors import ComputeError, get_error_metrics
from cachematrix.logging import get_logger, log_exception


def test_structured_logger_emits_json_with_bound_context(caplog) -> None:
    caplog.set_level(logging.INFO, logger="cachematrix.tests")
    logger = get_logger("cachematrix.tests", component="unit")

    logger.info({"event": "ping"}, context={"shape": (3, 3), "inverse": np.eye(3)})

    [record] = [rec for rec in caplog.records if rec.name == "cachematrix.tests"]
    payload = json.loads(record.getMessage())
    assert payload["event"] == "ping"
    assert payload["logger"] == "cachematrix.tests"
    assert payload["context"] == {
        "component": "unit",
        "shape": [3, 3],
        "inverse": {"shape": [3, 3], "dtype": "float64"},
    }
    assert record.structured["event"] == "ping"


def test_plain_messages_are_wrapped(caplog) -> None:
    caplog.set_level(logging.INFO, logger="cachematrix.tests")

    get_logger("cachematrix.tests").info("hello")

    payload = json.loads(caplog.records[-1].getMessage())
    assert payload["message"] == "hello"
    assert "timestamp" in payload


def test_log_exception_records_metrics(caplog) -> None:
    caplog.set_level(logging.ERROR, logger="cachematrix.tests")
    error = ComputeError("inversion failed", context={"rows": 2})

    log_exception(get_logger("cachematrix.tests"), error, event="inverse_failed")

    payload = json.loads(caplog.records[-1].getMessage())
    assert payload["event"] == "inverse_failed"
    assert payload["error"]["code"] == "compute"
    assert payload["context"] == {"rows": 2}
    assert get_error_metrics() == {"compute": 1}


def test_event_helper_sets_event_and_message(caplog) -> None:
    caplog.set_level(logging.DEBUG, logger="cachematrix.tests")

    get_logger("cachematrix.tests").event(
        logging.DEBUG, "cache_hit", "Using cached data", version=np.int64(3)
    )

    payload = json.loads(caplog.records[-1].getMessage())
    assert payload["event"] == "cache_hit"
    assert payload["message"] == "Using cached data"
    assert payload["context"] == {"version": 3}
