"""Tests for the JSON log formatter."""

import json
import logging

from packages.common.logging import JSONFormatter, get_request_id, set_request_id


def _record(msg: str = "attempt scored", **extra) -> logging.LogRecord:
    record = logging.LogRecord("drills", logging.INFO, __file__, 1, msg, None, None)
    for k, v in extra.items():
        setattr(record, k, v)
    return record


def test_request_id_and_fields_are_rendered() -> None:
    set_request_id("rid-7")
    try:
        assert get_request_id() == "rid-7"
        out = json.loads(JSONFormatter(service="interview-drills").format(_record(fields={"score": 60})))
    finally:
        set_request_id(None)
    assert out["request_id"] == "rid-7"
    assert out["service"] == "interview-drills"
    assert out["score"] == 60
    assert out["msg"] == "attempt scored"


def test_request_id_omitted_when_unset() -> None:
    set_request_id(None)
    out = json.loads(JSONFormatter().format(_record()))
    assert "request_id" not in out
    assert "service" not in out
