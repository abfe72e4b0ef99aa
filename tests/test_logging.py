import json
import logging

from app.core.logging import JsonFormatter, RequestContextFilter, request_id_ctx, user_id_ctx


def _record(**extra):
    record = logging.LogRecord("app.budget", logging.INFO, __file__, 1, "budget computed", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_context_fields_promoted_to_json():
    rid = request_id_ctx.set("req-1")
    uid = user_id_ctx.set("u1")
    try:
        record = _record(trip_id="t1", currency="EUR", unrelated="x")
        RequestContextFilter().filter(record)
        payload = json.loads(JsonFormatter().format(record))
    finally:
        user_id_ctx.reset(uid)
        request_id_ctx.reset(rid)

    assert payload["message"] == "budget computed"
    assert payload["logger"] == "app.budget"
    assert payload["request_id"] == "req-1"
    assert payload["user_id"] == "u1"
    assert payload["trip_id"] == "t1"
    assert payload["currency"] == "EUR"
    assert "unrelated" not in payload
    assert "source" not in payload


def test_defaults_outside_a_request():
    record = _record()
    RequestContextFilter().filter(record)
    payload = json.loads(JsonFormatter().format(record))
    assert payload["request_id"] == "-"
    assert payload["user_id"] == "-"
