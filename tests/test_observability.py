"""Tests for request-scoped logging helpers."""

from __future__ import annotations

import logging

from api.observability import (
    RequestIdFilter,
    new_request_id,
    request_log_fields,
    reset_request_id,
    set_request_id,
)


def test_request_log_fields_are_context_extras():
    fields = request_log_fields(method="POST", path="/api/v1/plans/validate", status_code=200, duration_ms=3.14159, client_ip=None)
    assert fields == {
        "ctx_method": "POST",
        "ctx_path": "/api/v1/plans/validate",
        "ctx_status_code": 200,
        "ctx_duration_ms": 3.14,
        "ctx_client_ip": "",
    }


def test_filter_stamps_bound_request_id():
    token = set_request_id("req-1")
    try:
        record = logging.makeLogRecord({"msg": "plan_import_accepted"})
        assert RequestIdFilter().filter(record) is True
        assert record.ctx_request_id == "req-1"
    finally:
        reset_request_id(token)


def test_filter_leaves_records_alone_outside_requests():
    record = logging.makeLogRecord({"msg": "plan_remapped"})
    RequestIdFilter().filter(record)
    assert not hasattr(record, "ctx_request_id")


def test_new_request_ids_are_unique():
    assert new_request_id() != new_request_id()
