"""Tests for sensitive data filtering in logs."""

from __future__ import annotations

import json
import logging
from io import StringIO

from admin_api.core.logging import (
    JsonFormatter,
    RequestIdFilter,
    SensitiveDataFilter,
    clear_request_id,
    redact,
    set_request_id,
)


def _logger(name: str) -> tuple[logging.Logger, StringIO]:
    logger = logging.getLogger(name)
    logger.setLevel(logging.INFO)
    logger.handlers.clear()
    logger.propagate = False

    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.addFilter(RequestIdFilter())
    handler.addFilter(SensitiveDataFilter())
    handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)
    return logger, stream


def test_sensitive_filter_redacts_credentials():
    """Ensure bearer tokens and passwords never reach the output."""

    logger, stream = _logger("test_redaction")

    logger.info(
        "auth_event",
        extra={
            "authorization": "Bearer secret-123",
            "password": "hunter2",
            "safe_field": "visible",
        },
    )

    output = stream.getvalue()

    assert "secret-123" not in output
    assert "hunter2" not in output
    assert "[REDACTED]" in output
    assert "visible" in output


def test_sensitive_filter_redacts_customer_contact_data():
    logger, stream = _logger("test_contact_redaction")

    logger.info(
        "order_event",
        extra={
            "email": "jane@example.com",
            "phone": "+91 98765 43210",
            "order_id": "o1",
        },
    )

    record = json.loads(stream.getvalue())

    assert record["email"] == "[REDACTED]"
    assert record["phone"] == "[REDACTED]"
    assert record["order_id"] == "o1"


def test_sensitive_filter_allows_cache_fields():
    """Verify cache and limiter context passes through unmodified."""

    logger, stream = _logger("test_safe_fields")

    logger.info(
        "cache.hit",
        extra={
            "cache_key": "/api/orders?page=2",
            "status_code": 200,
            "ttl_s": 15,
        },
    )

    record = json.loads(stream.getvalue())

    assert record["message"] == "cache.hit"
    assert record["cache_key"] == "/api/orders?page=2"
    assert record["status_code"] == 200
    assert "[REDACTED]" not in stream.getvalue()


def test_sensitive_filter_redacts_nested_dicts():
    logger, stream = _logger("test_nested")

    logger.info(
        "nested_event",
        extra={
            "headers": {
                "Authorization": "Bearer secret-token",
                "user-agent": "pytest",
            },
            "shipping": [{"email": "a@b.c", "city": "Pune"}],
        },
    )

    record = json.loads(stream.getvalue())

    assert record["headers"] == {"Authorization": "[REDACTED]", "user-agent": "pytest"}
    assert record["shipping"] == [{"email": "[REDACTED]", "city": "Pune"}]


def test_request_id_from_context_is_attached():
    logger, stream = _logger("test_request_id")

    set_request_id("req-123")
    try:
        logger.info("rate_limit.exceeded")
    finally:
        clear_request_id()

    assert json.loads(stream.getvalue())["request_id"] == "req-123"


def test_exception_info_is_formatted():
    logger, stream = _logger("test_exc_info")

    try:
        raise RuntimeError("boom")
    except RuntimeError:
        logger.exception("periodic_task.failed")

    record = json.loads(stream.getvalue())
    assert record["level"] == "error"
    assert "RuntimeError: boom" in record["exc_info"]


def test_redact_keeps_sequence_types():
    assert redact(("a", {"token": "t"})) == ("a", {"token": "[REDACTED]"})
    assert redact("plain") == "plain"
