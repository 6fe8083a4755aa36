"""
Tests for structured logging.
"""

import json
import logging

from carepay.logging_config import JSONFormatter


def make_record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="carepay.services.payment_service",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg="Payment %s completed",
        args=("abc",),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_output():
    log = json.loads(JSONFormatter().format(make_record()))

    assert log["level"] == "INFO"
    assert log["message"] == "Payment abc completed"
    assert log["logger"] == "carepay.services.payment_service"
    assert "payment_id" not in log


def test_payment_context_included():
    record = make_record(payment_id="p-1", razorpay_order_id="order_1", event="payment.captured")

    log = json.loads(JSONFormatter().format(record))

    assert log["payment_id"] == "p-1"
    assert log["razorpay_order_id"] == "order_1"
    assert log["event"] == "payment.captured"
