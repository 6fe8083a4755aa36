"""
Tests for parsing Razorpay webhook payloads.
"""

import pytest

from carepay.exceptions import MalformedWebhookPayload
from carepay.schemas.razorpay import (
    PaymentCapturedEvent,
    PaymentFailedEvent,
    UnhandledEvent,
    parse_webhook_event,
)

from conftest import captured_payload, failed_payload


class TestPayloadParsing:

    def test_captured(self):
        event = parse_webhook_event("payment.captured", captured_payload("order_1", "pay_1", "card"))

        assert isinstance(event, PaymentCapturedEvent)
        assert event.razorpay_order_id == "order_1"
        assert event.razorpay_payment_id == "pay_1"
        assert event.method == "card"
        assert event.amount == 99900

    def test_failed(self):
        event = parse_webhook_event("payment.failed", failed_payload("order_2", "Card declined"))

        assert isinstance(event, PaymentFailedEvent)
        assert event.razorpay_order_id == "order_2"
        assert event.error_code == "BAD_REQUEST_ERROR"
        assert event.failure_reason == "Card declined"

    def test_failure_reason_falls_back_to_code(self):
        payload = failed_payload("order_2")
        del payload["payment"]["entity"]["error_description"]

        event = parse_webhook_event("payment.failed", payload)

        assert event.failure_reason == "BAD_REQUEST_ERROR"

    def test_extra_entity_fields_ignored(self):
        payload = captured_payload("order_1")
        payload["payment"]["entity"]["notes"] = {"userId": "u1"}
        payload["payment"]["entity"]["fee"] = 2000

        assert isinstance(parse_webhook_event("payment.captured", payload), PaymentCapturedEvent)

    @pytest.mark.parametrize("event_type", ["order.paid", "refund.created", "", "payment.authorized"])
    def test_other_events(self, event_type):
        event = parse_webhook_event(event_type, {})

        assert isinstance(event, UnhandledEvent)
        assert event.event == event_type

    @pytest.mark.parametrize("payload", [
        {},
        None,
        {"payment": {}},
        {"payment": {"entity": None}},
        {"payment": {"entity": {"id": "pay_1"}}},
        {"payment": {"entity": {"order_id": "order_1"}}},
    ])
    def test_malformed(self, payload):
        with pytest.raises(MalformedWebhookPayload):
            parse_webhook_event("payment.captured", payload)
