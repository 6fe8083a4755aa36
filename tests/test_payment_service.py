"""
Tests for PaymentService order creation and queries.
"""

import time
import uuid
from unittest.mock import MagicMock

import pytest
from sqlalchemy import select, func

from carepay.exceptions import (
    ConfigurationError,
    GatewayError,
    GatewayTimeout,
    InvalidAmount,
    PaymentNotFound,
    UserNotFound,
)
from carepay.fsm.states import PaymentStatus, PaymentPurpose
from carepay.models.payment import Payment
from carepay.services.payment_service import PaymentService
from carepay.services.razorpay_gateway import RazorpayGateway

from conftest import make_settings


async def count_payments(db) -> int:
    result = await db.execute(select(func.count()).select_from(Payment))
    return result.scalar_one()


@pytest.mark.asyncio
async def test_create_order_amount_in_paise(payment_service, razorpay_client, user):
    """Gateway receives the exact integer amount, a receipt and notes."""
    order = await payment_service.create_payment_order(
        user_id=user.id,
        amount_paise=99900,
        currency="INR",
        purpose=PaymentPurpose.CONSULTATION,
        metadata={"vertical": "HAIR_LOSS", "intakeResponseId": "intake-1"},
    )

    data = razorpay_client.order.create.call_args[0][0]
    assert data["amount"] == 99900
    assert isinstance(data["amount"], int)
    assert data["currency"] == "INR"
    assert data["notes"] == {"userId": str(user.id), "purpose": "CONSULTATION"}

    assert order.razorpay_order_id == "order_test1"
    assert order.amount_paise == 99900
    assert order.currency == "INR"


@pytest.mark.asyncio
async def test_create_order_persists_pending_payment(payment_service, db, user):
    order = await payment_service.create_payment_order(
        user_id=user.id,
        amount_paise=99900,
        purpose="CONSULTATION",
        metadata={"vertical": "HAIR_LOSS"},
    )

    result = await db.execute(select(Payment).where(Payment.id == order.payment_id))
    payment = result.scalar_one()

    assert payment.status == PaymentStatus.PENDING.value
    assert payment.razorpay_order_id == order.razorpay_order_id
    assert payment.user_id == user.id
    assert payment.purpose == "CONSULTATION"
    assert payment.payment_metadata == {"vertical": "HAIR_LOSS", "purpose": "CONSULTATION"}
    assert payment.razorpay_payment_id is None


@pytest.mark.asyncio
async def test_receipt_ids_are_unique(payment_service, razorpay_client, user):
    await payment_service.create_payment_order(user_id=user.id, amount_paise=100, purpose="ORDER")
    await payment_service.create_payment_order(user_id=user.id, amount_paise=100, purpose="ORDER")

    receipts = [call[0][0]["receipt"] for call in razorpay_client.order.create.call_args_list]
    assert all(r.startswith("rcpt_") for r in receipts)
    assert all(len(r) <= 40 for r in receipts)
    assert receipts[0] != receipts[1]


@pytest.mark.asyncio
async def test_minimum_amount_accepted(payment_service, user):
    order = await payment_service.create_payment_order(user_id=user.id, amount_paise=100, purpose="ORDER")

    assert order.amount_paise == 100


@pytest.mark.asyncio
@pytest.mark.parametrize("amount", [99, 50, 0, -100])
async def test_below_minimum_rejected(payment_service, razorpay_client, db, user, amount):
    with pytest.raises(InvalidAmount):
        await payment_service.create_payment_order(user_id=user.id, amount_paise=amount, purpose="ORDER")

    razorpay_client.order.create.assert_not_called()
    assert await count_payments(db) == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("amount", [999.0, "99900", True])
async def test_non_integer_amount_rejected(payment_service, user, amount):
    """Rupee floats and strings are never converted."""
    with pytest.raises(InvalidAmount):
        await payment_service.create_payment_order(user_id=user.id, amount_paise=amount, purpose="ORDER")


@pytest.mark.asyncio
async def test_unknown_user_rejected(payment_service, razorpay_client):
    with pytest.raises(UserNotFound):
        await payment_service.create_payment_order(user_id=uuid.uuid4(), amount_paise=99900, purpose="ORDER")

    razorpay_client.order.create.assert_not_called()


@pytest.mark.asyncio
async def test_malformed_user_id_rejected(payment_service):
    with pytest.raises(UserNotFound):
        await payment_service.create_payment_order(user_id="user-1", amount_paise=99900, purpose="ORDER")


@pytest.mark.asyncio
async def test_gateway_error_writes_no_payment(payment_service, razorpay_client, db, user):
    razorpay_client.order.create.side_effect = RuntimeError("502 Bad Gateway")

    with pytest.raises(GatewayError):
        await payment_service.create_payment_order(user_id=user.id, amount_paise=99900, purpose="ORDER")

    assert await count_payments(db) == 0


@pytest.mark.asyncio
async def test_gateway_timeout_writes_no_payment(db, user):
    settings = make_settings(razorpay_timeout_seconds=0.05)
    client = MagicMock()
    client.order.create.side_effect = lambda data: time.sleep(0.5)
    service = PaymentService(db, settings, gateway=RazorpayGateway(settings, client=client))

    with pytest.raises(GatewayTimeout):
        await service.create_payment_order(user_id=user.id, amount_paise=99900, purpose="ORDER")

    assert await count_payments(db) == 0


def test_service_construction_fails_without_production_secret():
    settings = make_settings(app_env="production", razorpay_key_secret="")

    with pytest.raises(ConfigurationError):
        PaymentService(MagicMock(), settings)


@pytest.mark.asyncio
async def test_get_payment(payment_service, user):
    order = await payment_service.create_payment_order(user_id=user.id, amount_paise=99900, purpose="ORDER")

    payment = await payment_service.get_payment(order.payment_id)

    assert payment.id == order.payment_id
    assert payment.amount_paise == 99900


@pytest.mark.asyncio
async def test_get_payment_not_found(payment_service):
    with pytest.raises(PaymentNotFound):
        await payment_service.get_payment(uuid.uuid4())

    with pytest.raises(PaymentNotFound):
        await payment_service.get_payment("non-existent")


@pytest.mark.asyncio
async def test_get_payment_by_razorpay_order_id(payment_service, user):
    order = await payment_service.create_payment_order(user_id=user.id, amount_paise=99900, purpose="ORDER")

    payment = await payment_service.get_payment_by_razorpay_order_id(order.razorpay_order_id)
    assert payment.id == order.payment_id

    assert await payment_service.get_payment_by_razorpay_order_id("order_missing") is None


@pytest.mark.asyncio
async def test_get_payments_by_user_with_status_filter(payment_service, db, user):
    first = await payment_service.create_payment_order(user_id=user.id, amount_paise=100, purpose="ORDER")
    await payment_service.create_payment_order(user_id=user.id, amount_paise=200, purpose="ORDER")

    payment = await payment_service.get_payment(first.payment_id)
    payment.status = PaymentStatus.FAILED.value
    await db.flush()

    all_payments = await payment_service.get_payments_by_user(user.id)
    failed = await payment_service.get_payments_by_user(user.id, "FAILED")

    assert len(all_payments) == 2
    assert [p.id for p in failed] == [first.payment_id]
    assert await payment_service.get_payments_by_user(uuid.uuid4()) == []


class TestSupportedPaymentMethods:

    def test_methods(self):
        assert PaymentService.get_supported_payment_methods() == ["upi", "card", "netbanking", "wallet"]


class TestValidatePricing:

    @pytest.mark.parametrize("vertical,plan_type,amount", [
        ("HAIR_LOSS", "MONTHLY", 99900),
        ("HAIR_LOSS", "QUARTERLY", 249900),
        ("HAIR_LOSS", "ANNUAL", 899900),
        ("SEXUAL_HEALTH", "MONTHLY", 129900),
        ("SEXUAL_HEALTH", "QUARTERLY", 329900),
        ("SEXUAL_HEALTH", "ANNUAL", 1199900),
        ("WEIGHT_MANAGEMENT", "MONTHLY", 299900),
        ("WEIGHT_MANAGEMENT", "QUARTERLY", 799900),
        ("WEIGHT_MANAGEMENT", "MONTHLY_PREMIUM", 999900),
        ("PCOS", "MONTHLY", 149900),
        ("PCOS", "QUARTERLY", 379900),
        ("PCOS", "ANNUAL", 1399900),
    ])
    def test_catalogue_prices(self, vertical, plan_type, amount):
        assert PaymentService.validate_pricing(vertical, plan_type, amount).valid is True

    def test_wrong_price(self):
        result = PaymentService.validate_pricing("HAIR_LOSS", "MONTHLY", 50000)

        assert result.valid is False
        assert result.expected_price == 99900

    def test_unknown_plan(self):
        result = PaymentService.validate_pricing("HAIR_LOSS", "WEEKLY", 99900)

        assert result.valid is False
        assert result.expected_price == 0

        assert PaymentService.validate_pricing("DERMATOLOGY", "MONTHLY", 99900).valid is False
