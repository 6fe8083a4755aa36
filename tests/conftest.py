"""
Pytest configuration and fixtures.
"""

import hmac
import hashlib
import json
import uuid
from typing import AsyncGenerator
from unittest.mock import MagicMock

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from carepay.config import Settings
from carepay.database import Base
from carepay.models import User, SubscriptionPlan
from carepay.services.payment_service import PaymentService
from carepay.services.razorpay_gateway import RazorpayGateway

# Use in-memory SQLite for tests
TEST_DB_URL = "sqlite+aiosqlite:///:memory:"

KEY_SECRET = "test_key_secret"
WEBHOOK_SECRET = "test_webhook_secret"


def sign(message, secret: str) -> str:
    """HMAC-SHA256 hex digest, computed independently of the code under test."""
    if isinstance(message, str):
        message = message.encode("utf-8")
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


def webhook_body(event: str, payload: dict) -> str:
    """Body the service signs when no raw body is passed."""
    return json.dumps({"event": event, "payload": payload}, separators=(",", ":"))


def captured_payload(order_id: str, payment_id: str = "pay_captured123", method: str = "upi") -> dict:
    return {
        "payment": {
            "entity": {
                "id": payment_id,
                "order_id": order_id,
                "amount": 99900,
                "currency": "INR",
                "method": method,
                "status": "captured",
            }
        }
    }


def failed_payload(order_id: str, description: str = "Card declined") -> dict:
    return {
        "payment": {
            "entity": {
                "id": "pay_failed123",
                "order_id": order_id,
                "amount": 99900,
                "error_code": "BAD_REQUEST_ERROR",
                "error_description": description,
            }
        }
    }


def make_settings(**overrides) -> Settings:
    values = {
        "app_env": "test",
        "razorpay_key_id": "rzp_test_key",
        "razorpay_key_secret": KEY_SECRET,
        "razorpay_webhook_secret": WEBHOOK_SECRET,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest_asyncio.fixture
async def test_engine():
    """Create async engine for tests (one fresh database per test)."""
    engine = create_async_engine(TEST_DB_URL, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for a test."""
    async_session = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False
    )

    async with async_session() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def user(db) -> User:
    user = User(id=uuid.uuid4(), phone="+919876543210", name="Test Patient")
    db.add(user)
    await db.flush()
    return user


@pytest_asyncio.fixture
async def quarterly_plan(db) -> SubscriptionPlan:
    plan = SubscriptionPlan(
        id="plan-hair-quarterly",
        vertical="HAIR_LOSS",
        plan_type="QUARTERLY",
        name="Hair Loss - Quarterly",
        price_in_paise=249900,
        duration_months=3,
    )
    db.add(plan)
    await db.flush()
    return plan


@pytest.fixture
def razorpay_client() -> MagicMock:
    """Stand-in for razorpay.Client; order ids are handed out in sequence."""
    client = MagicMock()
    counter = {"n": 0}

    def create_order(data):
        counter["n"] += 1
        return {
            "id": f"order_test{counter['n']}",
            "amount": data["amount"],
            "currency": data["currency"],
            "status": "created",
        }

    client.order.create.side_effect = create_order
    return client


@pytest.fixture
def gateway(settings, razorpay_client) -> RazorpayGateway:
    return RazorpayGateway(settings, client=razorpay_client)


@pytest.fixture
def payment_service(db, settings, gateway) -> PaymentService:
    return PaymentService(db, settings, gateway=gateway)
