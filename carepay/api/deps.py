import uuid
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from carepay.config import Settings, get_settings
from carepay.database import get_db
from carepay.services.payment_service import PaymentService


def get_app_settings() -> Settings:
    """Settings dependency (overridden in tests)."""
    return get_settings()


async def get_current_user_id(
    x_user_id: Optional[str] = Header(None, alias="X-User-Id"),
) -> uuid.UUID:
    """
    Authenticated user id, set by the upstream auth gateway.
    Returns 401 if missing or not a UUID.
    """
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing user",
        )
    try:
        return uuid.UUID(x_user_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid user",
        )


async def get_payment_service(
    request: Request,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> PaymentService:
    """
    PaymentService bound to the request's session.
    Reuses the verifier and gateway built once at startup.
    """
    return PaymentService(
        db,
        settings,
        gateway=getattr(request.app.state, "razorpay_gateway", None),
        verifier=getattr(request.app.state, "signature_verifier", None),
    )
