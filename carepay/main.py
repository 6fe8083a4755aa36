"""
FastAPI application entry point.
Configures routes, error mapping, and lifecycle events.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from carepay.config import Settings, settings as default_settings
from carepay.database import init_db, close_db
from carepay.exceptions import PaymentError
from carepay.logging_config import configure_logging
from carepay.services.razorpay_gateway import RazorpayGateway
from carepay.services.signature_service import SignatureVerifier

from carepay.api.payments import router as payments_router
from carepay.api.webhooks.razorpay import router as razorpay_router


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifecycle manager."""
        configure_logging(settings)
        logging.info(f"Starting up {settings.app_name} ({settings.app_env})...")

        # Fails fast on missing production secrets
        app.state.signature_verifier = SignatureVerifier(settings)
        app.state.razorpay_gateway = RazorpayGateway(settings)

        await init_db()

        yield

        await close_db()
        logging.info("Shutting down...")

    app = FastAPI(
        title="CarePay",
        description="Telehealth payment orders and Razorpay reconciliation",
        version="1.0.0",
        lifespan=lifespan,
        debug=settings.debug,
    )

    @app.exception_handler(PaymentError)
    async def payment_error_handler(request: Request, exc: PaymentError):
        return JSONResponse(
            status_code=exc.status_code,
            content={"status": "error", "code": type(exc).__name__, "message": exc.message},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logging.error(f"Global exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"status": "error", "message": "Internal Server Error"},
        )

    origins = []
    if settings.is_development:
        origins.append("*")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "app": settings.app_name,
            "env": settings.app_env,
        }

    app.include_router(
        payments_router,
        tags=["payments"],
    )
    app.include_router(
        razorpay_router,
        prefix="/webhooks",
        tags=["webhooks"],
    )

    return app


app = create_app()
