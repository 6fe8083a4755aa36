#!/usr/bin/env python3
"""Startup script for the CarePay API."""
import uvicorn

from carepay.config import settings

if __name__ == "__main__":
    print(f"Starting CarePay API on port {settings.port}")
    uvicorn.run(
        "carepay.main:app",
        host=settings.host,
        port=settings.port,
        log_level="info"
    )
