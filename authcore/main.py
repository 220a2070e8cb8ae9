"""
FastAPI application entrypoint for the credential and token service.
"""

from __future__ import annotations

from fastapi import FastAPI

from authcore.api.routes import router as api_router
from authcore.core.config import get_settings
from authcore.core.logging import configure_logging


def create_app() -> FastAPI:
    """Factory for the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Credential & Token Federation",
        version="0.1.0",
        description="Scoped token issuance and credential setup for StackSpot, Vault and GitHub.",
    )
    app.include_router(api_router, prefix="/api")
    return app


app = create_app()

__all__ = ["app", "create_app"]
