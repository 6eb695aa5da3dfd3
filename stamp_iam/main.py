"""
FastAPI application entrypoint for the stamp IAM service.
"""

from __future__ import annotations

from fastapi import FastAPI

from stamp_iam.api.routes import router as api_router
from stamp_iam.core.config import get_settings
from stamp_iam.core.logging import configure_logging


def create_app() -> FastAPI:
    """Factory for the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Stamp IAM",
        version="0.1.0",
        description="OAuth-backed account verification for stamp credentials.",
    )
    app.include_router(api_router, prefix="/api")
    return app


app = create_app()

__all__ = ["app", "create_app"]
