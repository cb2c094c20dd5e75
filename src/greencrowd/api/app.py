# src/greencrowd/api/app.py
"""
FastAPI application wiring.

This file creates the `FastAPI` instance and installs middleware.
Business logic lives in `greencrowd.api.routes` and `greencrowd.geo`.
"""

from __future__ import annotations

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from greencrowd import __version__
from greencrowd.config.settings import Settings, get_settings
from greencrowd.core.logging import configure_logging

from .routes import router


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    application = FastAPI(title=f"{settings.app.name} API", version=__version__)

    # The PWA runs on its own origin and sends session cookies with device reports.
    if settings.api.cors_origins:
        application.add_middleware(
            CORSMiddleware,
            allow_origins=settings.api.cors_origins,
            allow_credentials=settings.api.cors_allow_credentials,
            allow_methods=["GET", "POST"],
            allow_headers=["Content-Type", "Authorization"],
        )

    application.include_router(router)
    return application


configure_logging()

app = create_app()
