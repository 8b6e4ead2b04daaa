"""FastAPI application factory."""

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..config.loader import AppConfig, load_config
from ..services import Services, build_services
from .routes import SERVICE_NAME, router

logger = logging.getLogger(__name__)


def create_app(
    config: Optional[AppConfig] = None,
    services: Optional[Services] = None
) -> FastAPI:
    """Create the HTTP application.

    Args:
        config: Configuration to build services from; loaded from the
            environment when omitted
        services: Prebuilt services, mainly for tests

    Returns:
        Configured FastAPI application
    """
    if services is None:
        services = build_services(config or load_config())

    if not services.client.is_configured():
        logger.warning("Generation API key is not configured; generation requests will fail")

    app = FastAPI(title=SERVICE_NAME, version=__version__)
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router)
    return app
