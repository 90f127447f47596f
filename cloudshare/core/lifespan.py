"""Application lifespan: startup and shutdown.

Single place for all startup/shutdown logic. Used by main.py; no business
logic here, only wiring (logging, service container, expiry sweeper).
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from cloudshare.core.config import get_settings
from cloudshare.core.container import ServiceContainer
from cloudshare.shared.telemetry.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup: logging, service container (unless one was injected), sweeper.
    Shutdown: sweeper stop, then HTTP client close for a container built here.
    """
    settings = getattr(app.state, "settings", None) or get_settings()
    setup_logging(settings.debug)

    # ---- Startup ----
    services: ServiceContainer | None = getattr(app.state, "services", None)
    owns_services = services is None
    if services is None:
        services = await ServiceContainer.build(settings)
        app.state.services = services

    if settings.sweeper_enabled:
        services.sweeper.start()

    yield

    # ---- Shutdown ----
    await services.sweeper.stop()
    logger.info("Expiry sweeper stopped")
    if owns_services:
        await services.aclose()
        app.state.services = None
