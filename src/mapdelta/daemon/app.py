"""Starlette application factory."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from starlette.applications import Starlette
from starlette.routing import BaseRoute

from mapdelta.config.models import ServerConfig
from mapdelta.daemon.middleware import RequestIdMiddleware
from mapdelta.daemon.routes import create_routes
from mapdelta.ops import AnalysisService

logger = structlog.get_logger(__name__)


def create_app(service: AnalysisService, server_config: ServerConfig | None = None) -> Starlette:
    """Create the Starlette application around an analysis service.

    The service's cache sweeper runs for the lifetime of the app.
    """
    server_config = server_config or service.config.server
    routes: list[BaseRoute] = list(create_routes(service, server_config))

    @asynccontextmanager
    async def lifespan(_app: Starlette) -> AsyncIterator[None]:
        service.start()
        logger.info("service_started", host=server_config.host, port=server_config.port)
        try:
            yield
        finally:
            service.stop()
            logger.info("service_stopped")

    app = Starlette(routes=routes, lifespan=lifespan)
    app.add_middleware(RequestIdMiddleware)
    return app
