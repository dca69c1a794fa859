"""Server lifecycle management."""

from __future__ import annotations

import asyncio
import signal

import structlog
import uvicorn

from mapdelta.config.models import MapDeltaConfig
from mapdelta.daemon.app import create_app
from mapdelta.ops import AnalysisService

logger = structlog.get_logger(__name__)

# Seconds to wait for in-flight requests after the first shutdown signal
FORCE_EXIT_SEC = 5.0


def build_server(config: MapDeltaConfig) -> uvicorn.Server:
    """Create the uvicorn server for a fresh service instance."""
    service = AnalysisService(config=config)
    app = create_app(service, config.server)

    uvicorn_config = uvicorn.Config(
        app,
        host=config.server.host,
        port=config.server.port,
        log_level="warning",  # Use structlog instead
        ws="none",
    )
    return uvicorn.Server(uvicorn_config)


async def run_server(config: MapDeltaConfig) -> None:
    """Serve until SIGINT/SIGTERM. A second signal forces exit."""
    server = build_server(config)

    loop = asyncio.get_running_loop()
    shutdown_count = 0
    force_exit_task: asyncio.Task[None] | None = None

    async def force_exit_after_timeout() -> None:
        await asyncio.sleep(FORCE_EXIT_SEC)
        logger.info("forcing_exit_after_timeout")
        server.force_exit = True

    def signal_handler() -> None:
        nonlocal shutdown_count, force_exit_task
        shutdown_count += 1
        logger.info("shutdown_signal_received", count=shutdown_count)
        server.should_exit = True
        if shutdown_count == 1:
            force_exit_task = loop.create_task(force_exit_after_timeout())
        else:
            server.force_exit = True
            if force_exit_task:
                force_exit_task.cancel()

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, signal_handler)

    base_url = f"http://{config.server.host}:{config.server.port}"
    logger.info("endpoint", name="health", url=f"{base_url}/health")
    logger.info("endpoint", name="compare", url=f"{base_url}/compare")

    try:
        await server.serve()
    finally:
        if force_exit_task:
            force_exit_task.cancel()
