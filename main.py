from __future__ import annotations

"""Broadcast Backend - FastAPI entry point for local and container runs
Architecture Overview:
    - Connection registry (DynamoDB when TABLE_NAME is set, in-memory otherwise)
    - Broadcast coordinator fanning posts out to every registered connection
    - Lifecycle handler shared with the AWS Lambda entry point (lambda_function.py)
Entry Points:
    - /health - Health check endpoint
    - /ws - WebSocket transport (connect, post frames, disconnect)
    - /api/v1/broadcast/events - Dispatch a raw API Gateway event
"""

import asyncio
import logging
from contextlib import asynccontextmanager, suppress
from typing import AsyncIterator

from fastapi import FastAPI

from core.connections import ConnectionRegistry, InMemoryConnectionRegistry
from core.logging import setup_logging
from core.observability import register_http_request_logging
from features.broadcast.dependencies import build_local_runtime
from features.broadcast.routes import router as broadcast_router
from features.broadcast.routes import websocket_router as broadcast_websocket_router

setup_logging()

logger = logging.getLogger(__name__)

# DynamoDB evicts by TTL on its own; the in-memory registry needs a sweep
EVICTION_INTERVAL_SECONDS = 60.0


async def _evict_expired_records(registry: InMemoryConnectionRegistry) -> None:
    while True:
        await asyncio.sleep(EVICTION_INTERVAL_SECONDS)
        registry.purge_expired()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifespan - startup and shutdown events."""
    registry = app.state.broadcast_runtime.registry
    eviction_task: asyncio.Task | None = None
    if isinstance(registry, InMemoryConnectionRegistry):
        eviction_task = asyncio.create_task(
            _evict_expired_records(registry), name="connection_eviction"
        )
    yield
    logger.info("Application shutting down...")
    if eviction_task is not None:
        eviction_task.cancel()
        with suppress(asyncio.CancelledError):
            await eviction_task
    logger.info("Shutdown complete")


def create_app(registry: ConnectionRegistry | None = None) -> FastAPI:
    """Application factory returning a configured FastAPI instance."""

    app = FastAPI(
        title="Broadcast Backend",
        description="WebSocket fan-out broadcaster with a self-healing connection registry",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.broadcast_runtime = build_local_runtime(registry)

    @app.get("/health")
    async def health_check() -> dict[str, object]:
        runtime = app.state.broadcast_runtime
        return {"status": "healthy", "version": "1.0.0", "open_sockets": runtime.hub.open_count}

    register_http_request_logging(app)

    app.include_router(broadcast_router)
    app.include_router(broadcast_websocket_router)

    logger.info(
        "Application created with broadcast routers (registry=%s)",
        type(app.state.broadcast_runtime.registry).__name__,
    )
    return app


app = create_app()


if __name__ == "__main__":  # pragma: no cover - manual execution helper
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
