"""Chat FastAPI application factory and server entrypoint."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import uvicorn
from fastapi import FastAPI

from chatcast.broadcast import BroadcastHub
from chatcast.config import AppSettings, load_settings
from chatcast.logging_setup import configure_logging, log_event
from chatcast.server.routes import router

logger = logging.getLogger(__name__)


def create_app(config_path: str | Path | None = None, settings: AppSettings | None = None) -> FastAPI:
    """Create configured FastAPI app."""
    settings = settings or load_settings(config_path)

    app = FastAPI(title="chatcast", version="0.1.0")
    app.state.settings = settings
    app.state.hub = BroadcastHub(capacity=settings.hub.capacity)
    app.state.shutdown = asyncio.Event()
    app.state.loop = None

    app.include_router(router)

    @app.on_event("startup")
    async def _bind_loop() -> None:
        app.state.loop = asyncio.get_running_loop()

    @app.on_event("shutdown")
    def _close_streams() -> None:
        app.state.shutdown.set()
        app.state.hub.close()

    return app


def trigger_shutdown(app: FastAPI) -> None:
    """Fire the shutdown signal for every open stream. Safe from any thread."""
    loop: asyncio.AbstractEventLoop | None = app.state.loop
    if loop is not None and not loop.is_closed():
        loop.call_soon_threadsafe(app.state.shutdown.set)
    else:
        app.state.shutdown.set()


class _StreamingServer(uvicorn.Server):
    """Stops live streams as soon as an exit signal arrives.

    uvicorn waits for open connections before running the app's shutdown
    handlers, so event streams would otherwise keep the process alive.
    """

    def __init__(self, config: uvicorn.Config, app: FastAPI) -> None:
        super().__init__(config)
        self._app = app

    def handle_exit(self, sig, frame) -> None:
        trigger_shutdown(self._app)
        super().handle_exit(sig, frame)


def serve(host: str | None, port: int | None, config_path: str | Path | None) -> None:
    """Run chat app with single worker (required for in-memory broadcast hub)."""
    settings = load_settings(config_path)
    configure_logging(settings.logging.level)
    app = create_app(settings=settings)

    host = host or settings.server.host
    port = port or settings.server.port
    log_event(
        logger,
        "starting server",
        component="server",
        extra={"host": host, "port": port, "capacity": settings.hub.capacity},
    )
    config = uvicorn.Config(app, host=host, port=port, workers=1)
    _StreamingServer(config, app).run()
