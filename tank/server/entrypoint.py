"""Application factory for the web server."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.routing import BaseRoute, Mount, Route
from starlette.staticfiles import StaticFiles

from tank.lib.config import Settings, get_settings
from tank.lib.ingest import Ingestor
from tank.lib.notifications import NotificationDispatcher, get_notifier
from tank.lib.state import TelemetryState
from tank.logging import configure, get_logger

from .api.health import health_check
from .api.telemetry import get_history, get_status, receive_update

_logger = get_logger("server.entrypoint")

# Upper bound on waiting for in-flight notifications at shutdown
_DRAIN_TIMEOUT_SEC = 5.0


@asynccontextmanager
async def lifespan(app: Starlette) -> AsyncIterator[None]:
    """Application lifespan manager for startup/shutdown tasks."""
    _logger.info("Tank relay started")
    try:
        yield
    finally:
        await app.state.dispatcher.drain(_DRAIN_TIMEOUT_SEC)
        _logger.info("Tank relay stopped")


def _static_mount(static_dir: str) -> list[BaseRoute]:
    """Mount the dashboard assets at / if a directory is configured."""
    if not static_dir:
        return []
    if not Path(static_dir).is_dir():
        _logger.warning("Static directory %s not found, skipping", static_dir)
        return []
    return [Mount("/", app=StaticFiles(directory=static_dir, html=True))]


def create_app(settings: Settings | None = None) -> Starlette:
    """Create and configure the Starlette application.

    Telemetry state lives in memory for the lifetime of the app and is
    shared with the handlers through ``app.state``.

    Returns:
        Configured Starlette application instance.
    """
    settings = settings or get_settings()
    configure(settings)

    routes: list[BaseRoute] = [
        Route("/health", health_check),
        Route("/api/update", receive_update, methods=["POST"]),
        Route("/api/status", get_status),
        Route("/api/history", get_history),
        *_static_mount(settings.server.static_dir),
    ]
    middleware = [
        Middleware(
            CORSMiddleware,
            allow_origins=settings.server.cors_origins,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    ]

    app = Starlette(routes=routes, middleware=middleware, lifespan=lifespan)

    telemetry = TelemetryState.from_settings(settings)
    dispatcher = NotificationDispatcher(get_notifier(settings))
    app.state.telemetry = telemetry
    app.state.dispatcher = dispatcher
    app.state.ingestor = Ingestor(telemetry, dispatcher)
    return app
