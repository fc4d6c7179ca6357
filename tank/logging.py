"""Logging configuration for the Tank Relay application."""

import logging
import sys

from tank.lib.config import Settings, get_settings

LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s - %(message)s"

_handler: logging.Handler | None = None


def _install_handler() -> logging.Handler:
    """Attach the shared stderr handler to the tank and uvicorn loggers."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logging.getLogger("tank").addHandler(handler)

    # uvicorn.error propagates here, so startup lines share our format
    uv_log = logging.getLogger("uvicorn")
    uv_log.handlers.clear()
    uv_log.addHandler(handler)

    # Device polls every few seconds, access lines drown everything else
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    return handler


def configure(settings: Settings | None = None) -> None:
    """Configure logging from settings.

    The handler is installed once; the level from LOG_LEVEL is re-applied on
    every call so each app created picks up its own settings.
    """
    global _handler
    if _handler is None:
        _handler = _install_handler()
    logging.getLogger("tank").setLevel((settings or get_settings()).log_level)


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the 'tank' namespace."""
    return logging.getLogger(f"tank.{name}")
