"""Device update endpoint and the dashboard polling endpoints."""

from starlette.requests import Request
from starlette.responses import JSONResponse

from tank.lib.exceptions import MissingDataError
from tank.lib.utils import now_ms
from tank.logging import get_logger

logger = get_logger("server.api.telemetry")

_MISSING_DATA = {"error": "Missing data"}


async def receive_update(request: Request) -> JSONResponse:
    """Accept a reading from the device."""
    try:
        data = await request.json()
    except ValueError:
        logger.info("Received empty or invalid JSON payload")
        return JSONResponse(_MISSING_DATA, status_code=400)

    try:
        request.app.state.ingestor.ingest(data, now_ms())
    except MissingDataError as e:
        logger.info("Rejected update: %s", e)
        return JSONResponse(_MISSING_DATA, status_code=400)

    return JSONResponse({"success": True})


async def get_status(request: Request) -> JSONResponse:
    """Return the latest reading and whether the device is online."""
    return JSONResponse(request.app.state.telemetry.to_status(now_ms()))


async def get_history(request: Request) -> JSONResponse:
    """Return the recent level history, oldest first."""
    return JSONResponse(request.app.state.telemetry.to_history())
