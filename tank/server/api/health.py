"""Health check endpoint for monitoring service status."""

from datetime import UTC, datetime

from starlette.requests import Request
from starlette.responses import JSONResponse

from tank.lib.liveness import is_online
from tank.lib.utils import now_ms


async def health_check(request: Request) -> JSONResponse:
    """Return health status of the relay and the reporting device.

    The relay itself is healthy whenever it can answer; an offline device is
    reported but does not make the service unhealthy.
    """
    state = request.app.state
    reading = state.telemetry.readings.get()

    return JSONResponse(
        {
            "status": "healthy",
            "timestamp": datetime.now(UTC).isoformat(),
            "checks": {
                "device": {
                    "online": is_online(reading.last_seen, now_ms()),
                    "last_seen": reading.last_seen or None,
                },
                "notifications": {"pending": state.dispatcher.pending},
            },
        }
    )
