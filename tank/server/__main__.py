"""Web server entrypoint.

Runs the Starlette web application using uvicorn. State is held in process
memory, so run a single worker:

    uvicorn tank.server.entrypoint:create_app --factory --port 3000

Usage: python -m tank.server
"""
import uvicorn

from tank.lib.config import get_settings


def main() -> None:
    """Run the web server."""
    server = get_settings().server
    uvicorn.run(
        "tank.server.entrypoint:create_app",
        factory=True,
        host=server.host,
        port=server.port,
    )


if __name__ == "__main__":
    main()
