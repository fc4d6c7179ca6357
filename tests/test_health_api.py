"""Tests for the health check API endpoint."""

import json
from unittest.mock import MagicMock, patch

import pytest

from tank.lib.config import Settings
from tank.server.api.health import health_check
from tank.server.entrypoint import create_app


class TestHealthCheck:
    """Tests for health_check endpoint."""

    def _make_request(self, app):
        """Create a mock Starlette request."""
        request = MagicMock()
        request.app = app
        return request

    @pytest.mark.asyncio
    async def test_healthy_with_offline_device(self):
        """Should stay healthy before the device ever reported."""
        app = create_app(Settings())

        response = await health_check(self._make_request(app))
        data = json.loads(response.body)

        assert response.status_code == 200
        assert data["status"] == "healthy"
        assert data["checks"]["device"] == {"online": False, "last_seen": None}
        assert data["checks"]["notifications"] == {"pending": 0}

    @pytest.mark.asyncio
    async def test_reports_online_device(self, now):
        """Should report the device online after a recent reading."""
        app = create_app(Settings())
        app.state.telemetry.readings.update(10.0, 50.0, -60, now)

        with patch("tank.server.api.health.now_ms", return_value=now + 1000):
            response = await health_check(self._make_request(app))

        device = json.loads(response.body)["checks"]["device"]
        assert device == {"online": True, "last_seen": now}
