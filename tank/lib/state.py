"""In-memory telemetry state shared by the ingestion path and query handlers.

One instance is built per process and injected into the web application.
Nothing is persisted: a restart starts from the never-seen reading and an
empty history.
"""

import threading
from typing import Any, Self

from tank.lib.alerts import AlertEngine
from tank.lib.config import MAX_HISTORY, Settings
from tank.lib.history import HistoryRing
from tank.lib.reading import ReadingStore


class TelemetryState:
    """Owns the current reading, the history ring and the alert engine.

    ``write_lock`` serializes whole ingestions so the reading, history and
    alert state always move together. Readers only take the per-component
    locks.
    """

    def __init__(
        self, alerts: AlertEngine, history_size: int = MAX_HISTORY
    ) -> None:
        self.readings = ReadingStore()
        self.history = HistoryRing(history_size)
        self.alerts = alerts
        self.write_lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> Self:
        cfg = settings.alerts
        return cls(
            AlertEngine(
                low_threshold=cfg.low_threshold,
                high_threshold=cfg.high_threshold,
                cooldown_ms=cfg.cooldown_ms,
            ),
            history_size=settings.history_size,
        )

    def to_status(self, now_ms: int) -> dict[str, Any]:
        """Latest reading plus liveness, as served to the dashboard."""
        return self.readings.get().to_dict(now_ms)

    def to_history(self) -> list[dict[str, Any]]:
        """History ring contents, oldest first, as served to the chart."""
        return [point.to_dict() for point in self.history.snapshot()]
