"""Bounded in-memory history of level readings.

Backs the dashboard chart. Oldest points are evicted first once the ring is
full; nothing survives a restart.

Thread-safe: appends and snapshots are serialized with a lock so readers
never observe a partially evicted ring.
"""

import threading
from collections import deque
from dataclasses import dataclass
from typing import Any

from tank.lib.config import MAX_HISTORY


@dataclass(frozen=True, slots=True)
class HistoryPoint:
    """A single (time label, level) pair on the chart."""

    time_label: str
    value: float

    def to_dict(self) -> dict[str, Any]:
        return {"t": self.time_label, "v": self.value}


class HistoryRing:
    """Fixed-capacity FIFO of history points in chronological order."""

    def __init__(self, capacity: int = MAX_HISTORY) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self._lock = threading.Lock()
        self._points: deque[HistoryPoint] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._points.maxlen or 0

    def append(self, point: HistoryPoint) -> None:
        """Append a point, evicting the oldest one if the ring is full."""
        with self._lock:
            self._points.append(point)

    def snapshot(self) -> list[HistoryPoint]:
        """Return a copy of the ring contents, oldest first."""
        with self._lock:
            return list(self._points)

    def __len__(self) -> int:
        with self._lock:
            return len(self._points)
