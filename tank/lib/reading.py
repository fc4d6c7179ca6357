"""Latest device reading and the store that holds it."""

import threading
from dataclasses import dataclass
from typing import Any

from tank.lib.liveness import is_online
from tank.lib.utils import format_clock

# Signal strength reported when the device sends none (dBm)
NO_SIGNAL = -100


@dataclass(frozen=True, slots=True)
class Reading:
    """The most recent normalized report from the device.

    ``last_seen`` is the epoch time in milliseconds the reading was accepted,
    0 meaning the device has never reported.
    """

    distance: float = 0.0
    level: float = 0.0
    signal_strength: int = NO_SIGNAL
    formatted_time: str = "--:--"
    last_seen: int = 0

    def to_dict(self, now_ms: int) -> dict[str, Any]:
        """Serialize for the status endpoint, including liveness at now_ms."""
        return {
            "distance": self.distance,
            "level": self.level,
            "rssi": self.signal_strength,
            "time": self.formatted_time,
            "lastSeen": self.last_seen,
            "online": is_online(self.last_seen, now_ms),
        }


class ReadingStore:
    """Holds exactly one live Reading, replaced wholesale on each update.

    Callers are expected to pass validated values.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._reading = Reading()

    def update(
        self,
        distance: float,
        level: float,
        signal_strength: int,
        now_ms: int,
    ) -> Reading:
        """Replace the stored reading and stamp it with now_ms."""
        reading = Reading(
            distance=distance,
            level=level,
            signal_strength=signal_strength,
            formatted_time=format_clock(now_ms),
            last_seen=now_ms,
        )
        with self._lock:
            self._reading = reading
        return reading

    def get(self) -> Reading:
        """Return the last stored reading, or the never-seen sentinel."""
        with self._lock:
            return self._reading
