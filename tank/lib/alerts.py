"""Alert decisions for water level threshold crossings.

Classifies each level into a band (low, normal, high) and decides whether a
notification should go out. Repeated readings in the same band are
suppressed until the cooldown has elapsed, a change of band always alerts
immediately, and returning to the normal band clears the last alert so the
next crossing fires right away.

Thread-safe: Uses a lock to protect shared state when evaluated from
concurrent request handlers.
"""

import threading
from dataclasses import dataclass
from enum import StrEnum

from tank.logging import get_logger

logger = get_logger("lib.alerts")


class Band(StrEnum):
    """Level classification against the configured thresholds."""

    NORMAL = "normal"
    LOW = "low"
    HIGH = "high"


@dataclass(frozen=True, slots=True)
class AlertDecision:
    """Outcome of evaluating a single level."""

    band: Band
    level: float
    emit: bool = False


class AlertEngine:
    """Decides when a level reading should trigger a notification.

    Once a decision to emit is made the alert is considered sent: the state
    is committed before dispatch and never rolled back on delivery failure,
    so a broken channel cannot cause a burst of retries.
    """

    def __init__(
        self,
        low_threshold: float,
        high_threshold: float,
        cooldown_ms: int,
    ) -> None:
        if low_threshold > high_threshold:
            raise ValueError(
                f"low threshold ({low_threshold}) is above "
                f"high threshold ({high_threshold})"
            )
        self.low_threshold = low_threshold
        self.high_threshold = high_threshold
        self.cooldown_ms = cooldown_ms
        self._lock = threading.Lock()
        self._last_alert_kind: Band | None = None
        self._last_alert_at = 0

    @property
    def last_alert_kind(self) -> Band | None:
        with self._lock:
            return self._last_alert_kind

    @property
    def last_alert_at(self) -> int:
        with self._lock:
            return self._last_alert_at

    def classify(self, level: float) -> Band:
        """Classify a level; values equal to a threshold are normal."""
        if level < self.low_threshold:
            return Band.LOW
        if level > self.high_threshold:
            return Band.HIGH
        return Band.NORMAL

    def _should_emit(self, band: Band, now_ms: int) -> bool:
        if band != self._last_alert_kind:
            return True
        return now_ms - self._last_alert_at > self.cooldown_ms

    def evaluate(self, level: float, now_ms: int) -> AlertDecision:
        """Evaluate a level at now_ms and commit any resulting alert."""
        band = self.classify(level)

        with self._lock:
            if band == Band.NORMAL:
                if self._last_alert_kind is not None:
                    logger.info(
                        "Level back to normal (%.1f%%), clearing %s alert",
                        level,
                        self._last_alert_kind,
                    )
                    self._last_alert_kind = None
                return AlertDecision(band=band, level=level)

            if not self._should_emit(band, now_ms):
                logger.debug(
                    "Suppressing %s alert at %.1f%% (cooldown)", band, level
                )
                return AlertDecision(band=band, level=level)

            self._last_alert_kind = band
            self._last_alert_at = now_ms

        logger.info("Level %.1f%% is %s, emitting alert", level, band)
        return AlertDecision(band=band, level=level, emit=True)

    def reset(self) -> None:
        """Forget the last alert."""
        with self._lock:
            self._last_alert_kind = None
            self._last_alert_at = 0
