"""Ingestion of readings reported by the device.

Validates the raw payload, updates the telemetry state and hands any
resulting notifications to the dispatcher. Notifications are dispatched
after the state lock is released and never block the caller.
"""

from dataclasses import dataclass
from typing import Annotated, Any, Protocol

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, ValidationError

from tank.lib.alerts import AlertDecision
from tank.lib.config import DeviceStatus
from tank.lib.exceptions import MissingDataError
from tank.lib.history import HistoryPoint
from tank.lib.notifications import format_alert_message, format_lifecycle_message
from tank.lib.reading import NO_SIGNAL, Reading
from tank.lib.state import TelemetryState
from tank.lib.utils import format_minute
from tank.logging import get_logger

logger = get_logger("lib.ingest")


def _parse_number(v: Any) -> float:
    """Parse a required number, accepting numeric strings."""
    if isinstance(v, bool):
        raise ValueError("must be a number, got bool")
    try:
        if isinstance(v, (int, float)):
            return float(v)
        if isinstance(v, str):
            return float(v.strip())
    except OverflowError as e:
        raise ValueError("number out of range") from e
    raise ValueError(f"must be a number, got {type(v).__name__}")


def _parse_signal(v: Any) -> int:
    """Parse signal strength, falling back to NO_SIGNAL when unusable."""
    if isinstance(v, bool):
        return NO_SIGNAL
    try:
        if isinstance(v, str):
            v = float(v.strip())
        if isinstance(v, (int, float)):
            return int(v)
    except (ValueError, OverflowError):
        pass
    return NO_SIGNAL


def _parse_status(v: Any) -> DeviceStatus | None:
    """Parse a lifecycle flag, ignoring unknown values."""
    if isinstance(v, str) and v in DeviceStatus:
        return DeviceStatus(v)
    return None


_Number = Annotated[
    float, BeforeValidator(_parse_number), Field(allow_inf_nan=False)
]
_Signal = Annotated[int, BeforeValidator(_parse_signal)]
_Status = Annotated[DeviceStatus | None, BeforeValidator(_parse_status)]


class UpdatePayload(BaseModel):
    """Validated body of an update request."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    distance: _Number
    level: _Number
    rssi: _Signal = NO_SIGNAL
    status: _Status = None


def parse_payload(raw: Any) -> UpdatePayload:
    """Validate a decoded JSON body.

    Raises:
        MissingDataError: If distance or level is absent, null or not a
            finite number, or if the body is not a JSON object.
    """
    if not isinstance(raw, dict):
        raise MissingDataError("Expected JSON object")
    try:
        return UpdatePayload.model_validate(raw)
    except ValidationError as e:
        fields = ", ".join(str(err["loc"][0]) for err in e.errors() if err["loc"])
        raise MissingDataError(f"Missing or invalid: {fields}") from e


class Dispatcher(Protocol):
    """Anything that can deliver a message without blocking the caller."""

    def dispatch(self, message: str) -> object: ...


@dataclass(frozen=True, slots=True)
class IngestResult:
    """What an accepted reading changed and which messages it produced."""

    reading: Reading
    decision: AlertDecision
    messages: tuple[str, ...] = ()


class Ingestor:
    """Applies reported readings to the telemetry state."""

    def __init__(self, state: TelemetryState, dispatcher: Dispatcher) -> None:
        self._state = state
        self._dispatcher = dispatcher

    def ingest(self, raw: Any, now_ms: int) -> IngestResult:
        """Validate and apply a raw payload received at now_ms.

        Raises:
            MissingDataError: If the payload is rejected. No state is
                modified in that case.
        """
        payload = parse_payload(raw)
        state = self._state

        with state.write_lock:
            reading = state.readings.update(
                distance=payload.distance,
                level=payload.level,
                signal_strength=payload.rssi,
                now_ms=now_ms,
            )
            state.history.append(
                HistoryPoint(time_label=format_minute(now_ms), value=payload.level)
            )
            decision = state.alerts.evaluate(payload.level, now_ms)

        logger.info(
            "[%s] Data received: level %.1f%%, RSSI %d",
            reading.formatted_time,
            reading.level,
            reading.signal_strength,
        )

        messages: list[str] = []
        if payload.status is not None:
            logger.info("Device reported status: %s", payload.status)
            messages.append(format_lifecycle_message(payload.status, payload.level))
        if decision.emit:
            messages.append(format_alert_message(decision))

        for message in messages:
            self._dispatcher.dispatch(message)

        return IngestResult(
            reading=reading, decision=decision, messages=tuple(messages)
        )
