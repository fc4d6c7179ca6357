"""Notification system for water level alerts.

Provides an abstract notification interface with pluggable backends
(Telegram, or a no-op when disabled) and a dispatcher that delivers
messages in the background so the ingestion path never waits on the
network.
"""

import asyncio
import json
import urllib.request
from abc import ABC, abstractmethod
from typing_extensions import override

from tank.lib.alerts import AlertDecision, Band
from tank.lib.config import DeviceStatus, Settings, get_settings
from tank.lib.exceptions import NotificationError
from tank.logging import get_logger

logger = get_logger("lib.notifications")

TELEGRAM_API_URL = "https://api.telegram.org/bot{token}/sendMessage"

_ALERT_TEMPLATES: dict[Band, str] = {
    Band.LOW: "⚠️ *CRITICAL: Low Water Level!*\nCurrent Level: {level:g}%",
    Band.HIGH: "✅ *Tank Full!*\nCurrent Level: {level:g}%",
}

_LIFECYCLE_TEMPLATES: dict[DeviceStatus, str] = {
    DeviceStatus.BOOT: "\U0001f50c *Sensor started*\nCurrent Level: {level:g}%",
    DeviceStatus.WAKE: "⏰ *Sensor woke up*\nCurrent Level: {level:g}%",
}


def format_alert_message(decision: AlertDecision) -> str:
    """Format an alert decision as a notification message."""
    template = _ALERT_TEMPLATES.get(decision.band)
    if template is None:
        raise ValueError(f"No alert message for band {decision.band}")
    return template.format(level=decision.level)


def format_lifecycle_message(status: DeviceStatus, level: float) -> str:
    """Format a device boot/wake event as a notification message."""
    return _LIFECYCLE_TEMPLATES[status].format(level=level)


class AbstractNotifier(ABC):
    """Abstract base class for notification backends."""

    @abstractmethod
    async def send(self, message: str) -> None:
        """Send a text message."""


class TelegramNotifier(AbstractNotifier):
    """Telegram Bot API notification backend."""

    def __init__(self, token: str, chat_id: str, timeout_sec: float) -> None:
        self._token = token
        self._chat_id = chat_id
        self._timeout_sec = timeout_sec

    def _build_payload(self, message: str) -> dict[str, str]:
        """Build a sendMessage payload."""
        return {
            "chat_id": self._chat_id,
            "text": message,
            "parse_mode": "Markdown",
        }

    def _post(self, payload: dict[str, str]) -> None:
        """POST a message to the Bot API (blocking)."""
        req = urllib.request.Request(
            TELEGRAM_API_URL.format(token=self._token),
            data=json.dumps(payload).encode("utf-8"),
            headers={"Content-Type": "application/json"},
            method="POST",
        )
        with urllib.request.urlopen(req, timeout=self._timeout_sec) as resp:
            if resp.status != 200:
                raise NotificationError(
                    f"Telegram API returned status {resp.status}"
                )
            body = resp.read()

        try:
            result = json.loads(body)
        except ValueError as e:
            raise NotificationError(f"Invalid Telegram response: {e}") from e
        if not result.get("ok"):
            raise NotificationError(
                f"Telegram API error: {result.get('description', 'unknown')}"
            )

    @override
    async def send(self, message: str) -> None:
        """Send Telegram message."""
        await asyncio.to_thread(self._post, self._build_payload(message))
        logger.info("Sent Telegram notification to chat %s", self._chat_id)


class NoOpNotifier(AbstractNotifier):
    """No-op notifier that logs but doesn't send notifications."""

    @override
    async def send(self, message: str) -> None:
        """Log the message but don't send a notification."""
        logger.info(
            "Notifications disabled, skipping: %s", message.splitlines()[0]
        )


def get_notifier(settings: Settings | None = None) -> AbstractNotifier:
    """Factory function to get the configured notifier."""
    cfg = (settings or get_settings()).notifications
    if not cfg.enabled:
        return NoOpNotifier()
    return TelegramNotifier(
        token=cfg.telegram.token.get_secret_value(),
        chat_id=cfg.telegram.chat_id,
        timeout_sec=cfg.timeout_sec,
    )


class NotificationDispatcher:
    """Delivers messages as detached tasks on the running event loop.

    Delivery is best effort and at most once: failures are logged and never
    retried or reported back to the caller.
    """

    def __init__(self, notifier: AbstractNotifier) -> None:
        self._notifier = notifier
        # Strong references so pending tasks are not garbage collected
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> int:
        """Number of messages still being delivered."""
        return len(self._tasks)

    def dispatch(self, message: str) -> asyncio.Task[None]:
        """Schedule a message for delivery and return immediately.

        Must be called from within a running event loop.
        """
        task = asyncio.get_running_loop().create_task(self._deliver(message))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _deliver(self, message: str) -> None:
        try:
            await self._notifier.send(message)
        except (NotificationError, OSError) as e:
            logger.error("Failed to send notification: %s", e)
        except Exception:
            logger.exception("Unexpected error sending notification")

    async def drain(self, timeout: float) -> None:
        """Wait for pending deliveries, cancelling any still running after timeout."""
        if not self._tasks:
            return
        _done, pending = await asyncio.wait(set(self._tasks), timeout=timeout)
        for task in pending:
            task.cancel()
        if pending:
            logger.warning(
                "Cancelled %d notification(s) still pending at shutdown",
                len(pending),
            )
