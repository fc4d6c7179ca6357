"""Tests for the notification system."""

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from pydantic import SecretStr

from tank.lib.alerts import AlertDecision, Band
from tank.lib.config import DeviceStatus, Settings
from tank.lib.exceptions import NotificationError
from tank.lib.notifications import (
    NoOpNotifier,
    NotificationDispatcher,
    TelegramNotifier,
    format_alert_message,
    format_lifecycle_message,
    get_notifier,
)


def make_response(status=200, body=None):
    """Create a mock urlopen response context manager."""
    response = MagicMock()
    response.status = status
    response.read.return_value = json.dumps(
        body if body is not None else {"ok": True}
    ).encode()
    cm = MagicMock()
    cm.__enter__.return_value = response
    return cm


class TestMessageFormatting:
    """Tests for message templates."""

    def test_low_alert(self):
        message = format_alert_message(
            AlertDecision(band=Band.LOW, level=5.0, emit=True)
        )
        assert "Low Water Level" in message
        assert "Current Level: 5%" in message

    def test_high_alert(self):
        message = format_alert_message(
            AlertDecision(band=Band.HIGH, level=95.25, emit=True)
        )
        assert "Tank Full" in message
        assert "Current Level: 95.25%" in message

    def test_normal_band_has_no_message(self):
        with pytest.raises(ValueError):
            format_alert_message(AlertDecision(band=Band.NORMAL, level=50.0))

    def test_lifecycle_messages(self):
        boot = format_lifecycle_message(DeviceStatus.BOOT, 40.0)
        wake = format_lifecycle_message(DeviceStatus.WAKE, 40.0)

        assert "started" in boot
        assert "woke up" in wake
        assert "Current Level: 40%" in boot
        assert "Current Level: 40%" in wake


class TestTelegramNotifier:
    """Tests for the Telegram notification backend."""

    def _notifier(self):
        return TelegramNotifier(token="123:abc", chat_id="42", timeout_sec=5)

    @pytest.mark.asyncio
    @patch("tank.lib.notifications.urllib.request.urlopen")
    async def test_successful_send(self, mock_urlopen):
        mock_urlopen.return_value = make_response()

        await self._notifier().send("hello")

        request = mock_urlopen.call_args.args[0]
        assert request.full_url == "https://api.telegram.org/bot123:abc/sendMessage"
        assert json.loads(request.data) == {
            "chat_id": "42",
            "text": "hello",
            "parse_mode": "Markdown",
        }
        assert mock_urlopen.call_args.kwargs["timeout"] == 5

    @pytest.mark.asyncio
    @patch("tank.lib.notifications.urllib.request.urlopen")
    async def test_api_error_raises(self, mock_urlopen):
        mock_urlopen.return_value = make_response(
            body={"ok": False, "description": "chat not found"}
        )

        with pytest.raises(NotificationError, match="chat not found"):
            await self._notifier().send("hello")

    @pytest.mark.asyncio
    @patch("tank.lib.notifications.urllib.request.urlopen")
    async def test_non_200_raises(self, mock_urlopen):
        mock_urlopen.return_value = make_response(status=202)

        with pytest.raises(NotificationError):
            await self._notifier().send("hello")

    @pytest.mark.asyncio
    @patch("tank.lib.notifications.urllib.request.urlopen")
    async def test_network_error_propagates(self, mock_urlopen):
        mock_urlopen.side_effect = OSError("Network unreachable")

        with pytest.raises(OSError):
            await self._notifier().send("hello")

        assert mock_urlopen.call_count == 1


class TestNoOpNotifier:
    """Tests for the no-op backend."""

    @pytest.mark.asyncio
    async def test_logs_and_drops(self, caplog):
        await NoOpNotifier().send("first line\nsecond line")

        assert "Notifications disabled, skipping: first line" in caplog.text


class TestGetNotifier:
    """Tests for the notifier factory."""

    def test_disabled_returns_noop(self):
        assert isinstance(get_notifier(Settings()), NoOpNotifier)

    def test_enabled_returns_telegram(self):
        settings = Settings(
            enable_notification_service=True,
            telegram_token=SecretStr("123:abc"),
            telegram_chat_id="42",
        )
        assert isinstance(get_notifier(settings), TelegramNotifier)


class TestNotificationDispatcher:
    """Tests for background dispatch."""

    @pytest.mark.asyncio
    async def test_dispatch_sends_in_background(self):
        notifier = MagicMock()
        notifier.send = AsyncMock()
        dispatcher = NotificationDispatcher(notifier)

        task = dispatcher.dispatch("hello")
        assert dispatcher.pending == 1
        await task

        notifier.send.assert_awaited_once_with("hello")
        assert dispatcher.pending == 0

    @pytest.mark.asyncio
    async def test_dispatch_does_not_wait_for_delivery(self):
        release = asyncio.Event()

        async def slow_send(message):
            await release.wait()

        notifier = MagicMock()
        notifier.send = slow_send
        dispatcher = NotificationDispatcher(notifier)

        task = dispatcher.dispatch("hello")
        assert not task.done()

        release.set()
        await task

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error", [NotificationError("chat not found"), OSError("timed out")]
    )
    async def test_failures_are_logged_not_raised(self, error, caplog):
        notifier = MagicMock()
        notifier.send = AsyncMock(side_effect=error)
        dispatcher = NotificationDispatcher(notifier)

        await dispatcher.dispatch("hello")

        notifier.send.assert_awaited_once()
        assert "Failed to send notification" in caplog.text

    @pytest.mark.asyncio
    async def test_unexpected_errors_are_logged(self, caplog):
        notifier = MagicMock()
        notifier.send = AsyncMock(side_effect=RuntimeError("boom"))
        dispatcher = NotificationDispatcher(notifier)

        await dispatcher.dispatch("hello")

        assert "Unexpected error sending notification" in caplog.text

    @pytest.mark.asyncio
    async def test_drain_cancels_stuck_deliveries(self, caplog):
        async def never_returns(message):
            await asyncio.Event().wait()

        notifier = MagicMock()
        notifier.send = never_returns
        dispatcher = NotificationDispatcher(notifier)

        task = dispatcher.dispatch("hello")
        await dispatcher.drain(timeout=0.01)
        await asyncio.gather(task, return_exceptions=True)

        assert task.cancelled()
        assert "still pending at shutdown" in caplog.text

    @pytest.mark.asyncio
    async def test_drain_without_pending_returns(self):
        await NotificationDispatcher(NoOpNotifier()).drain(timeout=0.01)

    def test_dispatch_requires_running_loop(self):
        dispatcher = NotificationDispatcher(NoOpNotifier())

        with pytest.raises(RuntimeError):
            dispatcher.dispatch("hello")
