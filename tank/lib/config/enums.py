"""Enumerations for the Tank Relay application."""

from enum import StrEnum


class DeviceStatus(StrEnum):
    """Lifecycle flags a device may attach to a reading."""

    BOOT = "boot"
    WAKE = "wake"
