"""Centralized configuration for the Tank Relay application.

This package provides:
- Enums for device lifecycle flags
- Pydantic settings models for configuration
"""

from .enums import DeviceStatus
from .settings import (
    MAX_HISTORY,
    AlertSettings,
    NotificationSettings,
    ServerSettings,
    Settings,
    TelegramSettings,
    get_settings,
)

__all__ = [
    # Enums
    "DeviceStatus",
    # Settings models
    "AlertSettings",
    "NotificationSettings",
    "ServerSettings",
    "Settings",
    "TelegramSettings",
    # Constants
    "MAX_HISTORY",
    # Functions
    "get_settings",
]
