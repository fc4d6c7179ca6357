"""Custom exceptions for the Tank Relay application.

Provides a hierarchy of domain-specific exceptions for better error handling
and more informative error messages throughout the application.
"""


class TankRelayError(Exception):
    """Base exception for all application errors."""


class MissingDataError(TankRelayError):
    """Raised when an inbound reading lacks a usable distance or level."""

    def __init__(self, message: str = "Missing data") -> None:
        super().__init__(message)


class NotificationError(TankRelayError):
    """Base exception for notification-related errors."""
