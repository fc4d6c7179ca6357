"""Settings models and configuration loading for the Tank Relay application."""

from functools import cached_property, lru_cache
from typing import Annotated, Any, Literal, Self

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    SecretStr,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

# History ring capacity; the dashboard chart is sized for this many points
MAX_HISTORY = 100


def _parse_bool(v: Any) -> bool:
    """Parse boolean from string '1'/'0' or actual bool."""
    if isinstance(v, bool):
        return v
    if isinstance(v, str):
        return v == "1"
    return bool(v)


_BoolFromStr = Annotated[bool, BeforeValidator(_parse_bool)]
_LogLevel = Annotated[
    Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
    BeforeValidator(lambda v: str(v).strip().upper()),
]


class TelegramSettings(BaseModel):
    """Telegram Bot API settings."""

    model_config = ConfigDict(frozen=True)

    token: SecretStr = SecretStr("")
    chat_id: str = ""


class NotificationSettings(BaseModel):
    """Notification service settings."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    telegram: TelegramSettings = TelegramSettings()
    timeout_sec: float = 10.0


class AlertSettings(BaseModel):
    """Water level alert thresholds and cooldown."""

    model_config = ConfigDict(frozen=True)

    low_threshold: float = 20.0
    high_threshold: float = 90.0
    cooldown_ms: int = 3_600_000


class ServerSettings(BaseModel):
    """HTTP server settings."""

    model_config = ConfigDict(frozen=True)

    host: str = "0.0.0.0"
    port: int = 3000
    static_dir: str = ""
    cors_origins: list[str] = ["*"]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Alerts (level is a percentage)
    low_threshold: float = Field(default=20.0, ge=0, le=100)
    high_threshold: float = Field(default=90.0, ge=0, le=100)
    alert_cooldown_ms: int = Field(default=3_600_000, ge=0)

    # History
    history_size: int = Field(default=MAX_HISTORY, ge=1, le=MAX_HISTORY)

    # Notifications
    enable_notification_service: _BoolFromStr = False
    telegram_token: SecretStr = SecretStr("")
    telegram_chat_id: str = ""
    notification_timeout_sec: float = Field(default=10.0, gt=0)

    # Server
    host: str = "0.0.0.0"
    port: int = Field(default=3000, gt=0, le=65535)
    static_dir: str = ""
    cors_origins: str = "*"  # Comma-separated list
    log_level: _LogLevel = "INFO"

    @cached_property
    def alerts(self) -> AlertSettings:
        """Get alert settings as nested object."""
        return AlertSettings(
            low_threshold=self.low_threshold,
            high_threshold=self.high_threshold,
            cooldown_ms=self.alert_cooldown_ms,
        )

    @cached_property
    def notifications(self) -> NotificationSettings:
        """Get notification settings as nested object."""
        return NotificationSettings(
            enabled=self.enable_notification_service,
            telegram=TelegramSettings(
                token=self.telegram_token,
                chat_id=self.telegram_chat_id,
            ),
            timeout_sec=self.notification_timeout_sec,
        )

    @cached_property
    def server(self) -> ServerSettings:
        """Get server settings as nested object."""
        return ServerSettings(
            host=self.host,
            port=self.port,
            static_dir=self.static_dir,
            cors_origins=[
                o.strip() for o in self.cors_origins.split(",") if o.strip()
            ],
        )

    @model_validator(mode="after")
    def validate_settings(self) -> Self:
        """Validate cross-field configuration constraints."""
        errors: list[str] = []

        if self.low_threshold >= self.high_threshold:
            errors.append(
                f"LOW_THRESHOLD ({self.low_threshold}) must be less than "
                f"HIGH_THRESHOLD ({self.high_threshold})"
            )

        if self.enable_notification_service:
            missing = []
            if not self.telegram_token.get_secret_value():
                missing.append("TELEGRAM_TOKEN")
            if not self.telegram_chat_id:
                missing.append("TELEGRAM_CHAT_ID")
            if missing:
                errors.append(
                    f"Notifications enabled but missing: {', '.join(missing)}"
                )

        if errors:
            raise ValueError(
                "Configuration validation failed:\n  - "
                + "\n  - ".join(errors)
            )

        return self


# Settings override for testing - allows injecting custom Settings without
# modifying environment variables or clearing the lru_cache.
_settings_override: Settings | None = None


@lru_cache(maxsize=1)
def _load_settings() -> Settings:
    """Load settings from environment (cached)."""
    return Settings()


def get_settings() -> Settings:
    """Get the global settings instance.

    Returns the test override if set, otherwise loads from environment
    variables (cached after first load). For testing, use override_settings()
    from tank.lib.config.testing to override.
    """
    if _settings_override is not None:
        return _settings_override
    return _load_settings()
