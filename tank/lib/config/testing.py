"""Test utilities for configuration.

Helpers for swapping the process-wide settings in tests. It should NOT be
imported in production code.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import tank.lib.config.settings as _settings_module
from tank.lib.config.settings import Settings, _load_settings


def clear_settings() -> None:
    """Drop any override and the cached environment settings."""
    _settings_module._settings_override = None
    _load_settings.cache_clear()


@contextmanager
def override_settings(**overrides: Any) -> Iterator[Settings]:
    """Use Settings built from overrides (ignoring .env) inside the block.

    Example:
        with override_settings(low_threshold=5) as settings:
            app = create_app()
    """
    settings = Settings(_env_file=None, **overrides)
    _settings_module._settings_override = settings
    try:
        yield settings
    finally:
        clear_settings()
