"""Shared utility functions."""
import time
from datetime import datetime

# Wall clock formats shown on the dashboard
_CLOCK_FMT = "%H:%M:%S"
_MINUTE_FMT = "%H:%M"


def now_ms() -> int:
    """Return the current Unix time in milliseconds."""
    return time.time_ns() // 1_000_000


def format_clock(epoch_ms: int) -> str:
    """Format an epoch timestamp as local 24h time (HH:MM:SS)."""
    return datetime.fromtimestamp(epoch_ms / 1000).strftime(_CLOCK_FMT)


def format_minute(epoch_ms: int) -> str:
    """Format an epoch timestamp as local 24h time at minute resolution."""
    return datetime.fromtimestamp(epoch_ms / 1000).strftime(_MINUTE_FMT)
