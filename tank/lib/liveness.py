"""Device liveness derived from the recency of its last report."""

# Device is considered offline once no report arrived for two minutes
ONLINE_WINDOW_MS = 120_000


def is_online(last_seen_ms: int, now_ms: int) -> bool:
    """Return True if the last report is younger than the online window.

    A device that has never reported (``last_seen_ms == 0``) is offline.
    """
    return now_ms - last_seen_ms < ONLINE_WINDOW_MS
