"""
trapdash.constants — Shared Constants
=======================================

Single source of truth for time ranges, bucket widths, service defaults,
and event kinds.  Import from here instead of duplicating in the engine,
services, and console routes.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Time ranges (milliseconds, to line up with bucket keys)
# ---------------------------------------------------------------------------
MINUTE_MS = 60 * 1000
HOUR_MS = 60 * MINUTE_MS
DAY_MS = 24 * HOUR_MS

TIME_RANGES: tuple[str, ...] = ("hour", "day", "week", "month")

WINDOW_MS: dict[str, int] = {
    "hour": HOUR_MS,
    "day": DAY_MS,
    "week": 7 * DAY_MS,
    "month": 30 * DAY_MS,
}

# Month deliberately shares the 1-day width with week.
BUCKET_MS: dict[str, int] = {
    "hour": 5 * MINUTE_MS,
    "day": HOUR_MS,
    "week": DAY_MS,
    "month": DAY_MS,
}


# ---------------------------------------------------------------------------
# Event kinds emitted by the bot trap's event log
# ---------------------------------------------------------------------------
class EventKind:
    """Event kind string constants as the service tags them."""
    BAN = "Ban"
    UNBAN = "Unban"
    CHALLENGE = "Challenge"
    BLOCK = "Block"
    ADMIN_ACTION = "AdminAction"


EVENT_KINDS: tuple[str, ...] = (
    EventKind.BAN,
    EventKind.UNBAN,
    EventKind.CHALLENGE,
    EventKind.BLOCK,
    EventKind.ADMIN_ACTION,
)


# ---------------------------------------------------------------------------
# Service defaults
# ---------------------------------------------------------------------------
API_BAN_REASON = "admin_ban"
API_BAN_DURATION = 21600  # 6h, what the service applies when omitted

CONSOLE_BAN_REASON = "manual_ban"
CONSOLE_BAN_DURATION = 3600

DEFAULT_BAN_DURATIONS: dict[str, int] = {
    "honeypot": 86400,
    "rate_limit": 3600,
    "browser": 21600,
    "admin": 21600,
}

DEFAULT_MAZE_THRESHOLD = 50

# Crawlers at or above this many maze pages are flagged in the panel
MAZE_HIGH_HITS = 30

SUMMARY_HOURS = 24
SERIES_EVENT_LIMIT = 1000
REFRESH_INTERVAL_SECONDS = 30.0
POST_ACTION_DELAY_SECONDS = 0.5
