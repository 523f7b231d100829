"""
trapdash.models — Wire Models and View Structures
===================================================

Two families live here:

* **Wire models** (pydantic) — the JSON shapes the bot trap's admin API
  returns.  Unknown keys are ignored, except on :class:`Config` where they
  are kept so a round-tripped config never loses server-side fields.
* **View structures** (dataclasses) — what the engine derives and hands to
  the renderer.  These are rebuilt on every refresh and never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from trapdash.constants import DEFAULT_BAN_DURATIONS, DEFAULT_MAZE_THRESHOLD

__all__ = [
    "Event",
    "Ban",
    "BanDurations",
    "BanDurationsPatch",
    "Config",
    "ConfigPatch",
    "AnalyticsSnapshot",
    "EventsSummary",
    "Crawler",
    "MazeSnapshot",
    "TimeBucket",
    "StatCards",
    "BanRow",
    "EventRow",
    "CrawlerRow",
    "MazePanel",
    "ConfigForm",
    "SummaryView",
    "ConnectionSettings",
    "DashboardViewState",
]


# ---------------------------------------------------------------------------
# Wire models
# ---------------------------------------------------------------------------
class Event(BaseModel):
    """One entry of the service's append-only event log."""
    ts: int
    event: str
    ip: str | None = None
    reason: str | None = None
    outcome: str | None = None
    admin: str | None = None


class Ban(BaseModel):
    ip: str
    reason: str | None = None
    expires: int


class BanDurations(BaseModel):
    """Per-type ban durations in seconds."""
    honeypot: int = DEFAULT_BAN_DURATIONS["honeypot"]
    rate_limit: int = DEFAULT_BAN_DURATIONS["rate_limit"]
    browser: int = DEFAULT_BAN_DURATIONS["browser"]
    admin: int = DEFAULT_BAN_DURATIONS["admin"]


class BanDurationsPatch(BaseModel):
    honeypot: int | None = None
    rate_limit: int | None = None
    browser: int | None = None
    admin: int | None = None


class Config(BaseModel):
    """The service's singleton configuration (the parts the console edits)."""
    model_config = ConfigDict(extra="allow")

    test_mode: bool = False
    ban_durations: BanDurations = Field(default_factory=BanDurations)
    maze_enabled: bool = False
    maze_auto_ban: bool = True
    maze_auto_ban_threshold: int = DEFAULT_MAZE_THRESHOLD


class ConfigPatch(BaseModel):
    """Partial config update — only the keys that are set are sent."""
    test_mode: bool | None = None
    ban_durations: BanDurationsPatch | None = None
    maze_enabled: bool | None = None
    maze_auto_ban: bool | None = None
    maze_auto_ban_threshold: int | None = None

    def to_body(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class ConfigUpdateAck(BaseModel):
    """Response of ``POST /admin/config``; the merged ``config`` is required."""
    status: str | None = None
    config: Config


class BanList(BaseModel):
    """Response of ``GET /admin/ban``."""
    bans: list[Ban] = Field(default_factory=list)


class AnalyticsSnapshot(BaseModel):
    ban_count: int = 0
    test_mode: bool = False


class EventsSummary(BaseModel):
    """Response of ``GET /admin/events``."""
    event_counts: dict[str, int] = Field(default_factory=dict)
    top_ips: list[tuple[str, int]] = Field(default_factory=list)
    recent_events: list[Event] = Field(default_factory=list)


class Crawler(BaseModel):
    ip: str
    hits: int


class MazeSnapshot(BaseModel):
    total_hits: int = 0
    unique_crawlers: int = 0
    maze_auto_bans: int = 0
    deepest_crawler: Crawler | None = None
    top_crawlers: list[Crawler] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Derived view structures
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class TimeBucket:
    """One aligned bucket of the events time series."""

    bucket_start: int  # unix ms, aligned to the range's bucket width
    count: int
    label: str


@dataclass(frozen=True, slots=True)
class StatCards:
    total_bans: int
    active_bans: int
    total_events: int
    unique_ips: int
    test_mode: bool
    test_mode_status: str


@dataclass(frozen=True, slots=True)
class BanRow:
    ip: str
    reason: str
    banned_at: int | None  # the service does not report ban start times
    expires: int
    expired: bool


@dataclass(frozen=True, slots=True)
class EventRow:
    ts: int
    kind: str
    badge: str
    ip: str
    reason: str
    outcome: str
    admin: str


@dataclass(frozen=True, slots=True)
class CrawlerRow:
    ip: str
    hits: int
    high: bool


@dataclass(frozen=True, slots=True)
class MazePanel:
    total_hits: int
    unique_crawlers: int
    maze_auto_bans: int
    deepest_crawler: CrawlerRow | None
    crawlers: list[CrawlerRow]


@dataclass(frozen=True, slots=True)
class ConfigForm:
    """Values for the editable duration and maze fields."""

    ban_durations: dict[str, int]
    maze_enabled: bool
    maze_auto_ban: bool
    maze_auto_ban_threshold: int


@dataclass(frozen=True, slots=True)
class SummaryView:
    """Everything a successful full refresh renders in one go."""

    stats: StatCards
    event_counts: dict[str, int]
    top_ips: list[tuple[str, int]]
    bans: list[BanRow]
    events: list[EventRow]


# ---------------------------------------------------------------------------
# Session state
# ---------------------------------------------------------------------------
@dataclass(slots=True)
class ConnectionSettings:
    """Endpoint + API key, read fresh by the client on every request."""

    endpoint: str
    api_key: str = ""

    @property
    def base_url(self) -> str:
        return self.endpoint.strip().rstrip("/")


@dataclass(slots=True)
class DashboardViewState:
    """Mutable state of one console session.

    ``refresh_seq`` / ``series_seq`` are handed out to each refresh cycle
    and series derivation when it starts; a completion whose token is no
    longer the newest is dropped.
    """

    time_range: str = "hour"
    series: list[TimeBucket] = field(default_factory=list)
    refreshing: bool = False
    refresh_seq: int = 0
    series_seq: int = 0
    last_refreshed: float | None = None
    last_error: str | None = None

    def next_refresh_token(self) -> int:
        self.refresh_seq += 1
        return self.refresh_seq

    def next_series_token(self) -> int:
        self.series_seq += 1
        return self.series_seq

    def is_current_refresh(self, token: int) -> bool:
        return token == self.refresh_seq

    def is_current_series(self, token: int) -> bool:
        return token == self.series_seq
