"""
trapdash.engine.views — Renderer-Ready View Builders
======================================================

Pure functions that turn API snapshots into the structures the renderer
draws: stat cards, ban/event table rows, the maze panel, and the config
form.  No I/O and no renderer calls happen here.
"""

from __future__ import annotations

from trapdash.constants import DEFAULT_BAN_DURATIONS, DEFAULT_MAZE_THRESHOLD, MAZE_HIGH_HITS
from trapdash.models import (
    AnalyticsSnapshot,
    Ban,
    BanRow,
    Config,
    ConfigForm,
    Crawler,
    CrawlerRow,
    EventRow,
    EventsSummary,
    MazePanel,
    MazeSnapshot,
    StatCards,
    SummaryView,
)

_MISSING = "-"


def describe_test_mode(enabled: bool) -> str:
    return "Enabled (logging only)" if enabled else "Disabled (blocking active)"


def build_stat_cards(
    analytics: AnalyticsSnapshot, events: EventsSummary, bans: list[Ban],
) -> StatCards:
    return StatCards(
        total_bans=analytics.ban_count,
        active_bans=len(bans),
        total_events=len(events.recent_events),
        unique_ips=len(events.top_ips),
        test_mode=analytics.test_mode,
        test_mode_status=describe_test_mode(analytics.test_mode),
    )


def build_ban_rows(bans: list[Ban], now: int) -> list[BanRow]:
    """Rows for the bans table; *now* is unix seconds.

    The service only reports ``expires``, so ``banned_at`` stays ``None``
    rather than being guessed from the expiry.
    """
    return [
        BanRow(
            ip=ban.ip,
            reason=ban.reason or "unknown",
            banned_at=None,
            expires=ban.expires,
            expired=ban.expires < now,
        )
        for ban in bans
    ]


def build_event_rows(events: EventsSummary) -> list[EventRow]:
    return [
        EventRow(
            ts=ev.ts,
            kind=ev.event,
            badge=ev.event.lower(),
            ip=ev.ip or _MISSING,
            reason=ev.reason or _MISSING,
            outcome=ev.outcome or _MISSING,
            admin=ev.admin or _MISSING,
        )
        for ev in events.recent_events
    ]


def _crawler_row(crawler: Crawler) -> CrawlerRow:
    return CrawlerRow(ip=crawler.ip, hits=crawler.hits, high=crawler.hits >= MAZE_HIGH_HITS)


def build_maze_panel(maze: MazeSnapshot) -> MazePanel:
    return MazePanel(
        total_hits=maze.total_hits,
        unique_crawlers=maze.unique_crawlers,
        maze_auto_bans=maze.maze_auto_bans,
        deepest_crawler=(
            _crawler_row(maze.deepest_crawler) if maze.deepest_crawler else None
        ),
        crawlers=[_crawler_row(c) for c in maze.top_crawlers],
    )


def build_config_form(config: Config) -> ConfigForm:
    """Editable field values; zero/empty durations fall back to service defaults."""
    durations = config.ban_durations.model_dump()
    return ConfigForm(
        ban_durations={
            key: durations.get(key) or default
            for key, default in DEFAULT_BAN_DURATIONS.items()
        },
        maze_enabled=config.maze_enabled,
        maze_auto_ban=config.maze_auto_ban,
        maze_auto_ban_threshold=config.maze_auto_ban_threshold or DEFAULT_MAZE_THRESHOLD,
    )


def build_summary(
    analytics: AnalyticsSnapshot,
    events: EventsSummary,
    bans: list[Ban],
    now: int,
) -> SummaryView:
    """Assemble the full summary rendered after a successful refresh."""
    return SummaryView(
        stats=build_stat_cards(analytics, events, bans),
        event_counts=dict(events.event_counts),
        top_ips=list(events.top_ips),
        bans=build_ban_rows(bans, now),
        events=build_event_rows(events),
    )
