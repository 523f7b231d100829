"""
trapdash.services.orchestrator — Refresh Orchestration
========================================================

One refresh cycle:

  1. Fan out four reads at once: analytics, events (24h summary), bans,
     maze.  ``asyncio.gather(return_exceptions=True)`` so a failing read
     never cancels its siblings.
  2. Analytics/events/bans are required.  If any failed, nothing is
     rendered, the previous view stays on screen and a timestamped error
     banner is shown.
  3. Maze is optional; a failed maze read is logged and the maze panel is
     simply left as it was.
  4. Re-derive the time series with a second events read (``limit=1000``)
     bucketed for the currently selected range.
  5. Best-effort config read to fill the duration / maze form fields.

Overlapping cycles are resolved with sequence tokens held on the
:class:`~trapdash.models.DashboardViewState`: each cycle takes a token when
it starts and only applies its results if that token is still the newest
when the reads come back.  In-flight requests are never cancelled.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from datetime import tzinfo

import pydantic

from trapdash.constants import SERIES_EVENT_LIMIT, SUMMARY_HOURS
from trapdash.engine.aggregator import aggregate
from trapdash.engine.views import build_config_form, build_maze_panel, build_summary
from trapdash.errors import PartialDataError, TrapdashError
from trapdash.models import DashboardViewState
from trapdash.services.api_client import AdminApiClient
from trapdash.services.renderer import Renderer

logger = logging.getLogger(__name__)

REQUIRED_READS: tuple[str, ...] = ("analytics", "events", "bans")


class RefreshOrchestrator:
    """Runs refresh cycles and feeds their results to the renderer."""

    def __init__(
        self,
        client: AdminApiClient,
        state: DashboardViewState,
        renderer: Renderer,
        *,
        summary_hours: int = SUMMARY_HOURS,
        series_limit: int = SERIES_EVENT_LIMIT,
        clock: Callable[[], float] = time.time,
        tz: tzinfo | None = None,
    ) -> None:
        self.client = client
        self.state = state
        self.renderer = renderer
        self.summary_hours = summary_hours
        self.series_limit = series_limit
        self._clock = clock
        self._tz = tz

    # -------------------------------------------------------------------
    # Full refresh
    # -------------------------------------------------------------------
    async def refresh(self) -> bool:
        """Run one full refresh cycle.

        Returns True if this cycle's results were rendered, False if the
        required reads failed or a newer cycle superseded this one.
        """
        token = self.state.next_refresh_token()
        self.state.refreshing = True
        self.renderer.mark_loading()
        try:
            return await self._run_cycle(token)
        finally:
            if self.state.is_current_refresh(token):
                self.state.refreshing = False

    async def _run_cycle(self, token: int) -> bool:
        analytics, events, bans, maze = await asyncio.gather(
            self.client.get_analytics(),
            self.client.get_events(hours=self.summary_hours),
            self.client.get_bans(),
            self.client.get_maze(),
            return_exceptions=True,
        )

        if not self.state.is_current_refresh(token):
            logger.debug(
                "Dropping stale refresh #%d (current #%d)", token, self.state.refresh_seq,
            )
            return False

        failures = {
            name: result
            for name, result in zip(REQUIRED_READS, (analytics, events, bans))
            if isinstance(result, BaseException)
        }
        if failures:
            err = PartialDataError(failures)
            now = self._clock()
            self.state.last_error = str(err)
            self.renderer.mark_error(str(err), now)
            logger.error("Dashboard refresh #%d failed: %s", token, err)
            return False

        self.renderer.render_summary(
            build_summary(analytics, events, bans, now=int(self._clock()))
        )

        if isinstance(maze, BaseException):
            logger.warning("Maze stats unavailable: %s", maze)
        else:
            self.renderer.render_maze(build_maze_panel(maze))

        await self._derive_series(report_errors=False)
        await self._load_config_form(token)

        if not self.state.is_current_refresh(token):
            return False

        now = self._clock()
        self.state.last_refreshed = now
        self.state.last_error = None
        self.renderer.mark_refreshed(now)
        logger.debug("Dashboard refresh #%d rendered", token)
        return True

    # -------------------------------------------------------------------
    # Time series
    # -------------------------------------------------------------------
    async def refresh_time_series(self) -> bool:
        """Re-derive only the time-series view for the selected range."""
        return await self._derive_series(report_errors=True)

    async def _derive_series(self, *, report_errors: bool) -> bool:
        token = self.state.next_series_token()
        time_range = self.state.time_range
        try:
            summary = await self.client.get_events(limit=self.series_limit)
        except (TrapdashError, pydantic.ValidationError) as exc:
            if not self.state.is_current_series(token):
                return False
            logger.warning("Time series update failed: %s", exc)
            if report_errors:
                self.renderer.mark_error(f"Time series update failed: {exc}", self._clock())
            return False

        if not self.state.is_current_series(token):
            logger.debug(
                "Dropping stale series #%d (current #%d)", token, self.state.series_seq,
            )
            return False

        buckets = aggregate(
            summary.recent_events, time_range, int(self._clock() * 1000), tz=self._tz,
        )
        self.state.series = buckets
        self.renderer.render_series(time_range, buckets)
        return True

    # -------------------------------------------------------------------
    # Config form (best effort)
    # -------------------------------------------------------------------
    async def _load_config_form(self, token: int) -> None:
        try:
            config = await self.client.get_config()
        except (TrapdashError, pydantic.ValidationError) as exc:
            logger.warning("Failed to load config: %s", exc)
            return
        if self.state.is_current_refresh(token):
            self.renderer.render_config(build_config_form(config))
