"""
trapdash.services.scheduler — Refresh Triggers
================================================

Funnels every reason to refresh into the orchestrator:

- manual request (operator clicked refresh),
- the periodic loop (every 30 s by default),
- a short delay after a successful admin action (0.5 s) so server-side
  state has settled before it is re-read,
- a time-range change, which only re-derives the time series.

Triggers are not deduplicated; the orchestrator's sequence tokens make
sure only the newest cycle's results land on screen.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from trapdash.constants import POST_ACTION_DELAY_SECONDS, REFRESH_INTERVAL_SECONDS, TIME_RANGES
from trapdash.models import DashboardViewState
from trapdash.services.orchestrator import RefreshOrchestrator

logger = logging.getLogger(__name__)


class RefreshScheduler:
    """Owns the periodic refresh task and one-shot refresh tasks."""

    def __init__(
        self,
        orchestrator: RefreshOrchestrator,
        state: DashboardViewState,
        *,
        interval: float = REFRESH_INTERVAL_SECONDS,
        post_action_delay: float = POST_ACTION_DELAY_SECONDS,
    ) -> None:
        self.orchestrator = orchestrator
        self.state = state
        self.interval = interval
        self.post_action_delay = post_action_delay
        self._periodic_task: asyncio.Task | None = None
        self._pending: set[asyncio.Task] = set()

    @property
    def running(self) -> bool:
        return self._periodic_task is not None and not self._periodic_task.done()

    # -------------------------------------------------------------------
    # One-shot triggers
    # -------------------------------------------------------------------
    def _spawn(self, coro_fn: Callable[[], Awaitable[bool]], name: str, delay: float = 0.0) -> asyncio.Task:
        async def _run() -> bool:
            if delay > 0:
                await asyncio.sleep(delay)
            try:
                return await coro_fn()
            except Exception:
                logger.exception("Refresh task %s failed", name)
                return False

        task = asyncio.get_running_loop().create_task(_run(), name=name)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    def request_refresh(self) -> asyncio.Task:
        """Manual refresh, starts immediately."""
        return self._spawn(self.orchestrator.refresh, "refresh-manual")

    def schedule_refresh(self, delay: float | None = None) -> asyncio.Task:
        """Full refresh after *delay* seconds (post-action default)."""
        if delay is None:
            delay = self.post_action_delay
        return self._spawn(self.orchestrator.refresh, "refresh-delayed", delay=delay)

    def change_time_range(self, time_range: str) -> asyncio.Task:
        """Switch the selected range and re-derive only the time series."""
        if time_range not in TIME_RANGES:
            raise ValueError(f"Invalid time range: {time_range}. Must be one of {TIME_RANGES}")
        self.state.time_range = time_range
        return self._spawn(self.orchestrator.refresh_time_series, "refresh-series")

    # -------------------------------------------------------------------
    # Periodic loop
    # -------------------------------------------------------------------
    def start(self, loop: asyncio.AbstractEventLoop | None = None, *, refresh_now: bool = True) -> None:
        """Start the periodic refresh task (idempotent)."""
        if self._periodic_task is not None:
            return

        async def _refresh_loop() -> None:
            if not refresh_now:
                await asyncio.sleep(self.interval)
            while True:
                try:
                    await self.orchestrator.refresh()
                except Exception:
                    logger.exception("Periodic refresh error")
                await asyncio.sleep(self.interval)

        loop = loop or asyncio.get_running_loop()
        self._periodic_task = loop.create_task(_refresh_loop(), name="refresh-periodic")
        logger.info("Periodic refresh started (every %.0fs)", self.interval)

    def stop(self) -> None:
        """Cancel the periodic task and any pending one-shot refreshes."""
        if self._periodic_task:
            self._periodic_task.cancel()
            self._periodic_task = None
        for task in list(self._pending):
            task.cancel()
        self._pending.clear()
