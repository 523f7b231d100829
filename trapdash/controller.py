"""
trapdash.controller — Dashboard Controller
============================================

Owns one console session: the connection settings, the view state, and
the client / orchestrator / scheduler / action executor that share them.
Everything that used to be a page-level global lives on this object and
is passed explicitly to the components that need it.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from datetime import tzinfo

import httpx

from trapdash.config import TrapdashConfig
from trapdash.models import ConnectionSettings, DashboardViewState
from trapdash.services.actions import AdminActionExecutor
from trapdash.services.api_client import AdminApiClient
from trapdash.services.orchestrator import RefreshOrchestrator
from trapdash.services.renderer import RecordingRenderer, Renderer
from trapdash.services.scheduler import RefreshScheduler

logger = logging.getLogger(__name__)


class DashboardController:
    """Wires the console components around a single view state.

    Usage::

        controller = DashboardController(load_config())
        controller.start()                 # inside a running event loop
        await controller.actions.ban("203.0.113.9")
        controller.stop()
    """

    def __init__(
        self,
        cfg: TrapdashConfig,
        renderer: Renderer | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], float] = time.time,
        tz: tzinfo | None = None,
    ) -> None:
        self.cfg = cfg
        self.connection = ConnectionSettings(endpoint=cfg.endpoint, api_key=cfg.api_key)
        self.state = DashboardViewState(time_range=cfg.default_time_range)
        self.renderer = renderer if renderer is not None else RecordingRenderer()

        self.client = AdminApiClient(
            self.connection,
            timeout=cfg.request_timeout_seconds,
            transport=transport,
        )
        self.orchestrator = RefreshOrchestrator(
            self.client,
            self.state,
            self.renderer,
            summary_hours=cfg.summary_hours,
            series_limit=cfg.series_limit,
            clock=clock,
            tz=tz,
        )
        self.scheduler = RefreshScheduler(
            self.orchestrator,
            self.state,
            interval=cfg.refresh_interval_seconds,
            post_action_delay=cfg.post_action_delay_seconds,
        )
        self.actions = AdminActionExecutor(self.client, self.renderer, self.scheduler)

    def update_connection(
        self, endpoint: str | None = None, api_key: str | None = None,
    ) -> ConnectionSettings:
        """Change where/how the console talks to the API; applies to the next call."""
        if endpoint is not None:
            self.connection.endpoint = endpoint
        if api_key is not None:
            self.connection.api_key = api_key
        logger.info("Connection updated: endpoint=%s", self.connection.base_url)
        return self.connection

    def start(self) -> None:
        self.scheduler.start()

    def stop(self) -> None:
        self.scheduler.stop()
