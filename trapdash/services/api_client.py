"""
trapdash.services.api_client — Bot Trap Admin API Client
==========================================================

Thin authenticated request layer over the bot trap's ``/admin/*`` API.

Every call:
  1. Reads endpoint + API key fresh from the session's
     :class:`~trapdash.models.ConnectionSettings` (the operator may have
     changed them since the last call).
  2. Sends ``Authorization: Bearer <key>`` (and a JSON body when given).
  3. Raises :class:`ApiError` on any non-2xx answer (or a 2xx whose body
     is not the JSON that was expected) and :class:`NetworkError` when no
     answer arrives.

There are no retries here; retry policy belongs to the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import httpx

from trapdash.constants import API_BAN_DURATION, API_BAN_REASON
from trapdash.errors import ApiError, NetworkError
from trapdash.models import (
    AnalyticsSnapshot,
    Ban,
    BanList,
    Config,
    ConfigPatch,
    ConfigUpdateAck,
    ConnectionSettings,
    EventsSummary,
    MazeSnapshot,
)

logger = logging.getLogger(__name__)


class AdminApiClient:
    """Async client for the bot trap admin API.

    ``settings`` is either a :class:`ConnectionSettings` instance (read on
    every call, so in-place edits take effect immediately) or a zero-arg
    callable returning one.  ``transport`` lets tests plug in an
    :class:`httpx.MockTransport`.
    """

    def __init__(
        self,
        settings: ConnectionSettings | Callable[[], ConnectionSettings],
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._timeout = timeout
        self._transport = transport

    def _current_settings(self) -> ConnectionSettings:
        if callable(self._settings):
            return self._settings()
        return self._settings

    # -------------------------------------------------------------------
    # Core request
    # -------------------------------------------------------------------
    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
        expect: str = "json",
        operation: str | None = None,
    ) -> Any:
        """Perform one authenticated request and return JSON or text.

        *expect* is ``"json"`` or ``"text"``.  *operation* names the call in
        error messages (``"Ban failed: 403 ..."``).
        """
        settings = self._current_settings()
        headers = {"Authorization": f"Bearer {settings.api_key}"}
        if body is not None:
            headers["Content-Type"] = "application/json"

        url = f"{settings.base_url}{path}"
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport,
            ) as client:
                resp = await client.request(
                    method, url, params=params, json=body, headers=headers,
                )
        except httpx.TransportError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise NetworkError(str(exc) or type(exc).__name__, operation) from exc

        if not resp.is_success:
            logger.warning("%s %s returned %d", method, path, resp.status_code)
            raise ApiError(resp.status_code, resp.text, operation)

        if expect == "text":
            return resp.text
        try:
            return resp.json()
        except ValueError as exc:
            logger.warning("%s %s returned a non-JSON body", method, path)
            raise ApiError(resp.status_code, resp.text, operation) from exc

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------
    async def ban(
        self,
        ip: str,
        reason: str = API_BAN_REASON,
        duration: int = API_BAN_DURATION,
    ) -> dict[str, Any]:
        return await self.request(
            "POST", "/admin/ban",
            body={"ip": ip, "reason": reason, "duration": duration},
            operation="Ban",
        )

    async def unban(self, ip: str) -> str:
        return await self.request(
            "POST", "/admin/unban", params={"ip": ip}, expect="text",
            operation="Unban",
        )

    async def update_config(self, patch: ConfigPatch | dict[str, Any]) -> Config:
        """Apply a partial config update and return the server's merged config."""
        body = patch.to_body() if isinstance(patch, ConfigPatch) else dict(patch)
        data = await self.request(
            "POST", "/admin/config", body=body, operation="Update config",
        )
        return ConfigUpdateAck.model_validate(data).config

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    async def get_config(self) -> Config:
        data = await self.request("GET", "/admin/config", operation="Get config")
        return Config.model_validate(data)

    async def get_analytics(self) -> AnalyticsSnapshot:
        data = await self.request("GET", "/admin/analytics", operation="Analytics")
        return AnalyticsSnapshot.model_validate(data)

    async def get_events(
        self, *, hours: int | None = None, limit: int | None = None,
    ) -> EventsSummary:
        """Read the event log scoped by ``hours`` *or* ``limit``."""
        if hours is not None and limit is not None:
            raise ValueError("get_events takes hours or limit, not both")
        params: dict[str, int] = {}
        if hours is not None:
            params["hours"] = hours
        if limit is not None:
            params["limit"] = limit
        data = await self.request(
            "GET", "/admin/events", params=params or None, operation="Events",
        )
        return EventsSummary.model_validate(data)

    async def get_bans(self) -> list[Ban]:
        data = await self.request("GET", "/admin/ban", operation="Bans")
        return BanList.model_validate(data).bans

    async def get_maze(self) -> MazeSnapshot:
        data = await self.request("GET", "/admin/maze", operation="Maze")
        return MazeSnapshot.model_validate(data)
