"""
tests/conftest.py — Shared Test Fixtures
=========================================
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import UTC
from typing import Any

import httpx
import pytest

from trapdash.config import TrapdashConfig
from trapdash.controller import DashboardController
from trapdash.services.renderer import RecordingRenderer

# 2023-11-14 22:13:20 UTC
NOW = 1_700_000_000

ENDPOINT = "http://trap.test"
API_KEY = "test-admin-key"


def fixed_clock(now: float = NOW) -> Callable[[], float]:
    return lambda: now


def make_config(**overrides: Any) -> TrapdashConfig:
    """Build a console config.  Usable as both a fixture helper and a factory."""
    values: dict[str, Any] = {
        "endpoint": ENDPOINT + "/",
        "api_key": API_KEY,
        "console_port": 8400,
    }
    values.update(overrides)
    return TrapdashConfig(**values)


# ---------------------------------------------------------------------------
# Fake admin API served through httpx.MockTransport
# ---------------------------------------------------------------------------
Route = tuple[int, Any] | Callable[[httpx.Request], tuple[int, Any]] | Exception


class FakeAdminApi:
    """In-process stand-in for the bot trap's ``/admin`` API.

    Routes map ``(method, path)`` to ``(status, payload)`` where a ``str``
    payload is sent as text and anything else as JSON.  A route may also be
    a callable taking the request, or an exception to raise.  ``gates``
    hold a request until the matching :class:`asyncio.Event` is set.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Route] = {}
        self.requests: list[httpx.Request] = []
        self.gates: dict[tuple[str, str], asyncio.Event] = {}

    def set(self, method: str, path: str, payload: Any = None, status: int = 200) -> None:
        self.routes[(method, path)] = (status, payload if payload is not None else {})

    def fail(self, method: str, path: str, status: int = 500, body: str = "boom") -> None:
        self.routes[(method, path)] = (status, body)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [
            r for r in self.requests
            if r.method == method and r.url.path == path
        ]

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, request.url.path)
        gate = self.gates.get(key)
        if gate is not None:
            await gate.wait()
        route = self.routes.get(key)
        if route is None:
            return httpx.Response(404, text="Not found")
        if isinstance(route, Exception):
            raise route
        status, payload = route(request) if callable(route) else route
        if isinstance(payload, str):
            return httpx.Response(status, text=payload)
        return httpx.Response(status, json=payload)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


def recent_events() -> list[dict[str, Any]]:
    return [
        {"ts": NOW - 30, "event": "Ban", "ip": "203.0.113.9",
         "reason": "honeypot", "outcome": "banned", "admin": None},
        {"ts": NOW - 600, "event": "Challenge", "ip": "198.51.100.7",
         "reason": "rate", "outcome": "served", "admin": None},
        {"ts": NOW - 7200, "event": "AdminAction", "ip": None,
         "reason": "config_view", "outcome": "test_mode=false", "admin": "ops"},
    ]


def seed_api(api: FakeAdminApi) -> FakeAdminApi:
    """Install a healthy response for every read endpoint."""
    api.set("GET", "/admin/analytics", {"ban_count": 3, "test_mode": False})
    api.set("GET", "/admin/events", {
        "event_counts": {"Ban": 1, "Challenge": 1, "AdminAction": 1},
        "top_ips": [["203.0.113.9", 4], ["198.51.100.7", 2]],
        "recent_events": recent_events(),
    })
    api.set("GET", "/admin/ban", {"bans": [
        {"ip": "203.0.113.9", "reason": "honeypot", "expires": NOW + 3600},
        {"ip": "192.0.2.1", "reason": "", "expires": NOW - 10},
    ]})
    api.set("GET", "/admin/maze", {
        "total_hits": 75, "unique_crawlers": 2, "maze_auto_bans": 1,
        "deepest_crawler": {"ip": "198.51.100.7", "hits": 60},
        "top_crawlers": [{"ip": "198.51.100.7", "hits": 60},
                         {"ip": "192.0.2.44", "hits": 15}],
    })
    api.set("GET", "/admin/config", {
        "test_mode": False,
        "ban_durations": {"honeypot": 86400, "rate_limit": 3600,
                          "browser": 21600, "admin": 7200},
        "maze_enabled": True, "maze_auto_ban": True,
        "maze_auto_ban_threshold": 40, "rate_limit": 80,
    })
    return api


@pytest.fixture
def fake_api() -> FakeAdminApi:
    return seed_api(FakeAdminApi())


@pytest.fixture
def renderer() -> RecordingRenderer:
    return RecordingRenderer()


@pytest.fixture
def controller(fake_api: FakeAdminApi, renderer: RecordingRenderer) -> DashboardController:
    """A console session wired to the fake API with a frozen clock in UTC."""
    return DashboardController(
        make_config(),
        renderer,
        transport=fake_api.transport,
        clock=fixed_clock(),
        tz=UTC,
    )
