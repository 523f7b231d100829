"""
trapdash.api.routes.console — Operator Console Endpoints
==========================================================

Routes for:
    - Reading the rendered view (stat cards, tables, series, maze, form)
    - Manual refresh and time-range selection
    - Connection settings (endpoint + API key)
    - Admin actions (ban, unban, test mode, ban durations, maze settings)

Action endpoints always answer 200 with ``{ok, message}``; the message is
the same text the console shows the operator.
"""

from __future__ import annotations

from typing import Any, Literal

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from trapdash.api.deps import get_controller
from trapdash.controller import DashboardController
from trapdash.services.actions import ActionResult
from trapdash.services.renderer import RecordingRenderer

router = APIRouter(tags=["console"])


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------
class ActionResponse(BaseModel):
    ok: bool
    message: str


class RefreshResponse(BaseModel):
    ok: bool
    view: dict[str, Any]


class TimeRangeBody(BaseModel):
    time_range: Literal["hour", "day", "week", "month"]


class ConnectionBody(BaseModel):
    endpoint: str | None = None
    api_key: str | None = None


class ConnectionResponse(BaseModel):
    endpoint: str
    has_api_key: bool


class BanBody(BaseModel):
    ip: str = ""
    reason: str | None = None
    duration: int | None = None


class UnbanBody(BaseModel):
    ip: str = ""


class ToggleTestModeBody(BaseModel):
    enabled: bool
    previous: bool | None = None


class BanDurationsBody(BaseModel):
    honeypot: int | None = Field(None, ge=0)
    rate_limit: int | None = Field(None, ge=0)
    browser: int | None = Field(None, ge=0)
    admin: int | None = Field(None, ge=0)


class MazeConfigBody(BaseModel):
    maze_enabled: bool
    maze_auto_ban: bool
    maze_auto_ban_threshold: int | None = Field(None, ge=0)


def _view(controller: DashboardController) -> dict[str, Any]:
    renderer = controller.renderer
    if not isinstance(renderer, RecordingRenderer):
        raise HTTPException(501, "Active renderer does not record views")
    view = renderer.snapshot()
    view["time_range"] = controller.state.time_range
    view["refreshing"] = controller.state.refreshing
    return view


def _action(result: ActionResult) -> ActionResponse:
    return ActionResponse(ok=result.ok, message=result.message)


# =========================================================================
# 1.  View + refresh
# =========================================================================
@router.get("/view")
def get_view(controller: DashboardController = Depends(get_controller)):
    """Return everything rendered so far."""
    return _view(controller)


@router.post("/refresh", response_model=RefreshResponse)
async def refresh(controller: DashboardController = Depends(get_controller)):
    """Run a full refresh now and return the resulting view."""
    ok = await controller.scheduler.request_refresh()
    return RefreshResponse(ok=ok, view=_view(controller))


@router.put("/time-range", response_model=RefreshResponse)
async def set_time_range(
    body: TimeRangeBody,
    controller: DashboardController = Depends(get_controller),
):
    """Select a time range and re-derive the time series for it."""
    ok = await controller.scheduler.change_time_range(body.time_range)
    return RefreshResponse(ok=ok, view=_view(controller))


# =========================================================================
# 2.  Connection settings
# =========================================================================
@router.put("/connection", response_model=ConnectionResponse)
def set_connection(
    body: ConnectionBody,
    controller: DashboardController = Depends(get_controller),
):
    if body.endpoint is not None and not body.endpoint.strip():
        raise HTTPException(400, "Endpoint must not be empty")
    conn = controller.update_connection(endpoint=body.endpoint, api_key=body.api_key)
    return ConnectionResponse(endpoint=conn.base_url, has_api_key=bool(conn.api_key))


# =========================================================================
# 3.  Admin actions
# =========================================================================
@router.post("/actions/ban", response_model=ActionResponse)
async def ban(body: BanBody, controller: DashboardController = Depends(get_controller)):
    return _action(await controller.actions.ban(body.ip, body.reason, body.duration))


@router.post("/actions/unban", response_model=ActionResponse)
async def unban(body: UnbanBody, controller: DashboardController = Depends(get_controller)):
    return _action(await controller.actions.unban(body.ip))


@router.post("/actions/test-mode", response_model=ActionResponse)
async def toggle_test_mode(body: ToggleTestModeBody, controller: DashboardController = Depends(get_controller)):
    return _action(await controller.actions.set_test_mode(body.enabled, body.previous))


@router.post("/actions/ban-durations", response_model=ActionResponse)
async def ban_durations(
    body: BanDurationsBody,
    controller: DashboardController = Depends(get_controller),
):
    return _action(await controller.actions.save_ban_durations(body.model_dump()))


@router.post("/actions/maze-config", response_model=ActionResponse)
async def maze_config(
    body: MazeConfigBody,
    controller: DashboardController = Depends(get_controller),
):
    return _action(await controller.actions.save_maze_config(
        body.maze_enabled, body.maze_auto_ban, body.maze_auto_ban_threshold,
    ))
