"""
trapdash.services.actions — Admin Action Executor
===================================================

Every admin mutation follows the same pattern:
  1. Validate local input (warning, no network call on failure)
  2. Show an "in progress" info message
  3. Issue the mutating call
  4. Success → success message, clear the input field, schedule a
     refresh shortly after so the settled server state is re-read
  5. Failure → error message carrying status + body; toggles snap back
     to the value they had before the action
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Protocol

import pydantic

from trapdash.constants import (
    CONSOLE_BAN_DURATION,
    CONSOLE_BAN_REASON,
    DEFAULT_BAN_DURATIONS,
    DEFAULT_MAZE_THRESHOLD,
)
from trapdash.errors import TrapdashError, ValidationError
from trapdash.models import BanDurationsPatch, ConfigPatch
from trapdash.services.api_client import AdminApiClient
from trapdash.services.renderer import MessageLevel, Renderer

logger = logging.getLogger(__name__)


class RefreshRequester(Protocol):
    def schedule_refresh(self, delay: float | None = None) -> Any: ...


@dataclass(frozen=True, slots=True)
class ActionResult:
    ok: bool
    message: str


# ---------------------------------------------------------------------------
# Local validation
# ---------------------------------------------------------------------------
def _require_ip(raw: str | None, verb: str) -> str:
    ip = (raw or "").strip()
    if not ip:
        raise ValidationError(f"Enter an IP to {verb}.", field="ip")
    return ip


def _positive_int(value: Any, name: str, default: int) -> int:
    """Coerce a form value; blank/zero means *default* like the service's form."""
    if value is None or value == "":
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be a whole number of seconds.", field=name) from None
    if number < 0:
        raise ValidationError(f"{name} must be positive.", field=name)
    return number or default


class AdminActionExecutor:
    """Runs admin mutations against the API with optimistic feedback."""

    def __init__(
        self,
        client: AdminApiClient,
        renderer: Renderer,
        scheduler: RefreshRequester,
    ) -> None:
        self.client = client
        self.renderer = renderer
        self.scheduler = scheduler

    # -------------------------------------------------------------------
    # Shared protocol
    # -------------------------------------------------------------------
    def _warn(self, exc: ValidationError) -> ActionResult:
        text = f"⚠ {exc}"
        self.renderer.show_message(MessageLevel.WARNING, text)
        return ActionResult(ok=False, message=text)

    async def _run(
        self,
        *,
        progress: str,
        call: Callable[[], Awaitable[Any]],
        success: Callable[[Any], str],
        clear: str | None = None,
        on_failure: Callable[[], None] | None = None,
    ) -> ActionResult:
        self.renderer.show_message(MessageLevel.INFO, progress)
        try:
            result = await call()
        except (TrapdashError, pydantic.ValidationError) as exc:
            if on_failure is not None:
                on_failure()
            text = f"✗ Error: {exc}"
            logger.warning("Admin action failed: %s", exc)
            self.renderer.show_message(MessageLevel.ERROR, text)
            return ActionResult(ok=False, message=text)

        text = f"✓ {success(result)}"
        self.renderer.show_message(MessageLevel.SUCCESS, text)
        if clear is not None:
            self.renderer.clear_input(clear)
        self.scheduler.schedule_refresh()
        logger.info("Admin action succeeded: %s", text)
        return ActionResult(ok=True, message=text)

    # -------------------------------------------------------------------
    # Ban / unban
    # -------------------------------------------------------------------
    async def ban(
        self,
        ip: str | None,
        reason: str | None = None,
        duration: int | None = None,
    ) -> ActionResult:
        try:
            ip = _require_ip(ip, "ban")
            duration = _positive_int(duration, "duration", CONSOLE_BAN_DURATION)
        except ValidationError as exc:
            return self._warn(exc)
        reason = (reason or "").strip() or CONSOLE_BAN_REASON

        return await self._run(
            progress=f"Banning {ip}...",
            call=lambda: self.client.ban(ip, reason, duration),
            success=lambda _: f"Banned {ip} for {duration}s",
            clear="ban-ip",
        )

    async def unban(self, ip: str | None) -> ActionResult:
        try:
            ip = _require_ip(ip, "unban")
        except ValidationError as exc:
            return self._warn(exc)

        return await self._run(
            progress=f"Unbanning {ip}...",
            call=lambda: self.client.unban(ip),
            success=lambda _: f"Unbanned {ip}",
            clear="unban-ip",
        )

    # -------------------------------------------------------------------
    # Config patches
    # -------------------------------------------------------------------
    async def set_test_mode(self, enabled: bool, previous: bool | None = None) -> ActionResult:
        """Flip the test-mode switch; the control reverts if the server refuses."""
        if previous is None:
            previous = not enabled
        self.renderer.set_test_mode_control(enabled)

        def _confirmed(config) -> str:
            self.renderer.set_test_mode_control(config.test_mode)
            return f"Test mode {'enabled' if config.test_mode else 'disabled'}"

        return await self._run(
            progress=f"{'Enabling' if enabled else 'Disabling'} test mode...",
            call=lambda: self.client.update_config(ConfigPatch(test_mode=enabled)),
            success=_confirmed,
            on_failure=lambda: self.renderer.set_test_mode_control(previous),
        )

    async def save_ban_durations(self, durations: dict[str, Any]) -> ActionResult:
        try:
            values = {
                key: _positive_int(durations.get(key), key, default)
                for key, default in DEFAULT_BAN_DURATIONS.items()
            }
        except ValidationError as exc:
            return self._warn(exc)

        return await self._run(
            progress="Saving ban durations...",
            call=lambda: self.client.update_config(
                ConfigPatch(ban_durations=BanDurationsPatch(**values))
            ),
            success=lambda _: "Ban durations saved",
        )

    async def save_maze_config(
        self,
        enabled: bool,
        auto_ban: bool,
        threshold: int | None = None,
    ) -> ActionResult:
        try:
            threshold = _positive_int(threshold, "threshold", DEFAULT_MAZE_THRESHOLD)
        except ValidationError as exc:
            return self._warn(exc)

        patch = ConfigPatch(
            maze_enabled=enabled,
            maze_auto_ban=auto_ban,
            maze_auto_ban_threshold=threshold,
        )
        return await self._run(
            progress="Saving maze settings...",
            call=lambda: self.client.update_config(patch),
            success=lambda _: "Maze settings saved",
        )

    async def patch_config(self, patch: ConfigPatch) -> ActionResult:
        """Send an arbitrary partial config update."""
        if not patch.to_body():
            return self._warn(ValidationError("Nothing to update."))
        return await self._run(
            progress="Updating config...",
            call=lambda: self.client.update_config(patch),
            success=lambda _: "Config updated",
        )
