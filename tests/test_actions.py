"""
tests/test_actions.py — Admin Action Executor Tests
=====================================================

Each action: local validation (no network on failure), in-progress
message, success message + cleared input + delayed refresh, and error
message + rollback on failure.
"""

from __future__ import annotations

import asyncio
import json
from unittest.mock import MagicMock

import pytest

from conftest import ENDPOINT, FakeAdminApi, seed_api
from trapdash.models import ConfigPatch, ConnectionSettings
from trapdash.services.actions import AdminActionExecutor
from trapdash.services.api_client import AdminApiClient
from trapdash.services.renderer import MessageLevel, RecordingRenderer


def run_async(coro):
    """Run an async coroutine in a fresh event loop."""
    return asyncio.run(coro)


@pytest.fixture
def api() -> FakeAdminApi:
    api = seed_api(FakeAdminApi())
    api.set("POST", "/admin/ban", {"status": "banned"})
    api.set("POST", "/admin/unban", "Unbanned")
    return api


@pytest.fixture
def scheduler() -> MagicMock:
    return MagicMock()


@pytest.fixture
def renderer() -> RecordingRenderer:
    r = RecordingRenderer()
    r.inputs = {"ban-ip": "1.2.3.4", "unban-ip": "5.6.7.8"}
    return r


@pytest.fixture
def executor(api, renderer, scheduler) -> AdminActionExecutor:
    client = AdminApiClient(
        ConnectionSettings(endpoint=ENDPOINT, api_key="k"), transport=api.transport,
    )
    return AdminActionExecutor(client, renderer, scheduler)


def _levels(renderer: RecordingRenderer) -> list[str]:
    return [level for level, _ in renderer.messages]


# ---------------------------------------------------------------------------
# Ban
# ---------------------------------------------------------------------------
class TestBan:
    def test_success_reports_ip_and_duration(self, executor, renderer, scheduler):
        result = run_async(executor.ban("1.2.3.4", "manual_ban", 3600))
        assert result.ok
        assert "1.2.3.4" in result.message
        assert "3600" in result.message
        assert _levels(renderer) == [MessageLevel.INFO, MessageLevel.SUCCESS]
        scheduler.schedule_refresh.assert_called_once_with()

    def test_success_clears_ip_field(self, executor, renderer):
        run_async(executor.ban("1.2.3.4"))
        assert renderer.inputs["ban-ip"] == ""
        assert renderer.inputs["unban-ip"] == "5.6.7.8"

    def test_blank_reason_and_duration_use_console_defaults(self, executor, api):
        run_async(executor.ban("  1.2.3.4  ", "   ", None))
        body = json.loads(api.calls("POST", "/admin/ban")[0].content)
        assert body == {"ip": "1.2.3.4", "reason": "manual_ban", "duration": 3600}

    @pytest.mark.parametrize("ip", ["", "   ", None])
    def test_missing_ip_warns_without_network(self, executor, api, renderer, scheduler, ip):
        result = run_async(executor.ban(ip))
        assert not result.ok
        assert "Enter an IP to ban" in result.message
        assert _levels(renderer) == [MessageLevel.WARNING]
        assert api.requests == []
        scheduler.schedule_refresh.assert_not_called()

    def test_negative_duration_warns(self, executor, api):
        result = run_async(executor.ban("1.2.3.4", duration=-5))
        assert not result.ok
        assert api.requests == []

    def test_failure_shows_status_and_body(self, executor, api, renderer, scheduler):
        api.fail("POST", "/admin/ban", status=500, body="store unavailable")
        result = run_async(executor.ban("1.2.3.4"))
        assert not result.ok
        assert "500" in result.message
        assert "store unavailable" in result.message
        assert renderer.last_message[0] == MessageLevel.ERROR
        assert renderer.inputs["ban-ip"] == "1.2.3.4"
        scheduler.schedule_refresh.assert_not_called()


# ---------------------------------------------------------------------------
# Unban
# ---------------------------------------------------------------------------
class TestUnban:
    def test_success(self, executor, api, renderer, scheduler):
        result = run_async(executor.unban(" 5.6.7.8 "))
        assert result.ok
        assert result.message == "✓ Unbanned 5.6.7.8"
        assert api.calls("POST", "/admin/unban")[0].url.params["ip"] == "5.6.7.8"
        assert renderer.inputs["unban-ip"] == ""
        scheduler.schedule_refresh.assert_called_once()

    def test_missing_ip(self, executor, api):
        result = run_async(executor.unban(""))
        assert "Enter an IP to unban" in result.message
        assert api.requests == []

    def test_failure(self, executor, api):
        api.fail("POST", "/admin/unban", status=400, body="Missing ip param")
        result = run_async(executor.unban("5.6.7.8"))
        assert not result.ok
        assert "400 Missing ip param" in result.message


# ---------------------------------------------------------------------------
# Test mode toggle
# ---------------------------------------------------------------------------
class TestTestModeToggle:
    def test_failure_reverts_control(self, executor, api, renderer, scheduler):
        api.fail("POST", "/admin/config", status=403, body="Forbidden")
        renderer.test_mode_control = False
        result = run_async(executor.set_test_mode(True))
        assert not result.ok
        assert "403" in result.message
        assert renderer.test_mode_control is False
        scheduler.schedule_refresh.assert_not_called()

    def test_failure_reverts_to_explicit_previous(self, executor, api, renderer):
        api.fail("POST", "/admin/config", status=500)
        run_async(executor.set_test_mode(False, previous=True))
        assert renderer.test_mode_control is True

    def test_non_json_ack_reverts_control(self, executor, api, renderer, scheduler):
        api.set("POST", "/admin/config", "OK")
        result = run_async(executor.set_test_mode(True, previous=False))
        assert not result.ok
        assert result.message.startswith("✗ Error:")
        assert renderer.test_mode_control is False
        scheduler.schedule_refresh.assert_not_called()

    def test_ack_without_config_reverts_control(self, executor, api, renderer, scheduler):
        api.set("POST", "/admin/config", {"status": "updated"})
        result = run_async(executor.set_test_mode(True, previous=False))
        assert not result.ok
        assert renderer.test_mode_control is False
        scheduler.schedule_refresh.assert_not_called()

    def test_success_reflects_server_value(self, executor, api, renderer, scheduler):
        api.set("POST", "/admin/config", {"status": "updated", "config": {"test_mode": True}})
        result = run_async(executor.set_test_mode(True))
        assert result.ok
        assert result.message == "✓ Test mode enabled"
        assert renderer.test_mode_control is True
        assert json.loads(api.calls("POST", "/admin/config")[0].content) == {"test_mode": True}
        scheduler.schedule_refresh.assert_called_once()

    def test_progress_message_is_shown_first(self, executor, api, renderer):
        api.set("POST", "/admin/config", {"config": {"test_mode": False}})
        run_async(executor.set_test_mode(False))
        assert renderer.messages[0] == (MessageLevel.INFO, "Disabling test mode...")


# ---------------------------------------------------------------------------
# Config forms
# ---------------------------------------------------------------------------
class TestConfigForms:
    def test_ban_durations_fill_defaults(self, executor, api):
        api.set("POST", "/admin/config", {"config": {}})
        result = run_async(executor.save_ban_durations({"honeypot": 600, "admin": ""}))
        assert result.ok
        body = json.loads(api.calls("POST", "/admin/config")[0].content)
        assert body == {"ban_durations": {
            "honeypot": 600, "rate_limit": 3600, "browser": 21600, "admin": 21600,
        }}

    def test_ban_durations_reject_garbage(self, executor, api, renderer):
        result = run_async(executor.save_ban_durations({"browser": "six hours"}))
        assert not result.ok
        assert renderer.last_message[0] == MessageLevel.WARNING
        assert api.requests == []

    def test_maze_config_sends_only_maze_keys(self, executor, api, scheduler):
        api.set("POST", "/admin/config", {"config": {}})
        result = run_async(executor.save_maze_config(True, False, 75))
        assert result.ok
        body = json.loads(api.calls("POST", "/admin/config")[0].content)
        assert body == {
            "maze_enabled": True, "maze_auto_ban": False, "maze_auto_ban_threshold": 75,
        }
        scheduler.schedule_refresh.assert_called_once()

    def test_maze_threshold_default(self, executor, api):
        api.set("POST", "/admin/config", {"config": {}})
        run_async(executor.save_maze_config(True, True, None))
        body = json.loads(api.calls("POST", "/admin/config")[0].content)
        assert body["maze_auto_ban_threshold"] == 50

    def test_maze_config_failure(self, executor, api, renderer):
        api.fail("POST", "/admin/config", status=500, body="kv write failed")
        result = run_async(executor.save_maze_config(True, True, 10))
        assert not result.ok
        assert "kv write failed" in result.message

    def test_empty_patch_warns(self, executor, api):
        result = run_async(executor.patch_config(ConfigPatch()))
        assert not result.ok
        assert api.requests == []

    def test_generic_patch(self, executor, api):
        api.set("POST", "/admin/config", {"config": {"maze_enabled": False}})
        result = run_async(executor.patch_config(ConfigPatch(maze_enabled=False)))
        assert result.ok
        assert json.loads(api.calls("POST", "/admin/config")[0].content) == {"maze_enabled": False}
