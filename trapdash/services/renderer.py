"""
trapdash.services.renderer — Renderer Contract + In-Memory Renderer
=====================================================================

The console core never draws anything itself.  It hands finished view
structures to a :class:`Renderer`, whose only job is to display them.

:class:`RecordingRenderer` keeps the latest value of every view in
memory.  The console API serves it as JSON, and tests assert against it.
"""

from __future__ import annotations

import threading
from dataclasses import asdict
from datetime import UTC, datetime
from typing import Any, Protocol

from trapdash.models import ConfigForm, MazePanel, SummaryView, TimeBucket


class MessageLevel:
    """Severity classes for operator messages."""
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class Renderer(Protocol):
    """Side-effect-only consumer of finished view data."""

    def show_message(self, level: str, text: str) -> None: ...

    def render_summary(self, summary: SummaryView) -> None: ...

    def render_series(self, time_range: str, buckets: list[TimeBucket]) -> None: ...

    def render_maze(self, panel: MazePanel) -> None: ...

    def render_config(self, form: ConfigForm) -> None: ...

    def set_test_mode_control(self, enabled: bool) -> None: ...

    def clear_input(self, name: str) -> None: ...

    def mark_loading(self) -> None: ...

    def mark_refreshed(self, at: float) -> None: ...

    def mark_error(self, text: str, at: float) -> None: ...


def _iso(ts: float | None) -> str | None:
    if ts is None:
        return None
    return datetime.fromtimestamp(ts, tz=UTC).isoformat()


class RecordingRenderer:
    """Renderer that records the latest state of every view.

    ``inputs`` models the console's transient form fields so actions can
    clear them; ``messages`` keeps the history of operator messages.
    """

    def __init__(self, max_messages: int = 50) -> None:
        self._lock = threading.Lock()
        self._max_messages = max_messages
        self.summary: SummaryView | None = None
        self.series_range: str | None = None
        self.series: list[TimeBucket] = []
        self.maze: MazePanel | None = None
        self.config: ConfigForm | None = None
        self.test_mode_control: bool = False
        self.inputs: dict[str, str] = {}
        self.messages: list[tuple[str, str]] = []
        self.loading: bool = False
        self.last_updated: float | None = None
        self.last_error: str | None = None

    @property
    def last_message(self) -> tuple[str, str] | None:
        return self.messages[-1] if self.messages else None

    # -------------------------------------------------------------------
    # Renderer protocol
    # -------------------------------------------------------------------
    def show_message(self, level: str, text: str) -> None:
        with self._lock:
            self.messages.append((level, text))
            if len(self.messages) > self._max_messages:
                self.messages = self.messages[-self._max_messages:]

    def render_summary(self, summary: SummaryView) -> None:
        with self._lock:
            self.summary = summary
            self.test_mode_control = summary.stats.test_mode

    def render_series(self, time_range: str, buckets: list[TimeBucket]) -> None:
        with self._lock:
            self.series_range = time_range
            self.series = list(buckets)

    def render_maze(self, panel: MazePanel) -> None:
        with self._lock:
            self.maze = panel

    def render_config(self, form: ConfigForm) -> None:
        with self._lock:
            self.config = form

    def set_test_mode_control(self, enabled: bool) -> None:
        with self._lock:
            self.test_mode_control = enabled

    def clear_input(self, name: str) -> None:
        with self._lock:
            self.inputs[name] = ""

    def mark_loading(self) -> None:
        with self._lock:
            self.loading = True

    def mark_refreshed(self, at: float) -> None:
        with self._lock:
            self.loading = False
            self.last_updated = at
            self.last_error = None

    def mark_error(self, text: str, at: float) -> None:
        with self._lock:
            self.loading = False
            self.last_error = f"[{_iso(at)}] {text}"

    # -------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------
    def snapshot(self) -> dict[str, Any]:
        """Return a JSON-serializable copy of everything rendered so far."""
        with self._lock:
            return {
                "summary": asdict(self.summary) if self.summary else None,
                "series": {
                    "range": self.series_range,
                    "labels": [b.label for b in self.series],
                    "counts": [b.count for b in self.series],
                },
                "maze": asdict(self.maze) if self.maze else None,
                "config": asdict(self.config) if self.config else None,
                "test_mode_control": self.test_mode_control,
                "messages": [
                    {"level": level, "text": text} for level, text in self.messages
                ],
                "loading": self.loading,
                "last_updated": _iso(self.last_updated),
                "last_error": self.last_error,
            }
