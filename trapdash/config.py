"""
trapdash.config — YAML Configuration Loader
=============================================

**Why this file exists:**
This module reads ``config.yaml`` for the console's own settings (where
the bot trap lives, how often to refresh, which range to open on).  The
API key is a secret and never goes in YAML; it comes from the
``TRAPDASH_API_KEY`` environment variable, which the entry points load
from ``.env`` before calling :func:`load_config`.

Usage::

    from trapdash.config import load_config

    cfg = load_config()                # reads ./config.yaml by default
    print(cfg.endpoint)                # "https://trap.example.com"
    print(cfg.refresh_interval_seconds)  # 30.0
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import yaml

from trapdash.constants import (
    POST_ACTION_DELAY_SECONDS,
    REFRESH_INTERVAL_SECONDS,
    SERIES_EVENT_LIMIT,
    SUMMARY_HOURS,
    TIME_RANGES,
)


# ---------------------------------------------------------------------------
# Typed settings object
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class TrapdashConfig:
    """Immutable configuration loaded from ``config.yaml``.

    ``endpoint`` and ``api_key`` only seed the session's
    :class:`~trapdash.models.ConnectionSettings`; the operator can change
    both at runtime from the console.
    """

    # Control API
    endpoint: str
    api_key: str

    # Console
    console_port: int

    # Refresh cadence
    refresh_interval_seconds: float = REFRESH_INTERVAL_SECONDS
    post_action_delay_seconds: float = POST_ACTION_DELAY_SECONDS
    request_timeout_seconds: float = 10.0

    # Views
    default_time_range: str = "hour"
    summary_hours: int = SUMMARY_HOURS
    series_limit: int = SERIES_EVENT_LIMIT


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def load_config(path: str | Path = "config.yaml") -> TrapdashConfig:
    """Read *path* and return a :class:`TrapdashConfig` instance.

    Parameters
    ----------
    path:
        Filesystem path to the YAML configuration file.
        Defaults to ``config.yaml`` in the current working directory.

    Raises
    ------
    FileNotFoundError
        If the YAML file doesn't exist.
    KeyError
        If a required key is missing from the YAML file.
    ValueError
        If ``default_time_range`` is not one of hour/day/week/month.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path.resolve()}\n"
            "Hint: copy config.yaml.example → config.yaml and edit it."
        )

    with open(config_path, encoding="utf-8") as fh:
        raw: dict = yaml.safe_load(fh) or {}

    time_range = str(raw.get("default_time_range", "hour"))
    if time_range not in TIME_RANGES:
        raise ValueError(
            f"Invalid default_time_range: {time_range}. Must be one of {TIME_RANGES}"
        )

    return TrapdashConfig(
        endpoint=os.getenv("TRAPDASH_ENDPOINT", "").strip() or raw["endpoint"],
        api_key=os.getenv("TRAPDASH_API_KEY", "").strip(),
        console_port=int(raw["console_port"]),
        refresh_interval_seconds=float(
            raw.get("refresh_interval_seconds", REFRESH_INTERVAL_SECONDS)
        ),
        post_action_delay_seconds=float(
            raw.get("post_action_delay_seconds", POST_ACTION_DELAY_SECONDS)
        ),
        request_timeout_seconds=float(raw.get("request_timeout_seconds", 10.0)),
        default_time_range=time_range,
        summary_hours=int(raw.get("summary_hours", SUMMARY_HOURS)),
        series_limit=int(raw.get("series_limit", SERIES_EVENT_LIMIT)),
    )
