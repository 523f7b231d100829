"""
trapdash.api.deps — FastAPI dependency injection
==================================================
"""

from __future__ import annotations

import os
from functools import lru_cache

from trapdash.config import TrapdashConfig, load_config
from trapdash.controller import DashboardController


@lru_cache(maxsize=1)
def get_config() -> TrapdashConfig:
    return load_config(os.getenv("TRAPDASH_CONFIG", "config.yaml"))


@lru_cache(maxsize=1)
def get_controller() -> DashboardController:
    """The process-wide console session."""
    return DashboardController(get_config())
