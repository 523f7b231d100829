"""
Trapdash — Operator Console for the Bot Trap
==============================================
Visualizes bot-mitigation activity (bans, challenges, crawler-maze hits)
and issues admin commands (ban/unban, test mode, ban durations, maze
thresholds) against the bot trap's remote ``/admin`` API.

Package layout::

    trapdash/
    ├── config.py          # YAML + .env → typed Python config
    ├── constants.py       # Time ranges, bucket widths, service defaults
    ├── errors.py          # ValidationError / ApiError / NetworkError / PartialDataError
    ├── models.py          # Wire models (pydantic) + view structures
    ├── controller.py      # DashboardController — one console session
    ├── engine/
    │   ├── aggregator.py  # Gap-free time bucketing of the event log
    │   └── views.py       # Stat cards, table rows, maze panel, config form
    ├── services/
    │   ├── api_client.py  # Bearer-authenticated httpx client
    │   ├── orchestrator.py # Parallel reads, partial-failure policy, stale guard
    │   ├── scheduler.py   # Manual / periodic / post-action / range triggers
    │   ├── actions.py     # Admin mutations with optimistic feedback + rollback
    │   └── renderer.py    # Renderer protocol + in-memory recording renderer
    └── api/
        ├── main.py        # FastAPI app
        └── routes/        # Console view + action endpoints
"""

__version__ = "0.1.0"
