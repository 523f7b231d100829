"""
trapdash.__main__ — Entry point for ``python -m trapdash``
===========================================================

Wiring:
1. Load .env (API key, optional endpoint override).
2. Load config.yaml (endpoint, port, refresh cadence).
3. Serve the console API with uvicorn; its lifespan starts the
   periodic refresh.

Run with::

    python -m trapdash
"""

from __future__ import annotations

import logging
import sys

import uvicorn
from dotenv import load_dotenv

from trapdash.api.deps import get_config

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("trapdash")


def main() -> None:
    """Bootstrap and run the operator console."""

    # 1. Environment variables (secrets).
    load_dotenv()

    # 2. Console configuration.
    try:
        cfg = get_config()
    except FileNotFoundError as exc:
        logger.critical("%s", exc)
        sys.exit(1)

    if not cfg.api_key:
        logger.warning(
            "TRAPDASH_API_KEY is not set — admin API calls will be rejected "
            "until a key is supplied via PUT /api/connection."
        )

    # 3. Serve (blocks until Ctrl+C or SIGTERM).
    logger.info("Starting console on port %d for %s", cfg.console_port, cfg.endpoint)
    uvicorn.run(
        "trapdash.api.main:app",
        host="127.0.0.1",
        port=cfg.console_port,
        log_level="info",
    )


if __name__ == "__main__":
    main()
