"""
trapdash.api.main — FastAPI application entry point
=====================================================

Run with::

    uvicorn trapdash.api.main:app --port 8400

or ``python -m trapdash`` which reads the port from ``config.yaml``.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI

load_dotenv()

from trapdash import __version__  # noqa: E402
from trapdash.api.deps import get_controller  # noqa: E402
from trapdash.api.routes.console import router as console_router  # noqa: E402

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle — start and stop the refresh scheduler."""
    controller = get_controller()
    controller.start()
    logger.info(
        "Trapdash console started — watching %s", controller.connection.base_url,
    )
    yield
    controller.stop()
    logger.info("Trapdash console shutting down")


app = FastAPI(
    title="Trapdash Operator Console",
    version=__version__,
    lifespan=lifespan,
)

app.include_router(console_router, prefix="/api")


@app.get("/api/health")
def health():
    return {"status": "ok"}
