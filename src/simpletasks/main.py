"""FastAPI application entry point."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI

from simpletasks import __version__
from simpletasks.api.dependencies import reset_task_views
from simpletasks.api.settings import router as settings_router
from simpletasks.api.tasks import router as tasks_router
from simpletasks.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Log resolved configuration at startup; drop pending rescans on shutdown."""
    s = get_settings()
    logger.info("SimpleTasks starting: vault_path=%s, data_path=%s", s.vault_path, s.data_path)
    if not s.vault_path or not s.vault_path.exists():
        logger.error("VAULT PATH NOT CONFIGURED OR MISSING: task APIs will return 503 errors")
    yield
    reset_task_views()


app = FastAPI(
    title="SimpleTasks",
    description="Checkbox task index for Obsidian vaults",
    version=__version__,
    debug=settings.debug,
    lifespan=lifespan,
)

app.include_router(settings_router)
app.include_router(tasks_router)


@app.get("/")
async def root() -> dict[str, str]:
    """Return project information."""
    return {
        "name": "SimpleTasks",
        "version": __version__,
        "description": "Checkbox task index for Obsidian vaults",
    }


@app.get("/health")
@app.get("/api/v1/health")
async def health() -> dict[str, Any]:
    """Health check endpoint with vault status."""
    s = get_settings()

    checks: dict[str, Any] = {"status": "ok"}
    if not s.vault_path or not s.vault_path.exists():
        checks["status"] = "error"
        checks["vault"] = "not configured or missing"
    else:
        checks["vault"] = "ok"
    return checks
