"""API routers for SimpleTasks."""

from simpletasks.api.settings import router as settings_router
from simpletasks.api.tasks import router as tasks_router

__all__ = ["settings_router", "tasks_router"]
