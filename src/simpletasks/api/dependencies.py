"""FastAPI dependency injection for shared resources."""

import logging
import threading
from functools import lru_cache
from pathlib import Path

from fastapi import HTTPException

from simpletasks.config import Settings
from simpletasks.settings import exclusions_from_settings, load_settings
from simpletasks.tasks.matching import GlobalExclusions
from simpletasks.tasks.view import TaskView
from simpletasks.vault.connector import VaultConnector

logger = logging.getLogger(__name__)

# One view per vault; rebuilt when the configured vault changes
_views: dict[Path, TaskView] = {}
_views_lock = threading.Lock()


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def get_data_path() -> Path:
    """Get the data directory path."""
    settings = get_settings()
    data_path = Path(settings.data_path) if settings.data_path else Path("data")
    data_path.mkdir(parents=True, exist_ok=True)
    return data_path


def get_exclusions() -> GlobalExclusions:
    """Global exclusion rules from data/settings.json."""
    return exclusions_from_settings(load_settings(get_data_path()))


def require_vault_path(settings: Settings) -> Path:
    """Return the configured vault path or fail the request with 503."""
    vault_path = settings.vault_path
    if not vault_path or not Path(vault_path).exists():
        raise HTTPException(
            status_code=503,
            detail="Vault path not configured or missing. Set SIMPLETASKS_VAULT_PATH.",
        )
    return Path(vault_path)


def get_connector(settings: Settings) -> VaultConnector:
    return VaultConnector(
        require_vault_path(settings),
        include_patterns=settings.include_patterns,
        exclude_patterns=settings.exclude_patterns,
    )


def get_task_view(settings: Settings) -> TaskView:
    """Get the shared task view for the configured vault."""
    vault_path = require_vault_path(settings)
    with _views_lock:
        view = _views.get(vault_path)
        if view is None:
            logger.info("Creating task view for %s", vault_path)
            view = TaskView(
                get_connector(settings),
                exclusions=get_exclusions(),
                max_workers=settings.scan_workers,
                rescan_delay=settings.rescan_delay,
            )
            _views[vault_path] = view
        return view


def reset_task_views() -> None:
    """Drop cached views, cancelling their pending rescans."""
    with _views_lock:
        for view in _views.values():
            view.debouncer.cancel_pending()
        _views.clear()
