"""User-configurable exclusions stored in data/settings.json."""

from __future__ import annotations

import contextlib
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from simpletasks.tasks.matching import GlobalExclusions

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS: dict[str, Any] = {
    "excludedFolders": [],
    "excludedTags": [],
}

_SETTINGS_FILE = "settings.json"


def _defaults() -> dict[str, Any]:
    return {key: list(value) for key, value in DEFAULT_SETTINGS.items()}


def load_settings(data_path: Path) -> dict[str, Any]:
    """Read settings from data_path/settings.json, merged over the defaults.

    Returns the defaults and writes the defaults file if missing or unparseable.
    """
    settings_file = data_path / _SETTINGS_FILE
    if settings_file.exists():
        try:
            with open(settings_file, encoding="utf-8") as f:
                stored = json.load(f)
            if isinstance(stored, dict):
                result = _defaults()
                result.update(stored)
                return result
            logger.warning("Settings file is not a JSON object, returning defaults")
        except (json.JSONDecodeError, OSError):
            logger.warning("Settings file corrupt or unreadable, returning defaults")
    # Write defaults so the file exists for next time
    defaults = _defaults()
    save_settings(data_path, defaults)
    return defaults


def save_settings(data_path: Path, settings: dict[str, Any]) -> None:
    """Write settings to data_path/settings.json using atomic write."""
    data_path.mkdir(parents=True, exist_ok=True)
    settings_file = data_path / _SETTINGS_FILE
    fd, tmp_path = tempfile.mkstemp(dir=str(data_path), suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(settings, f, indent=2)
            f.write("\n")
        os.replace(tmp_path, str(settings_file))
    except BaseException:
        with contextlib.suppress(OSError):
            os.unlink(tmp_path)
        raise


def add_excluded_folder(settings: dict[str, Any], folder: str) -> bool:
    """Append a folder to the exclusion list. Returns False for blanks and duplicates."""
    value = folder.strip()
    folders: list[str] = settings.setdefault("excludedFolders", [])
    if not value or value in folders:
        return False
    folders.append(value)
    return True


def remove_excluded_folder(settings: dict[str, Any], folder: str) -> bool:
    """Drop a folder from the exclusion list. Returns False if it was not there."""
    folders: list[str] = settings.get("excludedFolders", [])
    if folder not in folders:
        return False
    settings["excludedFolders"] = [f for f in folders if f != folder]
    return True


def parse_excluded_tags(text: str) -> list[str]:
    """Parse the one-tag-per-line settings text area."""
    return [line.strip() for line in text.split("\n") if line.strip()]


def exclusions_from_settings(settings: dict[str, Any]) -> GlobalExclusions:
    """Build the global exclusion rules from a settings dict."""
    return GlobalExclusions.build(
        tags=settings.get("excludedTags") or [],
        folders=settings.get("excludedFolders") or [],
    )
