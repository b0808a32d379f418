"""Settings API endpoints for the global exclusion rules."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from simpletasks.api.dependencies import get_connector, get_data_path, get_settings, get_task_view
from simpletasks.config import Settings
from simpletasks.models import ExclusionsPayload, FolderRequest, TagsTextRequest
from simpletasks.settings import (
    add_excluded_folder,
    exclusions_from_settings,
    load_settings,
    parse_excluded_tags,
    remove_excluded_folder,
    save_settings,
)
from simpletasks.tasks.suggest import suggest_folders

router = APIRouter(prefix="/api/v1/settings", tags=["settings"])


async def _apply(
    app_settings: Settings, data_path: Path, settings: dict
) -> ExclusionsPayload:
    """Persist the rules and rescan the vault with them."""
    save_settings(data_path, settings)

    # Rules are saved even when no vault is configured yet
    if app_settings.vault_path and Path(app_settings.vault_path).exists():
        view = get_task_view(app_settings)
        view.set_exclusions(exclusions_from_settings(settings))
        await asyncio.to_thread(view.refresh)
    return ExclusionsPayload.model_validate(settings)


@router.get("/exclusions", response_model=ExclusionsPayload, response_model_by_alias=True)
async def get_exclusions() -> ExclusionsPayload:
    """Return the globally excluded folders and tags."""
    settings = load_settings(get_data_path())
    return ExclusionsPayload.model_validate(settings)


@router.put("/exclusions", response_model=ExclusionsPayload, response_model_by_alias=True)
async def update_exclusions(
    body: ExclusionsPayload,
    app_settings: Annotated[Settings, Depends(get_settings)],
) -> ExclusionsPayload:
    """Replace the exclusion lists and rescan."""
    data_path = get_data_path()
    settings = load_settings(data_path)
    settings["excludedFolders"] = [f.strip() for f in body.excluded_folders if f.strip()]
    settings["excludedTags"] = [t.strip() for t in body.excluded_tags if t.strip()]
    return await _apply(app_settings, data_path, settings)


@router.post(
    "/exclusions/folders", response_model=ExclusionsPayload, response_model_by_alias=True
)
async def add_folder(
    body: FolderRequest,
    app_settings: Annotated[Settings, Depends(get_settings)],
) -> ExclusionsPayload:
    """Add one folder to the exclusion list."""
    data_path = get_data_path()
    settings = load_settings(data_path)
    if not add_excluded_folder(settings, body.folder):
        raise HTTPException(status_code=409, detail="Folder is blank or already excluded")
    return await _apply(app_settings, data_path, settings)


@router.delete(
    "/exclusions/folders", response_model=ExclusionsPayload, response_model_by_alias=True
)
async def remove_folder(
    folder: str,
    app_settings: Annotated[Settings, Depends(get_settings)],
) -> ExclusionsPayload:
    data_path = get_data_path()
    settings = load_settings(data_path)
    if not remove_excluded_folder(settings, folder):
        raise HTTPException(status_code=404, detail=f"Folder not excluded: {folder}")
    return await _apply(app_settings, data_path, settings)


@router.put(
    "/exclusions/tags", response_model=ExclusionsPayload, response_model_by_alias=True
)
async def update_tags_text(
    body: TagsTextRequest,
    app_settings: Annotated[Settings, Depends(get_settings)],
) -> ExclusionsPayload:
    """Replace the excluded tags from one-tag-per-line text."""
    data_path = get_data_path()
    settings = load_settings(data_path)
    settings["excludedTags"] = parse_excluded_tags(body.text)
    return await _apply(app_settings, data_path, settings)


@router.get("/folders")
async def folder_suggestions(
    app_settings: Annotated[Settings, Depends(get_settings)],
    query: str = "",
) -> list[str]:
    """Vault folders matching `query`, for the exclusion picker."""
    connector = get_connector(app_settings)
    return suggest_folders(connector.list_folders(), query)
