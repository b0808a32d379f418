"""Task view API endpoints."""

import asyncio
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query

from simpletasks.api.dependencies import get_settings, get_task_view
from simpletasks.config import Settings
from simpletasks.models import (
    CategoryCompletionResponse,
    DateChangeRequest,
    RefreshResponse,
    SegmentResponse,
    TaskListResponse,
    TaskResponse,
    TaskStatsResponse,
    ToggleRequest,
    ViewQueryRequest,
    ViewQueryResponse,
)
from simpletasks.tasks.extractor import Task, render_segments
from simpletasks.tasks.pipeline import FilterConfig, SortBy, SpecificRange, StatusFilter
from simpletasks.tasks.stats import TaskStats
from simpletasks.tasks.suggest import category_trigger, format_category, suggest_categories
from simpletasks.tasks.view import TaskView
from simpletasks.tasks.view_config import parse_relative, parse_view_config

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["tasks"])

_ISO_DATE = r"^\d{4}-\d{2}-\d{2}$"


def to_response(task: Task) -> TaskResponse:
    return TaskResponse(
        path=task.path,
        basename=task.document.basename,
        line=task.line_index,
        text=task.raw_text,
        done=task.done,
        categories=list(task.categories),
        tags=sorted(task.tags),
        date=task.date,
        segments=[
            SegmentResponse(kind=s.kind, text=s.text) for s in render_segments(task.raw_text)
        ],
    )


def _stats_response(stats: TaskStats) -> TaskStatsResponse:
    return TaskStatsResponse(
        total=stats.total,
        done=stats.done,
        undone=stats.undone,
        dated=stats.dated,
        undated=stats.undated,
        overdue=stats.overdue,
        by_category=stats.by_category,
    )


async def _scanned_view(settings: Settings) -> TaskView:
    """Get the task view, scanning the vault on first use."""
    view = get_task_view(settings)
    if not view.scanned:
        await asyncio.to_thread(view.ensure_scanned)
    return view


def _find_task(view: TaskView, path: str, line: int) -> Task:
    task = view.find(path, line)
    if task is None:
        raise HTTPException(status_code=404, detail=f"No task at {path}:{line}")
    return task


@router.get("/tasks", response_model=TaskListResponse)
async def list_tasks(
    settings: Annotated[Settings, Depends(get_settings)],
    status: StatusFilter = StatusFilter.ALL,
    sort: SortBy = SortBy.DATE,
    search: str = "",
    category: Annotated[list[str], Query()] = [],  # noqa: B006
    exclude_tag: Annotated[list[str], Query()] = [],  # noqa: B006
    exclude_folder: Annotated[list[str], Query()] = [],  # noqa: B006
    date: str | None = None,
    date_from: Annotated[str | None, Query(alias="from", pattern=_ISO_DATE)] = None,
    date_to: Annotated[str | None, Query(alias="to", pattern=_ISO_DATE)] = None,
) -> TaskListResponse:
    """List tasks with optional filters; `date` takes a relative range like "next 1 weeks"."""
    view = await _scanned_view(settings)

    relative = None
    if date:
        relative = parse_relative(date)
        if relative is None:
            raise HTTPException(
                status_code=422,
                detail="date must look like '<next|last> <n> <days|weeks|months|years>'",
            )

    rules = view.exclusions.merged(exclude_tag, exclude_folder)
    config = FilterConfig.build(
        status=status,
        excluded_tags=rules.tags,
        excluded_folders=rules.folders,
        categories=category,
        search=search,
        relative=relative,
        specific=SpecificRange(date_from, date_to),
        sort_by=sort,
    )
    tasks = view.tasks(config)
    return TaskListResponse(
        tasks=[to_response(t) for t in tasks],
        categories=view.categories(),
        total=len(tasks),
        failed=list(view.result.failed),
    )


@router.post("/tasks/query", response_model=ViewQueryResponse)
async def query_view(
    req: ViewQueryRequest,
    settings: Annotated[Settings, Depends(get_settings)],
) -> ViewQueryResponse:
    """Render a view block: its task list and, if asked for, its stats."""
    view = await _scanned_view(settings)
    view_config = parse_view_config(req.source)
    tasks = view.tasks(view_config.filter_config(view.exclusions))

    stats = None
    if "stats" in view_config.views:
        stats = _stats_response(view.stats(view_config.filter_config(view.exclusions)))

    return ViewQueryResponse(
        title=view_config.title,
        views=list(view_config.views),
        expanded=view_config.expanded,
        tasks=[to_response(t) for t in tasks] if "list" in view_config.views else [],
        stats=stats,
        categories=view.categories(),
    )


@router.post("/tasks/refresh", response_model=RefreshResponse)
async def refresh_tasks(
    settings: Annotated[Settings, Depends(get_settings)],
) -> RefreshResponse:
    """Rescan the vault now."""
    view = get_task_view(settings)
    view.debouncer.cancel_pending()
    result = await asyncio.to_thread(view.refresh)
    return RefreshResponse(
        tasks=len(result.tasks),
        categories=len(result.categories),
        documents=result.documents,
        failed=list(result.failed),
    )


@router.post("/tasks/changed", status_code=202)
async def vault_changed(
    settings: Annotated[Settings, Depends(get_settings)],
) -> dict[str, str]:
    """Notify the view that vault files changed; a rescan follows once changes settle."""
    view = get_task_view(settings)
    view.on_external_change()
    return {"status": "scheduled"}


@router.patch("/tasks/toggle", response_model=TaskResponse)
async def toggle_task(
    req: ToggleRequest,
    settings: Annotated[Settings, Depends(get_settings)],
) -> TaskResponse:
    """Check or uncheck a task."""
    view = await _scanned_view(settings)
    task = _find_task(view, req.path, req.line)
    written = await asyncio.to_thread(view.toggle_status, task)
    if not written:
        raise HTTPException(status_code=409, detail="Task line changed since last scan")
    return to_response(task)


@router.patch("/tasks/date", response_model=TaskResponse)
async def change_task_date(
    req: DateChangeRequest,
    settings: Annotated[Settings, Depends(get_settings)],
) -> TaskResponse:
    """Move a task to another date."""
    view = await _scanned_view(settings)
    task = _find_task(view, req.path, req.line)
    try:
        written = await asyncio.to_thread(view.change_date, task, req.date)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    if not written:
        raise HTTPException(status_code=409, detail="Task line changed since last scan")
    return to_response(task)


@router.get("/tasks/categories")
async def task_categories(
    settings: Annotated[Settings, Depends(get_settings)],
    query: str = "",
) -> list[str]:
    """Category suggestions from the last scan."""
    view = await _scanned_view(settings)
    return suggest_categories(view.category_cache.snapshot(), query)


@router.get("/tasks/categories/complete", response_model=CategoryCompletionResponse)
async def complete_category(
    settings: Annotated[Settings, Depends(get_settings)],
    text: str = "",
) -> CategoryCompletionResponse:
    """Complete an open `==` marker at the end of `text` (the line up to the cursor)."""
    view = await _scanned_view(settings)
    trigger = category_trigger(text)
    if trigger is None:
        return CategoryCompletionResponse()
    start, query = trigger
    names = suggest_categories(view.category_cache.snapshot(), query)
    return CategoryCompletionResponse(
        start=start,
        query=query,
        suggestions=names,
        inserts=[format_category(n) for n in names],
    )


@router.get("/tasks/stats", response_model=TaskStatsResponse)
async def task_stats(
    settings: Annotated[Settings, Depends(get_settings)],
) -> TaskStatsResponse:
    """Counts over the default view."""
    view = await _scanned_view(settings)
    return _stats_response(view.stats())
