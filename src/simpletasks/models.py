"""Pydantic models for the SimpleTasks API."""

from typing import Annotated, Literal

from pydantic import BaseModel, Field

IsoDate = Annotated[str, Field(pattern=r"^\d{4}-\d{2}-\d{2}$")]


class Note(BaseModel):
    """A parsed note from the vault."""

    path: str
    tags: list[str] = Field(default_factory=list)  # frontmatter + inline, each "#..."
    list_item_lines: list[int] = Field(default_factory=list)  # zero-based, in the raw text


class SegmentResponse(BaseModel):
    """A display fragment of a task's text."""

    kind: Literal["text", "category", "date", "tag"]
    text: str


class TaskResponse(BaseModel):
    """A task from the filtered task view."""

    path: str
    basename: str
    line: int
    text: str
    done: bool
    categories: list[str]
    tags: list[str]
    date: str | None = None
    segments: list[SegmentResponse] = Field(default_factory=list)


class TaskListResponse(BaseModel):
    """The ordered task view plus the categories seen by the last scan."""

    tasks: list[TaskResponse]
    categories: list[str]
    total: int
    failed: list[str] = Field(default_factory=list)


class TaskStatsResponse(BaseModel):
    total: int
    done: int
    undone: int
    dated: int
    undated: int
    overdue: int
    by_category: dict[str, int]


class ViewQueryRequest(BaseModel):
    """Request body carrying a view configuration block."""

    source: str = ""


class ViewQueryResponse(BaseModel):
    title: str | None = None
    views: list[str]
    expanded: bool
    tasks: list[TaskResponse]
    stats: TaskStatsResponse | None = None
    categories: list[str]


class RefreshResponse(BaseModel):
    tasks: int
    categories: int
    documents: int
    failed: list[str]


class ToggleRequest(BaseModel):
    """Request body for checking/unchecking a task."""

    path: str
    line: int = Field(ge=0)


class DateChangeRequest(BaseModel):
    """Request body for moving a task to another date."""

    path: str
    line: int = Field(ge=0)
    date: IsoDate


class ExclusionsPayload(BaseModel):
    """Global exclusion rules, as persisted in settings.json."""

    excluded_folders: list[str] = Field(default_factory=list, alias="excludedFolders")
    excluded_tags: list[str] = Field(default_factory=list, alias="excludedTags")

    model_config = {"populate_by_name": True}


class FolderRequest(BaseModel):
    """One vault folder for the exclusion list."""

    folder: str


class TagsTextRequest(BaseModel):
    """Excluded tags as the settings text area holds them, one per line."""

    text: str


class CategoryCompletionResponse(BaseModel):
    """Completions for an open `==` marker at the cursor."""

    start: int | None = None  # offset of the `==`, None when no marker is open
    query: str = ""
    suggestions: list[str] = Field(default_factory=list)
    inserts: list[str] = Field(default_factory=list)
