"""Filter/sort pipeline over a scanned task list.

`apply_filters` is a pure function of (tasks, FilterConfig, today): calling it
twice with the same arguments gives the same ordered list, and feeding its
output back in changes nothing.
"""

from __future__ import annotations

import calendar
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, timedelta
from enum import StrEnum

from simpletasks.tasks.extractor import Task
from simpletasks.tasks.matching import (
    category_included,
    is_folder_excluded,
    is_tag_excluded,
    normalize_folders,
    normalize_tags,
)


class StatusFilter(StrEnum):
    ALL = "all"
    DONE = "done"
    UNDONE = "undone"


class SortBy(StrEnum):
    DATE = "date"
    FILE = "file"


class DateRangeMode(StrEnum):
    ALL = "all"
    RELATIVE = "relative"
    SPECIFIC = "specific"


class Direction(StrEnum):
    NEXT = "next"
    LAST = "last"


class DateUnit(StrEnum):
    DAYS = "days"
    WEEKS = "weeks"
    MONTHS = "months"
    YEARS = "years"


@dataclass(frozen=True)
class RelativeRange:
    """`next 2 weeks`, `last 3 days`, ..."""

    direction: Direction
    amount: int
    unit: DateUnit

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValueError(f"Relative range amount must be >= 0, got {self.amount}")

    def window(self, today: date) -> tuple[str, str]:
        """Inclusive (start, end) ISO bounds around `today`."""
        if self.direction == Direction.NEXT:
            return today.isoformat(), shift_date(today, self.amount, self.unit).isoformat()
        return shift_date(today, -self.amount, self.unit).isoformat(), today.isoformat()

    def __str__(self) -> str:
        return f"{self.direction} {self.amount} {self.unit}"


@dataclass(frozen=True)
class SpecificRange:
    date_from: str | None = None
    date_to: str | None = None


@dataclass(frozen=True)
class FilterConfig:
    """Everything the pipeline needs to turn a task list into a view.

    Tag and folder rules should already include the global exclusions; use
    `FilterConfig.build` to get them normalized.
    """

    status: StatusFilter = StatusFilter.ALL
    excluded_tags: frozenset[str] = frozenset()
    excluded_folders: frozenset[str] = frozenset()
    categories: frozenset[str] = frozenset()  # lower-cased
    search: str = ""
    date_mode: DateRangeMode = DateRangeMode.ALL
    relative: RelativeRange | None = None
    specific: SpecificRange | None = None
    sort_by: SortBy = SortBy.DATE

    @classmethod
    def build(
        cls,
        status: StatusFilter | str = StatusFilter.ALL,
        excluded_tags: Iterable[str] = (),
        excluded_folders: Iterable[str] = (),
        categories: Iterable[str] = (),
        search: str = "",
        relative: RelativeRange | None = None,
        specific: SpecificRange | None = None,
        sort_by: SortBy | str = SortBy.DATE,
    ) -> FilterConfig:
        if relative is not None:
            mode = DateRangeMode.RELATIVE
        elif specific is not None and (specific.date_from or specific.date_to):
            mode = DateRangeMode.SPECIFIC
        else:
            mode = DateRangeMode.ALL
        return cls(
            status=StatusFilter(status),
            excluded_tags=normalize_tags(excluded_tags),
            excluded_folders=normalize_folders(excluded_folders),
            categories=frozenset(c.strip().lower() for c in categories if c.strip()),
            search=search,
            date_mode=mode,
            relative=relative,
            specific=specific,
            sort_by=SortBy(sort_by),
        )


def shift_date(day: date, amount: int, unit: DateUnit) -> date:
    """Move `day` by `amount` units.

    Month/year steps clamp to the end of the month. Results past the calendar
    range clamp to `date.min` / `date.max`.
    """
    try:
        if unit == DateUnit.DAYS:
            return day + timedelta(days=amount)
        if unit == DateUnit.WEEKS:
            return day + timedelta(weeks=amount)
        months = amount * 12 if unit == DateUnit.YEARS else amount
        month_index = day.year * 12 + (day.month - 1) + months
        year, month = divmod(month_index, 12)
        month += 1
        last_day = calendar.monthrange(year, month)[1]
        return date(year, month, min(day.day, last_day))
    except (OverflowError, ValueError):
        return date.max if amount > 0 else date.min


def _status_matches(task: Task, status: StatusFilter) -> bool:
    if status == StatusFilter.DONE:
        return task.done
    if status == StatusFilter.UNDONE:
        return not task.done
    return True


def _date_in_range(task: Task, config: FilterConfig, today: date) -> bool:
    if config.date_mode == DateRangeMode.RELATIVE and config.relative is not None:
        if not task.date:
            return False
        start, end = config.relative.window(today)
        return start <= task.date <= end

    if config.date_mode == DateRangeMode.SPECIFIC and config.specific is not None:
        date_from, date_to = config.specific.date_from, config.specific.date_to
        if not date_from and not date_to:
            return True
        if not task.date:
            return False
        if date_from and task.date < date_from:
            return False
        return not (date_to and task.date > date_to)

    return True


def matches(task: Task, config: FilterConfig, today: date) -> bool:
    """All filter predicates, cheapest first."""
    if not _status_matches(task, config.status):
        return False
    if is_tag_excluded(task.tags, config.excluded_tags):
        return False
    if is_folder_excluded(task.path, config.excluded_folders):
        return False
    if not category_included(task.categories, config.categories):
        return False
    if not _date_in_range(task, config, today):
        return False
    return not (config.search and config.search.lower() not in task.raw_text.lower())


def sort_tasks(tasks: Iterable[Task], sort_by: SortBy) -> list[Task]:
    """Stable sort. Undated tasks go after dated ones, in their original order."""
    if sort_by == SortBy.FILE:
        return sorted(tasks, key=lambda t: t.path)
    return sorted(tasks, key=lambda t: (t.date is None, t.date or ""))


def apply_filters(
    tasks: Sequence[Task],
    config: FilterConfig,
    today: date | None = None,
) -> list[Task]:
    """Filter and order `tasks` for display."""
    today = today or date.today()
    return sort_tasks((t for t in tasks if matches(t, config, today)), config.sort_by)
