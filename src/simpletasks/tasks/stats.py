"""Counts for the stats view."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date

from simpletasks.tasks.extractor import Task


@dataclass
class TaskStats:
    total: int = 0
    done: int = 0
    undone: int = 0
    dated: int = 0
    undated: int = 0
    overdue: int = 0
    by_category: dict[str, int] = field(default_factory=dict)


def summarize(tasks: Iterable[Task], today: date | None = None) -> TaskStats:
    """Tally tasks by status, date and category.

    A task counts once per category it carries; uncategorized tasks count under "".
    Overdue means undone with a date before today.
    """
    today_str = (today or date.today()).isoformat()
    stats = TaskStats()
    for task in tasks:
        stats.total += 1
        if task.done:
            stats.done += 1
        else:
            stats.undone += 1
        if task.date:
            stats.dated += 1
            if not task.done and task.date < today_str:
                stats.overdue += 1
        else:
            stats.undated += 1
        for category in task.categories or [""]:
            stats.by_category[category] = stats.by_category.get(category, 0) + 1
    return stats
