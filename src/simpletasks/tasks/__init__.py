"""Task extraction, filtering and write-back."""

from simpletasks.tasks.extractor import DocumentRef, Task, parse_task_line
from simpletasks.tasks.matching import GlobalExclusions
from simpletasks.tasks.pipeline import FilterConfig, apply_filters

__all__ = [
    "DocumentRef",
    "FilterConfig",
    "GlobalExclusions",
    "Task",
    "apply_filters",
    "parse_task_line",
]
