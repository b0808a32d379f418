"""Write-back of task edits as single-line patches to the owning document."""

from __future__ import annotations

import logging
import re
from datetime import date

from simpletasks.tasks.extractor import DATE_RE, TASK_RE, Task
from simpletasks.tasks.scanner import DocumentStore

logger = logging.getLogger(__name__)

# Checkbox prefix only: indentation, bullet and [marker]
_CHECKBOX_RE = re.compile(r"^(\s*[-*]\s*)\[([ xX])\]")
_ISO_DATE_RE = re.compile(rf"^{DATE_RE.pattern}$")


def toggle_line(line: str, done: bool, done_marker: str = "x") -> str | None:
    """Set the checkbox marker of `line`. Returns None if it is not a checkbox line."""
    match = _CHECKBOX_RE.match(line)
    if not match:
        return None
    marker = done_marker if done else " "
    return f"{match.group(1)}[{marker}]{line[match.end():]}"


def replace_date(line: str, old_date: str, new_date: str) -> str | None:
    """Replace the last date token equal to `old_date`. Returns None if there is none.

    Tokens are found with DATE_RE, so `2024-05-012` never counts as `2024-05-01`.
    """
    spans = [m.span() for m in DATE_RE.finditer(line) if m.group(0) == old_date]
    if not spans:
        return None
    start, end = spans[-1]
    return line[:start] + new_date + line[end:]


def _patch_line(store: DocumentStore, task: Task, patch) -> bool:
    """Re-read the task's document, patch its line and write it back.

    `patch` maps the current line to the new one, or None when the line no
    longer looks like what the task was scanned from.
    """
    content = store.read_text(task.path)
    lines = content.split("\n")
    if task.line_index >= len(lines):
        logger.info("Stale task %s:%d: line no longer exists", task.path, task.line_index)
        return False

    new_line = patch(lines[task.line_index])
    if new_line is None:
        logger.info("Stale task %s:%d: line changed since last scan", task.path, task.line_index)
        return False
    if new_line == lines[task.line_index]:
        return True

    lines[task.line_index] = new_line
    store.write_text(task.path, "\n".join(lines))
    return True


def toggle_status(store: DocumentStore, task: Task) -> bool:
    """Flip a task between done and undone.

    The in-memory task is updated first. Returns False (without writing) when
    the recorded line is no longer a checkbox item; the next scan corrects the
    in-memory state. Store errors propagate.
    """
    task.done = not task.done
    return _patch_line(store, task, lambda line: toggle_line(line, task.done, task.done_marker))


def change_date(store: DocumentStore, task: Task, new_date: str) -> bool:
    """Move a task to `new_date` (YYYY-MM-DD).

    Only the last occurrence of the current date on the line is replaced. A task
    without a date gets the new date appended to its line.
    """
    if not _ISO_DATE_RE.match(new_date):
        raise ValueError(f"Not an ISO date (YYYY-MM-DD): {new_date!r}")
    date.fromisoformat(new_date)  # rejects 2024-13-45

    old_date = task.date
    task.date = new_date

    def _patch(line: str) -> str | None:
        if not TASK_RE.match(line):
            return None
        if old_date is None:
            body = line.rstrip("\r")
            return f"{body.rstrip()} {new_date}{line[len(body):]}"
        return replace_date(line, old_date, new_date)

    return _patch_line(store, task, _patch)
