"""Checkbox task extraction: one markdown line in, one task record (or nothing) out."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import NamedTuple

# - [ ] text / * [x] text, optional indentation
TASK_RE = re.compile(r"^(\s*[-*]\s*)\[([ xX])\]\s*(.*)$")
CATEGORY_RE = re.compile(r"==([^=]+)==")
# Exactly YYYY-MM-DD: a longer digit run such as 2024-05-012 is not a date
DATE_RE = re.compile(r"(?<!\d)\d{4}-\d{2}-\d{2}(?!\d)")
TAG_RE = re.compile(r"#[\w/-]+")

_SEGMENT_RE = re.compile(
    rf"(?P<category>{CATEGORY_RE.pattern})|(?P<date>{DATE_RE.pattern})|(?P<tag>{TAG_RE.pattern})"
)


@dataclass(frozen=True)
class DocumentRef:
    """Handle to the document a task lives in."""

    path: str

    @property
    def basename(self) -> str:
        return PurePosixPath(self.path).stem


@dataclass(frozen=True)
class ParsedLine:
    """The pieces of a checkbox line, before document context is attached."""

    prefix: str  # indentation + bullet, e.g. "  - "
    marker: str  # " ", "x" or "X"
    text: str
    categories: tuple[str, ...]
    tags: tuple[str, ...]
    date: str | None

    @property
    def done(self) -> bool:
        return self.marker in ("x", "X")


@dataclass
class Task:
    """A checkbox line extracted from a document.

    `done` and `date` are updated in place by the mutation engine; everything
    else is fixed until the next scan.
    """

    document: DocumentRef
    line_index: int  # zero-based, valid until the next scan
    raw_text: str
    done: bool
    categories: list[str] = field(default_factory=list)
    tags: frozenset[str] = frozenset()
    date: str | None = None
    done_marker: str = "x"  # marker written back when the task is checked

    @property
    def path(self) -> str:
        return self.document.path


class Segment(NamedTuple):
    kind: str  # "text", "category", "date" or "tag"
    text: str


def extract_categories(text: str) -> list[str]:
    """Trimmed interiors of ==Name== spans, left to right, empty ones dropped."""
    categories = []
    for match in CATEGORY_RE.finditer(text):
        name = match.group(1).strip()
        if name:
            categories.append(name)
    return categories


def extract_date(text: str) -> str | None:
    """The last YYYY-MM-DD substring in `text`, if any."""
    dates = DATE_RE.findall(text)
    return dates[-1] if dates else None


def extract_tags(text: str) -> list[str]:
    return TAG_RE.findall(text)


def parse_task_line(line: str) -> ParsedLine | None:
    """Parse one line. Returns None when the line is not a checkbox item."""
    match = TASK_RE.match(line)
    if not match:
        return None
    prefix, marker, text = match.groups()
    return ParsedLine(
        prefix=prefix,
        marker=marker,
        text=text,
        categories=tuple(extract_categories(text)),
        tags=tuple(extract_tags(text)),
        date=extract_date(text),
    )


def render_segments(text: str) -> list[Segment]:
    """Split task text into display segments.

    Only the last date in the text is the task's date; earlier date-like
    substrings come back as plain text.
    """
    last_date = None
    for last_date in DATE_RE.finditer(text):
        pass
    last_date_start = last_date.start() if last_date else -1

    segments: list[Segment] = []

    def push(kind: str, value: str) -> None:
        if not value:
            return
        if kind == "text" and segments and segments[-1].kind == "text":
            segments[-1] = Segment("text", segments[-1].text + value)
        else:
            segments.append(Segment(kind, value))

    pos = 0
    for match in _SEGMENT_RE.finditer(text):
        push("text", text[pos : match.start()])
        token = match.group(0)
        if match.group("category") is not None:
            name = token[2:-2].strip()
            if name:
                push("category", name)
            else:
                push("text", token)
        elif match.group("date") is not None:
            push("date" if match.start() == last_date_start else "text", token)
        else:
            push("tag", token)
        pos = match.end()
    push("text", text[pos:])
    return segments
