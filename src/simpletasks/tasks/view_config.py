"""Parser for the per-view directive block.

Example block::

    title: This week
    view: list stats
    status: undone
    sort: date
    date: next 1 weeks
    exclude-tags: #archive, someday
    ==Work==

One directive per line; anything unrecognized is ignored.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from simpletasks.tasks.extractor import CATEGORY_RE
from simpletasks.tasks.matching import GlobalExclusions
from simpletasks.tasks.pipeline import (
    DateUnit,
    Direction,
    FilterConfig,
    RelativeRange,
    SortBy,
    SpecificRange,
    StatusFilter,
)

logger = logging.getLogger(__name__)

VIEW_KINDS = ("list", "stats")

_DIRECTIVE_RE = re.compile(r"^\s*([A-Za-z-]+)\s*:\s*(.*?)\s*$")
_RELATIVE_RE = re.compile(r"^(next|last)\s+(\d+)\s+(days|weeks|months|years)$", re.IGNORECASE)
_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_CATEGORY_LINE_RE = re.compile(rf"^\s*{CATEGORY_RE.pattern}\s*$")


@dataclass(frozen=True)
class ViewConfig:
    """A parsed view block."""

    title: str | None = None
    views: tuple[str, ...] = ("list",)
    status: StatusFilter = StatusFilter.ALL
    sort_by: SortBy = SortBy.DATE
    search: str = ""
    excluded_tags: tuple[str, ...] = ()
    excluded_folders: tuple[str, ...] = ()
    expanded: bool = True
    relative: RelativeRange | None = None
    date_from: str | None = None
    date_to: str | None = None
    categories: tuple[str, ...] = ()  # lower-cased

    def filter_config(self, exclusions: GlobalExclusions | None = None) -> FilterConfig:
        """The initial filter configuration of this view, global exclusions included."""
        exclusions = (exclusions or GlobalExclusions()).merged(
            self.excluded_tags, self.excluded_folders
        )
        specific = None
        if self.relative is None and (self.date_from or self.date_to):
            specific = SpecificRange(self.date_from, self.date_to)
        return FilterConfig.build(
            status=self.status,
            excluded_tags=exclusions.tags,
            excluded_folders=exclusions.folders,
            categories=self.categories,
            search=self.search,
            relative=self.relative,
            specific=specific,
            sort_by=self.sort_by,
        )


def _split_list(value: str) -> tuple[str, ...]:
    return tuple(item.strip() for item in value.split(",") if item.strip())


def parse_relative(value: str) -> RelativeRange | None:
    """Parse `next 2 weeks` / `last 10 days`. Returns None if malformed."""
    match = _RELATIVE_RE.match(value.strip())
    if not match:
        return None
    direction, amount, unit = match.groups()
    return RelativeRange(Direction(direction.lower()), int(amount), DateUnit(unit.lower()))


def parse_view_config(source: str) -> ViewConfig:
    """Parse a directive block into a ViewConfig."""
    fields: dict[str, object] = {}
    categories: list[str] = []

    for line in source.split("\n"):
        cat_match = _CATEGORY_LINE_RE.match(line)
        if cat_match:
            name = cat_match.group(1).strip().lower()
            if name and name not in categories:
                categories.append(name)
            continue

        match = _DIRECTIVE_RE.match(line)
        if not match:
            continue
        key, value = match.group(1).lower(), match.group(2)

        if key == "title":
            fields["title"] = value or None
        elif key == "view":
            views = tuple(v for v in value.lower().split() if v in VIEW_KINDS)
            fields["views"] = views or ("list",)
        elif key == "status" and value.lower() in {s.value for s in StatusFilter}:
            fields["status"] = StatusFilter(value.lower())
        elif key == "sort" and value.lower() in {s.value for s in SortBy}:
            fields["sort_by"] = SortBy(value.lower())
        elif key == "search":
            fields["search"] = value
        elif key == "exclude-tags":
            fields["excluded_tags"] = _split_list(value)
        elif key == "exclude-folders":
            fields["excluded_folders"] = _split_list(value)
        elif key == "expanded" and value.lower() in ("true", "false"):
            fields["expanded"] = value.lower() == "true"
        elif key == "date":
            relative = parse_relative(value)
            if relative is None:
                logger.debug("Ignoring malformed date directive: %r", value)
            else:
                fields["relative"] = relative
        elif key in ("from", "to") and _ISO_DATE_RE.match(value):
            fields["date_from" if key == "from" else "date_to"] = value

    return ViewConfig(categories=tuple(categories), **fields)  # type: ignore[arg-type]
