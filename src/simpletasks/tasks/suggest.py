"""Category cache and the lookups behind category/folder autocomplete."""

from __future__ import annotations

import re
from collections.abc import Iterable

# An unterminated "==partial" right before the cursor
_TRIGGER_RE = re.compile(r"==([^=]*)$")


class CategoryCache:
    """The categories seen by the most recent scan.

    Holds one immutable snapshot; `replace` swaps it wholesale so readers never
    see a half-built set.
    """

    def __init__(self, initial: Iterable[str] = ()) -> None:
        self._snapshot: frozenset[str] = frozenset(initial)

    def snapshot(self) -> frozenset[str]:
        return self._snapshot

    def replace(self, categories: Iterable[str]) -> None:
        self._snapshot = frozenset(categories)

    def __len__(self) -> int:
        return len(self._snapshot)

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        return name.lower() in {c.lower() for c in self._snapshot}


def category_trigger(prefix: str) -> tuple[int, str] | None:
    """Find an open `==` category marker at the end of `prefix`.

    Returns (start offset of the `==`, query typed so far), or None.
    """
    match = _TRIGGER_RE.search(prefix)
    # An odd number of markers before this one means it closes a category.
    if not match or prefix.count("==", 0, match.start()) % 2:
        return None
    return match.start(), match.group(1)


def suggest_categories(categories: Iterable[str], query: str = "") -> list[str]:
    query = query.lower()
    return sorted(c for c in categories if query in c.lower())


def format_category(name: str) -> str:
    """Text inserted when a category suggestion is picked."""
    return f"=={name}== "


def suggest_folders(folders: Iterable[str], query: str = "") -> list[str]:
    query = query.lower()
    return [f for f in folders if f not in ("", "/") and query in f.lower()]
