"""Tag, folder and category predicates shared by the scanner and the filter pipeline."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass


def normalize_tag(tag: str) -> str:
    """Trim a tag and make sure it starts with a single '#'."""
    tag = tag.strip()
    if not tag:
        return ""
    return tag if tag.startswith("#") else f"#{tag}"


def normalize_tags(tags: Iterable[str]) -> frozenset[str]:
    return frozenset(t for t in (normalize_tag(tag) for tag in tags) if t)


def normalize_folder(folder: str) -> str:
    """Lower-case a folder rule and strip surrounding slashes."""
    return folder.strip().strip("/").lower()


def normalize_folders(folders: Iterable[str]) -> frozenset[str]:
    return frozenset(f for f in (normalize_folder(folder) for folder in folders) if f)


def tag_matches_rule(tag: str, rule: str) -> bool:
    """True if `tag` equals `rule` or is nested below it (`#rule/child`)."""
    tag = normalize_tag(tag)
    rule = normalize_tag(rule)
    if not tag or not rule:
        return False
    return tag == rule or tag.startswith(rule + "/")


def is_tag_excluded(tags: Iterable[str], rules: Iterable[str]) -> bool:
    """True if any of `tags` matches any exclusion rule."""
    rules = [r for r in rules if r]
    if not rules:
        return False
    return any(tag_matches_rule(tag, rule) for tag in tags for rule in rules)


def is_folder_excluded(path: str, rules: Iterable[str]) -> bool:
    """True if `path` is a folder rule itself or lives below one (case-insensitive)."""
    path = path.strip("/").lower()
    for rule in rules:
        rule = normalize_folder(rule)
        if rule and (path == rule or path.startswith(rule + "/")):
            return True
    return False


def category_included(categories: Iterable[str], wanted: Iterable[str]) -> bool:
    """True if no category filter is active or a task category is in the filter set."""
    wanted = frozenset(wanted)
    if not wanted:
        return True
    return any(c.lower() in wanted for c in categories)


@dataclass(frozen=True)
class GlobalExclusions:
    """Exclusion rules that apply to every view (from the persisted settings)."""

    tags: frozenset[str] = frozenset()
    folders: frozenset[str] = frozenset()

    @classmethod
    def build(cls, tags: Iterable[str] = (), folders: Iterable[str] = ()) -> GlobalExclusions:
        return cls(tags=normalize_tags(tags), folders=normalize_folders(folders))

    def merged(self, tags: Iterable[str] = (), folders: Iterable[str] = ()) -> GlobalExclusions:
        """Union these rules with per-view rules."""
        return GlobalExclusions(
            tags=self.tags | normalize_tags(tags),
            folders=self.folders | normalize_folders(folders),
        )
