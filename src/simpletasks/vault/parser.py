"""Markdown parser for Obsidian notes."""

import logging
import re

import frontmatter
import yaml

from simpletasks.models import Note
from simpletasks.tasks.matching import normalize_tag
from simpletasks.vault.tags import extract_inline_tags, frontmatter_tags

# Bullet or ordered list item; "-[ ]" counts too
_LIST_ITEM_RE = re.compile(r"^\s*(?:[-*+]|\d+[.)])(?=\s|\[)")
_FENCE_RE = re.compile(r"^\s*(```|~~~)")

logger = logging.getLogger(__name__)


def parse_markdown(path: str, content: str) -> Note:
    """Parse a markdown file with frontmatter.

    Args:
        path: The file path (used in log messages).
        content: The raw markdown content.

    Returns:
        A Note with document tags and list item positions.
    """
    # PyYAML raises ValueError for timestamps it cannot build, e.g. 2024-02-30
    try:
        post = frontmatter.loads(content)
    except (yaml.YAMLError, ValueError):
        logger.debug("Unparseable frontmatter in %s, reading as plain text", path)
        post = frontmatter.Post(content)
    metadata = dict(post.metadata)

    tags: list[str] = []
    for tag in frontmatter_tags(metadata) + extract_inline_tags(post.content):
        tag = normalize_tag(tag)
        if tag not in tags:
            tags.append(tag)

    return Note(
        path=path,
        tags=tags,
        list_item_lines=_list_item_lines(content),
    )


def _frontmatter_end(lines: list[str]) -> int:
    """Index of the first line after a leading --- frontmatter block (0 if none)."""
    if not lines or lines[0].strip() != "---":
        return 0
    for i in range(1, len(lines)):
        if lines[i].strip() in ("---", "..."):
            return i + 1
    return 0


def _list_item_lines(content: str) -> list[int]:
    """Zero-based positions of list items in the raw text, skipping frontmatter and code."""
    lines = content.split("\n")
    start = _frontmatter_end(lines)
    positions: list[int] = []
    in_fence: str | None = None

    for i in range(start, len(lines)):
        line = lines[i]
        fence = _FENCE_RE.match(line)
        if fence:
            if in_fence is None:
                in_fence = fence.group(1)
            elif fence.group(1) == in_fence:
                in_fence = None
            continue
        if in_fence is None and _LIST_ITEM_RE.match(line):
            positions.append(i)

    return positions
