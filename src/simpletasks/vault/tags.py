"""Document-level tag extraction for Obsidian notes."""

import re
from collections.abc import Iterable

from simpletasks.tasks.extractor import TASK_RE
from simpletasks.tasks.matching import normalize_tag

# Inline #tag, not part of a word, URL fragment or heading marker
_INLINE_TAG_RE = re.compile(r"(?<![\w#/&])#[\w/-]+")

# Match fenced code blocks (```...``` or ~~~...~~~)
_FENCED_CODE_RE = re.compile(r"(```|~~~)[\s\S]*?\1")

# Match inline code (`...`)
_INLINE_CODE_RE = re.compile(r"`[^`\n]+`")

# Split a frontmatter tag string on commas and whitespace
_TAG_SPLIT_RE = re.compile(r"[,\s]+")


def extract_inline_tags(text: str) -> list[str]:
    """Extract document-level #tags from markdown body text.

    Tags inside code and on checkbox task lines are skipped: a task line's tags
    belong to that task, not to the whole document.
    Returns a deduplicated list in first-seen order.
    """
    cleaned = _FENCED_CODE_RE.sub("", text)
    cleaned = _INLINE_CODE_RE.sub("", cleaned)

    tags: list[str] = []
    seen: set[str] = set()
    for line in cleaned.split("\n"):
        if TASK_RE.match(line):
            continue
        for match in _INLINE_TAG_RE.finditer(line):
            tag = match.group(0)
            if tag not in seen:
                seen.add(tag)
                tags.append(tag)
    return tags


def frontmatter_tags(metadata: dict[str, object]) -> list[str]:
    """Read `tags` / `tag` from frontmatter, as a list or a comma/space separated string."""
    raw: list[str] = []
    for key in ("tags", "tag"):
        value = metadata.get(key)
        if isinstance(value, str):
            raw.extend(_TAG_SPLIT_RE.split(value))
        elif isinstance(value, Iterable):
            raw.extend(str(v) for v in value if v is not None)
    return [t for t in (normalize_tag(tag) for tag in raw) if t]
