"""Scan aggregator: walks the vault and builds the task list and category set."""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Protocol

from simpletasks.tasks.extractor import DocumentRef, Task, parse_task_line
from simpletasks.tasks.matching import GlobalExclusions, is_folder_excluded, is_tag_excluded
from simpletasks.vault.parser import parse_markdown

logger = logging.getLogger(__name__)

DEFAULT_WORKERS = 8


class DocumentStore(Protocol):
    """What the scanner and the mutation engine need from a document store."""

    def list_documents(self) -> list[str]: ...

    def read_text(self, relative_path: str) -> str: ...

    def write_text(self, relative_path: str, content: str) -> None: ...


@dataclass(frozen=True)
class ScanResult:
    """One complete pass over the vault."""

    tasks: tuple[Task, ...] = ()
    categories: frozenset[str] = frozenset()
    documents: int = 0
    failed: tuple[str, ...] = ()  # documents that could not be read
    scanned_at: float = field(default_factory=time.time)

    @property
    def partial(self) -> bool:
        return bool(self.failed)


@dataclass
class _DocumentScan:
    path: str
    tasks: list[Task] = field(default_factory=list)
    error: bool = False


def merge_categories(names: Sequence[str], into: dict[str, str]) -> None:
    """Fold category names into a lower-case -> display-name map, first spelling wins."""
    for name in names:
        into.setdefault(name.lower(), name)


def scan_text(path: str, text: str, exclusions: GlobalExclusions) -> list[Task]:
    """Extract the tasks of one document that survive the tag exclusion rules."""
    note = parse_markdown(path, text)
    doc_tags = frozenset(note.tags)
    if is_tag_excluded(doc_tags, exclusions.tags):
        logger.debug("Skipping %s: document tags excluded", path)
        return []

    document = DocumentRef(path)
    lines = text.split("\n")
    tasks: list[Task] = []
    for i in note.list_item_lines:
        parsed = parse_task_line(lines[i].rstrip("\r"))
        if parsed is None:
            continue
        tags = doc_tags | frozenset(parsed.tags)
        if is_tag_excluded(tags, exclusions.tags):
            continue
        tasks.append(
            Task(
                document=document,
                line_index=i,
                raw_text=parsed.text,
                done=parsed.done,
                categories=list(parsed.categories),
                tags=tags,
                date=parsed.date,
                done_marker=parsed.marker if parsed.done else "x",
            )
        )
    return tasks


def scan(
    store: DocumentStore,
    exclusions: GlobalExclusions | None = None,
    max_workers: int = DEFAULT_WORKERS,
) -> ScanResult:
    """Scan every document in the store.

    Documents are read concurrently, but the result keeps document order and
    line order. A document that fails to read is logged, recorded in
    `ScanResult.failed` and skipped. Other errors propagate.
    """
    exclusions = exclusions or GlobalExclusions()
    start = time.time()

    paths = [p for p in store.list_documents() if not is_folder_excluded(p, exclusions.folders)]

    def _scan_one(path: str) -> _DocumentScan:
        try:
            text = store.read_text(path)
            return _DocumentScan(path, scan_text(path, text, exclusions))
        except (OSError, UnicodeDecodeError):
            logger.warning("Failed to read document: %s", path, exc_info=True)
            return _DocumentScan(path, error=True)

    if paths:
        with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(paths)))) as pool:
            results = list(pool.map(_scan_one, paths))
    else:
        results = []

    tasks: list[Task] = []
    categories: dict[str, str] = {}
    failed: list[str] = []
    for result in results:
        if result.error:
            failed.append(result.path)
            continue
        for task in result.tasks:
            tasks.append(task)
            merge_categories(task.categories, categories)

    elapsed = int((time.time() - start) * 1000)
    logger.info(
        "Scanned %d documents: %d tasks, %d categories, %d failed (%dms)",
        len(paths),
        len(tasks),
        len(categories),
        len(failed),
        elapsed,
    )
    return ScanResult(
        tasks=tuple(tasks),
        categories=frozenset(categories.values()),
        documents=len(paths),
        failed=tuple(failed),
    )
