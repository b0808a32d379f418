"""TaskView: one task list view over the vault.

Owns the latest scan result, the view's filter configuration and the debounced
rescan. Rendering layers read `tasks()` / `categories()` and call the mutation
entry points; they never hold state of their own that the view depends on.
"""

from __future__ import annotations

import dataclasses
import logging
import threading
from datetime import date

from simpletasks.tasks import mutation
from simpletasks.tasks.debounce import RescanDebouncer, TimerFactory
from simpletasks.tasks.extractor import Task
from simpletasks.tasks.matching import GlobalExclusions
from simpletasks.tasks.pipeline import FilterConfig, SortBy, apply_filters
from simpletasks.tasks.scanner import DEFAULT_WORKERS, DocumentStore, ScanResult, scan
from simpletasks.tasks.stats import TaskStats, summarize
from simpletasks.tasks.suggest import CategoryCache
from simpletasks.tasks.view_config import ViewConfig

logger = logging.getLogger(__name__)


class TaskView:
    def __init__(
        self,
        store: DocumentStore,
        exclusions: GlobalExclusions | None = None,
        view_config: ViewConfig | None = None,
        category_cache: CategoryCache | None = None,
        max_workers: int = DEFAULT_WORKERS,
        rescan_delay: float = 1.0,
        timer_factory: TimerFactory | None = None,
        rescan_after_edit: bool = True,
    ) -> None:
        self.store = store
        self.exclusions = exclusions or GlobalExclusions()
        self.view_config = view_config or ViewConfig()
        self.filter_config = self.view_config.filter_config(self.exclusions)
        self.category_cache = category_cache if category_cache is not None else CategoryCache()
        self.max_workers = max_workers
        self.rescan_after_edit = rescan_after_edit

        self._result = ScanResult()
        self._scanned = False
        self._scan_lock = threading.Lock()

        debounce_kwargs = {"timer_factory": timer_factory} if timer_factory else {}
        self.debouncer = RescanDebouncer(self.refresh, delay=rescan_delay, **debounce_kwargs)

    @property
    def result(self) -> ScanResult:
        return self._result

    @property
    def scanned(self) -> bool:
        return self._scanned

    def refresh(self) -> ScanResult:
        """Rescan the vault and swap in the new result.

        Scans run one at a time; a refresh requested during a scan waits for it
        and then scans again, so the view always ends on the newest state.
        """
        with self._scan_lock:
            rules = self.exclusions.merged(
                self.view_config.excluded_tags, self.view_config.excluded_folders
            )
            result = scan(self.store, rules, max_workers=self.max_workers)
            self._result = result
            self.category_cache.replace(result.categories)
            self._scanned = True
        if result.partial:
            logger.warning("Scan finished with %d unreadable documents", len(result.failed))
        return result

    def ensure_scanned(self) -> ScanResult:
        if not self._scanned:
            return self.refresh()
        return self._result

    def on_external_change(self) -> None:
        """A document changed outside this view; rescan once things settle."""
        self.debouncer.on_external_change()

    # --- Reading ---

    def tasks(self, config: FilterConfig | None = None, today: date | None = None) -> list[Task]:
        """The filtered, ordered task list."""
        return apply_filters(self._result.tasks, config or self.filter_config, today)

    def stats(self, config: FilterConfig | None = None, today: date | None = None) -> TaskStats:
        return summarize(self.tasks(config, today), today)

    def categories(self) -> list[str]:
        return sorted(self._result.categories)

    def find(self, path: str, line_index: int) -> Task | None:
        for task in self._result.tasks:
            if task.path == path and task.line_index == line_index:
                return task
        return None

    # --- Filter edits ---

    def update_filter(self, **changes: object) -> FilterConfig:
        self.filter_config = dataclasses.replace(self.filter_config, **changes)
        return self.filter_config

    def set_exclusions(self, exclusions: GlobalExclusions) -> None:
        """Swap the global rules; takes full effect on the next refresh."""
        self.exclusions = exclusions
        config = self.view_config
        merged = exclusions.merged(config.excluded_tags, config.excluded_folders)
        self.update_filter(excluded_tags=merged.tags, excluded_folders=merged.folders)

    def toggle_category(self, name: str) -> frozenset[str]:
        """Add or remove one category from the active filter (chip click)."""
        key = name.strip().lower()
        active = self.filter_config.categories
        active = active - {key} if key in active else active | {key}
        return self.update_filter(categories=active).categories

    def clear_categories(self) -> None:
        self.update_filter(categories=frozenset())

    def set_search(self, term: str) -> None:
        self.update_filter(search=term)

    def toggle_sort(self) -> SortBy:
        sort_by = SortBy.FILE if self.filter_config.sort_by == SortBy.DATE else SortBy.DATE
        return self.update_filter(sort_by=sort_by).sort_by

    # --- Mutations ---

    def toggle_status(self, task: Task) -> bool:
        """Check/uncheck a task in memory and in its document.

        A rescan is scheduled either way; after a stale edit it replaces the
        optimistic in-memory state with what the document holds.
        """
        written = mutation.toggle_status(self.store, task)
        if self.rescan_after_edit:
            self.on_external_change()
        return written

    def change_date(self, task: Task, new_date: str) -> bool:
        """Move a task to another date in memory and in its document."""
        written = mutation.change_date(self.store, task, new_date)
        if self.rescan_after_edit:
            self.on_external_change()
        return written
