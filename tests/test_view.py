"""Tests for TaskView: refresh, filter edits, mutations and rescans."""

from datetime import date
from unittest.mock import patch

import pytest

from simpletasks.tasks.debounce import DebounceState
from simpletasks.tasks.matching import GlobalExclusions
from simpletasks.tasks.pipeline import SortBy
from simpletasks.tasks.suggest import CategoryCache
from simpletasks.tasks.view import TaskView
from simpletasks.tasks.view_config import parse_view_config
from simpletasks.vault.connector import VaultConnector

TODAY = date(2024, 6, 10)


@pytest.fixture
def view(vault, timers):
    return TaskView(VaultConnector(vault), timer_factory=timers)


class TestRefresh:
    def test_not_scanned_until_refresh(self, view):
        assert not view.scanned
        assert view.tasks(today=TODAY) == []

    def test_refresh_fills_tasks_and_cache(self, vault, timers):
        cache = CategoryCache(["Stale"])
        view = TaskView(VaultConnector(vault), category_cache=cache, timer_factory=timers)
        result = view.refresh()

        assert view.scanned
        assert len(result.tasks) == 7
        assert cache.snapshot() == {"Home", "Work"}
        assert view.categories() == ["Home", "Work"]

    def test_ensure_scanned_only_scans_once(self, view):
        first = view.ensure_scanned()
        with patch("simpletasks.tasks.view.scan") as mock_scan:
            assert view.ensure_scanned() is first
        mock_scan.assert_not_called()

    def test_view_folder_rules_apply_at_scan(self, vault, timers):
        config = parse_view_config("exclude-folders: Archive, Notes")
        view = TaskView(VaultConnector(vault), view_config=config, timer_factory=timers)
        view.refresh()
        assert {t.path for t in view.result.tasks} == {"Inbox.md", "Projects/Alpha.md"}

    def test_global_tag_rules_apply_at_scan(self, vault, timers):
        view = TaskView(
            VaultConnector(vault),
            exclusions=GlobalExclusions.build(tags=["#private"]),
            timer_factory=timers,
        )
        view.refresh()
        assert not any("Secret" in t.raw_text for t in view.result.tasks)

    def test_partial_scan_is_logged(self, view, caplog):
        original = view.store.read_text

        def flaky(path):
            if path == "Inbox.md":
                raise OSError("nope")
            return original(path)

        with patch.object(view.store, "read_text", side_effect=flaky):
            result = view.refresh()

        assert result.partial
        assert "1 unreadable documents" in caplog.text


class TestFilterEdits:
    def test_view_block_filters(self, vault, timers):
        config = parse_view_config("status: undone\ndate: next 1 weeks")
        view = TaskView(VaultConnector(vault), view_config=config, timer_factory=timers)
        view.refresh()
        texts = [t.raw_text for t in view.tasks(today=TODAY)]
        assert texts == ["Call plumber ==Home== 2024-06-12", "Kickoff ==work== 2024-06-15"]

    def test_toggle_category(self, view):
        view.refresh()
        assert view.toggle_category("Work") == {"work"}
        assert {t.path for t in view.tasks(today=TODAY)} == {"Inbox.md", "Projects/Alpha.md"}
        assert view.toggle_category("WORK") == frozenset()
        assert len(view.tasks(today=TODAY)) == 7

    def test_clear_categories(self, view):
        view.toggle_category("Home")
        view.toggle_category("Work")
        view.clear_categories()
        assert view.filter_config.categories == frozenset()

    def test_search(self, view):
        view.refresh()
        view.set_search("ROOM")
        assert [t.raw_text for t in view.tasks(today=TODAY)] == [
            "Book room 2024-06-03 2024-06-10"
        ]

    def test_toggle_sort(self, view):
        assert view.toggle_sort() == SortBy.FILE
        assert view.toggle_sort() == SortBy.DATE

    def test_set_exclusions_updates_filter(self, view):
        view.refresh()
        view.set_exclusions(GlobalExclusions.build(folders=["Projects"]))
        assert "Projects/Alpha.md" not in {t.path for t in view.tasks(today=TODAY)}

    def test_stats(self, view):
        view.refresh()
        stats = view.stats(today=TODAY)
        assert stats.total == 7
        assert stats.done == 2
        assert stats.overdue == 1  # Ancient task


class TestMutations:
    def test_find(self, view):
        view.refresh()
        task = view.find("Inbox.md", 4)
        assert task.raw_text.startswith("Draft report")
        assert view.find("Inbox.md", 3) is None

    def test_toggle_schedules_rescan(self, view, timers, vault):
        view.refresh()
        task = view.find("Inbox.md", 1)

        assert view.toggle_status(task) is True
        assert "- [x] Call plumber" in (vault / "Inbox.md").read_text()
        assert view.debouncer.state == DebounceState.PENDING

        timers.last.fire()
        assert view.find("Inbox.md", 1).done is True
        assert view.debouncer.state == DebounceState.IDLE

    def test_change_date_schedules_rescan(self, view, timers):
        view.refresh()
        task = view.find("Inbox.md", 1)
        assert view.change_date(task, "2024-07-04") is True
        timers.last.fire()
        assert view.find("Inbox.md", 1).date == "2024-07-04"

    def test_stale_edit_is_corrected_by_rescan(self, view, timers, vault):
        view.refresh()
        task = view.find("Inbox.md", 1)
        (vault / "Inbox.md").write_text("# Inbox\nnote\n- [ ] Call plumber ==Home== 2024-06-12\n")

        assert view.toggle_status(task) is False
        assert task.done is True
        assert view.debouncer.state == DebounceState.PENDING

        timers.last.fire()
        assert view.find("Inbox.md", 1) is None
        assert view.find("Inbox.md", 2).done is False

    def test_no_rescan_when_disabled(self, vault, timers):
        view = TaskView(VaultConnector(vault), timer_factory=timers, rescan_after_edit=False)
        view.refresh()
        view.toggle_status(view.find("Inbox.md", 1))
        assert timers.timers == []

    def test_external_changes_are_debounced(self, view, timers, vault):
        view.refresh()
        (vault / "New.md").write_text("- [ ] fresh ==Errands==\n")
        view.on_external_change()
        view.on_external_change()

        timers.last.fire()
        assert "Errands" in view.categories()
        assert len(view.result.tasks) == 8
