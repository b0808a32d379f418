"""Tests for the scan aggregator."""

from unittest.mock import patch

import pytest

from simpletasks.tasks.matching import GlobalExclusions
from simpletasks.tasks.scanner import scan, scan_text
from simpletasks.vault.connector import VaultConnector
from tests.conftest import write_vault


def _locations(result):
    return [(t.path, t.line_index) for t in result.tasks]


class TestScan:
    def test_empty_vault(self, tmp_path):
        result = scan(VaultConnector(tmp_path))
        assert result.tasks == ()
        assert result.categories == frozenset()
        assert result.documents == 0
        assert not result.partial

    def test_scan_order_is_document_then_line(self, vault):
        result = scan(VaultConnector(vault), max_workers=4)
        assert _locations(result) == [
            ("Archive/Old.md", 0),
            ("Inbox.md", 1),
            ("Inbox.md", 2),
            ("Inbox.md", 4),
            ("Notes/Private/diary.md", 0),
            ("Projects/Alpha.md", 4),
            ("Projects/Alpha.md", 5),
        ]

    def test_task_fields(self, vault):
        result = scan(VaultConnector(vault))
        rent = next(t for t in result.tasks if "rent" in t.raw_text)
        assert rent.done is True
        assert rent.categories == ["Home"]
        assert rent.tags == {"#bills"}
        assert rent.date == "2024-06-01"
        assert rent.document.basename == "Inbox"

    def test_document_tags_are_inherited(self, vault):
        result = scan(VaultConnector(vault))
        kickoff = next(t for t in result.tasks if "Kickoff" in t.raw_text)
        assert kickoff.tags == {"#project"}

    def test_done_marker_remembered(self, vault):
        result = scan(VaultConnector(vault))
        room = next(t for t in result.tasks if "Book room" in t.raw_text)
        assert room.done_marker == "X"
        assert room.date == "2024-06-10"

    def test_categories_case_insensitive_first_spelling(self, vault):
        result = scan(VaultConnector(vault))
        assert result.categories == {"Home", "Work"}

    def test_global_folder_exclusion(self, vault):
        rules = GlobalExclusions.build(folders=["archive", "Notes/Private"])
        result = scan(VaultConnector(vault), rules)
        paths = {t.path for t in result.tasks}
        assert paths == {"Inbox.md", "Projects/Alpha.md"}
        assert result.documents == 2

    def test_tag_exclusion_drops_tasks_and_documents(self, vault):
        rules = GlobalExclusions.build(tags=["#project"])
        result = scan(VaultConnector(vault), rules)
        texts = [t.raw_text for t in result.tasks]
        assert not any("Kickoff" in t or "Book room" in t for t in texts)
        assert not any("Draft report" in t for t in texts)  # #project/alpha is a child
        assert any("Call plumber" in t for t in texts)

    def test_excluded_tasks_do_not_contribute_categories(self, tmp_path):
        write_vault(tmp_path, {"a.md": "- [ ] hidden ==Secret== #hide\n- [ ] shown ==Open==\n"})
        result = scan(VaultConnector(tmp_path), GlobalExclusions.build(tags=["hide"]))
        assert result.categories == {"Open"}

    def test_unreadable_document_is_skipped(self, vault):
        connector = VaultConnector(vault)
        original = connector.read_text

        def flaky(path):
            if path == "Inbox.md":
                raise OSError("disk on fire")
            return original(path)

        with patch.object(connector, "read_text", side_effect=flaky):
            result = scan(connector)

        assert result.failed == ("Inbox.md",)
        assert result.partial
        assert "Inbox.md" not in {t.path for t in result.tasks}
        assert len(result.tasks) == 4

    def test_undecodable_document_is_skipped(self, tmp_path):
        write_vault(tmp_path, {"good.md": "- [ ] fine\n"})
        (tmp_path / "bad.md").write_bytes(b"\xff\xfe- [ ] broken\n")
        result = scan(VaultConnector(tmp_path))
        assert result.failed == ("bad.md",)
        assert [t.raw_text for t in result.tasks] == ["fine"]

    def test_programming_errors_propagate(self, vault):
        with (
            patch("simpletasks.tasks.scanner.scan_text", side_effect=TypeError("bug")),
            pytest.raises(TypeError),
        ):
            scan(VaultConnector(vault))


class TestScanText:
    def test_code_blocks_and_frontmatter_ignored(self):
        text = "---\ntitle: x\n---\n```\n- [ ] sample\n```\n- [ ] real\n"
        tasks = scan_text("a.md", text, GlobalExclusions())
        assert [t.line_index for t in tasks] == [6]

    def test_crlf_line_keeps_text(self):
        tasks = scan_text("a.md", "- [ ] windows 2024-01-02\r\n", GlobalExclusions())
        assert tasks[0].date == "2024-01-02"
        assert tasks[0].raw_text == "windows 2024-01-02"

    def test_impossible_frontmatter_timestamp_keeps_tasks(self, tmp_path):
        write_vault(tmp_path, {"a.md": "---\ndue: 2024-02-30\n---\n- [ ] pay rent 2024-03-01\n"})
        result = scan(VaultConnector(tmp_path))
        assert result.failed == ()
        assert [t.raw_text for t in result.tasks] == ["pay rent 2024-03-01"]
