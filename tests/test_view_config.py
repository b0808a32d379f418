"""Tests for the view directive block parser."""

from datetime import date

from simpletasks.tasks.matching import GlobalExclusions
from simpletasks.tasks.pipeline import (
    DateRangeMode,
    DateUnit,
    Direction,
    RelativeRange,
    SortBy,
    StatusFilter,
)
from simpletasks.tasks.view_config import ViewConfig, parse_relative, parse_view_config

FULL_BLOCK = """\
title: This week
view: list stats
status: undone
sort: file
search: report
date: next 2 weeks
exclude-tags: #archive, someday
exclude-folders: Templates, Archive/
expanded: false
==Work==
  ==Home==
"""


class TestParseViewConfig:
    def test_full_block(self):
        config = parse_view_config(FULL_BLOCK)
        assert config.title == "This week"
        assert config.views == ("list", "stats")
        assert config.status == StatusFilter.UNDONE
        assert config.sort_by == SortBy.FILE
        assert config.search == "report"
        assert config.relative == RelativeRange(Direction.NEXT, 2, DateUnit.WEEKS)
        assert config.excluded_tags == ("#archive", "someday")
        assert config.excluded_folders == ("Templates", "Archive/")
        assert config.expanded is False
        assert config.categories == ("work", "home")

    def test_empty_block_gives_defaults(self):
        assert parse_view_config("") == ViewConfig()

    def test_keys_are_case_insensitive(self):
        config = parse_view_config("Status: DONE\nSORT: date")
        assert config.status == StatusFilter.DONE
        assert config.sort_by == SortBy.DATE

    def test_invalid_values_are_ignored(self):
        config = parse_view_config("status: maybe\nsort: priority\nexpanded: sometimes")
        assert config == ViewConfig()

    def test_unknown_view_kinds_dropped(self):
        assert parse_view_config("view: kanban stats").views == ("stats",)
        assert parse_view_config("view: kanban").views == ("list",)

    def test_malformed_date_ignored(self):
        assert parse_view_config("date: soon").relative is None

    def test_specific_dates(self):
        config = parse_view_config("from: 2024-06-01\nto: 2024-06-30\nto: junk")
        assert (config.date_from, config.date_to) == ("2024-06-01", "2024-06-30")

    def test_prose_and_unknown_keys_ignored(self):
        config = parse_view_config("just some words\ncolour: blue\ntitle: Kept")
        assert config == ViewConfig(title="Kept")

    def test_duplicate_categories_collapse(self):
        config = parse_view_config("==Work==\n==work==\n====")
        assert config.categories == ("work",)


class TestParseRelative:
    def test_last_days(self):
        assert parse_relative("last 10 days") == RelativeRange(Direction.LAST, 10, DateUnit.DAYS)

    def test_case_insensitive(self):
        assert parse_relative("NEXT 1 Months") == RelativeRange(
            Direction.NEXT, 1, DateUnit.MONTHS
        )

    def test_malformed(self):
        assert parse_relative("next weeks") is None
        assert parse_relative("next -1 weeks") is None

    def test_str_round_trip(self):
        relative = RelativeRange(Direction.LAST, 3, DateUnit.YEARS)
        assert parse_relative(str(relative)) == relative


class TestFilterConfig:
    def test_global_and_view_rules_merged(self):
        config = parse_view_config("exclude-tags: someday\nexclude-folders: Templates")
        rules = GlobalExclusions.build(tags=["#archive"], folders=["Trash"])
        filters = config.filter_config(rules)
        assert filters.excluded_tags == {"#archive", "#someday"}
        assert filters.excluded_folders == {"trash", "templates"}

    def test_relative_wins_over_specific(self):
        config = parse_view_config("date: last 1 weeks\nfrom: 2020-01-01")
        filters = config.filter_config()
        assert filters.date_mode == DateRangeMode.RELATIVE
        assert filters.relative.window(date(2024, 6, 10)) == ("2024-06-03", "2024-06-10")

    def test_specific_mode(self):
        filters = parse_view_config("to: 2024-01-31").filter_config()
        assert filters.date_mode == DateRangeMode.SPECIFIC
        assert filters.specific.date_to == "2024-01-31"

    def test_no_dates_is_all(self):
        assert parse_view_config("").filter_config().date_mode == DateRangeMode.ALL
