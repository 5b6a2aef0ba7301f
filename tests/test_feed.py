"""Tests for feed grouping, sidebar ordering and the summary line."""

from datetime import date

from chronoglobe.feed import chapter_sidebar, group_feed, reverse_chronological, summary_line
from chronoglobe.models import Chapter, Memory

TODAY = date(2024, 6, 15)


def _m(mid, created_at=None, chapter_id=None):
    return Memory(id=mid, chapter_id=chapter_id, created_at=created_at)


class TestReverseChronological:
    def test_newest_first_undated_last(self):
        memories = [
            _m("old", "2020-01-01"),
            _m("undated"),
            _m("new", "2024-06-01T10:00:00Z"),
            _m("mid", "2022-03-03T08:00:00"),
        ]
        assert [m.id for m in reverse_chronological(memories)] == ["new", "mid", "old", "undated"]

    def test_offsets_compare_by_instant(self):
        memories = [
            _m("utc-next-day", "2024-06-02T01:00:00Z"),
            _m("eastern-evening", "2024-06-01T23:00:00-05:00"),
            _m("naive", "2024-06-01T12:00:00"),
        ]
        assert [m.id for m in reverse_chronological(memories)] == [
            "eastern-evening", "utc-next-day", "naive",
        ]


class TestGroupFeed:
    def test_groups_and_labels(self):
        memories = [
            _m("today", "2024-06-15T09:00:00"),
            _m("yesterday", "2024-06-14T20:00:00"),
            _m("week", "2024-06-10T12:00:00"),
            _m("month", "2024-06-03T12:00:00"),
            _m("older", "2023-12-25T12:00:00"),
            _m("undated"),
        ]
        groups = group_feed(memories, TODAY)
        assert [g.label for g in groups] == [
            "Today",
            "Yesterday",
            "Monday 10 Jun",
            "3 June",
            "Monday 25 December 2023",
            "Undated",
        ]
        assert [g.memories[0].id for g in groups] == [
            "today", "yesterday", "week", "month", "older", "undated",
        ]

    def test_same_day_shares_group(self):
        groups = group_feed([_m("a", "2024-06-15T08:00:00"), _m("b", "2024-06-15T18:00:00")], TODAY)
        assert len(groups) == 1
        assert [m.id for m in groups[0].memories] == ["b", "a"]

    def test_empty(self):
        assert group_feed([], TODAY) == []


class TestSidebar:
    def test_sorted_by_start_with_counts(self):
        chapters = [
            Chapter(id="c", title="Undated"),
            Chapter(id="b", title="Later", start_date="2010-01-01"),
            Chapter(id="a", title="Earlier", start_date="1995-05-01", end_date="2000-01-01"),
            Chapter(title="Broken"),
        ]
        memories = [_m("1", chapter_id="a"), _m("2", chapter_id="a"), _m("3", chapter_id="b")]
        entries = chapter_sidebar(chapters, memories, 2024)
        assert [e.chapter.id for e in entries] == ["a", "b", "c"]
        assert [e.memory_count for e in entries] == [2, 1, 0]
        assert [e.badge for e in entries] == ["95", "10", "?"]
        assert entries[0].date_label == "1995 - 2000"


class TestSummary:
    def test_plurals(self):
        assert summary_line(26, 4) == "26 memories across 4 chapters"
        assert summary_line(1, 1) == "1 memory across 1 chapter"
        assert summary_line(0, 2) == "0 memories across 2 chapters"
