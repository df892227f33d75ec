"""
Tests for the pure statistics engine (no DB, no HTTP).

Every call injects a fixed `now` so windows and rollups are deterministic:
NOW is Thursday 2024-03-14 15:00 UTC (11:00 EDT in New York).
"""
from __future__ import annotations

import json
import random
from datetime import datetime, timedelta, timezone

import pytest

from shelfstats.core.errors import InvalidTimeRangeError, InvalidTimezoneError
from shelfstats.services.activity import build_daily_activity, build_daily_activity_by_book
from shelfstats.services.stats_engine import (
    DEFAULT_ACTIVITY_DAYS,
    calculate_stats,
    get_chart_data,
)
from shelfstats.services.stats_types import CompletedBook, ProgressEvent

NOW = datetime(2024, 3, 14, 15, 0, tzinfo=timezone.utc)
NY = "America/New_York"


def _event(pages, recorded_at, book="book-a", title="Dune", event_id=None):
    return ProgressEvent(
        id=event_id or f"ev-{book}-{recorded_at}",
        user_book_id=book,
        book_title=title,
        pages_read=pages,
        recorded_at=recorded_at,
    )


def _ago(**kwargs) -> datetime:
    return NOW - timedelta(**kwargs)


# ---------------------------------------------------------------------------
# Empty input
# ---------------------------------------------------------------------------

class TestEmptyInput:
    def test_zero_valued_stats(self):
        stats = calculate_stats([], [], now=NOW)
        assert stats.total_pages_read == 0
        assert stats.total_books_completed == 0
        assert stats.pages_this_week == 0
        assert stats.pages_this_month == 0
        assert stats.current_streak == 0
        assert stats.longest_streak == 0
        assert stats.reading_days == []
        assert stats.book_metadata == {}
        assert stats.completed_books == []

    def test_window_still_full_length(self):
        stats = calculate_stats([], [], now=NOW)
        assert len(stats.daily_activity) == DEFAULT_ACTIVITY_DAYS
        assert all(day.pages == 0 for day in stats.daily_activity)
        assert len(stats.daily_activity_by_book) == DEFAULT_ACTIVITY_DAYS
        assert all(day.books == {} for day in stats.daily_activity_by_book)


# ---------------------------------------------------------------------------
# Daily activity windows
# ---------------------------------------------------------------------------

class TestDailyActivity:
    def test_window_ends_today_oldest_first(self):
        activity = build_daily_activity([], days=30, now=NOW)
        assert activity[0].date == "2024-02-14"
        assert activity[-1].date == "2024-03-14"
        dates = [d.date for d in activity]
        assert dates == sorted(dates)
        assert len(set(dates)) == 30

    @pytest.mark.parametrize("days", [1, 7, 30, 90])
    def test_window_length(self, days):
        events = [_event(5, _ago(days=i)) for i in range(0, 200, 3)]
        assert len(build_daily_activity(events, days=days, now=NOW)) == days
        by_book, _ = build_daily_activity_by_book(events, days=days, now=NOW)
        assert len(by_book) == days

    def test_zero_days_window(self):
        assert build_daily_activity([_event(5, NOW)], days=0, now=NOW) == []

    def test_negative_days_rejected(self):
        with pytest.raises(ValueError):
            build_daily_activity([], days=-1, now=NOW)

    def test_same_day_events_summed(self):
        events = [
            _event(10, _ago(hours=1)),
            _event(15, _ago(hours=2), book="book-b", title="Emma"),
            _event(5, _ago(hours=3)),
        ]
        activity = build_daily_activity(events, days=7, now=NOW)
        assert activity[-1].pages == 30

    def test_events_outside_window_ignored(self):
        activity = build_daily_activity([_event(99, _ago(days=45))], days=30, now=NOW)
        assert sum(d.pages for d in activity) == 0

    def test_zone_moves_event_to_previous_day(self):
        # 02:00 UTC on the 14th is 22:00 EDT on the 13th
        events = [_event(30, datetime(2024, 3, 14, 2, 0, tzinfo=timezone.utc))]

        utc_activity = build_daily_activity(events, days=3, now=NOW)
        assert [(d.date, d.pages) for d in utc_activity] == [
            ("2024-03-12", 0), ("2024-03-13", 0), ("2024-03-14", 30),
        ]

        ny_activity = build_daily_activity(events, days=3, timezone=NY, now=NOW)
        assert [(d.date, d.pages) for d in ny_activity] == [
            ("2024-03-12", 0), ("2024-03-13", 30), ("2024-03-14", 0),
        ]

    def test_window_across_dst_has_no_gaps_or_repeats(self):
        now = datetime(2024, 3, 12, 12, 0, tzinfo=timezone.utc)
        dates = [d.date for d in build_daily_activity([], days=4, timezone=NY, now=now)]
        assert dates == ["2024-03-09", "2024-03-10", "2024-03-11", "2024-03-12"]


class TestDailyActivityByBook:
    def test_each_book_attributed_independently(self):
        events = [
            _event(10, _ago(hours=1), book="book-a", title="Dune"),
            _event(4, _ago(hours=2), book="book-a", title="Dune"),
            _event(7, _ago(hours=3), book="book-b", title="Emma"),
        ]
        by_book, meta = build_daily_activity_by_book(events, days=2, now=NOW)
        assert by_book[-1].books == {"book-a": 14, "book-b": 7}
        assert by_book[0].books == {"book-a": 0, "book-b": 0}
        assert set(meta) == {"book-a", "book-b"}

    def test_books_from_full_history_zero_filled(self):
        events = [
            _event(10, _ago(hours=1), book="book-a", title="Dune"),
            _event(50, _ago(days=60), book="book-old", title="Old Book"),
        ]
        by_book, meta = build_daily_activity_by_book(events, days=30, now=NOW)
        assert meta["book-old"].title == "Old Book"
        for day in by_book:
            assert set(day.books) == set(meta)
            assert day.books["book-old"] == 0

    def test_title_from_most_recent_event(self):
        events = [
            _event(5, _ago(days=1), title="Dune (2nd ed.)"),
            _event(5, _ago(days=9), title="Dune"),
        ]
        _, meta = build_daily_activity_by_book(events, days=7, now=NOW)
        assert meta["book-a"].title == "Dune (2nd ed.)"
        _, meta_reversed = build_daily_activity_by_book(list(reversed(events)), days=7, now=NOW)
        assert meta_reversed["book-a"].title == "Dune (2nd ed.)"


# ---------------------------------------------------------------------------
# Rollups
# ---------------------------------------------------------------------------

class TestRollups:
    def test_rolling_thirty_day_month(self):
        events = [_event(50, _ago(days=3)), _event(10, _ago(days=40))]
        stats = calculate_stats(events, [], now=NOW)
        assert stats.pages_this_month == 50
        assert stats.total_pages_read == 60

    def test_month_window_is_not_calendar_month(self):
        # 2024-02-20 is in February but within the last 30 days
        stats = calculate_stats([_event(12, datetime(2024, 2, 20, tzinfo=timezone.utc))], [], now=NOW)
        assert stats.pages_this_month == 12

    def test_week_start_monday_vs_sunday(self):
        events = [
            _event(20, datetime(2024, 3, 11, 1, 0, tzinfo=timezone.utc)),   # Monday
            _event(5, datetime(2024, 3, 10, 23, 0, tzinfo=timezone.utc)),   # Sunday
            _event(100, datetime(2024, 3, 9, 12, 0, tzinfo=timezone.utc)),  # Saturday
        ]
        assert calculate_stats(events, [], week_start_day="monday", now=NOW).pages_this_week == 20
        assert calculate_stats(events, [], week_start_day="sunday", now=NOW).pages_this_week == 25

    def test_default_week_start_is_monday(self):
        events = [_event(5, datetime(2024, 3, 10, 23, 0, tzinfo=timezone.utc))]
        assert calculate_stats(events, [], now=NOW).pages_this_week == 0

    def test_week_boundary_follows_zone(self):
        # 2024-03-11 02:00 UTC is Sunday 22:00 EDT: before a Monday week start in NY
        events = [_event(8, datetime(2024, 3, 11, 2, 0, tzinfo=timezone.utc))]
        assert calculate_stats(events, [], now=NOW).pages_this_week == 8
        assert calculate_stats(events, [], timezone=NY, now=NOW).pages_this_week == 0


# ---------------------------------------------------------------------------
# Whole-aggregation properties
# ---------------------------------------------------------------------------

class TestAggregateProperties:
    def _history(self):
        events = []
        for i in range(60):
            events.append(_event(i % 7, _ago(days=i, hours=i % 5), book=f"book-{i % 3}",
                                 title=f"Book {i % 3}", event_id=f"ev-{i}"))
        # duplicate timestamps
        events.append(_event(9, _ago(days=2), event_id="dup-1"))
        events.append(_event(9, _ago(days=2), event_id="dup-2"))
        return events

    def test_conservation_regardless_of_order(self):
        events = self._history()
        expected = sum(e.pages_read for e in events)
        shuffled = events[:]
        random.Random(7).shuffle(shuffled)
        assert calculate_stats(events, [], now=NOW).total_pages_read == expected
        assert calculate_stats(shuffled, [], now=NOW).total_pages_read == expected

    def test_idempotent_output(self):
        events = self._history()
        first = json.dumps(calculate_stats(events, [], timezone=NY, now=NOW).to_dict(), sort_keys=True)
        second = json.dumps(calculate_stats(events, [], timezone=NY, now=NOW).to_dict(), sort_keys=True)
        assert first == second

    def test_order_independent_output(self):
        events = self._history()
        shuffled = events[:]
        random.Random(3).shuffle(shuffled)
        assert (calculate_stats(events, [], now=NOW).to_dict()
                == calculate_stats(shuffled, [], now=NOW).to_dict())

    def test_inputs_not_mutated(self):
        events = self._history()
        snapshot = list(events)
        calculate_stats(events, [], now=NOW)
        assert events == snapshot

    def test_zero_fill_for_every_day_and_book(self):
        stats = calculate_stats(self._history(), [], now=NOW)
        for day in stats.daily_activity_by_book:
            for book_id in stats.book_metadata:
                assert book_id in day.books

    def test_output_is_json_serializable(self):
        completed = [CompletedBook(id="b1", title="Dune", completed_at=_ago(days=1))]
        payload = calculate_stats(self._history(), completed, now=NOW).to_dict()
        json.dumps(payload)
        assert isinstance(payload["book_metadata"]["book-0"], dict)


# ---------------------------------------------------------------------------
# Reading days and streaks
# ---------------------------------------------------------------------------

class TestReadingDaysAndStreaks:
    def test_zero_page_events_are_not_reading_days(self):
        events = [_event(0, _ago(hours=1)), _event(12, _ago(days=1))]
        stats = calculate_stats(events, [], now=NOW)
        assert stats.reading_days == ["2024-03-13"]
        assert stats.current_streak == 1

    def test_reading_days_cover_all_history(self):
        events = [_event(5, _ago(days=400)), _event(5, _ago(days=1))]
        stats = calculate_stats(events, [], now=NOW)
        assert _ago(days=400).date().isoformat() in stats.reading_days
        assert len(stats.reading_days) == 2

    def test_streaks_from_events(self):
        events = [
            _event(5, datetime(2024, 3, 12, 9, tzinfo=timezone.utc)),
            _event(5, datetime(2024, 3, 13, 9, tzinfo=timezone.utc)),
            _event(5, datetime(2024, 3, 14, 9, tzinfo=timezone.utc)),
            _event(5, datetime(2024, 3, 1, 9, tzinfo=timezone.utc)),
        ]
        stats = calculate_stats(events, [], now=NOW)
        assert stats.current_streak == 3
        assert stats.longest_streak == 3

    def test_streak_uses_zone_days(self):
        # Two UTC days, but the same evening in New York
        events = [
            _event(5, datetime(2024, 3, 13, 23, 0, tzinfo=timezone.utc)),
            _event(5, datetime(2024, 3, 14, 1, 0, tzinfo=timezone.utc)),
        ]
        assert calculate_stats(events, [], now=NOW).longest_streak == 2
        assert calculate_stats(events, [], timezone=NY, now=NOW).longest_streak == 1


# ---------------------------------------------------------------------------
# Malformed input
# ---------------------------------------------------------------------------

class TestMalformedInput:
    def test_bad_timestamp_quarantined(self, caplog):
        events = [
            _event(40, "not a timestamp", event_id="bad"),
            _event(10, _ago(hours=1), event_id="good"),
        ]
        stats = calculate_stats(events, [], now=NOW)
        assert stats.total_pages_read == 50
        assert sum(d.pages for d in stats.daily_activity) == 10
        assert stats.pages_this_week == 10
        assert stats.pages_this_month == 10
        assert stats.reading_days == ["2024-03-14"]
        assert "book-a" in stats.book_metadata
        assert "bad" in caplog.text

    def test_book_seen_only_in_bad_event_still_listed(self):
        events = [_event(5, None, book="orphan", title="Orphan")]
        stats = calculate_stats(events, [], now=NOW)
        assert stats.book_metadata["orphan"].title == "Orphan"
        assert all(day.books == {"orphan": 0} for day in stats.daily_activity_by_book)

    def test_missing_pages_count_as_zero(self):
        stats = calculate_stats([_event(None, _ago(hours=1))], [], now=NOW)
        assert stats.total_pages_read == 0
        assert stats.reading_days == []

    def test_string_timestamps_accepted(self):
        stats = calculate_stats([_event(7, "2024-03-14T09:00:00Z")], [], now=NOW)
        assert stats.daily_activity[-1].pages == 7

    def test_trimmed_fraction_not_quarantined(self, caplog):
        events = [_event(9, "2024-03-14T09:00:00.12345+00:00")]
        stats = calculate_stats(events, [], now=NOW)
        assert stats.daily_activity[-1].pages == 9
        assert stats.reading_days == ["2024-03-14"]
        assert stats.current_streak == 1
        assert "unparseable" not in caplog.text

    def test_unknown_timezone_raises(self):
        with pytest.raises(InvalidTimezoneError):
            calculate_stats([], [], timezone="Not/AZone", now=NOW)


# ---------------------------------------------------------------------------
# Completed books
# ---------------------------------------------------------------------------

class TestCompletedBooks:
    def test_count_and_summaries(self):
        completed = [
            CompletedBook(id="b2", title="Emma", completed_at=datetime(2024, 3, 1, 8, tzinfo=timezone.utc),
                          cover="covers/emma.jpg"),
            CompletedBook(id="b1", title="Dune", completed_at="2024-02-01T10:00:00Z"),
        ]
        stats = calculate_stats([], completed, now=NOW)
        assert stats.total_books_completed == 2
        assert [b.id for b in stats.completed_books] == ["b2", "b1"]
        assert stats.completed_books[0].cover == "covers/emma.jpg"
        assert stats.completed_books[0].completed_at == "2024-03-01T08:00:00+00:00"
        assert stats.completed_books[1].completed_at == "2024-02-01T10:00:00+00:00"

    def test_unparseable_completion_date(self):
        stats = calculate_stats([], [CompletedBook(id="b1", title="Dune", completed_at="soon")], now=NOW)
        assert stats.total_books_completed == 1
        assert stats.completed_books[0].completed_at is None


# ---------------------------------------------------------------------------
# Chart data
# ---------------------------------------------------------------------------

class TestChartData:
    @pytest.mark.parametrize("time_range,days", [("7d", 7), ("30d", 30), ("90d", 90)])
    def test_window_per_time_range(self, time_range, days):
        chart = get_chart_data([], time_range, now=NOW)
        assert chart.time_range == time_range
        assert len(chart.daily_activity_by_book) == days

    def test_totals_and_average_round_half_up(self):
        events = [
            _event(10, _ago(days=1), book="book-a"),
            _event(15, _ago(days=2), book="book-b", title="Emma"),
            _event(99, _ago(days=20), book="book-a"),   # outside 7d
        ]
        chart = get_chart_data(events, "7d", now=NOW)
        assert chart.total_pages == 25
        assert chart.days_with_reading == 2
        assert chart.avg_pages == 13
        assert set(chart.book_metadata) == {"book-a", "book-b"}

    def test_no_reading_days_average_zero(self):
        chart = get_chart_data([_event(10, _ago(days=60))], "30d", now=NOW)
        assert chart.total_pages == 0
        assert chart.days_with_reading == 0
        assert chart.avg_pages == 0

    def test_invalid_time_range(self):
        with pytest.raises(InvalidTimeRangeError) as exc_info:
            get_chart_data([], "1y", now=NOW)
        assert exc_info.value.details["allowed"] == ["7d", "30d", "90d"]
