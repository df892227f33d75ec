"""
Reading statistics engine: pure aggregation over already-fetched data.

Inputs
------
events           : list[ProgressEvent]   any order, may be empty
completed_books  : list[CompletedBook]   any order, may be empty
timezone         : IANA zone name; None means UTC day boundaries
week_start_day   : "monday" (default) | "sunday"
now              : injected current instant; wall clock when None

Rollups
-------
pages_this_week  : events recorded at/after civil midnight opening the week
pages_this_month : events recorded within the last 30 days (rolling window,
                   not a calendar month)

No I/O and no shared state: every call builds a fresh result, so it is
safe to call concurrently and returns identical output for identical input.

Public API
----------
calculate_stats(events, completed_books, ...) -> DerivedStats
get_chart_data(events, time_range, ...)       -> ChartData
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone as dt_timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Sequence, Union

from shelfstats.core.errors import InvalidTimeRangeError
from shelfstats.services.activity import (
    BucketedEvent,
    bucket_events,
    build_daily_activity,
    build_daily_activity_by_book,
)
from shelfstats.services.day_keys import (
    DEFAULT_WEEK_START_DAY,
    WeekStartDay,
    format_day_key,
    get_zone,
    parse_instant,
    start_of_week,
)
from shelfstats.services.stats_types import (
    ChartData,
    CompletedBook,
    CompletedBookSummary,
    DerivedStats,
    ProgressEvent,
)
from shelfstats.services.streaks import calculate_streaks


DEFAULT_ACTIVITY_DAYS = 30
MONTH_LOOKBACK_DAYS = 30

TIME_RANGE_DAYS: dict[str, int] = {
    "7d": 7,
    "30d": 30,
    "90d": 90,
}
DEFAULT_TIME_RANGE = "30d"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _now() -> datetime:
    return datetime.now(tz=dt_timezone.utc)


def _sum_since(bucketed: Sequence[BucketedEvent], since: datetime) -> int:
    return sum(
        item.pages for item in bucketed
        if item.instant is not None and item.instant >= since
    )


def _reading_days(bucketed: Sequence[BucketedEvent]) -> list[str]:
    return sorted({
        item.day_key for item in bucketed
        if item.day_key is not None and item.pages > 0
    })


def _summarize_completed(book: CompletedBook) -> CompletedBookSummary:
    completed_at = parse_instant(book.completed_at)
    return CompletedBookSummary(
        id=book.id,
        title=book.title,
        cover=book.cover,
        completed_at=completed_at.isoformat() if completed_at else None,
    )


# ---------------------------------------------------------------------------
# Public: full statistics
# ---------------------------------------------------------------------------

def calculate_stats(
    events: Sequence[ProgressEvent],
    completed_books: Sequence[CompletedBook],
    timezone: Optional[str] = None,
    week_start_day: Union[WeekStartDay, str, None] = DEFAULT_WEEK_START_DAY,
    now: Optional[datetime] = None,
    days: int = DEFAULT_ACTIVITY_DAYS,
) -> DerivedStats:
    """Aggregate the event log into a fresh DerivedStats value."""
    get_zone(timezone)  # fail fast on an unknown zone
    now = parse_instant(now) if now is not None else _now()
    today_key = format_day_key(now, timezone)

    bucketed = bucket_events(events, timezone)

    week_start = start_of_week(now, week_start_day, timezone)
    month_ago = now - timedelta(days=MONTH_LOOKBACK_DAYS)

    daily_activity = build_daily_activity(
        events, days, timezone, now=now, bucketed=bucketed
    )
    daily_activity_by_book, book_metadata = build_daily_activity_by_book(
        events, days, timezone, now=now, bucketed=bucketed
    )

    reading_days = _reading_days(bucketed)
    streaks = calculate_streaks(reading_days, today_key, timezone)

    return DerivedStats(
        total_pages_read=sum(item.pages for item in bucketed),
        total_books_completed=len(completed_books),
        current_streak=streaks.current_streak,
        longest_streak=streaks.longest_streak,
        pages_this_week=_sum_since(bucketed, week_start),
        pages_this_month=_sum_since(bucketed, month_ago),
        daily_activity=daily_activity,
        daily_activity_by_book=daily_activity_by_book,
        book_metadata=book_metadata,
        completed_books=[_summarize_completed(b) for b in completed_books],
        reading_days=reading_days,
    )


# ---------------------------------------------------------------------------
# Public: chart rollup
# ---------------------------------------------------------------------------

def get_chart_data(
    events: Sequence[ProgressEvent],
    time_range: str = DEFAULT_TIME_RANGE,
    timezone: Optional[str] = None,
    now: Optional[datetime] = None,
) -> ChartData:
    """Per-book activity for a 7/30/90-day window plus window totals."""
    if time_range not in TIME_RANGE_DAYS:
        raise InvalidTimeRangeError(time_range, list(TIME_RANGE_DAYS))
    get_zone(timezone)

    daily_activity_by_book, book_metadata = build_daily_activity_by_book(
        events, TIME_RANGE_DAYS[time_range], timezone, now=now or _now()
    )

    day_totals = [sum(day.books.values()) for day in daily_activity_by_book]
    total_pages = sum(day_totals)
    days_with_reading = sum(1 for pages in day_totals if pages > 0)

    avg_pages = 0
    if days_with_reading:
        avg_pages = int(
            (Decimal(total_pages) / Decimal(days_with_reading))
            .quantize(Decimal("1"), rounding=ROUND_HALF_UP)
        )

    return ChartData(
        time_range=time_range,
        daily_activity_by_book=daily_activity_by_book,
        book_metadata=book_metadata,
        total_pages=total_pages,
        days_with_reading=days_with_reading,
        avg_pages=avg_pages,
    )
