"""
Daily activity windows built from the raw progress-event log.

Every event's pages land in the civil day of its `recorded_at` in the
caller's zone. Windows are contiguous: exactly `days` entries ending today,
oldest first, quiet days reported as zero.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from datetime import datetime, timezone as dt_timezone
from typing import Iterable, NamedTuple, Optional

from shelfstats.services.day_keys import (
    format_day_key,
    parse_instant,
    previous_day_key,
)
from shelfstats.services.stats_types import (
    BookMeta,
    DailyBookPages,
    DailyPages,
    ProgressEvent,
)

logger = logging.getLogger(__name__)


class BucketedEvent(NamedTuple):
    event: ProgressEvent
    instant: Optional[datetime]   # None when recorded_at could not be parsed
    day_key: Optional[str]
    pages: int


def _now() -> datetime:
    return datetime.now(tz=dt_timezone.utc)


def _pages(event: ProgressEvent) -> int:
    return int(event.pages_read or 0)


def bucket_events(
    events: Iterable[ProgressEvent],
    timezone: Optional[str] = None,
) -> list[BucketedEvent]:
    """
    Attach the parsed instant and day key to each event.
    Events with an unparseable timestamp keep their pages but get no day.
    """
    bucketed = []
    for event in events:
        instant = parse_instant(event.recorded_at)
        if instant is None:
            logger.warning(
                "Progress event %s has unparseable recorded_at %r; excluded from daily stats",
                event.id, event.recorded_at,
            )
            bucketed.append(BucketedEvent(event, None, None, _pages(event)))
            continue
        bucketed.append(
            BucketedEvent(event, instant, format_day_key(instant, timezone), _pages(event))
        )
    return bucketed


def window_day_keys(today_key: str, days: int, timezone: Optional[str] = None) -> list[str]:
    """The `days` consecutive day keys ending at `today_key`, oldest first."""
    if days < 0:
        raise ValueError(f"days must be >= 0, got {days}")
    if days == 0:
        return []
    keys = [today_key]
    while len(keys) < days:
        keys.append(previous_day_key(keys[-1], timezone))
    keys.reverse()
    return keys


def collect_book_metadata(bucketed: Iterable[BucketedEvent]) -> dict[str, BookMeta]:
    """
    Every book referenced anywhere in history. The title comes from the
    most recent event for that book, so input order does not matter.
    """
    latest: dict[str, tuple[Optional[datetime], str]] = {}
    for item in bucketed:
        book_id = item.event.user_book_id
        seen = latest.get(book_id)
        if seen is None:
            latest[book_id] = (item.instant, item.event.book_title)
        elif item.instant is not None and (seen[0] is None or item.instant >= seen[0]):
            latest[book_id] = (item.instant, item.event.book_title)
    return {
        book_id: BookMeta(id=book_id, title=title)
        for book_id, (_, title) in sorted(latest.items())
    }


# ---------------------------------------------------------------------------
# Public
# ---------------------------------------------------------------------------

def build_daily_activity(
    events: Iterable[ProgressEvent],
    days: int = 30,
    timezone: Optional[str] = None,
    now: Optional[datetime] = None,
    bucketed: Optional[list[BucketedEvent]] = None,
) -> list[DailyPages]:
    """Pages read per day over the window ending today."""
    if bucketed is None:
        bucketed = bucket_events(events, timezone)
    today_key = format_day_key(now or _now(), timezone)

    pages_by_day: dict[str, int] = defaultdict(int)
    for item in bucketed:
        if item.day_key is not None:
            pages_by_day[item.day_key] += item.pages

    return [
        DailyPages(date=key, pages=pages_by_day.get(key, 0))
        for key in window_day_keys(today_key, days, timezone)
    ]


def build_daily_activity_by_book(
    events: Iterable[ProgressEvent],
    days: int = 30,
    timezone: Optional[str] = None,
    now: Optional[datetime] = None,
    bucketed: Optional[list[BucketedEvent]] = None,
) -> tuple[list[DailyBookPages], dict[str, BookMeta]]:
    """
    Pages read per day and per book over the window ending today.
    Every book from the full history appears in every day (zero-filled).
    """
    if bucketed is None:
        bucketed = bucket_events(events, timezone)
    today_key = format_day_key(now or _now(), timezone)
    book_metadata = collect_book_metadata(bucketed)

    pages_by_day_and_book: dict[str, dict[str, int]] = defaultdict(lambda: defaultdict(int))
    for item in bucketed:
        if item.day_key is not None:
            pages_by_day_and_book[item.day_key][item.event.user_book_id] += item.pages

    result = []
    for key in window_day_keys(today_key, days, timezone):
        day_books = pages_by_day_and_book.get(key, {})
        result.append(DailyBookPages(
            date=key,
            books={book_id: day_books.get(book_id, 0) for book_id in book_metadata},
        ))
    return result, book_metadata
