"""
Plain dataclasses shared by the stats engine modules.

Inputs are snapshots handed over by the storage adapter; outputs hold only
JSON-compatible values (str, int, list, str-keyed dict) so `to_dict()` can
be serialized as-is.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Optional, Union

Instant = Union[datetime, str]


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ProgressEvent:
    id: str
    user_book_id: str
    book_title: str
    pages_read: Optional[int]   # delta since the previous recorded point
    recorded_at: Instant


@dataclass(frozen=True)
class CompletedBook:
    id: str
    title: str
    completed_at: Instant
    cover: Optional[str] = None


# ---------------------------------------------------------------------------
# Outputs
# ---------------------------------------------------------------------------

@dataclass
class DailyPages:
    date: str
    pages: int


@dataclass
class DailyBookPages:
    date: str
    books: dict[str, int]       # user_book_id -> pages read that day


@dataclass
class BookMeta:
    id: str
    title: str


@dataclass
class CompletedBookSummary:
    id: str
    title: str
    cover: Optional[str]
    completed_at: Optional[str]  # ISO-8601, UTC


@dataclass
class Streaks:
    current_streak: int
    longest_streak: int


@dataclass
class DerivedStats:
    total_pages_read: int
    total_books_completed: int
    current_streak: int
    longest_streak: int
    pages_this_week: int
    pages_this_month: int
    daily_activity: list[DailyPages] = field(default_factory=list)
    daily_activity_by_book: list[DailyBookPages] = field(default_factory=list)
    book_metadata: dict[str, BookMeta] = field(default_factory=dict)
    completed_books: list[CompletedBookSummary] = field(default_factory=list)
    reading_days: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ChartData:
    time_range: str
    daily_activity_by_book: list[DailyBookPages]
    book_metadata: dict[str, BookMeta]
    total_pages: int
    days_with_reading: int
    avg_pages: int

    def to_dict(self) -> dict:
        return asdict(self)
