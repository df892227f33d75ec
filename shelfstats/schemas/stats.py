"""
Reading statistics schemas.

GET /stats                → StatsResponse
GET /stats/chart          → ChartResponse
GET /stats/week-start     → WeekStartResponse
GET /stats/public/{id}    → PublicStatsResponse
"""
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

from shelfstats.services.day_keys import WeekStartDay


class DailyPagesResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    date: str = Field(description="Civil day key (YYYY-MM-DD) in the requested zone.")
    pages: int


class DailyBookPagesResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    date: str
    books: dict[str, int] = Field(
        description="user_book_id → pages read that day. Every known book is present."
    )


class BookMetaResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str


class CompletedBookResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    cover: Optional[str] = None
    completed_at: Optional[str] = Field(default=None, description="ISO-8601 instant (UTC).")


class StatsResponse(BaseModel):
    """Reading statistics, recomputed on every request."""
    model_config = ConfigDict(from_attributes=True)

    total_pages_read: int
    total_books_completed: int
    current_streak: int = Field(
        description="Consecutive reading days ending today or yesterday."
    )
    longest_streak: int
    pages_this_week: int = Field(
        description="Pages since civil midnight opening the current week."
    )
    pages_this_month: int = Field(description="Pages in the last 30 days (rolling).")
    daily_activity: list[DailyPagesResponse] = Field(description="Oldest first.")
    daily_activity_by_book: list[DailyBookPagesResponse]
    book_metadata: dict[str, BookMetaResponse]
    completed_books: list[CompletedBookResponse]
    reading_days: list[str] = Field(
        description="Every day key with pages read, all history."
    )


class ChartResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    time_range: str = Field(examples=["30d"])
    daily_activity_by_book: list[DailyBookPagesResponse]
    book_metadata: dict[str, BookMetaResponse]
    total_pages: int
    days_with_reading: int
    avg_pages: int = Field(description="Pages per reading day, rounded half-up.")


class WeekStartResponse(BaseModel):
    week_start_day: WeekStartDay


class PublicStatsResponse(BaseModel):
    is_public: bool
    stats: Optional[StatsResponse] = None
