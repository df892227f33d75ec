"""
Stats service: loads one user's reading data and hands it to the engine.

Reads only from: profiles, user_books, reading_progress_history.
The caller's identity (viewer_id) is trusted; it comes from the upstream
auth gateway.

Privacy
-------
A user always sees their own stats. Another user's stats are visible only
when that user's profile has is_stats_public set.

Public API
----------
get_reading_stats(db, viewer_id, ...)   -> DerivedStats
get_chart(db, viewer_id, time_range, ...) -> ChartData
get_public_stats(db, user_id, ...)      -> (is_public, DerivedStats | None)
get_week_start_day(db, user_id)         -> WeekStartDay
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Union

from sqlalchemy.orm import Session

from shelfstats.core.config import settings
from shelfstats.core.errors import StatsPrivateError, UnauthorizedError
from shelfstats.models.profile import Profile
from shelfstats.models.progress_history import ReadingProgressHistory
from shelfstats.models.user_book import ReadingStatus, UserBook
from shelfstats.services.day_keys import DEFAULT_WEEK_START_DAY, WeekStartDay
from shelfstats.services.stats_engine import (
    DEFAULT_TIME_RANGE,
    calculate_stats,
    get_chart_data,
)
from shelfstats.services.stats_types import (
    ChartData,
    CompletedBook,
    DerivedStats,
    ProgressEvent,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Loaders (storage -> engine inputs)
# ---------------------------------------------------------------------------

def load_progress_events(db: Session, user_id: str) -> list[ProgressEvent]:
    rows: list[ReadingProgressHistory] = (
        db.query(ReadingProgressHistory)
        .filter(ReadingProgressHistory.user_id == user_id)
        .order_by(ReadingProgressHistory.recorded_at.asc())
        .all()
    )
    return [
        ProgressEvent(
            id=row.id,
            user_book_id=row.user_book_id,
            book_title=row.user_book.title,
            pages_read=row.pages_read,
            recorded_at=row.recorded_at,
        )
        for row in rows
    ]


def load_completed_books(db: Session, user_id: str) -> list[CompletedBook]:
    rows: list[UserBook] = (
        db.query(UserBook)
        .filter(
            UserBook.user_id == user_id,
            UserBook.status == ReadingStatus.COMPLETED,
        )
        .order_by(UserBook.updated_at.desc())
        .all()
    )
    return [
        CompletedBook(
            id=row.id,
            title=row.title,
            cover=row.cover,
            completed_at=row.updated_at,
        )
        for row in rows
    ]


def _get_profile(db: Session, user_id: str) -> Optional[Profile]:
    return db.query(Profile).filter(Profile.id == user_id).first()


# ---------------------------------------------------------------------------
# Preferences and privacy
# ---------------------------------------------------------------------------

def get_week_start_day(db: Session, user_id: Optional[str]) -> WeekStartDay:
    """Profile preference; the default for anonymous users or unset values."""
    if not user_id:
        return DEFAULT_WEEK_START_DAY
    profile = _get_profile(db, user_id)
    if profile is None or not profile.week_start_day:
        return DEFAULT_WEEK_START_DAY
    try:
        return WeekStartDay(profile.week_start_day)
    except ValueError:
        logger.warning(
            "Profile %s has unknown week_start_day %r; using %s",
            user_id, profile.week_start_day, DEFAULT_WEEK_START_DAY.value,
        )
        return DEFAULT_WEEK_START_DAY


def _is_stats_public(db: Session, user_id: str) -> bool:
    profile = _get_profile(db, user_id)
    return bool(profile and profile.is_stats_public)


def _resolve_target(db: Session, viewer_id: Optional[str], target_user_id: Optional[str]) -> str:
    """Return the user whose stats are requested, enforcing the privacy gate."""
    if not viewer_id:
        raise UnauthorizedError()
    user_id = target_user_id or viewer_id
    if user_id != viewer_id and not _is_stats_public(db, user_id):
        raise StatsPrivateError(user_id)
    return user_id


# ---------------------------------------------------------------------------
# Public
# ---------------------------------------------------------------------------

def get_reading_stats(
    db: Session,
    viewer_id: Optional[str],
    target_user_id: Optional[str] = None,
    timezone: Optional[str] = None,
    week_start_day: Union[WeekStartDay, str, None] = None,
    now: Optional[datetime] = None,
    days: Optional[int] = None,
) -> DerivedStats:
    """
    Full statistics for target_user_id (defaults to the viewer).
    The week boundary follows the viewer's preference unless overridden.
    """
    user_id = _resolve_target(db, viewer_id, target_user_id)
    return calculate_stats(
        events=load_progress_events(db, user_id),
        completed_books=load_completed_books(db, user_id),
        timezone=timezone,
        week_start_day=week_start_day or get_week_start_day(db, viewer_id),
        now=now,
        days=days or settings.STATS_WINDOW_DAYS,
    )


def get_chart(
    db: Session,
    viewer_id: Optional[str],
    time_range: str = DEFAULT_TIME_RANGE,
    target_user_id: Optional[str] = None,
    timezone: Optional[str] = None,
    now: Optional[datetime] = None,
) -> ChartData:
    user_id = _resolve_target(db, viewer_id, target_user_id)
    return get_chart_data(
        events=load_progress_events(db, user_id),
        time_range=time_range,
        timezone=timezone,
        now=now,
    )


def get_public_stats(
    db: Session,
    user_id: str,
    timezone: Optional[str] = None,
    now: Optional[datetime] = None,
) -> tuple[bool, Optional[DerivedStats]]:
    """Stats for a profile page: (False, None) when the owner keeps them private."""
    if not _is_stats_public(db, user_id):
        return False, None
    stats = calculate_stats(
        events=load_progress_events(db, user_id),
        completed_books=load_completed_books(db, user_id),
        timezone=timezone,
        week_start_day=get_week_start_day(db, user_id),
        now=now,
        days=settings.STATS_WINDOW_DAYS,
    )
    return True, stats
