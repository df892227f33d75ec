"""
Stats router.

GET /stats                  : full reading statistics for a user
GET /stats/chart            : per-book activity for 7d / 30d / 90d
GET /stats/week-start       : caller's week-start preference
GET /stats/public/{user_id} : stats for a profile page, if public
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Header, Path, Query
from sqlalchemy.orm import Session

from shelfstats.db.base import get_db
from shelfstats.schemas.common import ErrorResponse
from shelfstats.schemas.stats import (
    ChartResponse,
    PublicStatsResponse,
    StatsResponse,
    WeekStartResponse,
)
from shelfstats.services.day_keys import WeekStartDay
from shelfstats.services.stats_engine import DEFAULT_TIME_RANGE, TIME_RANGE_DAYS
from shelfstats.services.stats_service import (
    get_chart,
    get_public_stats,
    get_reading_stats,
    get_week_start_day,
)

router = APIRouter(prefix="/stats", tags=["stats"])

_TZ_DESCRIPTION = (
    "IANA time zone used to decide which civil day each event falls on. "
    "Defaults to UTC."
)


def _viewer_id(
    x_user_id: Optional[str] = Header(
        default=None,
        description="Signed-in user id, set by the auth gateway.",
    ),
) -> Optional[str]:
    return x_user_id


# ---------------------------------------------------------------------------
# GET /stats
# ---------------------------------------------------------------------------

@router.get(
    "",
    response_model=StatsResponse,
    summary="Reading statistics",
    responses={
        200: {"description": "Totals, rollups, daily activity and streaks."},
        401: {"model": ErrorResponse, "description": "No signed-in user."},
        403: {"model": ErrorResponse, "description": "Another user's statistics are private."},
        422: {"model": ErrorResponse, "description": "Unknown time zone or invalid parameter."},
    },
)
def reading_stats(
    user_id: Optional[str] = Query(
        default=None,
        description="Whose stats to compute. Defaults to the caller.",
    ),
    tz: Optional[str] = Query(
        default=None, description=_TZ_DESCRIPTION, examples=["America/New_York"]
    ),
    week_start_day: Optional[WeekStartDay] = Query(
        default=None,
        description="Override the caller's week-start preference.",
    ),
    days: Optional[int] = Query(
        default=None, ge=1, le=366, description="Daily activity window length."
    ),
    viewer_id: Optional[str] = Depends(_viewer_id),
    db: Session = Depends(get_db),
):
    """
    Compute reading statistics from the full progress history.

    - **current_streak** counts consecutive reading days ending today or
      yesterday in the requested zone.
    - **pages_this_week** starts at civil midnight of the first day of the
      week (Monday or Sunday, per preference).
    - **pages_this_month** is a rolling 30-day window.
    """
    stats = get_reading_stats(
        db=db,
        viewer_id=viewer_id,
        target_user_id=user_id,
        timezone=tz,
        week_start_day=week_start_day,
        days=days,
    )
    return StatsResponse.model_validate(stats.to_dict())


# ---------------------------------------------------------------------------
# GET /stats/chart
# ---------------------------------------------------------------------------

@router.get(
    "/chart",
    response_model=ChartResponse,
    summary="Per-book reading chart",
    responses={
        200: {"description": "Per-book daily pages and window totals."},
        401: {"model": ErrorResponse, "description": "No signed-in user."},
        403: {"model": ErrorResponse, "description": "Another user's statistics are private."},
        422: {"model": ErrorResponse, "description": "Unknown time range or time zone."},
    },
)
def reading_chart(
    time_range: str = Query(
        default=DEFAULT_TIME_RANGE,
        description=f"One of: {', '.join(TIME_RANGE_DAYS)}.",
        examples=["7d"],
    ),
    user_id: Optional[str] = Query(default=None),
    tz: Optional[str] = Query(default=None, description=_TZ_DESCRIPTION),
    viewer_id: Optional[str] = Depends(_viewer_id),
    db: Session = Depends(get_db),
):
    chart = get_chart(
        db=db,
        viewer_id=viewer_id,
        time_range=time_range,
        target_user_id=user_id,
        timezone=tz,
    )
    return ChartResponse.model_validate(chart.to_dict())


# ---------------------------------------------------------------------------
# GET /stats/week-start
# ---------------------------------------------------------------------------

@router.get(
    "/week-start",
    response_model=WeekStartResponse,
    summary="Caller's week-start preference",
)
def week_start(
    viewer_id: Optional[str] = Depends(_viewer_id),
    db: Session = Depends(get_db),
):
    """Returns `monday` when the caller is anonymous or has no preference."""
    return WeekStartResponse(week_start_day=get_week_start_day(db, viewer_id))


# ---------------------------------------------------------------------------
# GET /stats/public/{user_id}
# ---------------------------------------------------------------------------

@router.get(
    "/public/{user_id}",
    response_model=PublicStatsResponse,
    summary="Public statistics for a profile page",
)
def public_stats(
    user_id: str = Path(description="Profile owner."),
    tz: Optional[str] = Query(default=None, description=_TZ_DESCRIPTION),
    db: Session = Depends(get_db),
):
    """`is_public` is false and `stats` null when the owner keeps stats private."""
    is_public, stats = get_public_stats(db=db, user_id=user_id, timezone=tz)
    return PublicStatsResponse(
        is_public=is_public,
        stats=StatsResponse.model_validate(stats.to_dict()) if stats else None,
    )
