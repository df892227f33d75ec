"""
Civil-day keys and week boundaries for a caller-supplied IANA time zone.

A day key is a `YYYY-MM-DD` string naming the calendar day an instant falls
on in a zone. Lexicographic order of keys equals chronological order.
With no zone, days are UTC days (never the host's local zone).

Public API
----------
get_zone(timezone)                          -> pytz tzinfo | None
parse_instant(value)                        -> aware UTC datetime | None
format_day_key(instant, timezone)           -> "YYYY-MM-DD"
previous_day_key(key, timezone)             -> "YYYY-MM-DD"
start_of_week(now, week_start_day, timezone) -> aware UTC datetime
"""
from __future__ import annotations

import enum
import re
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Optional, Union

import pytz

from shelfstats.core.errors import InvalidTimezoneError

UTC = pytz.utc

_FRACTION = re.compile(r"\.(\d+)(?=[+-]\d{2}:?\d{2}$|$)")


# ---------------------------------------------------------------------------
# Week start preference
# ---------------------------------------------------------------------------

class WeekStartDay(str, enum.Enum):
    monday = "monday"
    sunday = "sunday"


DEFAULT_WEEK_START_DAY = WeekStartDay.monday

# Indexed by date.weekday() (Monday == 0); independent of the process locale.
_WEEKDAY_NAMES = (
    "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday",
)

# Days elapsed since the start of the week, per convention.
_WEEK_OFFSETS: dict[WeekStartDay, dict[str, int]] = {
    WeekStartDay.monday: {
        "monday": 0,
        "tuesday": 1,
        "wednesday": 2,
        "thursday": 3,
        "friday": 4,
        "saturday": 5,
        "sunday": 6,
    },
    WeekStartDay.sunday: {
        "sunday": 0,
        "monday": 1,
        "tuesday": 2,
        "wednesday": 3,
        "thursday": 4,
        "friday": 5,
        "saturday": 6,
    },
}


# ---------------------------------------------------------------------------
# Zones and instants
# ---------------------------------------------------------------------------

def get_zone(timezone: Optional[str]) -> Optional[tzinfo]:
    """Resolve an IANA zone name. None/empty means UTC-anchored days."""
    if not timezone:
        return None
    try:
        return pytz.timezone(timezone)
    except pytz.UnknownTimeZoneError:
        raise InvalidTimezoneError(timezone)


def _as_utc(instant: datetime) -> datetime:
    if instant.tzinfo is None:
        return UTC.localize(instant)
    return instant.astimezone(UTC)


def parse_instant(value: Union[datetime, str, None]) -> Optional[datetime]:
    """
    Normalize a timestamp to an aware UTC datetime.
    Naive datetimes are taken as UTC. Returns None when unparseable.
    """
    if isinstance(value, datetime):
        return _as_utc(value)
    if not isinstance(value, str):
        return None

    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    # fromisoformat on 3.10 takes only 3 or 6 fractional digits
    text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    try:
        return _as_utc(datetime.fromisoformat(text))
    except ValueError:
        return None


# ---------------------------------------------------------------------------
# Day keys
# ---------------------------------------------------------------------------

def format_day_key(instant: datetime, timezone: Optional[str] = None) -> str:
    """Calendar day of `instant` in `timezone` (UTC when absent)."""
    zone = get_zone(timezone)
    utc_instant = _as_utc(instant)
    if zone is None:
        return utc_instant.date().isoformat()
    return utc_instant.astimezone(zone).date().isoformat()


def _civil_noon(day: date, zone: tzinfo) -> Optional[datetime]:
    """Noon of `day` in `zone`, or None if that day does not exist there."""
    noon = zone.normalize(zone.localize(datetime.combine(day, time(12))))
    if noon.date() != day:
        return None
    return noon


def previous_day_key(key: str, timezone: Optional[str] = None) -> str:
    """
    Key of the civil day immediately before `key` in `timezone`.

    Anchors on civil noon and steps back 24 absolute hours. Days skipped
    by a zone (e.g. a date-line move) fall back to calendar subtraction.
    """
    day = date.fromisoformat(key)
    zone = get_zone(timezone)
    if zone is None:
        return (day - timedelta(days=1)).isoformat()

    anchor = _civil_noon(day, zone)
    if anchor is None:
        return (day - timedelta(days=1)).isoformat()
    return format_day_key(anchor - timedelta(days=1), timezone)


# ---------------------------------------------------------------------------
# Week boundary
# ---------------------------------------------------------------------------

def start_of_week(
    now: datetime,
    week_start_day: Union[WeekStartDay, str, None] = DEFAULT_WEEK_START_DAY,
    timezone: Optional[str] = None,
) -> datetime:
    """Civil midnight that opens the week containing `now`, as a UTC instant."""
    convention = WeekStartDay(week_start_day or DEFAULT_WEEK_START_DAY)
    zone = get_zone(timezone) or UTC

    local_now = _as_utc(now).astimezone(zone)
    day_name = _WEEKDAY_NAMES[local_now.weekday()]
    offset = _WEEK_OFFSETS[convention][day_name]

    first_day = local_now.date() - timedelta(days=offset)
    midnight = zone.normalize(zone.localize(datetime.combine(first_day, time.min)))
    return midnight.astimezone(UTC)
