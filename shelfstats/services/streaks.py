"""
Reading streaks over a set of day keys.

current_streak: consecutive reading days ending today or yesterday
                (0 when the last reading day is older than yesterday).
longest_streak: longest run of consecutive reading days in all history.

Consecutiveness is decided with previous_day_key, so it follows the
caller's zone rather than raw 24 h arithmetic.
"""
from __future__ import annotations

from typing import Iterable, Optional

from shelfstats.services.day_keys import previous_day_key
from shelfstats.services.stats_types import Streaks


def _current_streak(descending: list[str], today_key: str, timezone: Optional[str]) -> int:
    yesterday_key = previous_day_key(today_key, timezone)
    if descending[0] not in (today_key, yesterday_key):
        return 0

    streak = 0
    expected = descending[0]
    for day in descending:
        if day == expected:
            streak += 1
            expected = previous_day_key(expected, timezone)
        elif day < expected:
            break
    return streak


def _longest_streak(ascending: list[str], timezone: Optional[str]) -> int:
    longest = 0
    run = 1
    for prev, curr in zip(ascending, ascending[1:]):
        if prev == previous_day_key(curr, timezone):
            run += 1
        else:
            longest = max(longest, run)
            run = 1
    return max(longest, run)


def calculate_streaks(
    reading_days: Iterable[str],
    today_key: str,
    timezone: Optional[str] = None,
) -> Streaks:
    """Input need not be sorted or deduplicated."""
    unique_days = set(reading_days)
    if not unique_days:
        return Streaks(current_streak=0, longest_streak=0)

    # YYYY-MM-DD sorts chronologically
    return Streaks(
        current_streak=_current_streak(sorted(unique_days, reverse=True), today_key, timezone),
        longest_streak=_longest_streak(sorted(unique_days), timezone),
    )
