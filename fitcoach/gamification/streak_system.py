"""
Streak Calculator

A streak is the number of consecutive calendar days, ending at a reference
day, that each have at least one completed activity.

All inputs are calendar dates already normalized to the user's local day.
Converting instants to dates belongs to the caller, so datetimes are
rejected rather than truncated.
"""

from datetime import date, timedelta
from typing import AbstractSet, Iterable

from fitcoach.validators import require_calendar_date

ONE_DAY = timedelta(days=1)


def _normalize(activity_dates: Iterable[date]) -> AbstractSet[date]:
    return frozenset(require_calendar_date(day, "activity_dates") for day in activity_dates)


def current_streak(activity_dates: Iterable[date], as_of: date) -> int:
    """
    Count consecutive active days walking backward from as_of

    Stops at the first day with no activity, so a gap right before as_of
    leaves only the trailing run. An inactive as_of gives 0.
    """
    require_calendar_date(as_of, "as_of")
    days = _normalize(activity_dates)

    streak = 0
    day = as_of
    while day in days:
        streak += 1
        day -= ONE_DAY
    return streak


def longest_streak(activity_dates: Iterable[date]) -> int:
    """Longest run of consecutive active days anywhere in the history"""
    days = _normalize(activity_dates)

    best = 0
    for day in days:
        # Only count from the first day of each run
        if day - ONE_DAY in days:
            continue
        length = 1
        while day + timedelta(days=length) in days:
            length += 1
        best = max(best, length)
    return best


def is_streak_at_risk(activity_dates: Iterable[date], today: date) -> bool:
    """
    True when the user was active yesterday but not yet today

    Used to decide whether a "don't break your streak" reminder is due.
    """
    require_calendar_date(today, "today")
    days = _normalize(activity_dates)
    return today not in days and today - ONE_DAY in days
