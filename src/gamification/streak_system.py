"""
Daily Session Streak System

A streak counts consecutive calendar days (in the reference timezone) with
at least one completed session.

Rules:
- First session ever: streak starts at 1
- Same day as last session: no change
- Next day: streak +1, best streak follows
- Gap of 2+ days: streak restarts at 1, best streak kept
- Backdated session (clock skew): ignored

All functions here are pure: they take a StreakState and return a new one.
"""

from typing import Any, Dict, Optional
from datetime import datetime
import logging

from src.models.user import StreakState
from src.utils.datetime_helpers import days_between

logger = logging.getLogger(__name__)

STREAK_MILESTONES = [7, 30, 100, 365]


def update_streak(
    streak: StreakState,
    now: datetime,
    tz_name: Optional[str] = None
) -> StreakState:
    """
    Apply one session at `now` to a streak

    Args:
        streak: Stored streak state
        now: Time of the session
        tz_name: Reference timezone override (defaults to REFERENCE_TIMEZONE)

    Returns:
        New StreakState with last_session_date moved to `now`, or the input
        unchanged when `now` falls before the last session day
    """
    last_date = streak.last_session_date

    # First session
    if last_date is None:
        logger.info("Streak started! Day 1")
        return StreakState(
            current=1,
            longest=max(streak.longest, 1),
            last_session_date=now,
        )

    diff = days_between(last_date, now, tz_name)

    if diff < 0:
        logger.warning(
            f"Session at {now.isoformat()} is {-diff} day(s) before last session "
            f"{last_date.isoformat()}; streak left unchanged"
        )
        return streak

    if diff == 0:
        current = streak.current
    elif diff == 1:
        current = streak.current + 1
    else:
        current = 1
        logger.info(f"Streak broken after {diff} days. Was {streak.current}, restarting at 1")

    if current != streak.current:
        logger.info(f"Streak updated: {streak.current} → {current} days")

    return StreakState(
        current=current,
        longest=max(streak.longest, current),
        last_session_date=now,
    )


def get_current_streak(
    streak: StreakState,
    now: datetime,
    tz_name: Optional[str] = None
) -> StreakState:
    """
    Streak as it should be displayed at `now`, without recording a session

    A streak whose last session is more than one day old is already broken
    and reads as 0; the best streak is always kept.
    """
    if streak.last_session_date is None:
        return StreakState(current=0, longest=streak.longest, last_session_date=None)

    if days_between(streak.last_session_date, now, tz_name) > 1:
        return StreakState(
            current=0,
            longest=streak.longest,
            last_session_date=streak.last_session_date,
        )

    return streak


def can_continue_streak(
    streak: StreakState,
    now: datetime,
    tz_name: Optional[str] = None
) -> bool:
    """True if a session at `now` would keep (or start) the streak"""
    if streak.last_session_date is None:
        return True

    return days_between(streak.last_session_date, now, tz_name) in (0, 1)


def validate_streak_integrity(
    streak: StreakState,
    now: datetime,
    tz_name: Optional[str] = None
) -> Dict[str, Any]:
    """
    Compare the stored streak with the value recomputed for `now`

    Returns:
        {
            'needs_update': bool,  # stored value diverges
            'streak': StreakState  # value to persist
        }
    """
    expected = get_current_streak(streak, now, tz_name)

    if expected.current != streak.current:
        logger.info(
            f"Streak integrity check: stored {streak.current}, "
            f"calculated {expected.current}"
        )
        return {"needs_update": True, "streak": expected}

    return {"needs_update": False, "streak": streak}


def daily_check_in(
    streak: StreakState,
    now: datetime,
    tz_name: Optional[str] = None
) -> Dict[str, Any]:
    """
    Count a daily check-in toward the streak

    Returns:
        {
            'current': int,
            'longest': int,
            'updated': bool,       # False if already checked in today
            'streak': StreakState
        }
    """
    updated_streak = update_streak(streak, now, tz_name)

    updated = streak.last_session_date is None or (
        days_between(streak.last_session_date, now, tz_name) > 0
    )
    if not updated:
        # Keep the stored timestamp so repeated check-ins stay no-ops
        updated_streak = streak

    return {
        "current": updated_streak.current,
        "longest": updated_streak.longest,
        "updated": updated,
        "streak": updated_streak,
    }


def get_next_milestone(current: int) -> int:
    """Next streak milestone above the current streak"""
    for milestone in STREAK_MILESTONES:
        if current < milestone:
            return milestone
    return STREAK_MILESTONES[-1]


def get_streak_info(
    streak: StreakState,
    now: datetime,
    tz_name: Optional[str] = None
) -> Dict[str, Any]:
    """
    Detailed streak information for display

    Returns:
        {
            'current': int,
            'longest': int,
            'last_session_date': datetime | None,
            'days_since_last_session': int | None,
            'is_active': bool,
            'next_milestone': int,
            'progress_to_next_milestone': float  # 0-100
        }
    """
    current = get_current_streak(streak, now, tz_name)
    last_date = streak.last_session_date

    if last_date is None:
        return {
            "current": 0,
            "longest": streak.longest,
            "last_session_date": None,
            "days_since_last_session": None,
            "is_active": False,
            "next_milestone": STREAK_MILESTONES[0],
            "progress_to_next_milestone": 0.0,
        }

    days_since = days_between(last_date, now, tz_name)
    if days_since < 0:
        logger.warning(f"Last session {last_date} is after {now}; reading it as today")
        days_since = 0
    next_milestone = get_next_milestone(current.current)

    return {
        "current": current.current,
        "longest": streak.longest,
        "last_session_date": last_date,
        "days_since_last_session": days_since,
        "is_active": days_since <= 1,
        "next_milestone": next_milestone,
        "progress_to_next_milestone": min(current.current / next_milestone * 100, 100.0),
    }
