"""
Gamification Engine

Applies one completed session to a user snapshot. Steps run in a fixed
order because each reads the state produced by the previous one:

1. Stats (counts, language/mode sets, first/last session dates)
2. Streak
3. Points, then level from the new total
4. Badges
5. Achievements

Chat turns inside a session are recorded with apply_message_event(), which
only touches message stats. When turns are recorded that way, the session
record is marked messages_counted so total_messages is not counted twice.

The input snapshot is never modified; the caller persists the returned
snapshot as one write.
"""

import logging
from datetime import datetime
from typing import List, Optional, Tuple

from pydantic import BaseModel

from src.gamification.achievement_system import check_achievements, merge_achievements
from src.gamification.badge_system import check_badges
from src.gamification.streak_system import update_streak, validate_streak_integrity
from src.gamification.xp_system import LevelBand, PointsPolicy, award_session_points, calculate_level
from src.models.achievement import Achievement, Badge
from src.models.user import SessionRecord, UserState, UserStats
from src.utils.datetime_helpers import earliest, latest, now_utc
from src.validators import clamp_non_negative_int

logger = logging.getLogger(__name__)

# user message + assistant reply
MESSAGES_PER_TURN = 2


class SessionOutcome(BaseModel):
    """Next user snapshot plus what changed, for the caller to surface"""
    state: UserState
    points_awarded: int
    previous_level: int
    leveled_up: bool
    new_badges: List[Badge]
    completed_achievements: List[Achievement]


def update_stats(stats: UserStats, session: SessionRecord, now: datetime) -> UserStats:
    """Fold one session into lifetime stats"""
    languages = list(stats.languages_used)
    if session.language and session.language not in languages:
        languages.append(session.language)

    modes = list(stats.modes_used)
    if session.mode and session.mode not in modes:
        modes.append(session.mode)

    added_messages = 0 if session.messages_counted else session.message_count

    return UserStats(
        total_sessions=stats.total_sessions + 1,
        total_messages=stats.total_messages + added_messages,
        total_duration=stats.total_duration + session.duration_seconds,
        crisis_sessions=stats.crisis_sessions + (1 if session.crisis_flagged else 0),
        languages_used=languages,
        modes_used=modes,
        # Backdated events never move these dates inward
        first_session_date=earliest(stats.first_session_date, now),
        last_session_date=latest(stats.last_session_date, now),
    )


def apply_message_event(
    state: UserState,
    message_count: int = MESSAGES_PER_TURN,
    now: Optional[datetime] = None
) -> UserState:
    """
    Record messages exchanged during an ongoing session

    Only message stats move: no streak, points, badges or achievements are
    evaluated until the session completes.

    Args:
        state: Snapshot loaded by the caller
        message_count: Messages in this turn (defaults to one user message
            plus one reply)
        now: Event time (defaults to current UTC time)
    """
    now = now or now_utc()
    added = clamp_non_negative_int(message_count)

    stats = state.stats.model_copy(update={
        "total_messages": state.stats.total_messages + added,
        "last_session_date": latest(state.stats.last_session_date, now),
    })

    logger.debug(f"Recorded {added} message(s) for user {state.user_id}")
    return state.model_copy(update={"stats": stats})


def apply_session_event(
    state: UserState,
    session: SessionRecord,
    now: Optional[datetime] = None,
    policy: Optional[PointsPolicy] = None,
    bands: Optional[List[LevelBand]] = None
) -> SessionOutcome:
    """
    Compute the user's next snapshot after a completed session

    Args:
        state: Snapshot loaded by the caller
        session: The completed session
        now: Event time (defaults to current UTC time)
        policy: Session point table (defaults to PointsPolicy())
        bands: Level band table (defaults to LEVEL_BANDS)

    Returns:
        SessionOutcome with the full next snapshot
    """
    now = now or now_utc()

    # 1. Stats
    stats = update_stats(state.stats, session, now)
    working = state.model_copy(update={"stats": stats})

    # 2. Streak
    streak = update_streak(working.streak, now)
    working = working.model_copy(update={"streak": streak})

    # 3. Points & level
    points_awarded = award_session_points(session, policy)
    points = working.points + points_awarded
    level = calculate_level(points, bands)
    working = working.model_copy(update={"points": points, "level": level})

    # 4. Badges
    new_badges = check_badges(working, now=now)
    working = working.model_copy(update={"badges": list(working.badges) + new_badges})

    # 5. Achievements
    merged, completed = merge_achievements(working.achievements, check_achievements(working), now)
    working = working.model_copy(update={"achievements": merged})

    leveled_up = level > state.level
    logger.info(
        f"Session applied for user {state.user_id}: +{points_awarded} points "
        f"(total {points}, level {level}), streak {streak.current}, "
        f"{len(new_badges)} new badge(s), {len(completed)} achievement(s) completed"
    )
    if leveled_up:
        logger.info(f"User {state.user_id} leveled up from {state.level} to {level}!")

    return SessionOutcome(
        state=working,
        points_awarded=points_awarded,
        previous_level=state.level,
        leveled_up=leveled_up,
        new_badges=new_badges,
        completed_achievements=completed,
    )


def refresh_streak(state: UserState, now: Optional[datetime] = None) -> Tuple[UserState, bool]:
    """
    Bring a stored streak up to date without recording a session

    Returns:
        (snapshot to persist, whether it differs from the input)
    """
    now = now or now_utc()
    check = validate_streak_integrity(state.streak, now)

    if not check["needs_update"]:
        return state, False

    return state.model_copy(update={"streak": check["streak"]}), True


def refresh_achievements(
    state: UserState,
    now: Optional[datetime] = None
) -> Tuple[UserState, List[Achievement], bool]:
    """
    Merge achievement progress reached outside a session (e.g. via message
    events) into a snapshot

    Returns:
        (snapshot, achievements completed by this merge, whether it changed)
    """
    now = now or now_utc()
    merged, completed = merge_achievements(state.achievements, check_achievements(state), now)

    if merged == list(state.achievements):
        return state, completed, False

    return state.model_copy(update={"achievements": merged}), completed, True
