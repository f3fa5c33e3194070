"""
GamificationService - Gamification Persistence Flow

Loads a user snapshot from a store, runs the pure engine and writes the
result back. Each public method issues at most one save, so a session is
either fully applied or not persisted at all.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol

from src.exceptions import wrap_external_exception
from src.gamification.dashboards import format_unlock_message, get_user_progress
from src.gamification.engine import (
    MESSAGES_PER_TURN,
    apply_message_event,
    apply_session_event,
    refresh_achievements,
    refresh_streak,
)
from src.gamification.streak_system import daily_check_in
from src.gamification.xp_system import LevelBand, PointsPolicy
from src.models.user import SessionRecord, UserState
from src.utils.datetime_helpers import now_utc

logger = logging.getLogger(__name__)


class UserStateStore(Protocol):
    """Storage for user snapshots (one document per user)"""

    async def get_user_state(self, user_id: str) -> Optional[UserState]:
        ...

    async def save_user_state(self, state: UserState) -> None:
        ...


class GamificationService:
    """
    Service for gamification features.

    Responsibilities:
    - Recording chat turns (message stats only)
    - Applying completed sessions (stats, streak, points, badges, achievements)
    - Daily streak check-ins
    - Progress summaries with streak repair and achievement catch-up

    total_messages: when process_message() is used for every turn, pass
    sessions with messages_counted=True so completion does not add them again.

    Callers must serialize events for the same user; the store is written
    with last-write-wins semantics.
    """

    def __init__(
        self,
        store: UserStateStore,
        policy: Optional[PointsPolicy] = None,
        bands: Optional[List[LevelBand]] = None
    ):
        """
        Initialize GamificationService.

        Args:
            store: User snapshot store
            policy: Session point table (defaults to PointsPolicy())
            bands: Level band table (defaults to LEVEL_BANDS)
        """
        self.store = store
        self.policy = policy or PointsPolicy()
        self.bands = bands
        logger.debug("GamificationService initialized")

    async def process_message(
        self,
        user_id: str,
        message_count: int = MESSAGES_PER_TURN,
        now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """
        Record one chat turn of an ongoing session.

        Returns:
            {'total_messages': int}

        Raises:
            DatabaseError: if loading or saving the snapshot fails
        """
        now = now or now_utc()
        state = await self._load(user_id)

        state = apply_message_event(state, message_count, now=now)
        await self._save(state)

        return {"total_messages": state.stats.total_messages}

    async def process_session_completion(
        self,
        user_id: str,
        session: SessionRecord,
        now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """
        Process gamification for a completed session.

        Returns:
            {
                'points_awarded': int,
                'total_points': int,
                'level': int,
                'leveled_up': bool,
                'current_streak': int,
                'longest_streak': int,
                'new_badges': list[Badge],
                'completed_achievements': list[Achievement],
                'message': str  # User-facing message
            }

        Raises:
            DatabaseError: if loading or saving the snapshot fails
        """
        now = now or now_utc()
        state = await self._load(user_id)

        outcome = apply_session_event(state, session, now=now, policy=self.policy, bands=self.bands)
        await self._save(outcome.state)

        streak = outcome.state.streak
        message = f"+{outcome.points_awarded} points! Streak: {streak.current} day(s) 🔥"
        if outcome.leveled_up:
            message += f"\n⭐ Level up! You reached level {outcome.state.level}"
        unlock_message = format_unlock_message(outcome.new_badges, outcome.completed_achievements)
        if unlock_message:
            message += f"\n\n{unlock_message}"

        return {
            "points_awarded": outcome.points_awarded,
            "total_points": outcome.state.points,
            "level": outcome.state.level,
            "leveled_up": outcome.leveled_up,
            "current_streak": streak.current,
            "longest_streak": streak.longest,
            "new_badges": outcome.new_badges,
            "completed_achievements": outcome.completed_achievements,
            "message": message,
        }

    async def daily_check_in(self, user_id: str, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Record a daily check-in toward the streak.

        Returns:
            {'current': int, 'longest': int, 'updated': bool}
        """
        now = now or now_utc()
        state = await self._load(user_id)

        result = daily_check_in(state.streak, now)
        if result["updated"]:
            await self._save(state.model_copy(update={"streak": result["streak"]}))

        return {
            "current": result["current"],
            "longest": result["longest"],
            "updated": result["updated"],
        }

    async def get_progress(self, user_id: str, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Progress summary for a user.

        A stale streak is repaired and achievement progress reached since
        the last session (e.g. from chat turns) is merged; both land in one
        save. Nothing is written when neither changed, or when the user has
        no stored snapshot yet.

        Returns:
            Output of get_user_progress() plus:
            {
                'streak_repaired': bool,
                'badges': list[Badge],              # owned badges
                'achievements': list[Achievement],  # progress for every achievement
                'newly_completed_achievements': list[Achievement]
            }
        """
        now = now or now_utc()
        stored = await self._get(user_id)
        state = stored or UserState(user_id=user_id)

        state, repaired = refresh_streak(state, now)
        if repaired:
            logger.info(f"Repairing stale streak for user {user_id}")

        state, completed, merged = refresh_achievements(state, now)
        if merged:
            logger.info(f"Updating achievement progress for user {user_id}")

        if stored is not None and (repaired or merged):
            await self._save(state)

        progress = get_user_progress(state, now, self.bands)
        progress["streak_repaired"] = repaired
        progress["badges"] = list(state.badges)
        progress["achievements"] = list(state.achievements)
        progress["newly_completed_achievements"] = completed
        return progress

    async def _get(self, user_id: str) -> Optional[UserState]:
        """Stored snapshot for a user, or None"""
        try:
            state = await self.store.get_user_state(user_id)
        except Exception as e:
            raise wrap_external_exception(e, operation="get_user_state", user_id=user_id)

        if state is not None and state.user_id != user_id:
            state = state.model_copy(update={"user_id": user_id})
        return state

    async def _load(self, user_id: str) -> UserState:
        """Load a snapshot, starting a fresh one for unknown users"""
        state = await self._get(user_id)
        if state is None:
            logger.info(f"No gamification state for user {user_id}, starting fresh")
            return UserState(user_id=user_id)
        return state

    async def _save(self, state: UserState) -> None:
        try:
            await self.store.save_user_state(state)
        except Exception as e:
            raise wrap_external_exception(e, operation="save_user_state", user_id=state.user_id)
