"""
Achievement System

Tracks progress toward fixed numeric targets across categories:
- Sessions (10 / 50 / 100 completed sessions)
- Messages (100 / 500 / 1000 messages sent)
- Streak (7 / 30 / 100 day streak)
- Languages (2 / 3 languages used)
- Modes (text and voice both used)

Features:
- Progress capped at the target
- Completion recorded once; completed_at never moves afterwards
- Safe to re-evaluate any number of times
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple
import logging

from src.gamification.catalog import validate_unique_ids
from src.models.achievement import Achievement, AchievementCategory, AchievementProgress
from src.models.user import UserState
from src.utils.datetime_helpers import earliest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AchievementRule:
    """Achievement definition"""
    id: str
    name: str
    description: str
    category: AchievementCategory
    target: int
    metric: Callable[[UserState], int]

    def evaluate(self, user: UserState) -> AchievementProgress:
        progress = min(self.target, max(0, self.metric(user)))
        return AchievementProgress(
            id=self.id,
            name=self.name,
            description=self.description,
            progress=progress,
            target=self.target,
            completed=progress >= self.target,
            category=self.category,
        )


def _sessions(user: UserState) -> int:
    return user.stats.total_sessions


def _messages(user: UserState) -> int:
    return user.stats.total_messages


def _streak(user: UserState) -> int:
    return user.streak.current


def _languages(user: UserState) -> int:
    return len(user.stats.languages_used)


def _modes(user: UserState) -> int:
    return len(user.stats.modes_used)


ACHIEVEMENT_RULES: List[AchievementRule] = [
    # Sessions
    AchievementRule("sessions_10", "Getting Started", "Complete 10 sessions",
                    AchievementCategory.SESSIONS, 10, _sessions),
    AchievementRule("sessions_50", "Regular User", "Complete 50 sessions",
                    AchievementCategory.SESSIONS, 50, _sessions),
    AchievementRule("sessions_100", "Dedicated Wellness Seeker", "Complete 100 sessions",
                    AchievementCategory.SESSIONS, 100, _sessions),
    # Messages
    AchievementRule("messages_100", "Conversation Starter", "Send 100 messages",
                    AchievementCategory.MESSAGES, 100, _messages),
    AchievementRule("messages_500", "Active Communicator", "Send 500 messages",
                    AchievementCategory.MESSAGES, 500, _messages),
    AchievementRule("messages_1000", "Chat Master", "Send 1000 messages",
                    AchievementCategory.MESSAGES, 1000, _messages),
    # Streaks
    AchievementRule("streak_7", "Week Warrior", "Maintain a 7-day streak",
                    AchievementCategory.STREAK, 7, _streak),
    AchievementRule("streak_30", "Monthly Master", "Maintain a 30-day streak",
                    AchievementCategory.STREAK, 30, _streak),
    AchievementRule("streak_100", "Century Streak", "Maintain a 100-day streak",
                    AchievementCategory.STREAK, 100, _streak),
    # Languages
    AchievementRule("languages_2", "Bilingual", "Use 2 different languages",
                    AchievementCategory.LANGUAGES, 2, _languages),
    AchievementRule("languages_3", "Trilingual", "Use all 3 languages",
                    AchievementCategory.LANGUAGES, 3, _languages),
    # Modes
    AchievementRule("modes_2", "Versatile User", "Use both text and voice modes",
                    AchievementCategory.MODES, 2, _modes),
]

validate_unique_ids(ACHIEVEMENT_RULES, "achievement")


def check_achievements(user: UserState) -> List[AchievementProgress]:
    """Evaluate every catalog achievement against the user snapshot"""
    return [rule.evaluate(user) for rule in ACHIEVEMENT_RULES]


def _collapse_duplicate(first: Achievement, second: Achievement) -> Achievement:
    """One record for a repeated id: furthest progress, earliest completion"""
    stamps = [a.completed_at for a in (first, second) if a.completed and a.completed_at is not None]
    completed_at = None
    for stamp in stamps:
        completed_at = earliest(completed_at, stamp)

    return first.model_copy(update={
        "progress": max(first.progress, second.progress),
        "completed": first.completed or second.completed,
        "completed_at": completed_at,
    })


def merge_achievements(
    existing: List[Achievement],
    evaluated: List[AchievementProgress],
    now: Optional[datetime] = None
) -> Tuple[List[Achievement], List[Achievement]]:
    """
    Merge evaluated progress into a user's persisted achievements

    - Known ids: progress is raised (never lowered); completion is sticky and
      completed_at is only stamped on the first incomplete → complete step
    - Unknown ids: appended, completed_at stamped if already complete
    - Persisted ids missing from the evaluation are kept untouched
    - Repeated persisted ids collapse into one record at the first position

    Returns:
        (merged achievements, achievements completed by this merge)
    """
    by_id: Dict[str, Achievement] = {}
    order: List[str] = []
    for achievement in existing:
        kept = by_id.get(achievement.id)
        if kept is None:
            order.append(achievement.id)
            by_id[achievement.id] = achievement
        else:
            logger.warning(f"Duplicate stored achievement collapsed: {achievement.id}")
            by_id[achievement.id] = _collapse_duplicate(kept, achievement)

    newly_completed: List[Achievement] = []

    for result in evaluated:
        previous = by_id.get(result.id)

        if previous is None:
            merged = Achievement(
                id=result.id,
                name=result.name,
                description=result.description,
                progress=result.progress,
                target=result.target,
                completed=result.completed,
                completed_at=now if result.completed else None,
                category=result.category,
            )
            order.append(result.id)
        else:
            completed = previous.completed or result.completed
            merged = Achievement(
                id=previous.id,
                name=previous.name,
                description=previous.description,
                progress=min(previous.target, max(previous.progress, result.progress)),
                target=previous.target,
                completed=completed,
                completed_at=previous.completed_at if previous.completed else (now if completed else None),
                category=previous.category,
            )

        if merged.completed and (previous is None or not previous.completed):
            newly_completed.append(merged)
            logger.info(f"Achievement completed: {merged.id} ({merged.name})")

        by_id[result.id] = merged

    return [by_id[achievement_id] for achievement_id in order], newly_completed


def get_all_achievements() -> List[AchievementRule]:
    """All achievement definitions"""
    return list(ACHIEVEMENT_RULES)
