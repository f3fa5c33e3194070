"""
Gamification engine for the wellness chat assistant

This module implements the progress rules applied after each session and chat turn:
- Daily session streaks
- Session points and levels
- Badges (one-off unlocks)
- Achievements (progress toward numeric targets)
"""

from src.gamification.streak_system import update_streak, validate_streak_integrity, can_continue_streak
from src.gamification.xp_system import award_session_points, calculate_level, PointsPolicy
from src.gamification.badge_system import check_badges
from src.gamification.achievement_system import check_achievements, merge_achievements
from src.gamification.engine import (
    apply_message_event,
    apply_session_event,
    refresh_achievements,
    refresh_streak,
    SessionOutcome,
)

__all__ = [
    "update_streak",
    "validate_streak_integrity",
    "can_continue_streak",
    "award_session_points",
    "calculate_level",
    "PointsPolicy",
    "check_badges",
    "check_achievements",
    "merge_achievements",
    "apply_message_event",
    "apply_session_event",
    "refresh_achievements",
    "refresh_streak",
    "SessionOutcome",
]
