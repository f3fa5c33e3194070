"""
Gamification Progress Summaries

Read-only views over a user snapshot: level progress, streak status and
badge/achievement completion, plus text formatting for chat replies.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from src.gamification.achievement_system import get_all_achievements
from src.gamification.badge_system import get_all_badges
from src.gamification.streak_system import get_current_streak, get_streak_info
from src.gamification.xp_system import LevelBand, calculate_level_from_points
from src.models.achievement import Achievement, Badge
from src.models.user import UserState

logger = logging.getLogger(__name__)


def get_user_progress(
    user: UserState,
    now: datetime,
    bands: Optional[List[LevelBand]] = None
) -> Dict[str, Any]:
    """
    Progress summary for a user

    Returns:
        {
            'level': int,
            'points': int,
            'progress_to_next': float,      # percent
            'points_to_next': int,          # points still needed
            'streak': {'current': int, 'longest': int},
            'streak_info': dict,            # see get_streak_info()
            'badge_progress': float,        # percent of catalog owned
            'achievement_progress': float,  # percent of catalog completed
            'completed_badges': int,
            'total_badges': int,
            'completed_achievements': int,
            'total_achievements': int
        }
    """
    level_info = calculate_level_from_points(user.points, bands)
    streak = get_current_streak(user.streak, now)

    total_badges = len(get_all_badges())
    completed_badges = len(user.badges)

    total_achievements = len(get_all_achievements())
    completed_achievements = len([a for a in user.achievements if a.completed])

    return {
        "level": level_info["current_level"],
        "points": user.points,
        "progress_to_next": level_info["progress_percent"],
        "points_to_next": level_info["points_to_next_level"],
        "streak": {"current": streak.current, "longest": streak.longest},
        "streak_info": get_streak_info(user.streak, now),
        "badge_progress": completed_badges / total_badges * 100 if total_badges else 0.0,
        "achievement_progress": (
            completed_achievements / total_achievements * 100 if total_achievements else 0.0
        ),
        "completed_badges": completed_badges,
        "total_badges": total_badges,
        "completed_achievements": completed_achievements,
        "total_achievements": total_achievements,
    }


def format_progress_display(progress: Dict[str, Any]) -> str:
    """
    Format a progress summary for a chat reply

    Args:
        progress: Output from get_user_progress()
    """
    streak = progress["streak"]

    lines = [
        f"⭐ Level {progress['level']} ({progress['points']} points)",
        f"   {progress['points_to_next']} points to level {progress['level'] + 1}",
    ]

    if streak["current"] > 0:
        line = f"🔥 Streak: {streak['current']} days"
        if streak["longest"] > streak["current"]:
            line += f" (best: {streak['longest']})"
        lines.append(line)
    else:
        lines.append("🔥 No active streak. Start a session today! 💪")

    lines.append(f"🏅 Badges: {progress['completed_badges']}/{progress['total_badges']}")
    lines.append(
        f"🏆 Achievements: {progress['completed_achievements']}/{progress['total_achievements']}"
    )

    return "\n".join(lines)


def format_unlock_message(badges: List[Badge], achievements: List[Achievement]) -> str:
    """Celebration message for badges/achievements unlocked by one session"""
    if not badges and not achievements:
        return ""

    lines = ["🎉 UNLOCKED! 🎉"]
    for badge in badges:
        lines.append(f"{badge.icon} {badge.name}: {badge.description}")
    for achievement in achievements:
        lines.append(f"🏆 {achievement.name}: {achievement.description}")

    return "\n".join(lines)
