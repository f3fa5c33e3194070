"""
Badge System

Badges are permanent markers unlocked the first time a rule holds for a
user. Each rule is a pure predicate over the user snapshot:

- Consistency (first session, streak thresholds)
- Milestone (session/message counts)
- Language (distinct languages used)
- Mode (text/voice usage)
- Special (time-of-day of the latest session, crisis-safe session)

Evaluation order does not matter and already-owned badges are skipped, so
checking twice without a state change unlocks nothing the second time.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional
import logging

from src.gamification.catalog import validate_unique_ids
from src.models.achievement import Badge, BadgeCategory
from src.models.user import SessionMode, UserState
from src.utils.datetime_helpers import local_hour

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BadgeRule:
    """Badge definition"""
    id: str
    name: str
    description: str
    icon: str
    category: BadgeCategory
    condition: Callable[[UserState], bool]

    def to_badge(self, unlocked_at: Optional[datetime] = None) -> Badge:
        return Badge(
            id=self.id,
            name=self.name,
            description=self.description,
            icon=self.icon,
            category=self.category,
            unlocked_at=unlocked_at,
        )


def _last_session_hour(state: UserState) -> Optional[int]:
    last = state.stats.last_session_date
    return local_hour(last) if last is not None else None


def _is_early_bird(state: UserState) -> bool:
    hour = _last_session_hour(state)
    return hour is not None and hour < 8


def _is_night_owl(state: UserState) -> bool:
    hour = _last_session_hour(state)
    return hour is not None and hour >= 22


BADGE_RULES: List[BadgeRule] = [
    # Consistency
    BadgeRule(
        id="first_session",
        name="First Steps",
        description="Complete your first wellness session",
        icon="🌟",
        category=BadgeCategory.CONSISTENCY,
        condition=lambda user: user.stats.total_sessions >= 1,
    ),
    BadgeRule(
        id="week_streak",
        name="Week Warrior",
        description="Maintain a 7-day streak",
        icon="🔥",
        category=BadgeCategory.CONSISTENCY,
        condition=lambda user: user.streak.current >= 7,
    ),
    BadgeRule(
        id="month_streak",
        name="Monthly Master",
        description="Maintain a 30-day streak",
        icon="💎",
        category=BadgeCategory.CONSISTENCY,
        condition=lambda user: user.streak.current >= 30,
    ),
    # Milestones
    BadgeRule(
        id="hundred_sessions",
        name="Century Club",
        description="Complete 100 sessions",
        icon="🏆",
        category=BadgeCategory.MILESTONE,
        condition=lambda user: user.stats.total_sessions >= 100,
    ),
    BadgeRule(
        id="thousand_messages",
        name="Chat Champion",
        description="Send 1000 messages",
        icon="💬",
        category=BadgeCategory.MILESTONE,
        condition=lambda user: user.stats.total_messages >= 1000,
    ),
    # Languages
    BadgeRule(
        id="multilingual",
        name="Polyglot",
        description="Use all three languages (English, Hindi, Marathi)",
        icon="🌍",
        category=BadgeCategory.LANGUAGE,
        condition=lambda user: len(user.stats.languages_used) >= 3,
    ),
    # Modes
    BadgeRule(
        id="voice_explorer",
        name="Voice Explorer",
        description="Try voice sessions",
        icon="🎤",
        category=BadgeCategory.MODE,
        condition=lambda user: SessionMode.VOICE.value in user.stats.modes_used,
    ),
    BadgeRule(
        id="text_master",
        name="Text Master",
        description="Complete 50 text sessions",
        icon="✍️",
        category=BadgeCategory.MODE,
        condition=lambda user: (
            SessionMode.TEXT.value in user.stats.modes_used
            and user.stats.total_sessions >= 50
        ),
    ),
    BadgeRule(
        id="mode_mixer",
        name="Mode Mixer",
        description="Use both text and voice sessions",
        icon="🔀",
        category=BadgeCategory.MODE,
        condition=lambda user: {SessionMode.TEXT.value, SessionMode.VOICE.value}.issubset(
            user.stats.modes_used
        ),
    ),
    # Special
    BadgeRule(
        id="early_bird",
        name="Early Bird",
        description="Complete a session before 8 AM",
        icon="🌅",
        category=BadgeCategory.SPECIAL,
        condition=_is_early_bird,
    ),
    BadgeRule(
        id="night_owl",
        name="Night Owl",
        description="Complete a session after 10 PM",
        icon="🦉",
        category=BadgeCategory.SPECIAL,
        condition=_is_night_owl,
    ),
    BadgeRule(
        id="safe_space",
        name="Safe Space",
        description="Complete a session safely after reaching out in a hard moment",
        icon="🤝",
        category=BadgeCategory.SPECIAL,
        condition=lambda user: user.stats.crisis_sessions >= 1,
    ),
]

validate_unique_ids(BADGE_RULES, "badge")


def check_badges(user: UserState, now: Optional[datetime] = None) -> List[Badge]:
    """
    Badges the user qualifies for but does not own yet

    Args:
        user: Current user snapshot
        now: Unlock timestamp stamped on returned badges

    Returns:
        Newly unlocked badges, in catalog order
    """
    owned = user.badge_ids
    unlocked = []

    for rule in BADGE_RULES:
        if rule.id in owned:
            continue
        if rule.condition(user):
            unlocked.append(rule.to_badge(unlocked_at=now))
            logger.info(f"User {user.user_id} unlocked badge: {rule.id} ({rule.name})")

    return unlocked


def get_all_badges() -> List[BadgeRule]:
    """All badge definitions"""
    return list(BADGE_RULES)
