"""User progress Pydantic models"""
from enum import Enum
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from src.models.achievement import Achievement, Badge
from src.validators import (
    clamp_non_negative_int,
    coerce_optional_datetime,
    normalize_tags,
)


class SessionMode(str, Enum):
    """Ways a user can talk to the assistant"""
    TEXT = "text"
    VOICE = "voice"


class StreakState(BaseModel):
    """Daily session streak. longest is never below current."""
    model_config = ConfigDict(frozen=True)

    current: int = 0
    longest: int = 0
    last_session_date: Optional[datetime] = None

    @field_validator('current', mode='before')
    @classmethod
    def clamp_current(cls, v):
        return clamp_non_negative_int(v)

    @field_validator('longest', mode='before')
    @classmethod
    def clamp_longest(cls, v):
        return clamp_non_negative_int(v)

    @field_validator('longest')
    @classmethod
    def longest_covers_current(cls, v: int, info: ValidationInfo) -> int:
        return max(v, info.data.get('current', 0))

    @field_validator('last_session_date', mode='before')
    @classmethod
    def parse_last_session_date(cls, v):
        return coerce_optional_datetime(v)


class UserStats(BaseModel):
    """Lifetime session statistics"""
    model_config = ConfigDict(frozen=True)

    total_sessions: int = 0
    total_messages: int = 0
    total_duration: int = 0  # seconds
    crisis_sessions: int = 0
    languages_used: List[str] = Field(default_factory=list)
    modes_used: List[str] = Field(default_factory=list)
    first_session_date: Optional[datetime] = None
    last_session_date: Optional[datetime] = None

    @field_validator('total_sessions', 'total_messages', 'total_duration', 'crisis_sessions', mode='before')
    @classmethod
    def clamp_counts(cls, v):
        return clamp_non_negative_int(v)

    @field_validator('languages_used', 'modes_used', mode='before')
    @classmethod
    def normalize_sets(cls, v):
        return normalize_tags(v)

    @field_validator('first_session_date', 'last_session_date', mode='before')
    @classmethod
    def parse_dates(cls, v):
        return coerce_optional_datetime(v)


class SessionRecord(BaseModel):
    """A completed chat session, the unit of gamification events"""
    model_config = ConfigDict(frozen=True)

    mode: str = SessionMode.TEXT.value
    language: str = "en"
    message_count: int = 0
    started_at: Optional[datetime] = None
    duration_seconds: int = 0
    crisis_flagged: bool = False
    # True when per-turn message events already added this session's messages
    messages_counted: bool = False

    @field_validator('mode', 'language', mode='before')
    @classmethod
    def normalize_tag(cls, v, info: ValidationInfo):
        if isinstance(v, Enum):
            v = v.value
        if v is None or not str(v).strip():
            return SessionMode.TEXT.value if info.field_name == 'mode' else "en"
        return str(v).strip().lower()

    @field_validator('message_count', 'duration_seconds', mode='before')
    @classmethod
    def clamp_counts(cls, v):
        return clamp_non_negative_int(v)

    @field_validator('started_at', mode='before')
    @classmethod
    def parse_started_at(cls, v):
        return coerce_optional_datetime(v)


class UserState(BaseModel):
    """
    Snapshot of a user's gamification document.

    The engine never mutates a snapshot; every step returns a new one that
    the caller persists as a single write.
    """
    model_config = ConfigDict(frozen=True)

    user_id: Optional[str] = None
    points: int = 0
    level: int = 1
    streak: StreakState = Field(default_factory=StreakState)
    badges: List[Badge] = Field(default_factory=list)
    achievements: List[Achievement] = Field(default_factory=list)
    stats: UserStats = Field(default_factory=UserStats)

    @field_validator('points', mode='before')
    @classmethod
    def clamp_points(cls, v):
        return clamp_non_negative_int(v)

    @field_validator('level', mode='before')
    @classmethod
    def clamp_level(cls, v):
        return max(1, clamp_non_negative_int(v))

    @field_validator('streak', 'stats', mode='before')
    @classmethod
    def default_missing(cls, v, info: ValidationInfo):
        # Legacy documents stored the streak as a bare number
        if info.field_name == 'streak' and isinstance(v, (int, float)) and not isinstance(v, bool):
            count = clamp_non_negative_int(v)
            return {'current': count, 'longest': count}
        return v if v is not None else {}

    @field_validator('badges', 'achievements', mode='before')
    @classmethod
    def default_lists(cls, v):
        return v if v is not None else []

    @property
    def badge_ids(self) -> set[str]:
        return {badge.id for badge in self.badges}
