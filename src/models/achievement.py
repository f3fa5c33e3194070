"""Badge and achievement models for gamification"""
from enum import Enum
from pydantic import BaseModel, ConfigDict, field_validator
from typing import Optional
from datetime import datetime

from src.validators import clamp_non_negative_int, coerce_optional_datetime


class BadgeCategory(str, Enum):
    """Badge categories"""
    CONSISTENCY = "consistency"
    MILESTONE = "milestone"
    SPECIAL = "special"
    LANGUAGE = "language"
    MODE = "mode"


class AchievementCategory(str, Enum):
    """Achievement categories"""
    SESSIONS = "sessions"
    MESSAGES = "messages"
    STREAK = "streak"
    LANGUAGES = "languages"
    MODES = "modes"


class Badge(BaseModel):
    """A badge owned by a user. Never changes after unlock."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    icon: str
    category: BadgeCategory
    unlocked_at: Optional[datetime] = None

    @field_validator('unlocked_at', mode='before')
    @classmethod
    def parse_unlocked_at(cls, v):
        return coerce_optional_datetime(v)


class Achievement(BaseModel):
    """A user's persisted achievement progress"""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    progress: int = 0
    target: int
    completed: bool = False
    completed_at: Optional[datetime] = None
    category: AchievementCategory

    @field_validator('progress', 'target', mode='before')
    @classmethod
    def clamp_counts(cls, v):
        return clamp_non_negative_int(v)

    @field_validator('completed_at', mode='before')
    @classmethod
    def parse_completed_at(cls, v):
        return coerce_optional_datetime(v)


class AchievementProgress(BaseModel):
    """Result of evaluating one catalog achievement against a user"""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    progress: int
    target: int
    completed: bool
    category: AchievementCategory
