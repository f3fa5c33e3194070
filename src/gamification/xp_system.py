"""
Points and Leveling System

Session Point Rules (defaults, see PointsPolicy):
- Completed session: 10 points (base)
- 10+ messages: +5, 20+ messages: +10 more
- Voice session: +5
- Hindi or Marathi session: +3
- Total scaled by a per-mode multiplier (1.0 for every mode by default)

Leveling Curve:
- Levels are read from a band table; each band charges a fixed number of
  points per level up to its last level
- Default: a single open-ended band of 100 points per level, so
  level = floor(points / 100) + 1
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
import logging

from pydantic import BaseModel, Field, field_validator

from src import config
from src.models.user import SessionRecord, SessionMode
from src.validators import clamp_non_negative_int, clamp_non_negative_float

logger = logging.getLogger(__name__)


class PointsPolicy(BaseModel):
    """Explicit, deterministic session point table"""
    base_points: int = Field(default_factory=lambda: config.BASE_SESSION_POINTS)
    # message_count threshold -> bonus, every reached threshold counts
    message_bonuses: Dict[int, int] = Field(default_factory=lambda: {10: 5, 20: 10})
    mode_bonuses: Dict[str, int] = Field(
        default_factory=lambda: {SessionMode.TEXT.value: 0, SessionMode.VOICE.value: 5}
    )
    language_bonuses: Dict[str, int] = Field(default_factory=lambda: {"hi": 3, "mr": 3})
    mode_multipliers: Dict[str, float] = Field(
        default_factory=lambda: {SessionMode.TEXT.value: 1.0, SessionMode.VOICE.value: 1.0}
    )

    @field_validator('base_points', mode='before')
    @classmethod
    def clamp_base(cls, v):
        return clamp_non_negative_int(v)

    @field_validator('message_bonuses', 'mode_bonuses', 'language_bonuses', mode='before')
    @classmethod
    def clamp_bonuses(cls, v):
        return {key: clamp_non_negative_int(bonus) for key, bonus in (v or {}).items()}

    @field_validator('mode_multipliers', mode='before')
    @classmethod
    def clamp_multipliers(cls, v):
        return {mode: clamp_non_negative_float(m, default=1.0) for mode, m in (v or {}).items()}


@dataclass(frozen=True)
class LevelBand:
    """Points charged per level while the level is below until_level"""
    until_level: Optional[int]  # None = open-ended
    points_per_level: int


LEVEL_BANDS: List[LevelBand] = [LevelBand(until_level=None, points_per_level=config.POINTS_PER_LEVEL)]


def award_session_points(session: SessionRecord, policy: Optional[PointsPolicy] = None) -> int:
    """
    Points for one completed session

    Args:
        session: Completed session record
        policy: Point table (defaults to PointsPolicy())

    Returns:
        Points to add, an int >= 0
    """
    policy = policy or PointsPolicy()

    points = policy.base_points

    for threshold, bonus in sorted(policy.message_bonuses.items()):
        if session.message_count >= threshold:
            points += bonus

    points += policy.mode_bonuses.get(session.mode, 0)
    points += policy.language_bonuses.get(session.language, 0)

    multiplier = policy.mode_multipliers.get(session.mode, 1.0)
    awarded = max(0, int(math.floor(points * multiplier + 0.5)))

    logger.debug(
        f"Session points: {awarded} (mode={session.mode}, language={session.language}, "
        f"messages={session.message_count}, multiplier={multiplier})"
    )
    return awarded


def _band_for_level(level: int, bands: List[LevelBand]) -> LevelBand:
    """Band that prices the step from `level` to `level + 1`"""
    for band in bands:
        if band.until_level is None or level < band.until_level:
            return band
    # Past the table: the last band keeps applying
    return bands[-1]


def calculate_level_from_points(total_points: Any, bands: Optional[List[LevelBand]] = None) -> Dict[str, Any]:
    """
    Calculate level from cumulative points

    Returns:
        {
            'current_level': int,
            'points_in_current_level': int,
            'points_to_next_level': int,
            'total_points_for_next_level': int,
            'progress_percent': float
        }
    """
    bands = bands or LEVEL_BANDS
    remaining = clamp_non_negative_int(total_points)
    level = 1
    spent = 0

    for index, band in enumerate(bands):
        per_level = max(1, band.points_per_level)
        is_last = index == len(bands) - 1

        if band.until_level is None or is_last:
            gained = remaining // per_level
        else:
            gained = min(max(0, band.until_level - level), remaining // per_level)

        level += gained
        spent += gained * per_level
        remaining -= gained * per_level

        if band.until_level is None or is_last:
            break

    next_cost = max(1, _band_for_level(level, bands).points_per_level)

    return {
        "current_level": level,
        "points_in_current_level": remaining,
        "points_to_next_level": next_cost - remaining,
        "total_points_for_next_level": spent + next_cost,
        "progress_percent": remaining / next_cost * 100,
    }


def calculate_level(total_points: Any, bands: Optional[List[LevelBand]] = None) -> int:
    """Level (>= 1) for a cumulative point total; non-decreasing in points"""
    return calculate_level_from_points(total_points, bands)["current_level"]


def points_for_next_level(level: int, bands: Optional[List[LevelBand]] = None) -> int:
    """Cumulative points needed to reach level + 1"""
    bands = bands or LEVEL_BANDS
    total = 0
    for step in range(1, max(1, level) + 1):
        total += max(1, _band_for_level(step, bands).points_per_level)
    return total


def progress_to_next_level(total_points: Any, bands: Optional[List[LevelBand]] = None) -> float:
    """Percent (0-100) of the way from the current level to the next"""
    return calculate_level_from_points(total_points, bands)["progress_percent"]
