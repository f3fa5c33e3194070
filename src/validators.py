"""
Input Normalization for Gamification Snapshots

User documents arrive from storage written by older code paths, so every
numeric or date field is normalized instead of rejected:

1. Counts & Points - Missing, negative, NaN or infinite values become 0
2. Dates - Missing or unparseable values become None
3. Tag Lists - Languages/modes are lowercased and de-duplicated in order
"""

import logging
import math
from datetime import date, datetime, time as dt_time
from typing import Any, Iterable, List, Optional

logger = logging.getLogger(__name__)


def clamp_non_negative_int(value: Any) -> int:
    """Coerce a stored count to an int >= 0"""
    if value is None or isinstance(value, bool):
        return 0

    try:
        number = float(value)
    except (TypeError, ValueError):
        logger.debug(f"Non-numeric count {value!r} clamped to 0")
        return 0

    if math.isnan(number) or math.isinf(number) or number < 0:
        return 0

    return int(number)


def clamp_non_negative_float(value: Any, default: float = 0.0) -> float:
    """Coerce a multiplier-style value to a float >= 0"""
    if value is None or isinstance(value, bool):
        return default

    try:
        number = float(value)
    except (TypeError, ValueError):
        return default

    if math.isnan(number) or math.isinf(number) or number < 0:
        return 0.0

    return number


def coerce_optional_datetime(value: Any) -> Optional[datetime]:
    """Parse a stored timestamp, returning None when it is missing or invalid"""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, dt_time.min)
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            logger.warning(f"Unparseable timestamp {value!r} treated as missing")
            return None

    logger.warning(f"Unsupported timestamp type {type(value).__name__} treated as missing")
    return None


def normalize_tags(values: Optional[Iterable[Any]]) -> List[str]:
    """Lowercase, strip and de-duplicate a list of tags, keeping first-seen order"""
    if values is None or isinstance(values, (str, bytes)):
        return []

    seen: List[str] = []
    for value in values:
        if value is None:
            continue
        tag = str(value).strip().lower()
        if tag and tag not in seen:
            seen.append(tag)
    return seen
