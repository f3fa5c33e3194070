"""Static rule catalog checks"""

import logging
from collections import Counter
from typing import Iterable

from src.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def validate_unique_ids(rules: Iterable, kind: str) -> None:
    """
    Ensure every rule in a catalog has a distinct id

    Called once at import time for the badge and achievement tables, so a
    duplicated rule fails loudly before any user state is evaluated.

    Raises:
        ConfigurationError: if any id appears more than once
    """
    counts = Counter(rule.id for rule in rules)
    duplicates = sorted(rule_id for rule_id, count in counts.items() if count > 1)

    if duplicates:
        raise ConfigurationError(
            f"Duplicate {kind} ids in catalog: {', '.join(duplicates)}",
            config_key=f"{kind}_catalog",
        )

    logger.debug(f"{kind} catalog validated: {len(counts)} rules")
