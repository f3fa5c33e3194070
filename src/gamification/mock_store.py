"""
In-Memory User State Store

Implements the UserStateStore protocol without a database. Used by tests
and the command line entry point; nothing here is persisted.
"""

import logging
from typing import Dict, Optional

from src.models.user import UserState

logger = logging.getLogger(__name__)


class InMemoryUserStateStore:
    """Dict-backed store of user snapshots keyed by user_id"""

    def __init__(self, initial: Optional[Dict[str, UserState]] = None):
        self._states: Dict[str, UserState] = dict(initial or {})
        self.save_count = 0

    async def get_user_state(self, user_id: str) -> Optional[UserState]:
        """Get a user's snapshot, or None if the user has none yet"""
        return self._states.get(user_id)

    async def save_user_state(self, state: UserState) -> None:
        """Replace a user's snapshot (last write wins)"""
        if not state.user_id:
            raise KeyError("user_id")
        self._states[state.user_id] = state
        self.save_count += 1
        logger.debug(f"Saved user state for {state.user_id} (NOT PERSISTED)")
