"""Command line entry point: apply one session event to a user snapshot"""
import argparse
import asyncio
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from src.config import validate_config, LOG_LEVEL
from src.exceptions import ValidationError, WellnessAgentError
from src.gamification.mock_store import InMemoryUserStateStore
from src.models.user import SessionRecord, UserState
from src.services.gamification_service import GamificationService

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    """Send logs to stderr so stdout stays machine-readable JSON"""
    logging.basicConfig(
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
        stream=sys.stderr,
    )


def load_state(path: Optional[Path], user_id: str) -> UserState:
    """Read a user snapshot from JSON, or start a new user"""
    if path is None:
        return UserState(user_id=user_id)
    try:
        state = UserState.model_validate_json(path.read_text(encoding="utf-8"))
    except (OSError, PydanticValidationError) as e:
        raise ValidationError(f"Cannot read user state: {e}", field="state", value=str(path), cause=e)
    return state.model_copy(update={"user_id": state.user_id or user_id})


def load_session(path: Path) -> SessionRecord:
    """Read a session record from JSON"""
    try:
        return SessionRecord.model_validate_json(path.read_text(encoding="utf-8"))
    except (OSError, PydanticValidationError) as e:
        raise ValidationError(f"Cannot read session: {e}", field="session", value=str(path), cause=e)


def parse_now(value: Optional[str]) -> Optional[datetime]:
    if value is None:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as e:
        raise ValidationError(f"Invalid timestamp '{value}'", field="now", value=value, cause=e)


async def run(state: UserState, session: SessionRecord, now: Optional[datetime]) -> dict:
    """Apply the session through the service and return the saved snapshot"""
    store = InMemoryUserStateStore({state.user_id: state})
    service = GamificationService(store)

    result = await service.process_session_completion(state.user_id, session, now=now)
    saved = await store.get_user_state(state.user_id)

    return {
        "points_awarded": result["points_awarded"],
        "leveled_up": result["leveled_up"],
        "new_badges": [badge.model_dump(mode="json") for badge in result["new_badges"]],
        "completed_achievements": [
            achievement.model_dump(mode="json") for achievement in result["completed_achievements"]
        ],
        "message": result["message"],
        "state": saved.model_dump(mode="json"),
    }


def main() -> int:
    parser = argparse.ArgumentParser(description="Apply a completed session to a user's gamification state")
    parser.add_argument("--session", required=True, type=Path, help="Session record JSON file")
    parser.add_argument("--state", type=Path, help="User state JSON file (omit for a new user)")
    parser.add_argument("--user-id", default="local-user", help="User ID when the state has none")
    parser.add_argument("--now", help="Event time, ISO 8601 (default: current UTC time)")

    args = parser.parse_args()
    configure_logging()

    try:
        validate_config()
        state = load_state(args.state, args.user_id)
        session = load_session(args.session)
        output = asyncio.run(run(state, session, parse_now(args.now)))
    except WellnessAgentError as e:
        print(json.dumps(e.to_dict(), indent=2, ensure_ascii=False))
        return 1

    print(json.dumps(output, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
