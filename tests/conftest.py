"""Global test fixtures and utilities for gamification tests"""
import pytest
from datetime import datetime, timedelta, timezone

from src.gamification.mock_store import InMemoryUserStateStore
from src.models.user import SessionRecord, StreakState, UserState, UserStats


# ============================================================================
# Time Fixtures
# ============================================================================

@pytest.fixture
def now():
    """Fixed event time: mid-day UTC so day boundaries are unambiguous"""
    return datetime(2024, 3, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def yesterday(now):
    return now - timedelta(days=1)


# ============================================================================
# User & Session Fixtures
# ============================================================================

@pytest.fixture
def test_user_id():
    """Standard test user ID"""
    return "user_123456789"


@pytest.fixture
def new_user(test_user_id):
    """User who has never completed a session"""
    return UserState(user_id=test_user_id)


@pytest.fixture
def make_user(test_user_id):
    """Factory for user snapshots with selected fields overridden"""
    def _make(streak=None, stats=None, **fields):
        return UserState(
            user_id=fields.pop("user_id", test_user_id),
            streak=streak or StreakState(),
            stats=stats or UserStats(),
            **fields,
        )
    return _make


@pytest.fixture
def text_session():
    """Short English text session"""
    return SessionRecord(mode="text", language="en", message_count=6, duration_seconds=300)


@pytest.fixture
def voice_session():
    """Longer Hindi voice session"""
    return SessionRecord(mode="voice", language="hi", message_count=12, duration_seconds=900)


# ============================================================================
# Storage Fixtures
# ============================================================================

@pytest.fixture
def memory_store():
    """Empty in-memory user state store"""
    return InMemoryUserStateStore()
