"""Unit tests for Achievement System (src/gamification/achievement_system.py)"""
from datetime import timedelta

from src.gamification.achievement_system import (
    ACHIEVEMENT_RULES,
    check_achievements,
    merge_achievements,
)
from src.models.achievement import Achievement, AchievementCategory
from src.models.user import StreakState, UserStats


def _by_id(results):
    return {result.id: result for result in results}


# ============================================================================
# Evaluation Tests
# ============================================================================

def test_check_achievements_covers_catalog(new_user):
    """Test every catalog achievement is evaluated"""
    results = check_achievements(new_user)

    assert [r.id for r in results] == [rule.id for rule in ACHIEVEMENT_RULES]
    assert all(r.progress == 0 and not r.completed for r in results)


def test_check_achievements_progress_capped(make_user):
    """Test progress never exceeds the target"""
    user = make_user(stats=UserStats(total_sessions=75))

    results = _by_id(check_achievements(user))

    assert results["sessions_10"].progress == 10
    assert results["sessions_10"].completed is True
    assert results["sessions_50"].progress == 50
    assert results["sessions_50"].completed is True
    assert results["sessions_100"].progress == 75
    assert results["sessions_100"].completed is False


def test_check_achievements_categories(make_user):
    """Test each category reads its own metric"""
    user = make_user(
        streak=StreakState(current=8, longest=8),
        stats=UserStats(total_messages=120, languages_used=["en", "hi"], modes_used=["voice"]),
    )

    results = _by_id(check_achievements(user))

    assert results["messages_100"].completed is True
    assert results["messages_500"].progress == 120
    assert results["streak_7"].completed is True
    assert results["streak_30"].progress == 8
    assert results["languages_2"].completed is True
    assert results["languages_3"].progress == 2
    assert results["modes_2"].progress == 1
    assert results["modes_2"].category == AchievementCategory.MODES


# ============================================================================
# Merge Tests
# ============================================================================

def test_merge_achievements_initial(make_user, now):
    """Test first merge creates every achievement"""
    user = make_user(stats=UserStats(total_sessions=10))

    merged, completed = merge_achievements([], check_achievements(user), now)

    assert len(merged) == len(ACHIEVEMENT_RULES)
    assert [a.id for a in completed] == ["sessions_10"]
    assert completed[0].completed_at == now
    assert all(a.completed_at is None for a in merged if not a.completed)


def test_merge_achievements_completed_at_stable(make_user, now):
    """Test completed_at is not overwritten by later evaluations"""
    user = make_user(stats=UserStats(total_sessions=10))
    merged, _ = merge_achievements([], check_achievements(user), now)

    later = now + timedelta(days=3)
    user = make_user(stats=UserStats(total_sessions=14))
    merged_again, completed_again = merge_achievements(merged, check_achievements(user), later)

    sessions_10 = _by_id(merged_again)["sessions_10"]
    assert sessions_10.completed is True
    assert sessions_10.completed_at == now
    assert completed_again == []


def test_merge_achievements_completion_is_sticky(make_user, now):
    """Test a broken streak does not un-complete a streak achievement"""
    streaking = make_user(streak=StreakState(current=7, longest=7))
    merged, _ = merge_achievements([], check_achievements(streaking), now)

    broken = make_user(streak=StreakState(current=1, longest=7))
    merged_again, _ = merge_achievements(merged, check_achievements(broken), now + timedelta(days=5))

    streak_7 = _by_id(merged_again)["streak_7"]
    assert streak_7.completed is True
    assert streak_7.progress == 7
    assert streak_7.completed_at == now


def test_merge_achievements_progress_never_decreases(make_user, now):
    """Test progress on incomplete achievements is not lowered"""
    merged, _ = merge_achievements(
        [], check_achievements(make_user(streak=StreakState(current=12, longest=12))), now
    )
    merged_again, _ = merge_achievements(
        merged, check_achievements(make_user(streak=StreakState(current=1, longest=12))), now
    )

    assert _by_id(merged_again)["streak_30"].progress == 12


def test_merge_achievements_transition_stamps_once(make_user, now):
    """Test incomplete → complete sets completed_at to that call's time"""
    merged, _ = merge_achievements([], check_achievements(make_user(stats=UserStats(total_sessions=9))), now)
    assert _by_id(merged)["sessions_10"].completed_at is None

    later = now + timedelta(hours=2)
    merged, completed = merge_achievements(
        merged, check_achievements(make_user(stats=UserStats(total_sessions=10))), later
    )

    assert [a.id for a in completed] == ["sessions_10"]
    assert _by_id(merged)["sessions_10"].completed_at == later


def test_merge_achievements_keeps_unknown_ids(now, new_user):
    """Test persisted achievements outside the catalog are left alone"""
    legacy = Achievement(
        id="legacy_goal",
        name="Legacy",
        description="Retired goal",
        progress=3,
        target=3,
        completed=True,
        completed_at=now - timedelta(days=100),
        category=AchievementCategory.SESSIONS,
    )

    merged, _ = merge_achievements([legacy], check_achievements(new_user), now)

    assert merged[0] == legacy
    assert len(merged) == len(ACHIEVEMENT_RULES) + 1


def test_merge_achievements_repeated_evaluation_is_stable(make_user, now):
    """Test re-merging the same evaluation changes nothing"""
    user = make_user(stats=UserStats(total_sessions=55, total_messages=600))
    evaluated = check_achievements(user)

    merged, _ = merge_achievements([], evaluated, now)
    merged_again, completed_again = merge_achievements(merged, evaluated, now + timedelta(days=1))

    assert merged_again == merged
    assert completed_again == []


def test_merge_achievements_collapses_duplicate_ids(make_user, now):
    """Test a stored achievement repeated twice comes back once"""
    first_seen = now - timedelta(days=20)
    incomplete = Achievement(
        id="sessions_10", name="Getting Started", description="Complete 10 sessions",
        progress=6, target=10, category=AchievementCategory.SESSIONS,
    )
    done = incomplete.model_copy(update={"progress": 10, "completed": True, "completed_at": first_seen})
    user = make_user(stats=UserStats(total_sessions=12))

    merged, completed = merge_achievements([incomplete, done], check_achievements(user), now)

    ids = [a.id for a in merged]
    assert ids.count("sessions_10") == 1
    assert ids[0] == "sessions_10"
    assert len(merged) == len(ACHIEVEMENT_RULES)
    sessions_10 = _by_id(merged)["sessions_10"]
    assert sessions_10.completed is True
    assert sessions_10.completed_at == first_seen
    assert "sessions_10" not in [a.id for a in completed]
