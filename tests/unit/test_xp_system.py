"""Unit tests for Points and Leveling System (src/gamification/xp_system.py)"""
import pytest

from src.gamification.xp_system import (
    LevelBand,
    PointsPolicy,
    award_session_points,
    calculate_level,
    calculate_level_from_points,
    points_for_next_level,
    progress_to_next_level,
)
from src.models.user import SessionRecord


# ============================================================================
# Level Calculation Tests
# ============================================================================

def test_calculate_level_from_points_level_1_zero():
    """Test level 1 with 0 points"""
    result = calculate_level_from_points(0)

    assert result["current_level"] == 1
    assert result["points_in_current_level"] == 0
    assert result["points_to_next_level"] == 100
    assert result["total_points_for_next_level"] == 100
    assert result["progress_percent"] == 0


def test_calculate_level_boundaries():
    """Test level = floor(points / 100) + 1"""
    assert calculate_level(0) == 1
    assert calculate_level(99) == 1
    assert calculate_level(100) == 2
    assert calculate_level(250) == 3
    assert calculate_level(10_000) == 101


def test_calculate_level_from_points_mid_level():
    """Test progress inside a level"""
    result = calculate_level_from_points(250)

    assert result["current_level"] == 3
    assert result["points_in_current_level"] == 50
    assert result["points_to_next_level"] == 50
    assert result["total_points_for_next_level"] == 300


@pytest.mark.parametrize("bad_points", [-1, -500, float("nan"), None, "abc"])
def test_calculate_level_clamps_invalid_points(bad_points):
    """Test negative/NaN/missing points count as 0"""
    assert calculate_level(bad_points) == 1


def test_calculate_level_monotonic():
    """Test more points never means a lower level"""
    levels = [calculate_level(points) for points in range(0, 5000, 7)]

    assert levels == sorted(levels)


def test_calculate_level_tiered_bands():
    """Test a multi-band curve"""
    bands = [
        LevelBand(until_level=5, points_per_level=100),
        LevelBand(until_level=15, points_per_level=200),
        LevelBand(until_level=None, points_per_level=500),
    ]

    assert calculate_level_from_points(399, bands)["current_level"] == 4
    assert calculate_level_from_points(400, bands)["current_level"] == 5

    at_five = calculate_level_from_points(400, bands)
    assert at_five["points_to_next_level"] == 200  # Level 5 → 6 is priced by the second band

    assert calculate_level_from_points(600, bands)["current_level"] == 6
    assert calculate_level_from_points(2400, bands)["current_level"] == 15
    assert calculate_level_from_points(2900, bands)["current_level"] == 16


def test_calculate_level_tiered_bands_monotonic():
    """Test monotonicity holds for multi-band curves too"""
    bands = [LevelBand(3, 50), LevelBand(6, 150), LevelBand(None, 400)]
    levels = [calculate_level_from_points(p, bands)["current_level"] for p in range(0, 6000, 13)]

    assert levels == sorted(levels)


def test_points_for_next_level():
    """Test cumulative points required for the next level"""
    assert points_for_next_level(1) == 100
    assert points_for_next_level(2) == 200
    assert points_for_next_level(10) == 1000


def test_progress_to_next_level():
    """Test percentage progress within a level"""
    assert progress_to_next_level(0) == 0
    assert progress_to_next_level(175) == pytest.approx(75.0)


# ============================================================================
# Session Points Tests
# ============================================================================

def test_award_session_points_short_text_session():
    """Test base award for a short English text session"""
    session = SessionRecord(mode="text", language="en", message_count=6)

    assert award_session_points(session) == 10


def test_award_session_points_message_bonuses():
    """Test 10+ and 20+ message bonuses stack"""
    assert award_session_points(SessionRecord(message_count=9)) == 10
    assert award_session_points(SessionRecord(message_count=10)) == 15
    assert award_session_points(SessionRecord(message_count=19)) == 15
    assert award_session_points(SessionRecord(message_count=20)) == 25


def test_award_session_points_voice_and_language_bonus():
    """Test voice and Hindi/Marathi bonuses"""
    assert award_session_points(SessionRecord(mode="voice", language="en")) == 15
    assert award_session_points(SessionRecord(mode="text", language="hi")) == 13
    assert award_session_points(SessionRecord(mode="voice", language="mr", message_count=25)) == 33


def test_award_session_points_mode_multiplier():
    """Test per-mode multiplier scales the total"""
    policy = PointsPolicy(mode_multipliers={"text": 1.0, "voice": 2.0})

    assert award_session_points(SessionRecord(mode="voice"), policy) == 30
    assert award_session_points(SessionRecord(mode="text"), policy) == 10


def test_award_session_points_rounds_half_up():
    """Test fractional awards round half up"""
    policy = PointsPolicy(base_points=5, mode_multipliers={"text": 1.5})

    assert award_session_points(SessionRecord(mode="text"), policy) == 8  # 7.5 → 8


def test_award_session_points_unknown_mode():
    """Test unknown mode gets no bonus and multiplier 1"""
    assert award_session_points(SessionRecord(mode="video")) == 10


def test_award_session_points_deterministic():
    """Test same session always gets the same award"""
    session = SessionRecord(mode="voice", language="hi", message_count=21)

    assert len({award_session_points(session) for _ in range(5)}) == 1


def test_points_policy_clamps_negative_values():
    """Test negative policy values are clamped"""
    policy = PointsPolicy(
        base_points=-10,
        mode_bonuses={"voice": -5},
        mode_multipliers={"voice": float("nan")},
    )

    assert policy.base_points == 0
    assert policy.mode_bonuses["voice"] == 0
    assert award_session_points(SessionRecord(mode="voice"), policy) == 0


def test_award_session_points_clamps_session_counts():
    """Test negative message counts award only the base"""
    session = SessionRecord(message_count=-40)

    assert session.message_count == 0
    assert award_session_points(session) == 10


def test_level_helpers_accept_custom_bands():
    """Test calculate_level and progress_to_next_level honour a band table"""
    bands = [LevelBand(until_level=5, points_per_level=100), LevelBand(until_level=None, points_per_level=200)]

    assert calculate_level(399, bands) == 4
    assert calculate_level(500, bands) == 5
    assert progress_to_next_level(500, bands) == pytest.approx(50.0)
    assert calculate_level(500) == 6
