"""Tests for the command line entry point (src/main.py)"""
import json
import sys

import pytest

from src import main as cli
from src.exceptions import ValidationError


@pytest.fixture
def session_file(tmp_path):
    path = tmp_path / "session.json"
    path.write_text(json.dumps({"mode": "text", "language": "en", "message_count": 6}))
    return path


def test_main_new_user(monkeypatch, capsys, session_file):
    """Test applying a session for a user without a state file"""
    monkeypatch.setattr(sys, "argv", [
        "main", "--session", str(session_file), "--now", "2024-03-15T12:00:00Z",
    ])

    assert cli.main() == 0

    output = json.loads(capsys.readouterr().out)
    assert output["points_awarded"] == 10
    assert output["state"]["user_id"] == "local-user"
    assert output["state"]["streak"]["current"] == 1
    assert [b["id"] for b in output["new_badges"]] == ["first_session"]


def test_main_existing_state(monkeypatch, capsys, tmp_path, session_file):
    """Test a stored snapshot from yesterday extends the streak"""
    state_file = tmp_path / "state.json"
    state_file.write_text(json.dumps({
        "user_id": "user_42",
        "points": 40,
        "streak": {"current": 4, "longest": 5, "last_session_date": "2024-03-14T09:00:00Z"},
    }))
    monkeypatch.setattr(sys, "argv", [
        "main", "--session", str(session_file), "--state", str(state_file),
        "--now", "2024-03-15T12:00:00Z",
    ])

    assert cli.main() == 0

    state = json.loads(capsys.readouterr().out)["state"]
    assert state["user_id"] == "user_42"
    assert state["points"] == 50
    assert state["streak"]["current"] == 5
    assert state["streak"]["longest"] == 5


def test_main_bad_session_file(monkeypatch, capsys, tmp_path):
    """Test invalid input prints a structured error and exits non-zero"""
    bad = tmp_path / "session.json"
    bad.write_text("{not json")
    monkeypatch.setattr(sys, "argv", ["main", "--session", str(bad)])

    assert cli.main() == 1

    output = json.loads(capsys.readouterr().out)
    assert output["error"] == "ValidationError"


def test_parse_now_invalid():
    with pytest.raises(ValidationError):
        cli.parse_now("yesterday")
