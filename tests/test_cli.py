"""Tests for the main.py command-line entry point.

Covers issue-token / verify-token round trips, rejection exit codes, the seed
command against a temporary SQLite file, and the no-command help path.
"""

import json

import pytest

import main
from core.config import get_settings


@pytest.fixture
def fresh_settings():
    """Clear the settings cache around a test that changes environment variables."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_issue_then_verify(capsys: pytest.CaptureFixture) -> None:
    assert main.main(["issue-token", "--user-id", "1", "--username", "player1"]) == 0
    token = capsys.readouterr().out.strip()
    assert len(token.split(".")) == 3

    assert main.main(["verify-token", token, "--json"]) == 0
    result = json.loads(capsys.readouterr().out)
    assert result["valid"] is True
    assert result["userId"] == 1
    assert result["username"] == "player1"
    assert result["expiresAt"]


def test_verify_accepts_bearer_prefix(capsys: pytest.CaptureFixture) -> None:
    main.main(["issue-token", "--user-id", "7", "--username", "bearer"])
    token = capsys.readouterr().out.strip()
    assert main.main(["verify-token", f"Bearer {token}"]) == 0
    assert "bearer" in capsys.readouterr().out


def test_verify_rejects_garbage(capsys: pytest.CaptureFixture) -> None:
    assert main.main(["verify-token", "a.b", "--json"]) == 1
    result = json.loads(capsys.readouterr().out)
    assert result == {"valid": False, "reason": "malformed token", "code": "malformed_token"}


def test_verify_rejects_garbage_plain_output(capsys: pytest.CaptureFixture) -> None:
    assert main.main(["verify-token", "not-a-token"]) == 1
    assert "malformed token" in capsys.readouterr().out


def test_seed_command(tmp_path, monkeypatch: pytest.MonkeyPatch, fresh_settings, capsys) -> None:
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'cli.db'}")
    assert main.main(["seed"]) == 0
    assert "created" in capsys.readouterr().out
    assert main.main(["seed"]) == 0
    assert "nothing seeded" in capsys.readouterr().out


def test_no_command_prints_help(capsys: pytest.CaptureFixture) -> None:
    assert main.main([]) == 0
    assert "issue-token" in capsys.readouterr().out
