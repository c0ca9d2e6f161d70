# Area: Persistence Tests
"""Tests for Games and Score Events Repositories."""

import json
import os
import tempfile

import pytest

from gameshow_sync._persistence.database import init_database, transaction
from gameshow_sync._persistence.repo_games import GameRepository, ScoreEventRepository


@pytest.fixture
def db_path():
    """Create temporary database for testing."""
    fd, path = tempfile.mkstemp(suffix=".db")
    os.close(fd)
    init_database(path)
    yield path
    os.unlink(path)


class TestGameRepository:
    """Tests for GameRepository class."""

    @pytest.fixture
    def repo(self, db_path):
        return GameRepository(db_path)

    def test_create_game(self, repo):
        """Test saving a new game row with defaults."""
        repo.create_game("G1", "HOST-42", "Dana", json.dumps({"WSHA": 10}))

        game = repo.get_game("G1")
        assert game is not None
        assert game["host_code"] == "HOST-42"
        assert game["host_name"] == "Dana"
        assert game["phase"] == "CONFIG"
        assert game["timer"] == 0
        assert json.loads(game["segment_settings"]) == {"WSHA": 10}

    def test_create_game_replaces_existing(self, repo):
        repo.create_game("G1", "OLD", None, "{}")
        repo.update_game("G1", {"timer": 9})
        repo.create_game("G1", "NEW", "Dana", "{}")

        game = repo.get_game("G1")
        assert game["host_code"] == "NEW"
        assert game["timer"] == 0

    def test_get_missing_game(self, repo):
        assert repo.get_game("NOPE") is None

    def test_update_game_columns(self, repo):
        """Only whitelisted columns are written."""
        repo.create_game("G1", "HOST-42", None, "{}")
        updated = repo.update_game("G1", {"phase": "PLAYING", "timer": 30, "bogus": 1})

        assert updated == 1
        game = repo.get_game("G1")
        assert game["phase"] == "PLAYING"
        assert game["timer"] == 30

    def test_update_unknown_game(self, repo):
        assert repo.update_game("NOPE", {"timer": 1}) == 0

    def test_update_without_columns(self, repo):
        repo.create_game("G1", "HOST-42", None, "{}")
        assert repo.update_game("G1", {"bogus": 1}) == 0

    def test_get_all_games(self, repo):
        repo.create_game("G1", "A", None, "{}")
        repo.create_game("G2", "B", None, "{}")
        assert {g["id"] for g in repo.get_all_games()} == {"G1", "G2"}


class TestScoreEventRepository:
    """Tests for ScoreEventRepository class."""

    @pytest.fixture
    def repo(self, db_path):
        return ScoreEventRepository(db_path)

    def test_events_in_recorded_order(self, repo):
        repo.add_event("G1", "playerA", 10, 1000, "correct")
        repo.add_event("G1", "playerB", -5, 900)
        repo.add_event("G2", "playerA", 1, 1)

        events = repo.get_events("G1")
        assert [(e["player_id"], e["points"]) for e in events] == [("playerA", 10), ("playerB", -5)]
        assert events[0]["reason"] == "correct"
        assert events[1]["reason"] is None

    def test_clear_events(self, repo):
        repo.add_event("G1", "playerA", 10, 1000)
        repo.add_event("G2", "playerA", 10, 1000)
        repo.clear_events("G1")
        assert repo.get_events("G1") == []
        assert len(repo.get_events("G2")) == 1

    def test_event_id_stored_once_per_game(self, repo):
        assert repo.add_event("G1", "playerA", 10, 1000, event_id="e1") == 1
        assert repo.add_event("G1", "playerA", 10, 1000, event_id="e1") == 0
        assert repo.add_event("G2", "playerA", 10, 1000, event_id="e1") == 1
        assert repo.add_event("G1", "playerA", 10, 1000) == 1
        assert repo.add_event("G1", "playerA", 10, 1000) == 1
        assert len(repo.get_events("G1")) == 3


class TestTransactions:
    """Repositories joining one caller-owned transaction."""

    def test_writes_commit_together(self, db_path):
        games = GameRepository(db_path)
        events = ScoreEventRepository(db_path)
        with transaction(db_path) as conn:
            games.create_game("G1", "HOST-42", None, "{}", conn=conn)
            events.add_event("G1", "playerA", 5, 1, conn=conn)
        assert games.get_game("G1") is not None
        assert len(events.get_events("G1")) == 1

    def test_failure_rolls_back_every_write(self, db_path):
        games = GameRepository(db_path)
        events = ScoreEventRepository(db_path)
        games.create_game("G1", "HOST-42", None, "{}")
        with pytest.raises(RuntimeError):
            with transaction(db_path) as conn:
                games.update_game("G1", {"phase": "PLAYING"}, conn=conn)
                events.add_event("G1", "playerA", 5, 1, conn=conn)
                raise RuntimeError("writer crashed")
        assert games.get_game("G1")["phase"] == "CONFIG"
        assert events.get_events("G1") == []
