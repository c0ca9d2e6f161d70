# Area: Persistence
"""
gameshow_sync._persistence.repo_games — Games Repository
========================================================

Repository for the games table (one row per session) and the
score_events table (append-only history of a session).
"""

import sqlite3
from typing import Any, Dict, List, Optional
from .database import BaseRepository

# Columns an update may touch; anything else is ignored
GAME_COLUMNS = (
    "host_code",
    "host_name",
    "phase",
    "current_segment",
    "current_question_index",
    "timer",
    "is_timer_running",
    "segment_settings",
    "video_room_url",
    "video_room_created",
)


class GameRepository(BaseRepository):
    """
    Repository for games table.

    Values are stored as given; JSON columns arrive already encoded.
    """

    def create_game(
        self,
        game_id: str,
        host_code: str,
        host_name: Optional[str],
        segment_settings_json: str,
        conn: Optional[sqlite3.Connection] = None,
    ) -> None:
        """
        Save a new game row, replacing any previous row with the same id.

        Args:
            game_id: Session identifier
            host_code: Host admission code
            host_name: Host display name, if known
            segment_settings_json: JSON object of question counts per segment
            conn: Open transaction to join (optional)
        """
        query = """
            INSERT OR REPLACE INTO games
            (id, host_code, host_name, segment_settings)
            VALUES (?, ?, ?, ?)
        """
        self._execute(query, (game_id, host_code, host_name, segment_settings_json), conn)

    def get_game(
        self, game_id: str, conn: Optional[sqlite3.Connection] = None
    ) -> Optional[Dict[str, Any]]:
        """
        Get a game by ID.

        Args:
            game_id: Session identifier to look up
            conn: Open transaction to read from (optional)

        Returns:
            Game row dict or None if not found
        """
        query = "SELECT * FROM games WHERE id = ?"
        return self._fetch_one(query, (game_id,), conn)

    def update_game(
        self,
        game_id: str,
        values: Dict[str, Any],
        conn: Optional[sqlite3.Connection] = None,
    ) -> int:
        """
        Update some columns of a game.

        Args:
            game_id: Session identifier
            values: Column -> value; unknown columns are skipped
            conn: Open transaction to join (optional)

        Returns:
            Number of rows updated (0 if the game does not exist)
        """
        columns = [c for c in GAME_COLUMNS if c in values]
        if not columns:
            return 0
        assignments = ", ".join(f"{c} = ?" for c in columns)
        query = f"UPDATE games SET {assignments}, updated_at = CURRENT_TIMESTAMP WHERE id = ?"
        params = tuple(values[c] for c in columns) + (game_id,)
        return self._execute(query, params, conn)

    def get_all_games(self) -> List[Dict[str, Any]]:
        """Get all games, newest first."""
        return self._fetch_all("SELECT * FROM games ORDER BY created_at DESC")


class ScoreEventRepository(BaseRepository):
    """Repository for score_events table."""

    def add_event(
        self,
        game_id: str,
        player_id: str,
        points: int,
        timestamp: int,
        reason: Optional[str] = None,
        event_id: Optional[str] = None,
        conn: Optional[sqlite3.Connection] = None,
    ) -> int:
        """
        Append one event. An event whose id is already stored for the
        session is skipped.

        Returns:
            1 if a row was added, else 0
        """
        query = """
            INSERT INTO score_events
            (game_id, event_id, player_id, points, timestamp, reason)
            VALUES (?, ?, ?, ?, ?, ?)
            ON CONFLICT (game_id, event_id) DO NOTHING
        """
        return self._execute(query, (game_id, event_id, player_id, points, timestamp, reason), conn)

    def get_events(self, game_id: str) -> List[Dict[str, Any]]:
        """
        Get a session's score events in the order they were recorded.

        Args:
            game_id: Session identifier

        Returns:
            List of score event rows
        """
        query = "SELECT * FROM score_events WHERE game_id = ? ORDER BY id"
        return self._fetch_all(query, (game_id,))

    def clear_events(self, game_id: str, conn: Optional[sqlite3.Connection] = None) -> None:
        """Delete every score event of a session."""
        self._execute("DELETE FROM score_events WHERE game_id = ?", (game_id,), conn)
