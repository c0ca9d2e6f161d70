# Area: Persistence
"""
gameshow_sync._persistence.repo_players — Players Repository
============================================================

Repository for the players table. A row exists for each player slot
that has been joined or updated in a session.
"""

import sqlite3
from typing import Any, Dict, List, Optional
from .database import BaseRepository

PLAYER_COLUMNS = (
    "name",
    "score",
    "strikes",
    "special_buttons",
    "flag",
    "club",
    "is_connected",
    "role",
)


class PlayerRepository(BaseRepository):
    """
    Repository for players table.

    Handles joining, updating and listing the player slots of a session.
    """

    def upsert_player(
        self,
        game_id: str,
        player_id: str,
        values: Dict[str, Any],
        conn: Optional[sqlite3.Connection] = None,
    ) -> None:
        """
        Insert a player row, or update the given columns if it exists.

        Args:
            game_id: Session identifier
            player_id: Player slot ("host", "playerA", "playerB")
            values: Column -> value; unknown columns are skipped
            conn: Open transaction to join (optional)
        """
        columns = [c for c in PLAYER_COLUMNS if c in values]
        names = ", ".join(["game_id", "player_id"] + columns)
        placeholders = ", ".join("?" for _ in range(len(columns) + 2))
        if columns:
            updates = ", ".join(f"{c} = excluded.{c}" for c in columns)
            conflict = f"DO UPDATE SET {updates}, updated_at = CURRENT_TIMESTAMP"
        else:
            conflict = "DO NOTHING"
        query = f"""
            INSERT INTO players ({names})
            VALUES ({placeholders})
            ON CONFLICT (game_id, player_id) {conflict}
        """
        params = (game_id, player_id) + tuple(values[c] for c in columns)
        self._execute(query, params, conn)

    def update_player(
        self,
        game_id: str,
        player_id: str,
        values: Dict[str, Any],
        conn: Optional[sqlite3.Connection] = None,
    ) -> int:
        """
        Update some columns of an existing player row.

        Returns:
            Number of rows updated (0 if the row does not exist)
        """
        columns = [c for c in PLAYER_COLUMNS if c in values]
        if not columns:
            return 0
        assignments = ", ".join(f"{c} = ?" for c in columns)
        query = f"""
            UPDATE players SET {assignments}, updated_at = CURRENT_TIMESTAMP
            WHERE game_id = ? AND player_id = ?
        """
        params = tuple(values[c] for c in columns) + (game_id, player_id)
        return self._execute(query, params, conn)

    def get_player(
        self, game_id: str, player_id: str, conn: Optional[sqlite3.Connection] = None
    ) -> Optional[Dict[str, Any]]:
        query = "SELECT * FROM players WHERE game_id = ? AND player_id = ?"
        return self._fetch_one(query, (game_id, player_id), conn)

    def get_players(self, game_id: str) -> List[Dict[str, Any]]:
        """
        Get all player rows of a session.

        Args:
            game_id: Session identifier

        Returns:
            List of player rows
        """
        query = "SELECT * FROM players WHERE game_id = ? ORDER BY player_id"
        return self._fetch_all(query, (game_id,))
