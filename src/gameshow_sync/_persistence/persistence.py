# Area: Persistence
"""
gameshow_sync._persistence.persistence — Persistence collaborator
=================================================================

``Persistence`` is the narrow interface the session core writes
through; ``SqlitePersistence`` implements it on the repositories in
this package. All calls are blocking; the reconciler runs them in a
worker thread.

Every SQLite failure is re-raised as PersistenceError so callers only
handle the package's own exception types.
"""

import json
import logging
import sqlite3
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Mapping, Optional, Protocol

from ..errors import PersistenceError
from .database import DEFAULT_DB_PATH, init_database, transaction
from .records import GameRecord, PlayerRecord, ScoreEventRecord, split_delta
from .repo_games import GameRepository, ScoreEventRepository
from .repo_players import PlayerRepository

logger = logging.getLogger("gameshow_sync.persistence")


class Persistence(Protocol):
    """Durable storage for sessions, player slots and score events."""

    def create_game(
        self,
        game_id: str,
        host_code: str,
        host_name: Optional[str],
        segment_settings: Mapping[str, int],
    ) -> GameRecord:
        ...

    def update_game(self, game_id: str, partial: Mapping[str, Any]) -> None:
        ...

    def add_player(self, player_id: str, game_id: str, record: Mapping[str, Any]) -> None:
        ...

    def update_player(self, game_id: str, player_id: str, partial: Mapping[str, Any]) -> None:
        ...

    def get_game(self, game_id: str) -> Optional[GameRecord]:
        ...

    def get_players(self, game_id: str) -> List[PlayerRecord]:
        ...

    def add_score_event(self, game_id: str, event: Mapping[str, Any]) -> None:
        ...

    def get_score_events(self, game_id: str) -> List[ScoreEventRecord]:
        ...

    def clear_score_events(self, game_id: str) -> None:
        ...

    def apply_delta(self, game_id: str, delta: Mapping[str, Any], join: bool = False) -> None:
        ...


@contextmanager
def _guard(operation: str) -> Iterator[None]:
    try:
        yield
    except sqlite3.Error as e:
        logger.error(f"{operation} failed: {e}")
        raise PersistenceError(operation, str(e)) from e


def _encode(values: Mapping[str, Any]) -> Dict[str, Any]:
    """Encode JSON columns; other values pass through."""
    encoded = dict(values)
    for column in ("segment_settings", "special_buttons"):
        if column in encoded and not isinstance(encoded[column], str):
            encoded[column] = json.dumps(encoded[column])
    return encoded


def _merged_json(stored: Optional[str], partial: Mapping[str, Any]) -> Dict[str, Any]:
    try:
        base = json.loads(stored) if stored else {}
    except ValueError:
        base = {}
    base.update(partial)
    return base


class SqlitePersistence:
    """
    Persistence backed by one SQLite file.

    Single-call methods run in their own transaction. ``apply_delta``
    writes everything one game state delta touches in one transaction.

    Args:
        db_path: Path to the database file (created if missing)
    """

    def __init__(self, db_path: str = DEFAULT_DB_PATH):
        self.db_path = db_path
        with _guard("init_database"):
            init_database(db_path)
        self.games = GameRepository(db_path)
        self.players = PlayerRepository(db_path)
        self.score_events = ScoreEventRepository(db_path)

    # ── Games ────────────────────────────────────────────────

    def create_game(
        self,
        game_id: str,
        host_code: str,
        host_name: Optional[str],
        segment_settings: Mapping[str, int],
    ) -> GameRecord:
        """
        Create (or recreate) a session row.

        Returns:
            The stored record
        """
        settings = {getattr(k, "value", k): v for k, v in segment_settings.items()}
        with _guard("create_game"), transaction(self.db_path) as conn:
            self.games.create_game(game_id, host_code, host_name, json.dumps(settings), conn)
            row = self.games.get_game(game_id, conn)
        logger.info(f"Game created: {game_id}")
        return GameRecord.model_validate(row)

    def update_game(self, game_id: str, partial: Mapping[str, Any]) -> None:
        """
        Write changed session fields. ``segment_settings`` merges with
        the stored settings, matching the delta semantics.

        Raises:
            PersistenceError: If the game does not exist or the write fails
        """
        with _guard("update_game"), transaction(self.db_path) as conn:
            self._update_game(conn, game_id, partial)

    def get_game(self, game_id: str) -> Optional[GameRecord]:
        with _guard("get_game"):
            row = self.games.get_game(game_id)
        return GameRecord.model_validate(row) if row else None

    def _update_game(self, conn: sqlite3.Connection, game_id: str, partial: Mapping[str, Any]) -> None:
        values = dict(partial)
        if "segment_settings" in values:
            row = self.games.get_game(game_id, conn)
            stored = row["segment_settings"] if row else None
            values["segment_settings"] = _merged_json(stored, values["segment_settings"])
        if not self.games.update_game(game_id, _encode(values), conn) and values:
            raise PersistenceError("update_game", f"unknown game {game_id}")

    # ── Players ──────────────────────────────────────────────

    def add_player(self, player_id: str, game_id: str, record: Mapping[str, Any]) -> None:
        """Join a player slot; existing rows keep columns the record omits."""
        with _guard("add_player"), transaction(self.db_path) as conn:
            self.players.upsert_player(game_id, player_id, _encode(record), conn)
        logger.debug(f"Player {player_id} stored for {game_id}")

    def update_player(self, game_id: str, player_id: str, partial: Mapping[str, Any]) -> None:
        """
        Write changed player fields, creating the row if the slot was
        never joined. ``special_buttons`` merges with the stored buttons.
        """
        with _guard("update_player"), transaction(self.db_path) as conn:
            self._update_player(conn, game_id, player_id, partial)

    def get_players(self, game_id: str) -> List[PlayerRecord]:
        with _guard("get_players"):
            rows = self.players.get_players(game_id)
        return [PlayerRecord.model_validate(row) for row in rows]

    def _update_player(
        self, conn: sqlite3.Connection, game_id: str, player_id: str, partial: Mapping[str, Any]
    ) -> None:
        values = dict(partial)
        if "special_buttons" in values:
            row = self.players.get_player(game_id, player_id, conn)
            stored = row["special_buttons"] if row else None
            values["special_buttons"] = _merged_json(stored, values["special_buttons"])
        values = _encode(values)
        if not self.players.update_player(game_id, player_id, values, conn):
            self.players.upsert_player(game_id, player_id, values, conn)

    # ── Score events ─────────────────────────────────────────

    def add_score_event(self, game_id: str, event: Mapping[str, Any]) -> None:
        with _guard("add_score_event"), transaction(self.db_path) as conn:
            self._add_score_event(conn, game_id, event)

    def get_score_events(self, game_id: str) -> List[ScoreEventRecord]:
        with _guard("get_score_events"):
            rows = self.score_events.get_events(game_id)
        return [ScoreEventRecord.model_validate(row) for row in rows]

    def clear_score_events(self, game_id: str) -> None:
        with _guard("clear_score_events"):
            self.score_events.clear_events(game_id)

    def _add_score_event(self, conn: sqlite3.Connection, game_id: str, event: Mapping[str, Any]) -> None:
        self.score_events.add_event(
            game_id,
            event["player_id"],
            int(event["points"]),
            int(event["timestamp"]),
            event.get("reason"),
            event.get("event_id"),
            conn,
        )

    # ── Deltas ───────────────────────────────────────────────

    def apply_delta(self, game_id: str, delta: Mapping[str, Any], join: bool = False) -> None:
        """
        Write one game state delta atomically.

        Either every row the delta touches is written, or none is.

        Args:
            game_id: Session the delta belongs to
            delta: Delta as produced by diff_states
            join: Player entries come from a join; their rows record
                the slot as ``role``

        Raises:
            PersistenceError: If any write fails (nothing is committed)
        """
        game_partial, player_partials, events, replace_history = split_delta(dict(delta))
        with _guard("apply_delta"), transaction(self.db_path) as conn:
            if game_partial:
                self._update_game(conn, game_id, game_partial)
            for player_id, partial in player_partials.items():
                if join:
                    record = _encode({**partial, "role": player_id})
                    self.players.upsert_player(game_id, player_id, record, conn)
                else:
                    self._update_player(conn, game_id, player_id, partial)
            if replace_history:
                self.score_events.clear_events(game_id, conn)
            for event in events:
                self._add_score_event(conn, game_id, event)
        logger.debug(f"Delta stored for {game_id}: {sorted(delta)}")
