# Area: Persistence
"""
Durable session storage.

This package contains:
- Database initialization (database, schema.sql)
- Repositories (repo_games, repo_players)
- Stored record models and the load contract (records)
- The persistence interface and its SQLite implementation (persistence)
"""

from .database import get_connection, init_database
from .persistence import Persistence, SqlitePersistence
from .records import (
    GameRecord,
    PlayerRecord,
    ScoreEventRecord,
    load_state,
    split_delta,
)

__all__ = [
    "get_connection",
    "init_database",
    "Persistence",
    "SqlitePersistence",
    "GameRecord",
    "PlayerRecord",
    "ScoreEventRecord",
    "load_state",
    "split_delta",
]
