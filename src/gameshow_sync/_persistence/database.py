# Area: Persistence
"""
gameshow_sync._persistence.database — Session database access
=============================================================

SQLite setup for session storage and the repository base class.

A session change usually touches several tables at once (the game row,
one or more player rows, the score history). Repositories therefore
never commit on their own when handed a connection: the caller opens
one ``transaction()`` and passes its connection to every write, so the
whole change commits or rolls back together.

    with transaction(db_path) as conn:
        games.update_game("G1", {"phase": "PLAYING"}, conn=conn)
        score_events.clear_events("G1", conn=conn)
"""

import logging
import sqlite3
from contextlib import contextmanager, nullcontext
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

logger = logging.getLogger("gameshow_sync.persistence.database")

# Path to schema file
SCHEMA_PATH = Path(__file__).parent / "schema.sql"

DEFAULT_DB_PATH = "gameshow.db"


def get_connection(db_path: str = DEFAULT_DB_PATH) -> sqlite3.Connection:
    """Open a connection whose rows convert to dicts."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    return conn


@contextmanager
def transaction(db_path: str = DEFAULT_DB_PATH) -> Iterator[sqlite3.Connection]:
    """
    Run a block of statements as one transaction.

    Commits when the block finishes, rolls back if it raises, and
    always closes the connection.

    Args:
        db_path: Path to the SQLite database file

    Yields:
        The open connection to execute on
    """
    conn = get_connection(db_path)
    try:
        yield conn
        conn.commit()
    except BaseException:
        conn.rollback()
        raise
    finally:
        conn.close()


def init_database(db_path: str = DEFAULT_DB_PATH) -> None:
    """Create the session tables if missing. Safe to run on an existing file."""
    schema = SCHEMA_PATH.read_text()
    with transaction(db_path) as conn:
        conn.executescript(schema)
    logger.info(f"Database initialized at {db_path}")


class BaseRepository:
    """
    Base class for the session repositories.

    Every query helper takes an optional ``conn``. With one, the query
    joins the caller's transaction; without one, it runs in a
    transaction of its own.

    Args:
        db_path: Path to the SQLite database file
    """

    def __init__(self, db_path: str = DEFAULT_DB_PATH):
        self.db_path = db_path

    def _transaction(self, conn: Optional[sqlite3.Connection] = None):
        if conn is not None:
            return nullcontext(conn)
        return transaction(self.db_path)

    def _execute(
        self, query: str, params: tuple = (), conn: Optional[sqlite3.Connection] = None
    ) -> int:
        """Run a write; returns the number of affected rows."""
        with self._transaction(conn) as active:
            return active.execute(query, params).rowcount

    def _fetch_all(
        self, query: str, params: tuple = (), conn: Optional[sqlite3.Connection] = None
    ) -> List[Dict[str, Any]]:
        with self._transaction(conn) as active:
            return [dict(row) for row in active.execute(query, params).fetchall()]

    def _fetch_one(
        self, query: str, params: tuple = (), conn: Optional[sqlite3.Connection] = None
    ) -> Optional[Dict[str, Any]]:
        rows = self._fetch_all(query, params, conn)
        return rows[0] if rows else None
