"""
Search Index - Full-text recipe index on SQLite FTS5.

The synchronizer only depends on the SearchIndex protocol. SqliteSearchIndex
is the implementation the command line uses; a db_path of None keeps the
whole index in memory.
"""

import logging
import re
import sqlite3
from pathlib import Path
from typing import List, Mapping, Optional, Protocol

from .errors import IndexOperationFailed


logger = logging.getLogger(__name__)


_TOKEN_RE = re.compile(r"\w+", re.UNICODE)


class SearchIndex(Protocol):
    """Capability the synchronizer writes through."""

    @property
    def is_new(self) -> bool:
        """True when the index was created empty by this process."""
        ...

    def index(self, key: str, document: Mapping[str, object]) -> None:
        ...

    def delete(self, key: str) -> None:
        ...

    def search(self, query: str, limit: int = 20) -> List[str]:
        ...

    def close(self) -> None:
        ...


class SqliteSearchIndex:
    """
    SQLite FTS5 search index keyed by recipe title.

    Write failures surface as IndexOperationFailed so a single bad recipe
    does not stop a sync pass.
    """

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = Path(db_path) if db_path is not None else None
        self._conn: Optional[sqlite3.Connection] = None
        self._is_new = False

    @property
    def is_new(self) -> bool:
        self._get_connection()
        return self._is_new

    def _get_connection(self) -> sqlite3.Connection:
        """Get or create the database connection."""
        if self._conn is None:
            if self.db_path is None:
                logger.info("Creating memory only search index")
                self._conn = self._open(":memory:")
            else:
                logger.info(f"Trying to open index path {self.db_path}")
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
                try:
                    self._conn = self._open(str(self.db_path))
                except sqlite3.DatabaseError as e:
                    logger.warning(
                        f"Failed to open index path {self.db_path}, trying to recreate it: {e}"
                    )
                    self.db_path.unlink(missing_ok=True)
                    self._conn = self._open(str(self.db_path))
        return self._conn

    def _open(self, database: str) -> sqlite3.Connection:
        conn = sqlite3.connect(database, check_same_thread=False)
        try:
            conn.execute("PRAGMA journal_mode = WAL")
            conn.execute("PRAGMA synchronous = NORMAL")
            self._is_new = self._init_tables(conn)
        except sqlite3.DatabaseError:
            conn.close()
            raise
        return conn

    def _init_tables(self, conn: sqlite3.Connection) -> bool:
        """Create the FTS table if missing. Returns True if it was created."""
        row = conn.execute(
            "SELECT name FROM sqlite_master WHERE type = 'table' AND name = 'recipes'"
        ).fetchone()
        if row is not None:
            return False

        conn.execute("""
            CREATE VIRTUAL TABLE recipes USING fts5(
                key UNINDEXED,
                title,
                body
            )
        """)
        conn.commit()
        return True

    def index(self, key: str, document: Mapping[str, object]) -> None:
        """Add or replace the document stored under key."""
        conn = self._get_connection()
        try:
            with conn:
                conn.execute("DELETE FROM recipes WHERE key = ?", (key,))
                conn.execute(
                    "INSERT INTO recipes (key, title, body) VALUES (?, ?, ?)",
                    (
                        key,
                        str(document.get("title") or key),
                        str(document.get("summary") or ""),
                    )
                )
        except sqlite3.Error as e:
            raise IndexOperationFailed("index", key, str(e)) from e

    def delete(self, key: str) -> None:
        """Remove key from the index; a missing key is not an error."""
        conn = self._get_connection()
        try:
            with conn:
                conn.execute("DELETE FROM recipes WHERE key = ?", (key,))
        except sqlite3.Error as e:
            raise IndexOperationFailed("delete", key, str(e)) from e

    def keys(self) -> List[str]:
        """All keys currently stored."""
        conn = self._get_connection()
        return [row[0] for row in conn.execute("SELECT key FROM recipes ORDER BY key")]

    def search(self, query: str, limit: int = 20) -> List[str]:
        """
        Ranked keys matching query.

        Tries an all-terms match first, then falls back to a prefix match
        on any term when nothing is found.
        """
        tokens = _TOKEN_RE.findall(query)
        if not tokens:
            return []

        exact = " ".join(f'"{t}"' for t in tokens)
        hits = self._match(exact, limit)
        if not hits:
            fuzzy = " OR ".join(f'"{t}"*' for t in tokens)
            logger.debug(f"No hits for {query!r}, trying {fuzzy!r}")
            hits = self._match(fuzzy, limit)
        return hits

    def _match(self, expression: str, limit: int) -> List[str]:
        conn = self._get_connection()
        cursor = conn.execute(
            "SELECT key FROM recipes WHERE recipes MATCH ? ORDER BY rank LIMIT ?",
            (expression, limit)
        )
        return [row[0] for row in cursor.fetchall()]

    def close(self):
        """Close database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None
