"""Durable append-only store for accepted quotes.

Purpose of this abstraction:
    Give the acquisition loop a narrow `append(text) -> id` contract backed by
    a local SQLite file (`quotes.db` in the working directory by default).

Schema:
    quotes(id INTEGER PRIMARY KEY AUTOINCREMENT,
           quote TEXT NOT NULL,
           created_at TEXT NOT NULL)   -- ISO-8601 UTC

Failure handling:
    Every `sqlite3.Error` is re-raised as `StoreError`. Each append commits
    before returning, so a returned id means the row is on disk.

External dependencies:
    - Standard library: `sqlite3`, `datetime`, `logging`.
"""

import logging
import sqlite3
from datetime import datetime, timezone
from typing import Protocol

from quotes_cli.core.errors import StoreError


logger = logging.getLogger(__name__)


class QuoteSink(Protocol):
    """Minimal persistence contract required by the acquisition loop."""

    def append(self, text: str, accepted_at: datetime | None = None) -> int:
        """Persist one quote and return its identifier."""
        ...


_CREATE_TABLE = """
CREATE TABLE IF NOT EXISTS quotes (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    quote TEXT NOT NULL,
    created_at TEXT NOT NULL
)
"""


class QuoteStore:
    """SQLite-backed `QuoteSink`.

    Args:
        path: Database file path, or `":memory:"`.
    """

    def __init__(self, path: str):
        self.path = path
        try:
            self._conn = sqlite3.connect(path)
            with self._conn:
                self._conn.execute(_CREATE_TABLE)
        except sqlite3.Error as exc:
            raise StoreError(f"Unable to initialize database at {path}: {exc}") from exc

    def append(self, text: str, accepted_at: datetime | None = None) -> int:
        """Insert one quote and return its row id.

        Raises:
            StoreError: The insert or commit failed.
        """
        accepted_at = accepted_at or datetime.now(timezone.utc)
        try:
            with self._conn:
                cursor = self._conn.execute(
                    "INSERT INTO quotes (quote, created_at) VALUES (?, ?)",
                    (text, accepted_at.isoformat()),
                )
        except sqlite3.Error as exc:
            raise StoreError(f"Failed to save quote: {exc}") from exc

        logger.debug("Stored quote id=%s", cursor.lastrowid)
        return cursor.lastrowid

    def count(self) -> int:
        try:
            row = self._conn.execute("SELECT COUNT(*) FROM quotes").fetchone()
        except sqlite3.Error as exc:
            raise StoreError(f"Failed to count quotes: {exc}") from exc
        return row[0]

    def recent(self, limit: int) -> list[str]:
        """Return up to `limit` most recent quotes, oldest first."""
        if limit <= 0:
            return []
        try:
            rows = self._conn.execute(
                "SELECT quote FROM quotes ORDER BY id DESC LIMIT ?",
                (limit,),
            ).fetchall()
        except sqlite3.Error as exc:
            raise StoreError(f"Failed to read quotes: {exc}") from exc
        return [row[0] for row in reversed(rows)]

    def close(self) -> None:
        self._conn.close()
