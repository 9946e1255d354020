"""
SQLite storage. One file, one connection, no ORM.

Tables:
- monitor_state: resume cursor per monitor name
- pastes: archived pastes (metadata + body), written by ArchiveHandler
"""

import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path

from errors import StateError
from models import Paste
from storage.cursor import CursorStore

log = logging.getLogger(__name__)


class Storage:
    def __init__(self, db_path: Path):
        db_path = Path(db_path)
        db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(db_path))
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.row_factory = sqlite3.Row
        self._migrate()

    def _migrate(self):
        """Create tables if they don't exist. No migration framework needed."""
        self._conn.executescript("""
            CREATE TABLE IF NOT EXISTS monitor_state (
                monitor_name TEXT PRIMARY KEY,
                last_key TEXT NOT NULL DEFAULT '',
                updated_at TEXT NOT NULL DEFAULT (datetime('now'))
            );

            CREATE TABLE IF NOT EXISTS pastes (
                key TEXT PRIMARY KEY,
                title TEXT NOT NULL,
                user TEXT NOT NULL,
                syntax TEXT NOT NULL,
                published_at TEXT NOT NULL,
                full_url TEXT NOT NULL,
                size INTEGER NOT NULL DEFAULT 0,
                expire INTEGER NOT NULL DEFAULT 0,
                body BLOB NOT NULL,
                archived_at TEXT NOT NULL
            );

            CREATE INDEX IF NOT EXISTS idx_pastes_published
                ON pastes(published_at);
            CREATE INDEX IF NOT EXISTS idx_pastes_syntax
                ON pastes(syntax);
        """)
        self._conn.commit()

    # ── Resume cursor ──

    def get_cursor(self, monitor_name: str) -> str:
        """Last delivered key for a monitor, "" if none."""
        row = self._conn.execute(
            "SELECT last_key FROM monitor_state WHERE monitor_name = ?",
            (monitor_name,),
        ).fetchone()
        return row[0] if row else ""

    def set_cursor(self, monitor_name: str, key: str):
        self._conn.execute(
            """INSERT INTO monitor_state (monitor_name, last_key, updated_at)
               VALUES (?, ?, datetime('now'))
               ON CONFLICT(monitor_name)
               DO UPDATE SET last_key = excluded.last_key, updated_at = excluded.updated_at""",
            (monitor_name, key),
        )
        self._conn.commit()

    # ── Paste archive ──

    def insert_paste(self, paste: Paste, body: bytes) -> bool:
        """
        Archive a paste. Returns True if new, False if the key was already stored.
        Idempotent: duplicates are silently ignored.
        """
        cursor = self._conn.execute(
            """INSERT OR IGNORE INTO pastes
               (key, title, user, syntax, published_at, full_url, size, expire, body, archived_at)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                paste.key,
                paste.title,
                paste.user,
                paste.syntax,
                paste.date.isoformat(),
                paste.full_url,
                paste.size,
                paste.expire,
                body,
                datetime.now(timezone.utc).isoformat(),
            ),
        )
        self._conn.commit()
        return cursor.rowcount > 0

    def get_paste_body(self, key: str) -> bytes | None:
        row = self._conn.execute(
            "SELECT body FROM pastes WHERE key = ?", (key,)
        ).fetchone()
        return bytes(row[0]) if row else None

    def get_stats(self) -> dict:
        """Basic stats for debugging."""
        total = self._conn.execute("SELECT COUNT(*) FROM pastes").fetchone()[0]
        by_syntax = {}
        for row in self._conn.execute(
            "SELECT syntax, COUNT(*) AS cnt FROM pastes GROUP BY syntax ORDER BY cnt DESC"
        ):
            by_syntax[row[0] or "unknown"] = row[1]
        return {"total_pastes": total, "by_syntax": by_syntax}

    def close(self):
        self._conn.close()


class SQLiteCursorStore(CursorStore):
    """Cursor kept in the monitor_state table, one row per monitor name."""

    def __init__(self, storage: Storage, monitor_name: str = "pastebin"):
        self._storage = storage
        self._name = monitor_name

    def load(self) -> str:
        try:
            return self._storage.get_cursor(self._name)
        except sqlite3.Error as e:
            raise StateError(f"read cursor for {self._name}: {e}") from e

    def save(self, key: str) -> None:
        try:
            self._storage.set_cursor(self._name, key)
        except sqlite3.Error as e:
            raise StateError(f"save cursor for {self._name}: {e}") from e
