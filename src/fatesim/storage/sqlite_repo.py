"""SQLite-based repository implementation.

Stores each user's state as a JSON document in a single table, using the
standard library sqlite3 module.
"""

import json
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from .repository import GameStateRepository


def dict_factory(cursor: sqlite3.Cursor, row: tuple) -> dict:
    """Convert sqlite3 row to dict."""
    return {col[0]: row[idx] for idx, col in enumerate(cursor.description)}


class SQLiteGameStateRepository(GameStateRepository):
    """SQLite-based game state repository."""

    def __init__(self, database_uri: str = "instance/fatesim.db"):
        """Initialize repository.

        Args:
            database_uri: Path to SQLite database file
        """
        self.database_path = Path(database_uri)
        self.database_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _get_connection(self) -> sqlite3.Connection:
        """Get database connection."""
        conn = sqlite3.connect(self.database_path)
        conn.row_factory = dict_factory
        return conn

    def _init_db(self) -> None:
        """Initialize database schema."""
        conn = self._get_connection()
        try:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS game_states (
                    user_id TEXT PRIMARY KEY,
                    month INTEGER DEFAULT 0,
                    data TEXT NOT NULL,
                    created_at TEXT,
                    updated_at TEXT
                )
            """)
            conn.commit()
        finally:
            conn.close()

    def save_user_data(self, user_id: str, data: dict) -> None:
        """Persist a user's complete state (upsert)."""
        now = datetime.now(timezone.utc).isoformat()
        conn = self._get_connection()
        try:
            conn.execute("""
                INSERT INTO game_states (user_id, month, data, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(user_id) DO UPDATE SET
                    month = excluded.month,
                    data = excluded.data,
                    updated_at = excluded.updated_at
            """, (
                user_id,
                data.get("month", 0),
                json.dumps(data, ensure_ascii=False),
                now,
                now,
            ))
            conn.commit()
        finally:
            conn.close()

    def load_user_data(self, user_id: str) -> Optional[dict]:
        """Load a user's saved state."""
        conn = self._get_connection()
        try:
            row = conn.execute(
                "SELECT data FROM game_states WHERE user_id = ?", (user_id,)
            ).fetchone()
        finally:
            conn.close()

        if row is None:
            return None
        return json.loads(row["data"])

    def delete_user_data(self, user_id: str) -> bool:
        """Delete a user's saved state."""
        conn = self._get_connection()
        try:
            cursor = conn.execute("DELETE FROM game_states WHERE user_id = ?", (user_id,))
            deleted = cursor.rowcount > 0
            conn.commit()
        finally:
            conn.close()
        return deleted

    def list_users(self) -> list[dict]:
        """List saved users, most recently updated first."""
        conn = self._get_connection()
        try:
            rows = conn.execute("""
                SELECT user_id, month, updated_at
                FROM game_states
                ORDER BY updated_at DESC
            """).fetchall()
        finally:
            conn.close()
        return rows
