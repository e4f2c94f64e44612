import os
import sqlite3
from typing import Dict, Optional

from .config import settings


def default_db_path() -> str:
    return os.path.join(settings.DB_DIR, settings.DB_FILE)


def get_db_connection(db_path: Optional[str] = None):
    """Establishes a connection to the SQLite database."""
    conn = sqlite3.connect(db_path or default_db_path())
    conn.row_factory = sqlite3.Row
    return conn


def create_tables(db_path: Optional[str] = None):
    """Creates the log and key-value tables if they don't exist."""
    conn = get_db_connection(db_path)
    with conn:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS logs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                timestamp DATETIME DEFAULT CURRENT_TIMESTAMP,
                level TEXT,
                logger TEXT,
                message TEXT
            );
        """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS kv (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL
            );
        """
        )
    conn.close()


def init_db(db_path: Optional[str] = None):
    """Initializes the database and creates necessary tables."""
    directory = os.path.dirname(db_path or default_db_path())
    if directory and not os.path.exists(directory):
        os.makedirs(directory, exist_ok=True)
    create_tables(db_path)


# --- Key-value stores for vocabulary overrides ---
class MemoryStore:
    def __init__(self):
        self._data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str):
        self._data[key] = value

    def delete(self, key: str):
        self._data.pop(key, None)


class SQLiteStore:
    """Text values keyed by name, kept in the ``kv`` table."""

    def __init__(self, db_path: Optional[str] = None):
        self.db_path = db_path or default_db_path()
        init_db(self.db_path)

    def get(self, key: str) -> Optional[str]:
        conn = get_db_connection(self.db_path)
        try:
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        finally:
            conn.close()
        return row["value"] if row else None

    def set(self, key: str, value: str):
        conn = get_db_connection(self.db_path)
        with conn:
            conn.execute(
                "INSERT INTO kv (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (key, value),
            )
        conn.close()

    def delete(self, key: str):
        conn = get_db_connection(self.db_path)
        with conn:
            conn.execute("DELETE FROM kv WHERE key = ?", (key,))
        conn.close()
