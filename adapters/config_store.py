import json
import sqlite3
import threading
from typing import Any, Dict, Optional, Protocol

from core import logger


GUEST_SCOPE = "guest"
POMODORO_PREFIX = "pomodoro-storage"
RECENTLY_PLAYED_PREFIX = "recently-played"
PLAYER_PREFERENCES_KEY = "music-player-storage"


def scope_key(prefix: str, user_id: Optional[str]) -> str:
    """
    Namespace a record per identity, guests share one scope
    :param prefix:
    :param user_id:
    :return:
    """
    return f"{prefix}-{user_id}" if user_id else f"{prefix}-{GUEST_SCOPE}"


class ConfigStore(Protocol):
    def load(self, scope: str) -> Optional[Dict[str, Any]]:
        ...

    def save(self, scope: str, patch: Dict[str, Any]) -> None:
        ...


class MemoryConfigStore:
    """In-process store, nothing survives a restart"""

    def __init__(self, records: Dict[str, Dict[str, Any]] = None):
        self._records: Dict[str, Dict[str, Any]] = {k: dict(v) for k, v in (records or {}).items()}

    def load(self, scope: str) -> Optional[Dict[str, Any]]:
        record = self._records.get(scope)
        return dict(record) if record is not None else None

    def save(self, scope: str, patch: Dict[str, Any]) -> None:
        self._records.setdefault(scope, {}).update(patch)


class SqliteConfigStore:
    def __init__(self, db_path: str):
        self.db_path = db_path
        self._lock = threading.Lock()
        self._init_db()

    def _get_connection(self):
        conn = sqlite3.connect(self.db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self):
        with self._get_connection() as conn:
            conn.execute("PRAGMA journal_mode=WAL;")
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS records (
                    scope TEXT PRIMARY KEY,
                    data TEXT NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                );
            """)

    def load(self, scope: str) -> Optional[Dict[str, Any]]:
        """
        Read the record for a scope. A missing or unreadable record reads as absent
        :param scope:
        :return:
        """
        with self._get_connection() as conn:
            row = conn.execute("SELECT data FROM records WHERE scope = ?", (scope,)).fetchone()
        if row is None:
            return None
        try:
            data = json.loads(row['data'])
        except (TypeError, ValueError) as e:
            logger.warning(f"[ConfigStore] Corrupt record for {scope}: {e}")
            return None
        return data if isinstance(data, dict) else None

    def save(self, scope: str, patch: Dict[str, Any]) -> None:
        """
        Merge `patch` into the stored record
        :param scope:
        :param patch:
        :return:
        """
        with self._lock:
            record = self.load(scope) or {}
            record.update(patch)
            with self._get_connection() as conn:
                conn.execute("""
                    INSERT INTO records (scope, data, updated_at) VALUES (?, ?, CURRENT_TIMESTAMP)
                    ON CONFLICT(scope) DO UPDATE SET data = excluded.data, updated_at = CURRENT_TIMESTAMP
                """, (scope, json.dumps(record)))

    def delete(self, scope: str) -> None:
        with self._get_connection() as conn:
            conn.execute("DELETE FROM records WHERE scope = ?", (scope,))
