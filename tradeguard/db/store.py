"""Key-value stores for TradeGuard.

Values are JSON documents stored under string keys. Rules live under
``"rules"`` and each day's ledger under ``"day:YYYY-MM-DD"``.
"""

import json
import logging
import sqlite3
from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class ReadStatus(str, Enum):
    """Outcome of reading a key."""

    OK = "ok"
    ABSENT = "absent"
    CORRUPT = "corrupt"


class StoredValue(BaseModel):
    """Decoded value of a key, or the reason there isn't one."""

    status: ReadStatus = Field(..., description="Read outcome")
    value: Any = Field(default=None, description="Decoded JSON value when status is OK")
    error: Optional[str] = Field(default=None, description="Decode error when status is CORRUPT")

    model_config = {"frozen": True}

    @property
    def ok(self) -> bool:
        return self.status is ReadStatus.OK


def decode(raw: Optional[str]) -> StoredValue:
    """Decode a raw stored string.

    A JSON ``null`` is treated the same as a missing key.
    """
    if raw is None:
        return StoredValue(status=ReadStatus.ABSENT)
    try:
        value = json.loads(raw)
    except (TypeError, ValueError) as e:
        return StoredValue(status=ReadStatus.CORRUPT, error=str(e))
    if value is None:
        return StoredValue(status=ReadStatus.ABSENT)
    return StoredValue(status=ReadStatus.OK, value=value)


class KeyValueStore(ABC):
    """Abstract JSON key-value store.

    Subclasses implement raw string access; decoding and the
    fallback policy are shared.
    """

    @abstractmethod
    def get_raw(self, key: str) -> Optional[str]:
        """Return the raw stored string for ``key`` or None."""
        pass

    @abstractmethod
    def set_raw(self, key: str, raw: str) -> None:
        """Store ``raw`` under ``key``, replacing any previous value."""
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove ``key`` if present."""
        pass

    @abstractmethod
    def keys(self, prefix: str = "") -> list[str]:
        """Return all keys starting with ``prefix``, sorted."""
        pass

    def read(self, key: str) -> StoredValue:
        """Read and decode ``key``."""
        return decode(self.get_raw(key))

    def get(self, key: str, fallback: Any = None) -> Any:
        """Return the decoded value for ``key``, or ``fallback``.

        Never raises for malformed data.
        """
        stored = self.read(key)
        if stored.status is ReadStatus.CORRUPT:
            logger.warning("Malformed value under %r, using fallback: %s", key, stored.error)
        return stored.value if stored.ok else fallback

    def set(self, key: str, value: Any) -> None:
        """Encode ``value`` as JSON and store it under ``key``."""
        self.set_raw(key, json.dumps(value, ensure_ascii=False))


class MemoryStore(KeyValueStore):
    """In-process store, mostly useful for tests and dry runs."""

    def __init__(self, data: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(data or {})

    def get_raw(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_raw(self, key: str, raw: str) -> None:
        self._data[key] = raw

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self, prefix: str = "") -> list[str]:
        return sorted(k for k in self._data if k.startswith(prefix))


class SqliteStore(KeyValueStore):
    """SQLite-backed key-value store."""

    TABLE = "kv"

    def __init__(self, db_path: Path):
        """Initialize the store.

        Args:
            db_path: Path to the SQLite database file.
        """
        self.db_path = db_path
        self._ensure_db_dir()
        self._init_schema()

    def _ensure_db_dir(self) -> None:
        """Ensure the database directory exists."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def _get_connection(self) -> sqlite3.Connection:
        """Get a database connection."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_schema(self) -> None:
        """Initialize database schema on first run."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(f"""
                CREATE TABLE IF NOT EXISTS {self.TABLE} (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
                )
            """)
            conn.commit()
        finally:
            conn.close()

    def get_raw(self, key: str) -> Optional[str]:
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(f"SELECT value FROM {self.TABLE} WHERE key = ?", (key,))
            row = cursor.fetchone()
            return row["value"] if row else None
        finally:
            conn.close()

    def set_raw(self, key: str, raw: str) -> None:
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                f"""
                INSERT OR REPLACE INTO {self.TABLE} (key, value, updated_at)
                VALUES (?, ?, CURRENT_TIMESTAMP)
                """,
                (key, raw),
            )
            conn.commit()
        finally:
            conn.close()

    def delete(self, key: str) -> None:
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(f"DELETE FROM {self.TABLE} WHERE key = ?", (key,))
            conn.commit()
        finally:
            conn.close()

    def keys(self, prefix: str = "") -> list[str]:
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                f"SELECT key FROM {self.TABLE} WHERE substr(key, 1, ?) = ? ORDER BY key",
                (len(prefix), prefix),
            )
            return [row["key"] for row in cursor.fetchall()]
        finally:
            conn.close()
