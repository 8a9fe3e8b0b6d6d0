"""SQLite-backed key-value storage for cached JSON blobs."""

from __future__ import annotations

import datetime as dt
import json
import logging
import sqlite3
from contextlib import closing
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional

from .errors import StorageError
from .models import StorageResult

logger = logging.getLogger(__name__)

SQLITE_PREFIX = "sqlite://"


def resolve_sqlite_path(database_url: str) -> Path:
    """Translate a STORE_URL into a filesystem path."""
    if not database_url:
        raise ValueError("STORE_URL must not be empty")

    if database_url.startswith(SQLITE_PREFIX):
        raw_path = database_url[len(SQLITE_PREFIX) :]
        # Allow sqlite:///path/to/file and sqlite://path/to/file styles.
        if raw_path.startswith("/"):
            raw_path = raw_path[1:]
        path = Path(raw_path)
    else:
        path = Path(database_url)

    if not path.is_absolute():
        path = Path.cwd() / path

    return path.expanduser().resolve()


@dataclass
class SQLiteStore:
    """String-keyed JSON store on top of sqlite3.

    Every call returns a ``StorageResult`` instead of raising, so callers
    decide which default a failure degrades to.
    """

    path: Path
    max_value_bytes: Optional[int] = None

    def connect(self) -> sqlite3.Connection:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        return sqlite3.connect(self.path)

    def initialize(self) -> None:
        with closing(self.connect()) as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv_store (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
                """
            )
            conn.commit()

    def read(self, key: str) -> StorageResult[Any]:
        try:
            with closing(self.connect()) as conn:
                row = conn.execute(
                    "SELECT value FROM kv_store WHERE key = ?",
                    (key,),
                ).fetchone()
        except sqlite3.Error as exc:
            return StorageResult(error=StorageError(key, f"unreadable: {exc}"))

        if not row:
            return StorageResult(value=None)
        try:
            return StorageResult(value=json.loads(row[0]))
        except ValueError as exc:
            return StorageResult(error=StorageError(key, f"corrupt: {exc}"))

    def write(self, key: str, value: Any) -> StorageResult[None]:
        try:
            payload = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            return StorageResult(error=StorageError(key, f"not serializable: {exc}"))

        if (
            self.max_value_bytes is not None
            and len(payload.encode("utf-8")) > self.max_value_bytes
        ):
            return StorageResult(error=StorageError(key, "quota exceeded"))

        updated_at = dt.datetime.now(dt.timezone.utc).isoformat()
        try:
            with closing(self.connect()) as conn:
                conn.execute(
                    """
                    INSERT INTO kv_store (key, value, updated_at)
                    VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET
                        value=excluded.value,
                        updated_at=excluded.updated_at
                    """,
                    (key, payload, updated_at),
                )
                conn.commit()
        except sqlite3.Error as exc:
            return StorageResult(error=StorageError(key, f"write failed: {exc}"))
        return StorageResult(value=None)

    def remove(self, key: str) -> StorageResult[None]:
        try:
            with closing(self.connect()) as conn:
                conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
                conn.commit()
        except sqlite3.Error as exc:
            return StorageResult(error=StorageError(key, f"remove failed: {exc}"))
        return StorageResult(value=None)

    def keys(self) -> List[str]:
        try:
            with closing(self.connect()) as conn:
                cursor = conn.execute("SELECT key FROM kv_store ORDER BY key")
                return [row[0] for row in cursor.fetchall()]
        except sqlite3.Error:
            logger.exception("Failed to list keys in %s", self.path)
            return []
