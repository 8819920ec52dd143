"""Embedded message log backed by SQLite."""

import asyncio
import logging
import sqlite3
import threading
from pathlib import Path

from relay.db.base import in_id_range, utc_now_iso
from relay.errors import StorageError
from relay.models.chat import Message

_logger = logging.getLogger("relay.db.sqlite")

DEFAULT_DB_PATH = Path("data/messages.db")

# AUTOINCREMENT keeps the high-water mark in sqlite_sequence, so ids are never
# handed out twice even after the newest row is deleted and the process restarts.
_SCHEMA = """
CREATE TABLE IF NOT EXISTS messages (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    timestamp TEXT NOT NULL,
    nickname TEXT NOT NULL,
    message TEXT NOT NULL
)
"""


class SQLiteMessageStore:
    name = "sqlite"

    def __init__(self, db_path: Path | str = DEFAULT_DB_PATH) -> None:
        self._db_path = str(db_path)
        self._lock = threading.Lock()
        self._conn: sqlite3.Connection | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _open(self) -> None:
        with self._lock:
            if self._conn is None:
                self._conn = self._connect()

    def _connect(self) -> sqlite3.Connection:
        if self._db_path != ":memory:":
            Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self._db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        if self._db_path != ":memory:":
            conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA synchronous=FULL")
        with conn:
            conn.execute(_SCHEMA)
        return conn

    async def init(self) -> None:
        try:
            await asyncio.to_thread(self._open)
        except (sqlite3.Error, OSError) as e:
            raise StorageError(f"failed to open message store at {self._db_path}: {e}") from e
        _logger.info("Opened SQLite message store at %s", self._db_path)

    async def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StorageError("message store is not initialized")
        return self._conn

    # ------------------------------------------------------------------
    # Blocking operations, run via asyncio.to_thread
    # ------------------------------------------------------------------

    def _append(self, nickname: str, body: str) -> Message:
        with self._lock:
            conn = self._connection()
            ts = utc_now_iso()
            with conn:
                cur = conn.execute(
                    "INSERT INTO messages (timestamp, nickname, message) VALUES (?, ?, ?)",
                    (ts, nickname, body),
                )
            return Message(id=cur.lastrowid, timestamp=ts, nickname=nickname, message=body)

    def _delete(self, message_id: int) -> bool:
        if not in_id_range(message_id):
            return False
        with self._lock:
            conn = self._connection()
            with conn:
                cur = conn.execute("DELETE FROM messages WHERE id = ?", (message_id,))
            return cur.rowcount > 0

    def _scan_all(self) -> list[Message]:
        with self._lock:
            rows = self._connection().execute(
                "SELECT id, timestamp, nickname, message FROM messages ORDER BY id ASC"
            ).fetchall()
        return [
            Message(
                id=row["id"],
                timestamp=row["timestamp"],
                nickname=row["nickname"],
                message=row["message"],
            )
            for row in rows
        ]

    def _count(self) -> int:
        with self._lock:
            row = self._connection().execute("SELECT COUNT(*) FROM messages").fetchone()
        return int(row[0])

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def append(self, nickname: str, body: str) -> Message:
        try:
            return await asyncio.to_thread(self._append, nickname, body)
        except (sqlite3.Error, OverflowError) as e:
            raise StorageError(f"failed to append message: {e}") from e

    async def delete(self, message_id: int) -> bool:
        try:
            return await asyncio.to_thread(self._delete, message_id)
        except (sqlite3.Error, OverflowError) as e:
            raise StorageError(f"failed to delete message {message_id}: {e}") from e

    async def scan_all(self) -> list[Message]:
        try:
            return await asyncio.to_thread(self._scan_all)
        except (sqlite3.Error, OverflowError) as e:
            raise StorageError(f"failed to read messages: {e}") from e

    async def count(self) -> int:
        try:
            return await asyncio.to_thread(self._count)
        except (sqlite3.Error, OverflowError) as e:
            raise StorageError(f"failed to count messages: {e}") from e
