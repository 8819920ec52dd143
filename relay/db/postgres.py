"""Message log backed by PostgreSQL through a psycopg async pool."""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

import psycopg
from psycopg_pool import AsyncConnectionPool

from relay.db.base import in_id_range
from relay.errors import StorageError
from relay.models.chat import Message

_logger = logging.getLogger("relay.db.postgres")

_SCHEMA = """
CREATE TABLE IF NOT EXISTS chat_messages (
    id BIGSERIAL PRIMARY KEY,
    ts TIMESTAMPTZ NOT NULL,
    nickname TEXT NOT NULL,
    message TEXT NOT NULL
)
"""


def _row_to_message(row: tuple) -> Message:
    mid, ts, nickname, message = row
    return Message(
        id=mid,
        timestamp=ts.astimezone(UTC).isoformat(),
        nickname=nickname,
        message=message,
    )


class PostgresMessageStore:
    name = "postgres"

    def __init__(self, dsn: str, min_size: int = 1, max_size: int = 10) -> None:
        self._dsn = dsn
        self._min_size = min_size
        self._max_size = max_size
        self._pool: AsyncConnectionPool | None = None
        # Sequence values are handed out before commit; serializing inserts
        # keeps commit order equal to id order.
        self._write_lock = asyncio.Lock()

    async def init(self) -> None:
        if self._pool is not None:
            return
        pool = AsyncConnectionPool(
            self._dsn, min_size=self._min_size, max_size=self._max_size, open=False
        )
        try:
            await pool.open(wait=True)
            async with pool.connection() as conn:
                await conn.execute(_SCHEMA)
        except (psycopg.Error, OSError) as e:
            await pool.close()
            raise StorageError(f"failed to open postgres message store: {e}") from e
        self._pool = pool
        _logger.info("Opened postgres message store pool min=%d max=%d", self._min_size, self._max_size)

    async def close(self) -> None:
        if self._pool is not None:
            await self._pool.close()
            self._pool = None

    def get_pool_stats(self) -> dict[str, int]:
        if self._pool is None:
            return {}
        return dict(self._pool.get_stats())

    @asynccontextmanager
    async def _get_connection(self) -> AsyncIterator[psycopg.AsyncConnection]:
        if self._pool is None:
            raise StorageError("message store is not initialized")
        async with self._pool.connection() as conn:
            yield conn

    async def append(self, nickname: str, body: str) -> Message:
        ts = datetime.now(UTC)
        try:
            async with self._write_lock, self._get_connection() as conn:
                cur = await conn.execute(
                    "INSERT INTO chat_messages (ts, nickname, message) VALUES (%s, %s, %s) RETURNING id, ts, nickname, message",
                    (ts, nickname, body),
                )
                row = await cur.fetchone()
        except psycopg.Error as e:
            raise StorageError(f"failed to append message: {e}") from e
        return _row_to_message(row)

    async def delete(self, message_id: int) -> bool:
        if not in_id_range(message_id):
            return False
        try:
            async with self._write_lock, self._get_connection() as conn:
                cur = await conn.execute(
                    "DELETE FROM chat_messages WHERE id = %s", (message_id,)
                )
                return cur.rowcount > 0
        except psycopg.Error as e:
            raise StorageError(f"failed to delete message {message_id}: {e}") from e

    async def scan_all(self) -> list[Message]:
        try:
            async with self._get_connection() as conn:
                cur = await conn.execute(
                    "SELECT id, ts, nickname, message FROM chat_messages ORDER BY id ASC"
                )
                return [_row_to_message(row) async for row in cur]
        except psycopg.Error as e:
            raise StorageError(f"failed to read messages: {e}") from e

    async def count(self) -> int:
        try:
            async with self._get_connection() as conn:
                cur = await conn.execute("SELECT COUNT(*) FROM chat_messages")
                row = await cur.fetchone()
                return int(row[0])
        except psycopg.Error as e:
            raise StorageError(f"failed to count messages: {e}") from e
