import asyncio
import os

import pytest

TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "")

pytestmark = pytest.mark.skipif(
    not TEST_DATABASE_URL, reason="TEST_DATABASE_URL not set"
)


async def _open_clean():
    from relay.db.postgres import PostgresMessageStore

    store = PostgresMessageStore(TEST_DATABASE_URL, min_size=1, max_size=4)
    await store.init()
    async with store._get_connection() as conn:
        await conn.execute("TRUNCATE chat_messages RESTART IDENTITY")
    return store


@pytest.mark.asyncio
async def test_append_scan_delete_roundtrip():
    store = await _open_clean()
    try:
        first = await store.append("a", "hi")
        second = await store.append("b", "yo")
        assert second.id > first.id
        assert await store.delete(first.id) is True
        assert await store.delete(first.id) is False
        assert [m.id for m in await store.scan_all()] == [second.id]
        assert await store.count() == 1
    finally:
        await store.close()


@pytest.mark.asyncio
async def test_concurrent_appends_are_unique_and_ordered():
    store = await _open_clean()
    try:
        results = await asyncio.gather(*(store.append("n", str(i)) for i in range(100)))
        stored = await store.scan_all()
    finally:
        await store.close()

    ids = sorted(m.id for m in results)
    assert ids == list(range(ids[0], ids[0] + 100))
    assert [m.id for m in stored] == ids
