import json

import pytest

from relay.hub import BroadcastHub


def _event(mid: int) -> dict:
    return {"type": "message", "id": mid, "timestamp": "t", "nickname": "n", "message": "m"}


async def _drain(listener) -> list[dict]:
    received = []
    while not listener._queue.empty():
        text = await listener.get()
        if text is None:
            break
        received.append(json.loads(text))
    return received


@pytest.mark.asyncio
async def test_broadcast_reaches_every_member_in_order():
    hub = BroadcastHub()
    first = await hub.register()
    second = await hub.register()

    for mid in range(1, 4):
        assert await hub.broadcast(_event(mid)) == 2

    assert [e["id"] for e in await _drain(first)] == [1, 2, 3]
    assert [e["id"] for e in await _drain(second)] == [1, 2, 3]


@pytest.mark.asyncio
async def test_late_listener_misses_earlier_broadcast():
    hub = BroadcastHub()
    early = await hub.register()
    await hub.broadcast(_event(1))
    late = await hub.register()
    await hub.broadcast(_event(2))

    assert [e["id"] for e in await _drain(early)] == [1, 2]
    assert [e["id"] for e in await _drain(late)] == [2]


@pytest.mark.asyncio
async def test_unregister_is_idempotent():
    hub = BroadcastHub()
    listener = await hub.register()
    await hub.unregister(listener)
    await hub.unregister(listener)

    assert hub.listener_count == 0
    assert listener.closed
    assert await hub.broadcast(_event(1)) == 0


@pytest.mark.asyncio
async def test_backlogged_listener_is_dropped_without_affecting_others():
    hub = BroadcastHub(queue_size=2)
    slow = await hub.register()
    fast = await hub.register()

    await hub.broadcast(_event(1))
    await hub.broadcast(_event(2))
    assert await _drain(fast) == [_event(1), _event(2)]

    delivered = await hub.broadcast(_event(3))

    assert delivered == 1
    assert hub.listener_count == 1
    assert slow.closed
    # A dropped listener only yields the close sentinel.
    assert await slow.get() is None
    assert await _drain(fast) == [_event(3)]


@pytest.mark.asyncio
async def test_delete_events_are_serialized_as_json():
    hub = BroadcastHub()
    listener = await hub.register()
    await hub.broadcast({"type": "delete", "id": 7})

    assert json.loads(await listener.get()) == {"type": "delete", "id": 7}


@pytest.mark.asyncio
async def test_close_shuts_every_listener():
    hub = BroadcastHub()
    listeners = [await hub.register() for _ in range(3)]
    await hub.close()

    assert hub.listener_count == 0
    assert all(listener.closed for listener in listeners)
    assert all([await listener.get() is None for listener in listeners])


@pytest.mark.parametrize("size", [0, -1])
def test_unbounded_queue_size_is_rejected(size):
    with pytest.raises(ValueError):
        BroadcastHub(queue_size=size)
