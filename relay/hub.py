"""In-process fan-out of relay events to live listeners."""

import asyncio
import itertools
import json
import logging

from relay.events import LiveEvent

_logger = logging.getLogger("relay.hub")

DEFAULT_QUEUE_SIZE = 32

_listener_ids = itertools.count(1)


class Listener:
    """Outbound side of one live connection.

    Events are queued as serialized JSON text. ``None`` in the queue means the
    hub closed the listener and the connection should be torn down.
    """

    def __init__(self, maxsize: int = DEFAULT_QUEUE_SIZE) -> None:
        self.id = next(_listener_ids)
        self._queue: asyncio.Queue[str | None] = asyncio.Queue(maxsize=maxsize)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def offer(self, text: str) -> bool:
        if self._closed:
            return False
        try:
            self._queue.put_nowait(text)
        except asyncio.QueueFull:
            return False
        return True

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        # Make room for the sentinel; pending events are discarded.
        while not self._queue.empty():
            self._queue.get_nowait()
        self._queue.put_nowait(None)

    async def get(self) -> str | None:
        return await self._queue.get()

    def __repr__(self) -> str:
        return f"<Listener id={self.id} closed={self._closed}>"


class BroadcastHub:
    def __init__(self, queue_size: int = DEFAULT_QUEUE_SIZE) -> None:
        if queue_size < 1:
            raise ValueError(f"queue_size must be at least 1, got {queue_size}")
        self._queue_size = queue_size
        self._listeners: set[Listener] = set()
        self._lock = asyncio.Lock()

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    async def register(self) -> Listener:
        listener = Listener(self._queue_size)
        async with self._lock:
            self._listeners.add(listener)
        _logger.debug("hub.register listener=%s members=%d", listener.id, len(self._listeners))
        return listener

    async def unregister(self, listener: Listener) -> None:
        async with self._lock:
            self._listeners.discard(listener)
        listener.close()
        _logger.debug("hub.unregister listener=%s members=%d", listener.id, len(self._listeners))

    async def broadcast(self, event: LiveEvent) -> int:
        """Queue ``event`` for every current member and return how many accepted it.

        Members whose queue is full or already closed are dropped.
        """
        text = json.dumps(event)
        delivered = 0
        async with self._lock:
            dropped = []
            for listener in self._listeners:
                if listener.offer(text):
                    delivered += 1
                else:
                    dropped.append(listener)
            for listener in dropped:
                self._listeners.discard(listener)
                listener.close()
        for listener in dropped:
            _logger.warning("hub.drop listener=%s reason=backlog", listener.id)
        return delivered

    async def close(self) -> None:
        async with self._lock:
            listeners = list(self._listeners)
            self._listeners.clear()
        for listener in listeners:
            listener.close()
