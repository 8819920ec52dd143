import json
import logging

import redis.asyncio as redis

from relay.events import RelayEvent

_logger = logging.getLogger("relay.bus")


class EventBus:
    """Mirrors relay events onto a Redis pub/sub channel for other processes."""

    CHANNEL = "chat:events"

    def __init__(self, redis_client: redis.Redis, channel: str = CHANNEL) -> None:
        self._redis = redis_client
        self._channel = channel

    @property
    def channel(self) -> str:
        return self._channel

    async def publish(self, event: RelayEvent) -> bool:
        try:
            await self._redis.publish(self._channel, json.dumps(event))
        except Exception as e:
            _logger.warning("Failed to mirror %s event to %s: %s", event.get("type"), self._channel, e)
            return False
        return True

    async def ping(self) -> bool:
        try:
            await self._redis.ping()
        except Exception:
            return False
        return True

    async def aclose(self) -> None:
        aclose = getattr(self._redis, "aclose", None)
        if callable(aclose):
            await aclose()
        else:
            await self._redis.close()


def create_event_bus(host: str, port: int, password: str = "") -> EventBus:
    client = redis.Redis(
        host=host,
        port=port,
        password=password if password else None,
        decode_responses=True,
    )
    return EventBus(client)
