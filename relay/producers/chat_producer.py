import asyncio
import hmac
import logging
import re
from collections.abc import Iterable
from typing import Any

from relay.bus import EventBus
from relay.db import MessageStore
from relay.errors import AuthError, NotFoundError, ValidationError
from relay.events import RelayEvent
from relay.hub import BroadcastHub
from relay.models.chat import Message, delete_event
from relay.sanitize import clean

_logger = logging.getLogger("relay.producers.chat_producer")

_MESSAGE_ID_RE = re.compile(r"-?[0-9]+", re.ASCII)


def parse_message_id(raw: Any) -> int:
    if isinstance(raw, int) and not isinstance(raw, bool):
        return raw
    if isinstance(raw, str) and _MESSAGE_ID_RE.fullmatch(raw.strip()):
        return int(raw.strip())
    raise ValidationError("messageId must be an integer")


class MessageRelay:
    """Runs submissions and deletions through sanitize, persist, then broadcast.

    Mutations hold one lock from the store call through the broadcast, so live
    listeners see events in the same order the store assigned ids.
    """

    def __init__(
        self,
        store: MessageStore,
        hub: BroadcastHub,
        admin_keys: Iterable[str] = (),
        event_bus: EventBus | None = None,
    ) -> None:
        self.store = store
        self.hub = hub
        self.event_bus = event_bus
        self._admin_keys = frozenset(admin_keys)
        self._lock = asyncio.Lock()

    def is_admin(self, credential: Any) -> bool:
        if not isinstance(credential, str) or not credential:
            return False
        candidate = credential.encode()
        return any(hmac.compare_digest(candidate, key.encode()) for key in self._admin_keys)

    async def _broadcast(self, event: RelayEvent) -> None:
        delivered = await self.hub.broadcast(event)
        _logger.debug("[broadcast] type=%s delivered=%d", event["type"], delivered)

    async def _mirror(self, event: RelayEvent) -> None:
        # Called after the relay lock is released.
        if self.event_bus is not None:
            await self.event_bus.publish(event)

    async def submit(self, nick: Any, text: Any) -> Message:
        nickname = clean(nick)
        body = clean(text)
        if not nickname.strip():
            raise ValidationError("nick must not be empty")
        if not body.strip():
            raise ValidationError("message must not be empty")

        async with self._lock:
            message = await self.store.append(nickname, body)
            _logger.info("[submit] stored id=%d nick=%s len=%d", message.id, nickname[:32], len(body))
            event = message.to_event()
            await self._broadcast(event)
        await self._mirror(event)
        return message

    async def delete(self, raw_message_id: Any, admin_key: Any) -> int:
        """Delete a message on behalf of an admin and return its id.

        The credential is checked before the id is parsed.
        """
        if not self.is_admin(admin_key):
            raise AuthError("invalid admin key")
        message_id = parse_message_id(raw_message_id)

        async with self._lock:
            removed = await self.store.delete(message_id)
            if not removed:
                raise NotFoundError(f"message {message_id} not found")
            _logger.info("[delete] removed id=%d", message_id)
            event = delete_event(message_id)
            await self._broadcast(event)
        await self._mirror(event)
        return message_id

    async def history(self) -> list[Message]:
        return await self.store.scan_all()
