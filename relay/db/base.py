from datetime import UTC, datetime
from typing import Protocol

from relay.models.chat import Message


# Both backends store ids as signed 64-bit integers.
MIN_MESSAGE_ID = -(2**63)
MAX_MESSAGE_ID = 2**63 - 1


def in_id_range(message_id: int) -> bool:
    return MIN_MESSAGE_ID <= message_id <= MAX_MESSAGE_ID


def utc_now_iso() -> str:
    return datetime.now(UTC).isoformat()


class MessageStore(Protocol):
    name: str

    async def init(self) -> None: ...

    async def close(self) -> None: ...

    async def append(self, nickname: str, body: str) -> Message: ...

    async def delete(self, message_id: int) -> bool: ...

    async def scan_all(self) -> list[Message]: ...

    async def count(self) -> int: ...
