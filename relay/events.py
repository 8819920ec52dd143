from typing import Literal, TypedDict


class MessageEvent(TypedDict):
    type: Literal["message"]
    id: int
    timestamp: str
    nickname: str
    message: str


class DeleteEvent(TypedDict):
    type: Literal["delete"]
    id: int


class PingEvent(TypedDict):
    type: Literal["ping"]


class HistoryEvent(TypedDict):
    type: Literal["history"]
    messages: list[dict]


RelayEvent = MessageEvent | DeleteEvent
LiveEvent = MessageEvent | DeleteEvent | PingEvent | HistoryEvent
