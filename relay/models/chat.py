from pydantic import BaseModel

from relay.events import DeleteEvent, MessageEvent


class Message(BaseModel):
    id: int
    timestamp: str
    nickname: str
    message: str

    def to_event(self) -> MessageEvent:
        return {
            "type": "message",
            "id": self.id,
            "timestamp": self.timestamp,
            "nickname": self.nickname,
            "message": self.message,
        }


class DeleteMessageResponse(BaseModel):
    deleted: bool
    id: int


class HealthResponse(BaseModel):
    status: str
    store: str
    listeners: int
    messages: int | None = None


def delete_event(message_id: int) -> DeleteEvent:
    return {"type": "delete", "id": message_id}
