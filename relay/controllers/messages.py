import logging

from fastapi import APIRouter, HTTPException

from relay.dependencies import Payload, Relay
from relay.errors import StorageError, ValidationError
from relay.models.chat import Message

router = APIRouter(tags=["chat"])
_logger = logging.getLogger("relay.controllers.messages")


@router.post("/send-message", response_model=Message, status_code=201)
async def send_message(payload: Payload, relay: Relay) -> Message:
    try:
        return await relay.submit(payload.get("nick"), payload.get("message"))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except StorageError as e:
        _logger.exception("[send_message] storage failure")
        raise HTTPException(status_code=500, detail="error saving message") from e


@router.get("/messages", response_model=list[Message])
async def list_messages(relay: Relay) -> list[Message]:
    try:
        return await relay.history()
    except StorageError as e:
        _logger.exception("[list_messages] storage failure")
        raise HTTPException(status_code=500, detail="error reading messages") from e
