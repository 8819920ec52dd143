import logging

from fastapi import APIRouter, HTTPException

from relay.dependencies import Payload, Relay
from relay.errors import AuthError, NotFoundError, StorageError, ValidationError
from relay.models.chat import DeleteMessageResponse

router = APIRouter(tags=["admin"])
_logger = logging.getLogger("relay.controllers.chat_admin")


@router.post("/delete-message", response_model=DeleteMessageResponse)
async def delete_message(payload: Payload, relay: Relay) -> DeleteMessageResponse:
    try:
        message_id = await relay.delete(payload.get("messageId"), payload.get("adminkey"))
    except AuthError as e:
        _logger.warning("[delete_message] rejected admin key")
        raise HTTPException(status_code=403, detail=str(e)) from e
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except StorageError as e:
        _logger.exception("[delete_message] storage failure")
        raise HTTPException(status_code=500, detail="error deleting message") from e
    return DeleteMessageResponse(deleted=True, id=message_id)
