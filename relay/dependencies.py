from typing import Annotated, Any

from fastapi import Depends, HTTPException, Request

from relay import state
from relay.producers.chat_producer import MessageRelay


def get_relay() -> MessageRelay:
    if state.relay is None:
        raise HTTPException(status_code=503, detail="relay not initialized")
    return state.relay


Relay = Annotated[MessageRelay, Depends(get_relay)]


async def read_payload(request: Request) -> dict[str, Any]:
    """Return request fields from a JSON object or a form-encoded body."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            data = await request.json()
        except ValueError:
            raise HTTPException(status_code=400, detail="malformed JSON body") from None
        if not isinstance(data, dict):
            raise HTTPException(status_code=400, detail="JSON body must be an object")
        return data
    form = await request.form()
    return {key: value for key, value in form.items() if isinstance(value, str)}


Payload = Annotated[dict[str, Any], Depends(read_payload)]
