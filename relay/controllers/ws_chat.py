import asyncio
import json
import logging

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState

from relay import state
from relay.errors import StorageError
from relay.hub import BroadcastHub, Listener

router = APIRouter(tags=["chat"])
_logger = logging.getLogger("relay.controllers.ws_chat")

_PING = json.dumps({"type": "ping"})

# Close codes
_TRY_AGAIN_LATER = 1013
_INTERNAL_ERROR = 1011


def _client_ip(websocket: WebSocket) -> str:
    client_ip = websocket.headers.get("x-forwarded-for", websocket.client.host if websocket.client else "-")
    if "," in client_ip:
        client_ip = client_ip.split(",")[0].strip()
    return client_ip


def _is_replayed(text: str, last_seen_id: int) -> bool:
    """True for message events already covered by the history snapshot."""
    event = json.loads(text)
    return event.get("type") == "message" and event.get("id", 0) <= last_seen_id


async def _drain_incoming(websocket: WebSocket) -> None:
    # Nothing is expected from clients; reading only detects disconnects.
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return


async def _send_updates(websocket: WebSocket, listener: Listener, last_seen_id: int | None) -> None:
    try:
        while True:
            text = await listener.get()
            if text is None:
                return
            if last_seen_id is not None and _is_replayed(text, last_seen_id):
                continue
            await websocket.send_text(text)
    except Exception as e:
        _logger.debug("[ws_chat] send failed for listener=%s: %s", listener.id, e)


async def _heartbeat(hub: BroadcastHub, listener: Listener, interval: float) -> None:
    while True:
        await asyncio.sleep(interval)
        if not listener.offer(_PING):
            _logger.warning("[ws_chat] drop listener=%s reason=backlog", listener.id)
            await hub.unregister(listener)
            return


@router.websocket("/ws")
async def websocket_chat(
    websocket: WebSocket,
    history: bool = Query(False, description="Send a history snapshot before live events"),
) -> None:
    relay = state.relay
    if relay is None:
        await websocket.close(code=_INTERNAL_ERROR)
        return

    # Registered before accept so a client that sees the handshake complete
    # never misses a broadcast issued afterwards.
    listener = await relay.hub.register()
    client_ip = _client_ip(websocket)
    tasks: list[asyncio.Task] = []
    try:
        await websocket.accept()
        _logger.info("[ws_chat] accept listener=%s ip=%s history=%s", listener.id, client_ip, history)

        last_seen_id = None
        if history:
            try:
                messages = await relay.history()
            except StorageError:
                _logger.exception("[ws_chat] failed to load history for listener=%s", listener.id)
                await websocket.close(code=_INTERNAL_ERROR)
                return
            last_seen_id = messages[-1].id if messages else 0
            await websocket.send_text(
                json.dumps({"type": "history", "messages": [m.model_dump() for m in messages]})
            )

        receive_task = asyncio.create_task(_drain_incoming(websocket))
        update_task = asyncio.create_task(_send_updates(websocket, listener, last_seen_id))
        tasks = [receive_task, update_task]
        heartbeat_sec = state.settings.ws_heartbeat_sec if state.settings else 25.0
        if heartbeat_sec > 0:
            tasks.append(asyncio.create_task(_heartbeat(relay.hub, listener, heartbeat_sec)))

        await asyncio.wait({receive_task, update_task}, return_when=asyncio.FIRST_COMPLETED)
    except WebSocketDisconnect:
        pass
    finally:
        for task in tasks:
            task.cancel()
        await relay.hub.unregister(listener)

        if websocket.application_state == WebSocketState.CONNECTED and websocket.client_state == WebSocketState.CONNECTED:
            try:
                await asyncio.wait_for(websocket.close(code=_TRY_AGAIN_LATER), timeout=2.0)
            except asyncio.TimeoutError:
                _logger.warning("Timeout closing websocket for listener=%s", listener.id)
            except Exception as e:
                _logger.warning("Error closing websocket for listener=%s: %s", listener.id, e)
        _logger.info("[ws_chat] close listener=%s ip=%s", listener.id, client_ip)
