import logging
import os

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s",
)
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from relay import state
from relay.bus import create_event_bus
from relay.config import Settings
from relay.controllers.chat_admin import router as chat_admin_router
from relay.controllers.health import router as health_router
from relay.controllers.messages import router as messages_router
from relay.controllers.ws_chat import router as ws_chat_router
from relay.db import create_store
from relay.hub import BroadcastHub
from relay.producers.chat_producer import MessageRelay

_logger = logging.getLogger("relay.main")


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    settings = Settings.from_env()
    logging.getLogger("relay").setLevel(settings.log_level)

    store = create_store(settings)
    await store.init()

    event_bus = None
    if settings.enable_event_mirror:
        event_bus = create_event_bus(settings.redis_host, settings.redis_port, settings.redis_password)

    hub = BroadcastHub(queue_size=settings.listener_queue_size)
    if not settings.admin_keys:
        _logger.warning("ADMIN_KEYS is empty; message deletion is disabled")

    state.settings = settings
    state.event_bus = event_bus
    state.relay = MessageRelay(store, hub, admin_keys=settings.admin_keys, event_bus=event_bus)
    _logger.info("Relay started store=%s mirror=%s", store.name, event_bus is not None)

    try:
        yield
    finally:
        await hub.close()
        try:
            await store.close()
        except Exception as e:
            _logger.warning("Error closing message store: %s", e)
        if event_bus is not None:
            try:
                await event_bus.aclose()
            except Exception as e:
                _logger.warning("Error closing event mirror: %s", e)
        state.relay = None
        state.event_bus = None
        state.settings = None


app = FastAPI(title="Chat Relay", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=Settings.from_env().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router)
app.include_router(messages_router)
app.include_router(chat_admin_router)
app.include_router(ws_chat_router)

Instrumentator().instrument(app).expose(app, endpoint="/metrics", include_in_schema=False)
