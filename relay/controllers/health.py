from fastapi import APIRouter

from relay import state
from relay.errors import StorageError
from relay.models.chat import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    if state.relay is None:
        return HealthResponse(status="starting", store="disconnected", listeners=0)

    store_status = "healthy"
    messages = None
    try:
        messages = await state.relay.store.count()
    except StorageError:
        store_status = "unhealthy"

    return HealthResponse(
        status="ok" if store_status == "healthy" else "degraded",
        store=store_status,
        listeners=state.relay.hub.listener_count,
        messages=messages,
    )


@router.get("/health/mirror")
async def health_mirror() -> dict[str, str]:
    """Report the Redis event mirror connection, if one is configured."""
    if state.event_bus is None:
        return {"redis": "disabled"}
    healthy = await state.event_bus.ping()
    return {"redis": "healthy" if healthy else "unhealthy", "channel": state.event_bus.channel}


@router.get("/health/pools")
async def health_pools() -> dict:
    """Get connection pool status for the message store."""
    if state.relay is None:
        return {"store": "not_initialized", "pool": {}}
    store = state.relay.store
    get_pool_stats = getattr(store, "get_pool_stats", None)
    pool_stats = get_pool_stats() if callable(get_pool_stats) else {"status": "not_pooled"}
    return {"store": store.name, "pool": pool_stats}
