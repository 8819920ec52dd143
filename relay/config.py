import os
from dataclasses import dataclass, field


def _split_csv(raw: str) -> list[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


@dataclass(frozen=True)
class Settings:
    admin_keys: frozenset[str] = field(default_factory=frozenset)
    chat_db_path: str = "data/messages.db"
    database_url: str = ""
    db_pool_min: int = 1
    db_pool_max: int = 10
    cors_origins: list[str] = field(default_factory=lambda: ["http://localhost:3000"])
    listener_queue_size: int = 32
    ws_heartbeat_sec: float = 25.0
    enable_event_mirror: bool = False
    redis_host: str = "redis"
    redis_port: int = 6379
    redis_password: str = ""
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            admin_keys=frozenset(_split_csv(os.getenv("ADMIN_KEYS", ""))),
            chat_db_path=os.getenv("CHAT_DB_PATH", "data/messages.db"),
            database_url=os.getenv("DATABASE_URL", ""),
            db_pool_min=int(os.getenv("DB_POOL_MIN", "1")),
            db_pool_max=int(os.getenv("DB_POOL_MAX", "10")),
            cors_origins=_split_csv(os.getenv("CORS_ORIGINS", "http://localhost:3000")),
            listener_queue_size=max(1, int(os.getenv("LISTENER_QUEUE_SIZE", "32"))),
            ws_heartbeat_sec=float(os.getenv("WS_HEARTBEAT_SEC", "25")),
            enable_event_mirror=os.getenv("ENABLE_EVENT_MIRROR", "0") == "1",
            redis_host=os.getenv("REDIS_HOST", "redis"),
            redis_port=int(os.getenv("REDIS_PORT", "6379")),
            redis_password=os.getenv("REDIS_PASSWORD", ""),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
