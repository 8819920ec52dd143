"""Message store backends."""

from relay.config import Settings
from relay.db.base import MessageStore, utc_now_iso
from relay.db.sqlite import SQLiteMessageStore


def create_store(settings: Settings) -> MessageStore:
    if settings.database_url.startswith(("postgres://", "postgresql://")):
        # Imported lazily so the embedded backend does not need libpq.
        from relay.db.postgres import PostgresMessageStore

        return PostgresMessageStore(
            settings.database_url,
            min_size=settings.db_pool_min,
            max_size=settings.db_pool_max,
        )
    return SQLiteMessageStore(settings.chat_db_path)


__all__ = [
    "MessageStore",
    "SQLiteMessageStore",
    "create_store",
    "utc_now_iso",
]
