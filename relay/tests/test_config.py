from relay.config import Settings
from relay.db import SQLiteMessageStore, create_store


def test_defaults(monkeypatch):
    for name in ("ADMIN_KEYS", "CHAT_DB_PATH", "DATABASE_URL", "CORS_ORIGINS", "LISTENER_QUEUE_SIZE"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings.from_env()

    assert settings.admin_keys == frozenset()
    assert settings.chat_db_path == "data/messages.db"
    assert settings.cors_origins == ["http://localhost:3000"]
    assert settings.listener_queue_size == 32
    assert settings.enable_event_mirror is False


def test_admin_keys_are_split_and_trimmed(monkeypatch):
    monkeypatch.setenv("ADMIN_KEYS", " k1 , k2,,k3 ")

    assert Settings.from_env().admin_keys == frozenset({"k1", "k2", "k3"})


def test_sqlite_store_is_default(tmp_path):
    store = create_store(Settings(chat_db_path=str(tmp_path / "m.db")))
    assert isinstance(store, SQLiteMessageStore)


def test_postgres_url_selects_postgres_store():
    from relay.db.postgres import PostgresMessageStore

    store = create_store(Settings(database_url="postgresql://user@localhost/chat"))
    assert isinstance(store, PostgresMessageStore)


def test_listener_queue_size_is_at_least_one(monkeypatch):
    monkeypatch.setenv("LISTENER_QUEUE_SIZE", "0")
    assert Settings.from_env().listener_queue_size == 1

    monkeypatch.setenv("LISTENER_QUEUE_SIZE", "-5")
    assert Settings.from_env().listener_queue_size == 1
