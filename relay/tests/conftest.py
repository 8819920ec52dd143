import pytest
from fastapi.testclient import TestClient

ADMIN_KEY = "test-admin-key"


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "messages.db"


@pytest.fixture
def relay_env(db_path, monkeypatch):
    monkeypatch.setenv("CHAT_DB_PATH", str(db_path))
    monkeypatch.setenv("ADMIN_KEYS", f"other-key,{ADMIN_KEY}")
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.setenv("ENABLE_EVENT_MIRROR", "0")
    monkeypatch.setenv("WS_HEARTBEAT_SEC", "0")
    monkeypatch.delenv("LISTENER_QUEUE_SIZE", raising=False)
    return monkeypatch


@pytest.fixture
def client(relay_env):
    from relay.main import app

    with TestClient(app) as test_client:
        yield test_client
