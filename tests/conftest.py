import pytest
from fastapi.testclient import TestClient

from server import app as server_app
from storage.memory_store import InMemoryStore

TOKEN = "test-token"


@pytest.fixture()
def store():
    memory = InMemoryStore()
    memory.add_user(TOKEN, email="landlord@example.com", user_id="user-1")
    return memory


@pytest.fixture()
def client(store, monkeypatch):
    monkeypatch.setenv("SUPABASE_URL", "http://supabase.test")
    monkeypatch.setenv("SUPABASE_ANON_KEY", "anon-key")
    server_app.app.dependency_overrides[server_app.get_store] = lambda: store
    with TestClient(server_app.app) as test_client:
        yield test_client
    server_app.app.dependency_overrides.clear()


@pytest.fixture()
def auth_headers():
    return {"Authorization": f"Bearer {TOKEN}"}


@pytest.fixture()
def ca_case(store):
    return store.create_case("user-1", "Maple St unit 4", "CA")
