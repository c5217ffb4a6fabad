# tests_routes/conftest.py
import pytest

from mcbuildlib import create_app

ADMIN = {"username": "admin", "password": "admin-password"}
MEMBER = {"username": "steve", "password": "diamond-pickaxe"}


@pytest.fixture
def app(tmp_path, monkeypatch):
    """Full app on a throwaway SQLite file, with a seeded admin account"""
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'api.db'}")
    monkeypatch.setenv("JWT_SECRET", "test-secret-key")
    monkeypatch.setenv("ADMIN_USERNAME", ADMIN["username"])
    monkeypatch.setenv("ADMIN_PASSWORD", ADMIN["password"])
    app = create_app({"TESTING": True})
    yield app
    app.config["DB_ENGINE"].dispose()


@pytest.fixture
def client(app):
    return app.test_client()


def _login(client, creds):
    resp = client.post("/api/auth/login", json=creds)
    assert resp.status_code == 200, resp.get_json()
    return {"Authorization": f"Bearer {resp.get_json()['access_token']}"}


@pytest.fixture
def admin_headers(client):
    return _login(client, ADMIN)


@pytest.fixture
def user_headers(client):
    resp = client.post("/api/users/register", json=MEMBER)
    assert resp.status_code == 201, resp.get_json()
    return _login(client, MEMBER)
