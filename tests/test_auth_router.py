import pytest
from dependency_injector import providers
from fastapi.testclient import TestClient

from goldapi.containers import Container
from goldapi.core.exceptions import AuthenticationError
from goldapi.main import app
from goldapi.models.user import ActorRole
from goldapi.schemas.auth import Token


class FakeAuthService:
    # user login
    def login_user(self, login_data):
        if login_data.password == "bad":
            raise AuthenticationError("Invalid email or password")
        return Token(access_token="user_token", role=ActorRole.USER, actor_id=1)

    # admin login
    def login_admin(self, login_data):
        if login_data.password == "bad":
            raise AuthenticationError("Invalid email or password")
        return Token(access_token="admin_token", role=ActorRole.ADMIN, actor_id=99)


@pytest.fixture(autouse=True)
def patch_auth_service():
    container: Container = app.container  # type: ignore
    container.services.auth_service.override(providers.Factory(FakeAuthService))
    yield
    container.services.auth_service.reset_override()


client = TestClient(app)


def test_user_login_success():
    res = client.post(
        "/api/v1/auth/login", json={"email": "user@example.com", "password": "ok"}
    )
    assert res.status_code == 200
    body = res.json()
    assert body["access_token"] == "user_token"
    assert body["token_type"] == "bearer"
    assert body["role"] == "user"


def test_user_login_failed():
    res = client.post(
        "/api/v1/auth/login", json={"email": "user@example.com", "password": "bad"}
    )
    assert res.status_code == 401
    body = res.json()
    assert body["success"] is False
    assert body["error"]["code"] == "AUTH_001"
    assert body["error"]["message"] == "Invalid email or password"


def test_login_requires_valid_email():
    res = client.post("/api/v1/auth/login", json={"email": "nope", "password": "ok"})
    assert res.status_code == 422
    assert "email" in res.json()["error"]["details"]["fields"]


def test_admin_login_success():
    res = client.post(
        "/api/v1/auth/admin/login", json={"email": "admin@example.com", "password": "ok"}
    )
    assert res.status_code == 200
    body = res.json()
    assert body["role"] == "admin"
    assert body["actor_id"] == 99


def test_me_returns_actor_from_token(admin_headers):
    res = client.get("/api/v1/auth/me", headers=admin_headers)
    assert res.status_code == 200
    assert res.json() == {"id": 99, "role": "admin"}


def test_me_requires_token():
    res = client.get("/api/v1/auth/me")
    assert res.status_code == 401
