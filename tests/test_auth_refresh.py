from contextlib import contextmanager
from types import SimpleNamespace

from fastapi.testclient import TestClient

from smm_panel.core.database import get_db
from smm_panel.core.security import create_access_token, create_refresh_token, decode_token
from smm_panel.main import app
from smm_panel.models import User, UserRole, UserStatus


class _StubQuery:
    def __init__(self, result):
        self._result = result

    def filter(self, *args, **kwargs):
        return self

    def first(self):
        return self._result


class _StubSession:
    def __init__(self, user):
        self._user = user

    def query(self, model, *args, **kwargs):
        return _StubQuery(self._user if model is User else None)


@contextmanager
def _client_with_user(user):
    app.dependency_overrides.clear()

    def _override_get_db():
        yield _StubSession(user)

    app.dependency_overrides[get_db] = _override_get_db
    try:
        with TestClient(app) as client:
            yield client
    finally:
        app.dependency_overrides.clear()


def _user(status=UserStatus.ACTIVE, role=UserRole.CLIENT):
    return SimpleNamespace(id=1, status=status, role=role)


def test_refresh_rejects_access_token():
    access = create_access_token("1", "client")
    with _client_with_user(_user()) as client:
        res = client.post("/api/v1/auth/refresh", json={"refresh_token": access})

    assert res.status_code == 401
    assert res.json()["detail"] == "Invalid refresh token"


def test_refresh_rejects_invalid_token():
    with _client_with_user(_user()) as client:
        res = client.post("/api/v1/auth/refresh", json={"refresh_token": "not-a-jwt"})

    assert res.status_code == 401
    assert res.json()["detail"] == "Invalid refresh token"


def test_refresh_rejects_banned_user():
    refresh = create_refresh_token("1", "client")
    with _client_with_user(_user(status=UserStatus.BANNED)) as client:
        res = client.post("/api/v1/auth/refresh", json={"refresh_token": refresh})

    assert res.status_code == 401
    assert res.json()["detail"] == "User not found or inactive"


def test_refresh_success_returns_new_pair():
    refresh = create_refresh_token("1", "seller")
    with _client_with_user(_user(role=UserRole.SELLER)) as client:
        res = client.post("/api/v1/auth/refresh", json={"refresh_token": refresh})
    assert res.status_code == 200

    body = res.json()
    assert body["token_type"] == "bearer"

    decoded_access = decode_token(body["access_token"])
    assert decoded_access["type"] == "access"
    assert decoded_access["sub"] == "1"
    assert decoded_access["role"] == "seller"

    decoded_refresh = decode_token(body["refresh_token"])
    assert decoded_refresh["type"] == "refresh"


def test_protected_route_rejects_refresh_token():
    refresh = create_refresh_token("1", "client")
    with _client_with_user(_user()) as client:
        res = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {refresh}"})

    assert res.status_code == 401


def test_protected_route_requires_token():
    with _client_with_user(_user()) as client:
        res = client.get("/api/v1/auth/me")

    assert res.status_code == 401
    assert res.json()["detail"] == "Authentication required"


def test_admin_route_rejects_client():
    token = create_access_token("1", "client")
    with _client_with_user(_user()) as client:
        res = client.get("/api/v1/admin/settings", headers={"Authorization": f"Bearer {token}"})

    assert res.status_code == 403
    assert res.json()["detail"] == "Admin access required"


def test_staff_route_rejects_client():
    token = create_access_token("1", "client")
    with _client_with_user(_user()) as client:
        res = client.post(
            "/api/v1/categories/",
            json={"name": "TikTok"},
            headers={"Authorization": f"Bearer {token}"},
        )

    assert res.status_code == 403
    assert res.json()["detail"] == "Insufficient permissions"
