from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

from fastapi.testclient import TestClient

from smm_panel.core.database import get_db
from smm_panel.main import app
from smm_panel.models import User
import smm_panel.api.v1.endpoints.auth as auth_endpoints


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
        self.commits = 0

    def query(self, model, *args, **kwargs):
        return _StubQuery(self._user if model is User else None)

    def commit(self):
        self.commits += 1


@contextmanager
def _client_with_session(session):
    app.dependency_overrides.clear()

    def _override_get_db():
        yield session

    app.dependency_overrides[get_db] = _override_get_db
    try:
        with TestClient(app) as client:
            yield client
    finally:
        app.dependency_overrides.clear()


def test_forgot_password_unknown_email_is_generic():
    with _client_with_session(_StubSession(None)) as client:
        res = client.post("/api/v1/auth/forgot-password", json={"email": "nobody@example.com"})

    assert res.status_code == 200
    body = res.json()
    assert body["message"] == "If the email exists, a reset link has been sent"
    assert body.get("reset_token") is None


def test_forgot_password_sets_token_and_sends_email(monkeypatch):
    sent = {}

    def _fake_send(to_email, reset_token, site_name="SMM Panel"):
        sent["to"] = to_email
        sent["token"] = reset_token
        sent["site"] = site_name

    monkeypatch.setattr(auth_endpoints, "send_password_reset_email", _fake_send)
    user = SimpleNamespace(id=1, email="jane@example.com", reset_token=None, reset_token_expires_at=None)
    session = _StubSession(user)
    with _client_with_session(session) as client:
        res = client.post("/api/v1/auth/forgot-password", json={"email": "jane@example.com"})

    assert res.status_code == 200
    token = res.json()["reset_token"]
    assert token and token == user.reset_token == sent["token"]
    assert sent["to"] == "jane@example.com"
    assert sent["site"] == "SMM WebPanel"
    remaining = user.reset_token_expires_at - datetime.now(timezone.utc)
    assert timedelta(minutes=55) < remaining <= timedelta(hours=1)
    assert session.commits == 1


def test_forgot_password_email_failure_is_not_exposed(monkeypatch):
    def _boom(*args, **kwargs):
        raise RuntimeError("provider down")

    monkeypatch.setattr(auth_endpoints, "send_password_reset_email", _boom)
    user = SimpleNamespace(id=1, email="jane@example.com", reset_token=None, reset_token_expires_at=None)
    with _client_with_session(_StubSession(user)) as client:
        res = client.post("/api/v1/auth/forgot-password", json={"email": "jane@example.com"})

    assert res.status_code == 200
    assert "provider" not in res.text


def test_reset_password_rejects_expired_token():
    user = SimpleNamespace(
        id=1,
        hashed_password="x",
        reset_token="tok",
        reset_token_expires_at=datetime.now(timezone.utc) - timedelta(minutes=1),
    )
    with _client_with_session(_StubSession(user)) as client:
        res = client.post("/api/v1/auth/reset-password", json={"token": "tok", "new_password": "newpass1"})

    assert res.status_code == 400
    assert res.json()["detail"] == "Invalid or expired token"


def test_reset_password_accepts_naive_expiry_and_clears_token():
    user = SimpleNamespace(
        id=1,
        hashed_password="x",
        reset_token="tok",
        reset_token_expires_at=datetime.utcnow() + timedelta(minutes=30),
    )
    with _client_with_session(_StubSession(user)) as client:
        res = client.post("/api/v1/auth/reset-password", json={"token": "tok", "new_password": "newpass1"})

    assert res.status_code == 200
    assert user.reset_token is None
    assert user.reset_token_expires_at is None
    assert user.hashed_password != "x"
