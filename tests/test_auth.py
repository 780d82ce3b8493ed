import time

from cryptography.fernet import Fernet

from habits_api.auth import issue_session_token, read_session_token
from habits_api.settings import reset_settings

from conftest import BACKEND_SECRET, OTHER_USER, USER, open_session


def test_health_needs_no_session(client):
    assert client.get("/health").json() == {"ok": True}


def test_protected_routes_require_cookie(client):
    for path in ("/v1/habits", "/v1/categories", "/v1/habit-records", "/v1/settings/theme", "/v1/auth/session"):
        response = client.get(path)
        assert response.status_code == 401, path


def test_open_session_sets_cookie(client):
    response = open_session(client, "Ana@Example.com")
    assert response.status_code == 200
    assert response.json()["user_email"] == USER
    assert "habits_session" in response.cookies
    assert client.get("/v1/auth/session").json() == {"user_email": USER}


def test_open_session_rejects_bad_backend_token(client):
    assert open_session(client, USER, token="wrong").status_code == 401
    response = client.post("/v1/auth/session", headers={"X-Backend-Token": BACKEND_SECRET})
    assert response.status_code == 401


def test_tampered_cookie_is_rejected(client):
    client.cookies.set("habits_session", "not-a-token")
    assert client.get("/v1/habits").status_code == 401


def test_cookie_signed_with_other_key_is_rejected(client):
    foreign = Fernet(Fernet.generate_key()).encrypt(b'{"email": "ana@example.com"}').decode()
    client.cookies.set("habits_session", foreign)
    assert client.get("/v1/habits").status_code == 401


def test_expired_session_is_rejected(client, monkeypatch):
    token = issue_session_token(USER)
    monkeypatch.setenv("SESSION_MAX_AGE_SECONDS", "1")
    reset_settings()
    time.sleep(2.1)
    client.cookies.set("habits_session", token)
    assert client.get("/v1/habits").status_code == 401


def test_session_token_roundtrip(api_env):
    assert read_session_token(issue_session_token(USER)) == USER


def test_allowed_emails_are_enforced(client, monkeypatch):
    monkeypatch.setenv("ALLOWED_EMAILS", f"{USER}")
    reset_settings()
    assert open_session(client, OTHER_USER).status_code == 403
    assert open_session(client, USER).status_code == 200


def test_session_cookie_for_user_removed_from_allow_list(client, monkeypatch):
    assert open_session(client, OTHER_USER).status_code == 200
    monkeypatch.setenv("ALLOWED_EMAILS", USER)
    reset_settings()
    assert client.get("/v1/habits").status_code == 403


def test_logout_clears_cookie(client):
    open_session(client)
    assert client.delete("/v1/auth/session").json() == {"ok": True}
    assert client.get("/v1/habits").status_code == 401
