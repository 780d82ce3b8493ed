import pytest
from fastapi.testclient import TestClient

from habits_api.db import reset_engine
from habits_api.settings import reset_settings

BACKEND_SECRET = "test-backend-secret"
USER = "ana@example.com"
OTHER_USER = "bruno@example.com"


@pytest.fixture
def api_env(monkeypatch, tmp_path):
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'habits.db'}")
    monkeypatch.setenv("BACKEND_SESSION_SECRET", BACKEND_SECRET)
    monkeypatch.delenv("ALLOWED_EMAILS", raising=False)
    monkeypatch.delenv("SESSION_MAX_AGE_SECONDS", raising=False)
    reset_settings()
    reset_engine()
    yield
    reset_settings()
    reset_engine()


@pytest.fixture
def app(api_env):
    from habits_api.main import create_app

    return create_app()


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


def open_session(test_client, user_email=USER, token=BACKEND_SECRET):
    return test_client.post(
        "/v1/auth/session",
        headers={"X-Backend-Token": token, "X-User-Email": user_email},
    )


@pytest.fixture
def login(client):
    def _login(user_email=USER):
        client.cookies.clear()
        response = open_session(client, user_email)
        assert response.status_code == 200, response.text
        return client

    return _login


@pytest.fixture
def user_client(login):
    return login(USER)
