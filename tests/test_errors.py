from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from habits_api import repositories

from conftest import open_session


def test_storage_failure_maps_to_500(client, monkeypatch):
    async def broken(*args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("database is locked"))

    monkeypatch.setattr(repositories, "list_habits", broken)
    open_session(client)
    response = client.get("/v1/habits")
    assert response.status_code == 500
    assert response.json() == {"detail": "Internal error"}


def test_unexpected_failure_maps_to_500(app, monkeypatch):
    async def broken(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(repositories, "list_categories", broken)
    with TestClient(app, raise_server_exceptions=False) as client:
        open_session(client)
        response = client.get("/v1/categories")
    assert response.status_code == 500
    assert response.json() == {"detail": "Internal error"}
