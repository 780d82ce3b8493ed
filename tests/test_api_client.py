import pytest
import requests

from habits_dashboard.data import api_client, repositories

USER = "ana@example.com"


class FakeResponse:
    def __init__(self, status_code=200, payload=None, cookies=None):
        self.status_code = status_code
        self._payload = payload if payload is not None else {}
        self.cookies = requests.cookies.cookiejar_from_dict(cookies or {})
        self.text = str(self._payload)

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        return self._payload


class FakeSession:
    def __init__(self, responses):
        self.responses = list(responses)
        self.session_opens = []
        self.calls = []
        self.cookies = requests.cookies.RequestsCookieJar()
        self.token = 0

    def post(self, url, headers=None, timeout=None):
        self.token += 1
        self.session_opens.append(headers)
        return FakeResponse(200, {"user_email": USER}, {"habits_session": f"tok{self.token}"})

    def request(self, method, url, params=None, json=None, cookies=None, timeout=None):
        self.calls.append({"method": method, "url": url, "params": params, "json": json, "cookies": cookies})
        result = self.responses.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


SECRETS = {
    ("app", "API_BASE_URL"): "http://api.local/",
    ("app", "BACKEND_SESSION_SECRET"): "secret",
}


@pytest.fixture
def fake_session(monkeypatch):
    def _install(*responses):
        session = FakeSession(responses)
        monkeypatch.setattr(api_client, "_SESSION", session)
        return session

    monkeypatch.setattr(api_client, "_SESSION_COOKIES", {})
    return _install


@pytest.fixture
def invalidations():
    calls = []
    repositories.configure(
        lambda path, default=None: SECRETS.get(tuple(path), default),
        lambda: USER,
        invalidate_callback=lambda: calls.append(True),
    )
    yield calls
    repositories.configure(None, None)


def test_request_opens_session_once(fake_session, invalidations):
    session = fake_session(FakeResponse(200, {"items": [1]}), FakeResponse(200, {"items": [2]}))
    assert api_client.request("GET", "/v1/habits") == {"items": [1]}
    assert api_client.request("GET", "/v1/habits") == {"items": [2]}
    assert len(session.session_opens) == 1
    assert session.session_opens[0] == {"X-User-Email": USER, "X-Backend-Token": "secret"}
    assert session.calls[0]["url"] == "http://api.local/v1/habits"
    assert session.calls[1]["cookies"] == {"habits_session": "tok1"}


def test_request_reopens_session_after_401(fake_session, invalidations):
    session = fake_session(FakeResponse(401, {"detail": "Invalid or expired session"}), FakeResponse(200, {"ok": True}))
    assert api_client.request("DELETE", "/v1/habits/h1") == {"ok": True}
    assert len(session.session_opens) == 2
    assert session.calls[1]["cookies"] == {"habits_session": "tok2"}


def test_request_raises_api_error_with_detail(fake_session, invalidations):
    fake_session(FakeResponse(400, {"detail": "Name is required"}))
    with pytest.raises(api_client.ApiError) as excinfo:
        api_client.request("POST", "/v1/habits", json={"name": ""})
    assert excinfo.value.status_code == 400
    assert excinfo.value.detail == "Name is required"


def test_reads_fall_back_to_empty(fake_session, invalidations):
    fake_session(FakeResponse(500, {"detail": "Internal error"}), requests.ConnectionError("down"))
    assert repositories.list_habits() == []
    assert repositories.list_records(day="2026-02-01") == []


def test_theme_read_falls_back_to_default(fake_session, invalidations):
    fake_session(requests.Timeout("slow"))
    assert repositories.get_theme() == "light"


def test_writes_raise_and_invalidate(fake_session, invalidations):
    fake_session(FakeResponse(403, {"detail": "Not authorized to access this habit"}))
    with pytest.raises(api_client.ApiError):
        repositories.delete_habit("h1")
    assert invalidations == [True]


def test_adjust_record_sends_iso_day(fake_session, invalidations):
    from datetime import date

    session = fake_session(FakeResponse(200, {"value": 1, "completed": False}))
    repositories.adjust_record("h1", date(2026, 2, 1), "increment")
    assert session.calls[0]["json"] == {"habit_id": "h1", "date": "2026-02-01", "action": "increment"}
    assert invalidations == [True]


def test_list_records_query_params(fake_session, invalidations):
    session = fake_session(FakeResponse(200, {"items": []}))
    repositories.list_records(habit_id="h1", start_date="2026-01-01", end_date="2026-03-31")
    assert session.calls[0]["params"] == {"habit_id": "h1", "start_date": "2026-01-01", "end_date": "2026-03-31"}


def test_missing_user_is_an_error(fake_session, monkeypatch):
    fake_session()
    repositories.configure(lambda path, default=None: SECRETS.get(tuple(path), default), lambda: "")
    with pytest.raises(RuntimeError):
        api_client.request("GET", "/v1/habits")
    repositories.configure(None, None)
