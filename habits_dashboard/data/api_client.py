import logging
import os
import threading
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

logger = logging.getLogger(__name__)

SESSION_PATH = "/v1/auth/session"

_SECRET_GETTER = None
_USER_GETTER = None
_SESSION_COOKIES: dict[str, dict] = {}
_COOKIES_LOCK = threading.Lock()


class ApiError(RuntimeError):
    def __init__(self, status_code: int, detail: Any):
        super().__init__(f"API error {status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail


def _build_session():
    session = requests.Session()
    retry = Retry(
        total=2,
        backoff_factor=0.5,
        status_forcelist=(502, 503, 504),
        allowed_methods=("GET", "POST", "PUT", "PATCH", "DELETE"),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry, pool_connections=10, pool_maxsize=10)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


_SESSION = _build_session()


def configure(secret_getter, user_getter):
    global _SECRET_GETTER, _USER_GETTER
    _SECRET_GETTER = secret_getter
    _USER_GETTER = user_getter


def _get_secret(path, default=None):
    if _SECRET_GETTER is None:
        return default
    return _SECRET_GETTER(path, default)


def api_base_url():
    return (
        _get_secret(("app", "API_BASE_URL"))
        or _get_secret(("API_BASE_URL",))
        or os.getenv("API_BASE_URL")
        or ""
    )


def backend_token():
    return (
        _get_secret(("app", "BACKEND_SESSION_SECRET"))
        or _get_secret(("BACKEND_SESSION_SECRET",))
        or os.getenv("BACKEND_SESSION_SECRET")
        or ""
    )


def is_enabled():
    return bool(api_base_url() and backend_token())


def _current_user():
    user_email = _USER_GETTER() if _USER_GETTER else None
    if not user_email:
        raise RuntimeError("Missing user email for API request")
    return user_email


def _error_detail(response):
    try:
        payload = response.json()
    except ValueError:
        return response.text
    if isinstance(payload, dict) and "detail" in payload:
        return payload["detail"]
    return payload


def open_session(user_email: str, timeout: int = 10) -> dict:
    """Exchange the backend token for a session cookie scoped to `user_email`."""
    base = api_base_url().rstrip("/")
    if not base:
        raise RuntimeError("API_BASE_URL not configured")
    token = backend_token()
    if not token:
        raise RuntimeError("BACKEND_SESSION_SECRET not configured")
    response = _SESSION.post(
        f"{base}{SESSION_PATH}",
        headers={"X-User-Email": user_email, "X-Backend-Token": token},
        timeout=timeout,
    )
    if not response.ok:
        raise ApiError(response.status_code, _error_detail(response))
    cookies = requests.utils.dict_from_cookiejar(response.cookies)
    # The shared session must not carry one user's cookie into another user's request.
    _SESSION.cookies.clear()
    with _COOKIES_LOCK:
        _SESSION_COOKIES[user_email] = cookies
    logger.debug("Opened API session for %s", user_email)
    return cookies


def close_session(user_email: str) -> None:
    with _COOKIES_LOCK:
        _SESSION_COOKIES.pop(user_email, None)


def _session_cookies(user_email: str) -> dict:
    with _COOKIES_LOCK:
        cookies = _SESSION_COOKIES.get(user_email)
    if cookies:
        return cookies
    return open_session(user_email)


def request(method: str, path: str, params: dict | None = None, json: dict | None = None, timeout: int = 10) -> Any:
    base = api_base_url().rstrip("/")
    if not base:
        raise RuntimeError("API_BASE_URL not configured")
    user_email = _current_user()
    url = f"{base}{path}"
    response = _SESSION.request(
        method, url, params=params, json=json, cookies=_session_cookies(user_email), timeout=timeout
    )
    if response.status_code == 401:
        close_session(user_email)
        response = _SESSION.request(
            method, url, params=params, json=json, cookies=open_session(user_email), timeout=timeout
        )
    if not response.ok:
        raise ApiError(response.status_code, _error_detail(response))
    if response.status_code == 204:
        return None
    return response.json()
