import logging
from datetime import date

import requests

from habits_dashboard.constants import DEFAULT_THEME
from habits_dashboard.data import api_client

logger = logging.getLogger(__name__)

READ_ERRORS = (requests.RequestException, api_client.ApiError, RuntimeError)

_INVALIDATE_CALLBACK = None


def configure(secret_getter, current_user_getter, invalidate_callback=None):
    global _INVALIDATE_CALLBACK
    api_client.configure(secret_getter, current_user_getter)
    _INVALIDATE_CALLBACK = invalidate_callback


def api_enabled():
    return api_client.is_enabled()


def _invalidate():
    if _INVALIDATE_CALLBACK is None:
        return
    _INVALIDATE_CALLBACK()


def _day_iso(day):
    if isinstance(day, date):
        return day.isoformat()
    return str(day)


def _read(path, params=None, key="items", default=None):
    fallback = [] if default is None else default
    try:
        payload = api_client.request("GET", path, params=params)
    except READ_ERRORS as exc:
        logger.warning("GET %s failed, using empty result: %s", path, exc)
        return fallback
    if key is None:
        return payload
    return (payload or {}).get(key, fallback)


def _write(method, path, payload=None):
    try:
        return api_client.request(method, path, json=payload)
    finally:
        _invalidate()


# Habits


def list_habits(category_id=None, include_archived=False):
    params = {"include_archived": str(bool(include_archived)).lower()}
    if category_id:
        params["categoryId"] = category_id
    return _read("/v1/habits", params=params)


def create_habit(payload):
    return _write("POST", "/v1/habits", payload)


def update_habit(habit_id, payload):
    return _write("PUT", f"/v1/habits/{habit_id}", payload)


def archive_habit(habit_id, archived=True):
    return _write("PUT", f"/v1/habits/{habit_id}/archive", {"archived": bool(archived)})


def delete_habit(habit_id):
    return _write("DELETE", f"/v1/habits/{habit_id}")


def get_habit_stats(habit_id):
    return _read(f"/v1/habits/{habit_id}/stats", key=None, default={}) or {}


# Categories


def list_categories():
    return _read("/v1/categories")


def create_category(name, color=None, icon=None):
    return _write("POST", "/v1/categories", {"name": name, "color": color, "icon": icon})


def update_category(category_id, name, color=None, icon=None):
    return _write("PUT", f"/v1/categories/{category_id}", {"name": name, "color": color, "icon": icon})


def delete_category(category_id):
    return _write("DELETE", f"/v1/categories/{category_id}")


# Records


def list_records(habit_id=None, start_date=None, end_date=None, day=None):
    params = {}
    if habit_id:
        params["habit_id"] = habit_id
    if start_date is not None:
        params["start_date"] = _day_iso(start_date)
    if end_date is not None:
        params["end_date"] = _day_iso(end_date)
    if day is not None:
        params["date"] = _day_iso(day)
    return _read("/v1/habit-records", params=params)


def adjust_record(habit_id, day, action):
    return _write(
        "POST",
        "/v1/habit-records/adjust",
        {"habit_id": habit_id, "date": _day_iso(day), "action": action},
    )


def save_record(habit_id, day, value, notes=None):
    return _write(
        "POST",
        "/v1/habit-records",
        {"habit_id": habit_id, "date": _day_iso(day), "value": int(value), "notes": notes},
    )


# Preferences


def get_theme():
    payload = _read("/v1/settings/theme", key=None, default={}) or {}
    return payload.get("theme") or DEFAULT_THEME


def set_theme(theme):
    return _write("PUT", "/v1/settings/theme", {"theme": theme})
