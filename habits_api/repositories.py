from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone
from uuid import uuid4

from sqlalchemy import text as sql_text

from habits_api.db import get_sessionmaker
from habits_api.schemas import FREQUENCIES, THEMES, RecordAction, parse_day

logger = logging.getLogger(__name__)

CATEGORIES_TABLE = "habit_categories"
HABITS_TABLE = "habits"
RECORDS_TABLE = "habit_records"
SETTINGS_TABLE = "settings"

DEFAULT_CATEGORY_COLOR = "#4F46E5"
DEFAULT_CATEGORY_ICON = "📋"
DEFAULT_THEME = "light"

# Largest value the INTEGER columns hold on every supported backend.
MAX_INT_VALUE = 2_147_483_647

CATEGORY_COLUMNS = ["id", "user_email", "name", "color", "icon", "created_at", "updated_at"]
HABIT_COLUMNS = [
    "id",
    "user_email",
    "name",
    "description",
    "frequency",
    "target",
    "uom",
    "category_id",
    "archived",
    "created_at",
    "updated_at",
]
RECORD_COLUMNS = ["id", "habit_id", "date", "value", "notes", "created_at", "updated_at"]


class NotFoundError(LookupError):
    """A referenced habit, record or category does not exist."""


class ForbiddenError(PermissionError):
    """The row exists but belongs to another user."""


def _new_id() -> str:
    return uuid4().hex


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _clean_name(value, limit: int = 120) -> str:
    return " ".join(str(value or "").split()).strip()[:limit]


def _clean_optional_text(value):
    if value is None:
        return None
    value_str = str(value).strip()
    return value_str or None


def _normalize_frequency(value):
    if value in FREQUENCIES:
        return value
    return "daily"


def _parse_target(value) -> int:
    try:
        target = int(value)
    except (TypeError, ValueError):
        raise ValueError("Target must be a positive integer") from None
    if target <= 0:
        raise ValueError("Target must be a positive integer")
    if target > MAX_INT_VALUE:
        raise ValueError(f"Target must be at most {MAX_INT_VALUE}")
    return target


def _checked_value(value) -> int:
    value = int(value)
    if value > MAX_INT_VALUE:
        raise ValueError(f"Value must be at most {MAX_INT_VALUE}")
    return value


def _day_iso(value) -> str:
    return parse_day(value).isoformat()


def _columns(prefix: str, columns: list[str]) -> str:
    return ", ".join(f"{prefix}.{col}" for col in columns)


def _normalize_record_row(row) -> dict:
    if not row:
        return {}
    payload = dict(row)
    payload["date"] = _day_iso(payload.get("date"))
    payload["value"] = int(payload.get("value") or 0)
    return payload


def _normalize_habit_row(row) -> dict:
    payload = dict(row)
    payload["target"] = int(payload.get("target") or 1)
    payload["archived"] = int(bool(payload.get("archived")))
    return payload


async def _owned_row(table: str, columns: list[str], row_id: str, user_email: str, label: str) -> dict:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        row = (await session.execute(
            sql_text(f"SELECT {', '.join(columns)} FROM {table} WHERE id = :id"),
            {"id": row_id},
        )).mappings().fetchone()
    if not row:
        raise NotFoundError(f"{label} not found")
    if row["user_email"] != user_email:
        raise ForbiddenError(f"Not authorized to access this {label.lower()}")
    return dict(row)


# Categories


async def list_categories(user_email: str) -> list[dict]:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        rows = (await session.execute(
            sql_text(
                f"""
                SELECT {', '.join(CATEGORY_COLUMNS)}
                FROM {CATEGORIES_TABLE}
                WHERE user_email = :user_email
                ORDER BY name
                """
            ),
            {"user_email": user_email},
        )).mappings().all()
    return [dict(row) for row in rows]


async def get_category(user_email: str, category_id: str) -> dict:
    return await _owned_row(CATEGORIES_TABLE, CATEGORY_COLUMNS, category_id, user_email, "Category")


async def create_category(user_email: str, name: str, color: str | None = None, icon: str | None = None) -> dict:
    clean_name = _clean_name(name, 60)
    if not clean_name:
        raise ValueError("Name is required")
    now = _now_iso()
    record = {
        "id": _new_id(),
        "user_email": user_email,
        "name": clean_name,
        "color": _clean_optional_text(color) or DEFAULT_CATEGORY_COLOR,
        "icon": _clean_optional_text(icon) or DEFAULT_CATEGORY_ICON,
        "created_at": now,
        "updated_at": now,
    }
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(
                f"""
                INSERT INTO {CATEGORIES_TABLE} (id, user_email, name, color, icon, created_at, updated_at)
                VALUES (:id, :user_email, :name, :color, :icon, :created_at, :updated_at)
                """
            ),
            record,
        )
        await session.commit()
    return record


async def update_category(
    user_email: str,
    category_id: str,
    name: str,
    color: str | None = None,
    icon: str | None = None,
) -> dict:
    clean_name = _clean_name(name, 60)
    if not clean_name:
        raise ValueError("Name is required")
    await get_category(user_email, category_id)
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(
                f"""
                UPDATE {CATEGORIES_TABLE}
                SET name = :name,
                    color = COALESCE(:color, color),
                    icon = COALESCE(:icon, icon),
                    updated_at = :updated_at
                WHERE id = :id AND user_email = :user_email
                """
            ),
            {
                "id": category_id,
                "user_email": user_email,
                "name": clean_name,
                "color": _clean_optional_text(color),
                "icon": _clean_optional_text(icon),
                "updated_at": _now_iso(),
            },
        )
        await session.commit()
    return await get_category(user_email, category_id)


async def delete_category(user_email: str, category_id: str) -> int:
    """Delete a category, detaching its habits. Returns how many habits were detached."""
    await get_category(user_email, category_id)
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        result = await session.execute(
            sql_text(
                f"""
                UPDATE {HABITS_TABLE}
                SET category_id = NULL, updated_at = :updated_at
                WHERE user_email = :user_email AND category_id = :category_id
                """
            ),
            {"user_email": user_email, "category_id": category_id, "updated_at": _now_iso()},
        )
        detached = int(result.rowcount or 0)
        await session.execute(
            sql_text(f"DELETE FROM {CATEGORIES_TABLE} WHERE id = :id AND user_email = :user_email"),
            {"id": category_id, "user_email": user_email},
        )
        await session.commit()
    logger.info("Deleted category %s for %s, detached %d habits", category_id, user_email, detached)
    return detached


# Habits


async def _attach_categories(user_email: str, habits: list[dict]) -> list[dict]:
    if not habits:
        return habits
    categories = {item["id"]: item for item in await list_categories(user_email)}
    for habit in habits:
        habit["category"] = categories.get(habit.get("category_id"))
    return habits


async def list_habits(user_email: str, category_id: str | None = None, include_archived: bool = False) -> list[dict]:
    filters = ["user_email = :user_email"]
    params: dict = {"user_email": user_email}
    if category_id:
        filters.append("category_id = :category_id")
        params["category_id"] = category_id
    if not include_archived:
        filters.append("COALESCE(archived, 0) = 0")
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        rows = (await session.execute(
            sql_text(
                f"""
                SELECT {', '.join(HABIT_COLUMNS)}
                FROM {HABITS_TABLE}
                WHERE {' AND '.join(filters)}
                ORDER BY created_at DESC
                """
            ),
            params,
        )).mappings().all()
    return await _attach_categories(user_email, [_normalize_habit_row(row) for row in rows])


async def get_habit(user_email: str, habit_id: str) -> dict:
    row = await _owned_row(HABITS_TABLE, HABIT_COLUMNS, habit_id, user_email, "Habit")
    habits = await _attach_categories(user_email, [_normalize_habit_row(row)])
    return habits[0]


async def _checked_category_id(user_email: str, category_id):
    category_id = _clean_optional_text(category_id)
    if category_id is None:
        return None
    await get_category(user_email, category_id)
    return category_id


async def create_habit(user_email: str, payload: dict) -> dict:
    name = _clean_name(payload.get("name"))
    if not name:
        raise ValueError("Name is required")
    now = _now_iso()
    record = {
        "id": _new_id(),
        "user_email": user_email,
        "name": name,
        "description": _clean_optional_text(payload.get("description")),
        "frequency": _normalize_frequency(payload.get("frequency")),
        "target": _parse_target(payload.get("target", 1)),
        "uom": _clean_name(payload.get("uom"), 30) or "times",
        "category_id": await _checked_category_id(user_email, payload.get("category_id")),
        "archived": 0,
        "created_at": now,
        "updated_at": now,
    }
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(
                f"""
                INSERT INTO {HABITS_TABLE}
                ({', '.join(HABIT_COLUMNS)})
                VALUES ({', '.join(f':{col}' for col in HABIT_COLUMNS)})
                """
            ),
            record,
        )
        await session.commit()
    return await get_habit(user_email, record["id"])


async def update_habit(user_email: str, habit_id: str, payload: dict) -> dict:
    name = _clean_name(payload.get("name"))
    if not name:
        raise ValueError("Name is required")
    await get_habit(user_email, habit_id)
    params = {
        "id": habit_id,
        "user_email": user_email,
        "name": name,
        "description": _clean_optional_text(payload.get("description")),
        "frequency": _normalize_frequency(payload.get("frequency")),
        "target": _parse_target(payload.get("target", 1)),
        "uom": _clean_name(payload.get("uom"), 30) or "times",
        "category_id": await _checked_category_id(user_email, payload.get("category_id")),
        "updated_at": _now_iso(),
    }
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(
                f"""
                UPDATE {HABITS_TABLE}
                SET name = :name,
                    description = :description,
                    frequency = :frequency,
                    target = :target,
                    uom = :uom,
                    category_id = :category_id,
                    updated_at = :updated_at
                WHERE id = :id AND user_email = :user_email
                """
            ),
            params,
        )
        await session.commit()
    return await get_habit(user_email, habit_id)


async def set_habit_archived(user_email: str, habit_id: str, archived: bool) -> dict:
    await get_habit(user_email, habit_id)
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(
                f"""
                UPDATE {HABITS_TABLE}
                SET archived = :archived, updated_at = :updated_at
                WHERE id = :id AND user_email = :user_email
                """
            ),
            {"id": habit_id, "user_email": user_email, "archived": int(bool(archived)), "updated_at": _now_iso()},
        )
        await session.commit()
    return await get_habit(user_email, habit_id)


async def delete_habit(user_email: str, habit_id: str) -> None:
    await get_habit(user_email, habit_id)
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(f"DELETE FROM {RECORDS_TABLE} WHERE habit_id = :habit_id"),
            {"habit_id": habit_id},
        )
        await session.execute(
            sql_text(f"DELETE FROM {HABITS_TABLE} WHERE id = :id AND user_email = :user_email"),
            {"id": habit_id, "user_email": user_email},
        )
        await session.commit()


# Records


async def list_records(
    user_email: str,
    habit_id: str | None = None,
    start_date=None,
    end_date=None,
    day=None,
) -> list[dict]:
    filters = ["h.user_email = :user_email"]
    params: dict = {"user_email": user_email}
    if habit_id:
        await get_habit(user_email, habit_id)
        filters.append("r.habit_id = :habit_id")
        params["habit_id"] = habit_id
    if day is not None:
        filters.append("r.date = :day")
        params["day"] = _day_iso(day)
    if start_date is not None:
        filters.append("r.date >= :start_date")
        params["start_date"] = _day_iso(start_date)
    if end_date is not None:
        filters.append("r.date <= :end_date")
        params["end_date"] = _day_iso(end_date)
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        rows = (await session.execute(
            sql_text(
                f"""
                SELECT {_columns('r', RECORD_COLUMNS)}
                FROM {RECORDS_TABLE} r
                JOIN {HABITS_TABLE} h ON h.id = r.habit_id
                WHERE {' AND '.join(filters)}
                ORDER BY r.date DESC
                """
            ),
            params,
        )).mappings().all()
    return [_normalize_record_row(row) for row in rows]


async def get_record(user_email: str, record_id: str) -> dict:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        row = (await session.execute(
            sql_text(
                f"""
                SELECT {_columns('r', RECORD_COLUMNS)}, h.user_email AS owner_email
                FROM {RECORDS_TABLE} r
                LEFT JOIN {HABITS_TABLE} h ON h.id = r.habit_id
                WHERE r.id = :id
                """
            ),
            {"id": record_id},
        )).mappings().fetchone()
    if not row:
        raise NotFoundError("Record not found")
    payload = _normalize_record_row(row)
    if payload.pop("owner_email", None) != user_email:
        raise ForbiddenError("Not authorized to modify this record")
    return payload


async def _record_for_day(habit_id: str, day_iso: str) -> dict | None:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        row = (await session.execute(
            sql_text(
                f"SELECT {', '.join(RECORD_COLUMNS)} FROM {RECORDS_TABLE} "
                "WHERE habit_id = :habit_id AND date = :date"
            ),
            {"habit_id": habit_id, "date": day_iso},
        )).mappings().fetchone()
    return _normalize_record_row(row) if row else None


async def _delete_record_for_day(habit_id: str, day_iso: str) -> None:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        result = await session.execute(
            sql_text(f"DELETE FROM {RECORDS_TABLE} WHERE habit_id = :habit_id AND date = :date"),
            {"habit_id": habit_id, "date": day_iso},
        )
        await session.commit()
    if result.rowcount:
        logger.info("Value reset to zero, removed record for habit %s on %s", habit_id, day_iso)


async def upsert_record(user_email: str, habit_id: str, day, value: int = 1, notes: str | None = None) -> dict | None:
    """Write the value for one (habit, day). A value of zero or less removes the record."""
    await get_habit(user_email, habit_id)
    day_iso = _day_iso(day)
    value = _checked_value(value)
    if value <= 0:
        await _delete_record_for_day(habit_id, day_iso)
        return None
    now = _now_iso()
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(
                f"""
                INSERT INTO {RECORDS_TABLE} (id, habit_id, date, value, notes, created_at, updated_at)
                VALUES (:id, :habit_id, :date, :value, :notes, :created_at, :updated_at)
                ON CONFLICT(habit_id, date) DO UPDATE SET
                    value = EXCLUDED.value,
                    notes = COALESCE(EXCLUDED.notes, {RECORDS_TABLE}.notes),
                    updated_at = EXCLUDED.updated_at
                """
            ),
            {
                "id": _new_id(),
                "habit_id": habit_id,
                "date": day_iso,
                "value": value,
                "notes": _clean_optional_text(notes),
                "created_at": now,
                "updated_at": now,
            },
        )
        await session.commit()
    return await _record_for_day(habit_id, day_iso)


async def update_record(user_email: str, record_id: str, value: int | None = None, notes: str | None = None) -> dict | None:
    existing = await get_record(user_email, record_id)
    new_value = existing["value"] if value is None else _checked_value(value)
    if new_value <= 0:
        await delete_record(user_email, record_id)
        return None
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(
                f"""
                UPDATE {RECORDS_TABLE}
                SET value = :value, notes = :notes, updated_at = :updated_at
                WHERE id = :id
                """
            ),
            {
                "id": record_id,
                "value": new_value,
                "notes": existing.get("notes") if notes is None else _clean_optional_text(notes),
                "updated_at": _now_iso(),
            },
        )
        await session.commit()
    return await get_record(user_email, record_id)


async def adjust_record(user_email: str, habit_id: str, day, action: RecordAction) -> dict:
    habit = await get_habit(user_email, habit_id)
    target = int(habit["target"])
    day_iso = _day_iso(day)
    # Read-modify-write without a lock: concurrent adjusts of the same day are last-write-wins.
    existing = await _record_for_day(habit_id, day_iso)
    current = existing["value"] if existing else 0
    action = RecordAction(action)
    if action is RecordAction.increment:
        new_value = current + 1
    elif action is RecordAction.decrement:
        new_value = max(0, current - 1)
    elif action is RecordAction.complete:
        new_value = target
    else:
        new_value = 0
    record = await upsert_record(user_email, habit_id, day_iso, new_value)
    return {
        "habit_id": habit_id,
        "date": day_iso,
        "value": record["value"] if record else 0,
        "completed": bool(record) and record["value"] >= target,
        "record": record,
    }


async def delete_record(user_email: str, record_id: str) -> None:
    await get_record(user_email, record_id)
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(f"DELETE FROM {RECORDS_TABLE} WHERE id = :id"),
            {"id": record_id},
        )
        await session.commit()


def week_start(today: date) -> date:
    # Weeks start on Sunday.
    return today - timedelta(days=(today.weekday() + 1) % 7)


async def habit_stats(user_email: str, habit_id: str, today: date | None = None) -> dict:
    today = today or date.today()
    records = await list_records(user_email, habit_id=habit_id, end_date=today)
    done_days = {date.fromisoformat(item["date"]) for item in records if item["value"] > 0}
    start_of_week = week_start(today)
    start_of_month = today.replace(day=1)

    streak = 0
    current = today
    while current in done_days:
        streak += 1
        current -= timedelta(days=1)

    return {
        "weeklyCompletion": sum(1 for day in done_days if day >= start_of_week),
        "monthlyCompletion": sum(1 for day in done_days if day >= start_of_month),
        "currentStreak": streak,
        "totalCompletions": len(done_days),
    }


# Preferences


async def get_setting(user_email: str, key: str) -> str | None:
    setting_key = f"{user_email}::{key}"
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        row = (await session.execute(
            sql_text(f"SELECT value FROM {SETTINGS_TABLE} WHERE key = :key"),
            {"key": setting_key},
        )).fetchone()
    return row[0] if row else None


async def set_setting(user_email: str, key: str, value: str) -> None:
    setting_key = f"{user_email}::{key}"
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(
                f"INSERT INTO {SETTINGS_TABLE} (key, value) VALUES (:key, :value) "
                "ON CONFLICT(key) DO UPDATE SET value=EXCLUDED.value"
            ),
            {"key": setting_key, "value": value},
        )
        await session.commit()


async def get_theme(user_email: str) -> str:
    raw = await get_setting(user_email, "theme")
    if raw in THEMES:
        return raw
    return DEFAULT_THEME


async def set_theme(user_email: str, theme: str) -> str:
    clean = str(theme or "").strip().lower()
    if clean not in THEMES:
        raise ValueError(f"Unknown theme: {theme}")
    await set_setting(user_email, "theme", clean)
    return clean
