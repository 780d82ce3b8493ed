from __future__ import annotations

from datetime import date as dt_date, datetime
from enum import Enum
from typing import Optional, Any

from pydantic import BaseModel, field_validator

FREQUENCIES = ("daily", "weekly", "monthly")

THEMES = (
    "light", "dark", "cupcake", "bumblebee", "emerald", "corporate",
    "synthwave", "retro", "cyberpunk", "valentine", "halloween", "garden",
    "forest", "aqua", "lofi", "pastel", "fantasy", "wireframe", "black",
    "luxury", "dracula", "cmyk", "autumn", "business", "acid", "lemonade",
    "night", "coffee", "winter",
)


def parse_day(value: Any) -> dt_date:
    """Normalize a wire date to a calendar day.

    Accepts ``date``/``datetime`` objects, ``YYYY-MM-DD`` strings and the
    timestamp-at-midnight forms ``YYYY-MM-DD 00:00:00`` / ``YYYY-MM-DDT...``.
    The time of day is always dropped.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, dt_date):
        return value
    raw = str(value or "").strip()
    if not raw:
        raise ValueError("Date is required")
    day_part = raw.replace("T", " ").split(" ", 1)[0]
    try:
        return dt_date.fromisoformat(day_part)
    except ValueError as exc:
        raise ValueError(f"Invalid date: {raw!r}") from exc


class RecordAction(str, Enum):
    increment = "increment"
    decrement = "decrement"
    reset = "reset"
    complete = "complete"


class CategoryCreate(BaseModel):
    name: str = ""
    color: Optional[str] = None
    icon: Optional[str] = None


class CategoryResponse(BaseModel):
    id: str
    user_email: str
    name: str
    color: Optional[str]
    icon: Optional[str]
    created_at: str
    updated_at: Optional[str] = None


class HabitCreate(BaseModel):
    name: str = ""
    description: Optional[str] = None
    frequency: str = "daily"
    target: int = 1
    uom: str = "times"
    category_id: Optional[str] = None


class HabitArchivePayload(BaseModel):
    archived: bool = True


class HabitResponse(BaseModel):
    id: str
    user_email: str
    name: str
    description: Optional[str]
    frequency: str
    target: int
    uom: str
    category_id: Optional[str]
    archived: int
    created_at: str
    updated_at: Optional[str] = None
    category: Optional[CategoryResponse] = None


class HabitStatsResponse(BaseModel):
    weeklyCompletion: int
    monthlyCompletion: int
    currentStreak: int
    totalCompletions: int


class _DayModel(BaseModel):
    @field_validator("date", mode="before", check_fields=False)
    @classmethod
    def _normalize_date(cls, value):
        return parse_day(value)


class RecordUpsert(_DayModel):
    habit_id: str
    date: dt_date
    value: int = 1
    notes: Optional[str] = None


class RecordPatch(BaseModel):
    value: Optional[int] = None
    notes: Optional[str] = None


class RecordAdjust(_DayModel):
    habit_id: str
    date: dt_date
    action: RecordAction


class RecordResponse(BaseModel):
    id: str
    habit_id: str
    date: str
    value: int
    notes: Optional[str]
    created_at: str
    updated_at: Optional[str] = None


class RecordAdjustResponse(BaseModel):
    habit_id: str
    date: str
    value: int
    completed: bool
    record: Optional[RecordResponse] = None


class ThemePayload(BaseModel):
    theme: str


class SessionResponse(BaseModel):
    user_email: str
    expires_in: int
