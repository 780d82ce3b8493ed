"""
Streak and activity statistics for one habit over a trailing window of days.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import IntEnum
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from habits_dashboard.constants import ACTIVITY_WINDOW_DAYS, GRID_DAYS_PER_WEEK, GRID_WEEKS

logger = logging.getLogger(__name__)


class Intensity(IntEnum):
    NONE = 0
    LOW = 1
    MEDIUM = 2
    HIGH = 3
    COMPLETE = 4


@dataclass(frozen=True)
class DayActivity:
    day: date
    value: int
    intensity: Intensity


@dataclass
class ActivitySummary:
    completed_days: int = 0
    current_streak: int = 0
    longest_streak: int = 0
    longest_run_start: Optional[date] = None
    completion_rate: float = 0.0
    days: List[DayActivity] = field(default_factory=list)
    grid: List[List[DayActivity]] = field(default_factory=list)


def normalize_day(value) -> date:
    """
    'YYYY-MM-DD', 'YYYY-MM-DD 00:00:00', ISO timestamps, date or datetime -> date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    raw = str(value or "").strip()
    return date.fromisoformat(raw.replace("T", " ").split(" ", 1)[0])


def daily_values(records: Iterable[dict]) -> Tuple[Dict[date, int], Set[date]]:
    """
    Sum record values per day and collect the days that have a record at all.

    Records whose date cannot be parsed are skipped.
    """
    values: Dict[date, int] = defaultdict(int)
    present: Set[date] = set()
    for record in records or []:
        try:
            day = normalize_day(record.get("date"))
        except ValueError:
            logger.debug("Skipping record with invalid date: %r", record.get("date"))
            continue
        present.add(day)
        try:
            values[day] += int(record.get("value") or 0)
        except (TypeError, ValueError):
            continue
    return dict(values), present


def window_days(today: date, length: int) -> List[date]:
    """
    `length` consecutive days ending with `today`, oldest first.
    """
    start = today - timedelta(days=length - 1)
    return [start + timedelta(days=offset) for offset in range(length)]


def build_day_series(records: Iterable[dict], today: date, length: int = ACTIVITY_WINDOW_DAYS) -> List[Tuple[date, int]]:
    values, _ = daily_values(records)
    return [(day, values.get(day, 0)) for day in window_days(today, length)]


def current_streak(values: Sequence[int]) -> int:
    """
    Consecutive non-zero days counted backward from the last element (today).
    """
    streak = 0
    for value in reversed(values):
        if value <= 0:
            break
        streak += 1
    return streak


def longest_streak(values: Sequence[int]) -> Tuple[int, Optional[int]]:
    """
    (length, start index) of the longest non-zero run. Ties keep the earliest run.
    """
    best = 0
    best_start = None
    run = 0
    run_start = 0
    for idx, value in enumerate(values):
        if value > 0:
            if run == 0:
                run_start = idx
            run += 1
            if run > best:
                best = run
                best_start = run_start
        else:
            run = 0
    return best, best_start


def intensity_for(value: int, target: int) -> Intensity:
    if value <= 0:
        return Intensity.NONE
    target = max(int(target or 1), 1)
    ratio = value / target
    if ratio >= 1:
        return Intensity.COMPLETE
    if ratio < 1 / 3:
        return Intensity.LOW
    if ratio < 2 / 3:
        return Intensity.MEDIUM
    return Intensity.HIGH


def build_week_grid(values: Dict[date, int], target: int, today: date) -> List[List[DayActivity]]:
    days = window_days(today, GRID_WEEKS * GRID_DAYS_PER_WEEK)
    cells = [DayActivity(day, values.get(day, 0), intensity_for(values.get(day, 0), target)) for day in days]
    return [cells[idx:idx + GRID_DAYS_PER_WEEK] for idx in range(0, len(cells), GRID_DAYS_PER_WEEK)]


def completion_rate(completed_days: int, length: int = ACTIVITY_WINDOW_DAYS) -> float:
    if length <= 0:
        return 0.0
    return round(completed_days / length * 100, 1)


def summarize_activity(
    records: Iterable[dict],
    target: int,
    today: Optional[date] = None,
    length: int = ACTIVITY_WINDOW_DAYS,
) -> ActivitySummary:
    today = today or date.today()
    records = list(records or [])
    values, present = daily_values(records)
    days = window_days(today, length)
    series = [values.get(day, 0) for day in days]

    longest, longest_start = longest_streak(series)
    completed = sum(1 for day in days if day in present)
    return ActivitySummary(
        completed_days=completed,
        current_streak=current_streak(series),
        longest_streak=longest,
        longest_run_start=days[longest_start] if longest_start is not None else None,
        completion_rate=completion_rate(completed, length),
        days=[DayActivity(day, value, intensity_for(value, target)) for day, value in zip(days, series)],
        grid=build_week_grid(values, target, today),
    )


def record_progress(value, target) -> float:
    target = max(int(target or 1), 1)
    return min(100.0, round((int(value or 0) / target) * 100, 1))


def is_complete(value, target) -> bool:
    return int(value or 0) >= max(int(target or 1), 1)
