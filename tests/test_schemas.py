from datetime import date, datetime

import pytest
from pydantic import ValidationError

from habits_api.schemas import RecordAction, RecordAdjust, RecordUpsert, parse_day


@pytest.mark.parametrize(
    "raw",
    ["2026-01-05", "2026-01-05 00:00:00", "2026-01-05T13:45:00Z", " 2026-01-05 "],
)
def test_parse_day_strips_time(raw):
    assert parse_day(raw) == date(2026, 1, 5)


def test_parse_day_accepts_date_objects():
    assert parse_day(datetime(2026, 1, 5, 22, 10)) == date(2026, 1, 5)
    assert parse_day(date(2026, 1, 5)) == date(2026, 1, 5)


@pytest.mark.parametrize("raw", ["", None, "05/01/2026", "2026-13-01"])
def test_parse_day_rejects_garbage(raw):
    with pytest.raises(ValueError):
        parse_day(raw)


def test_record_upsert_normalizes_timestamp_date():
    payload = RecordUpsert(habit_id="h1", date="2026-01-05 00:00:00")
    assert payload.date == date(2026, 1, 5)
    assert payload.value == 1
    assert payload.notes is None


def test_record_adjust_rejects_unknown_action():
    with pytest.raises(ValidationError):
        RecordAdjust(habit_id="h1", date="2026-01-05", action="double")
    assert RecordAdjust(habit_id="h1", date="2026-01-05", action="complete").action is RecordAction.complete
