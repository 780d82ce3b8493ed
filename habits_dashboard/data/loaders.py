from __future__ import annotations

from datetime import date, timedelta

import streamlit as st

from habits_dashboard.constants import ACTIVITY_WINDOW_DAYS, GRID_DAYS_PER_WEEK, GRID_WEEKS
from habits_dashboard.data import repositories


# user_email is part of every cache key so sessions of different users never share results.


@st.cache_data(ttl=120, show_spinner=False)
def load_habits(user_email, category_id=None, include_archived=False):
    return repositories.list_habits(category_id=category_id, include_archived=include_archived)


@st.cache_data(ttl=300, show_spinner=False)
def load_categories(user_email):
    return repositories.list_categories()


@st.cache_data(ttl=120, show_spinner=False)
def load_day_records(user_email, day_iso):
    records = repositories.list_records(day=day_iso)
    return {item["habit_id"]: item for item in records}


@st.cache_data(ttl=120, show_spinner=False)
def load_activity_records(user_email, habit_id, today_iso):
    today = date.fromisoformat(today_iso)
    span = max(ACTIVITY_WINDOW_DAYS, GRID_WEEKS * GRID_DAYS_PER_WEEK)
    start = today - timedelta(days=span - 1)
    return repositories.list_records(habit_id=habit_id, start_date=start, end_date=today)


@st.cache_data(ttl=120, show_spinner=False)
def load_habit_stats(user_email, habit_id, today_iso):
    return repositories.get_habit_stats(habit_id)


def invalidate():
    load_habits.clear()
    load_categories.clear()
    load_day_records.clear()
    load_activity_records.clear()
    load_habit_stats.clear()
