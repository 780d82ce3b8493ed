from datetime import date

import streamlit as st


PREFIX = "slice"


def get_slice(slice_name):
    key = f"{PREFIX}.{slice_name}"
    if key not in st.session_state:
        st.session_state[key] = {}
    return st.session_state[key]


def get_value(slice_name, name, default=None):
    return get_slice(slice_name).get(name, default)


def set_value(slice_name, name, value):
    get_slice(slice_name)[name] = value


def selected_day(slice_name):
    """The day a tab is looking at. Starts at today and survives reruns."""
    value = get_value(slice_name, "selected_day")
    if not isinstance(value, date):
        value = date.today()
        set_value(slice_name, "selected_day", value)
    return value


def editing_habit(slice_name):
    return get_value(slice_name, "editing")


def toggle_editing(slice_name, habit_id):
    current = editing_habit(slice_name)
    set_value(slice_name, "editing", None if current == habit_id else habit_id)


def stop_editing(slice_name):
    set_value(slice_name, "editing", None)
