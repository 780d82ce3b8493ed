import html
import logging

import streamlit as st

from habits_dashboard.constants import FREQUENCIES, RECORD_ACTIONS, UNITS
from habits_dashboard.data import loaders, repositories
from habits_dashboard.metrics import is_complete, record_progress
from habits_dashboard.state import session_slices

logger = logging.getLogger(__name__)

SLICE = "today"


def _category_options(categories):
    options = {"No category": None}
    for category in categories:
        options[f"{category.get('icon') or ''} {category['name']}".strip()] = category["id"]
    return options


def _habit_payload(prefix, category_options):
    category_label = st.session_state.get(f"{prefix}.category")
    return {
        "name": (st.session_state.get(f"{prefix}.name") or "").strip(),
        "description": (st.session_state.get(f"{prefix}.description") or "").strip() or None,
        "frequency": st.session_state.get(f"{prefix}.frequency", FREQUENCIES[0]),
        "target": int(st.session_state.get(f"{prefix}.target", 1) or 1),
        "uom": st.session_state.get(f"{prefix}.uom", UNITS[0]),
        "category_id": category_options.get(category_label),
    }


def _run_mutation(action, *args):
    try:
        action(*args)
    except Exception as exc:
        logger.warning("%s failed: %s", getattr(action, "__name__", "mutation"), exc)
        st.warning(str(exc))
        loaders.invalidate()
        return False
    return True


def _adjust(habit_id, selected_day, action):
    if _run_mutation(repositories.adjust_record, habit_id, selected_day, action):
        st.rerun()


def _render_add_form(category_options):
    with st.expander("Add habit", expanded=False):
        with st.form(key="today.add_form", clear_on_submit=True):
            st.text_input("Name", key="today.new.name", placeholder="Drink water")
            st.text_area("Description", key="today.new.description", height=68)
            form_cols = st.columns(4)
            with form_cols[0]:
                st.selectbox("Frequency", FREQUENCIES, key="today.new.frequency")
            with form_cols[1]:
                st.number_input("Target", min_value=1, max_value=10000, step=1, value=1, key="today.new.target")
            with form_cols[2]:
                st.selectbox("Unit", UNITS, key="today.new.uom")
            with form_cols[3]:
                st.selectbox("Category", list(category_options), key="today.new.category")
            submitted = st.form_submit_button("Add", use_container_width=True)

    if submitted:
        payload = _habit_payload("today.new", category_options)
        if not payload["name"]:
            st.warning("Habit name is required.")
            return
        if _run_mutation(repositories.create_habit, payload):
            st.rerun()


def _render_edit_form(habit, category_options):
    prefix = f"today.edit.{habit['id']}"
    labels = list(category_options)
    current_label = next(
        (label for label, value in category_options.items() if value == habit.get("category_id")),
        labels[0],
    )
    with st.form(key=f"{prefix}.form"):
        st.text_input("Name", value=habit["name"], key=f"{prefix}.name")
        st.text_area("Description", value=habit.get("description") or "", key=f"{prefix}.description", height=68)
        form_cols = st.columns(4)
        with form_cols[0]:
            frequency = habit.get("frequency") if habit.get("frequency") in FREQUENCIES else FREQUENCIES[0]
            st.selectbox("Frequency", FREQUENCIES, index=FREQUENCIES.index(frequency), key=f"{prefix}.frequency")
        with form_cols[1]:
            st.number_input(
                "Target",
                min_value=1,
                max_value=10000,
                step=1,
                value=max(int(habit.get("target") or 1), 1),
                key=f"{prefix}.target",
            )
        with form_cols[2]:
            units = UNITS if habit.get("uom") in UNITS else UNITS + [habit.get("uom") or "times"]
            st.selectbox("Unit", units, index=units.index(habit.get("uom") or "times"), key=f"{prefix}.uom")
        with form_cols[3]:
            st.selectbox("Category", labels, index=labels.index(current_label), key=f"{prefix}.category")
        saved = st.form_submit_button("Save", use_container_width=True)

    if saved:
        if _run_mutation(repositories.update_habit, habit["id"], _habit_payload(prefix, category_options)):
            session_slices.stop_editing(SLICE)
            st.rerun()

    action_cols = st.columns(2)
    with action_cols[0]:
        if st.button("Archive", key=f"{prefix}.archive", use_container_width=True):
            if _run_mutation(repositories.archive_habit, habit["id"], True):
                session_slices.stop_editing(SLICE)
                st.rerun()
    with action_cols[1]:
        if st.button("Delete", key=f"{prefix}.delete", use_container_width=True):
            if _run_mutation(repositories.delete_habit, habit["id"]):
                session_slices.stop_editing(SLICE)
                st.rerun()


def _render_value_form(habit, record, selected_day):
    prefix = f"today.value.{habit['id']}.{selected_day.isoformat()}"
    with st.form(key=f"{prefix}.form"):
        value_cols = st.columns([1, 3])
        with value_cols[0]:
            value = st.number_input(
                f"Value ({habit.get('uom') or 'times'})",
                min_value=0,
                step=1,
                value=int((record or {}).get("value") or 0),
                key=f"{prefix}.value",
            )
        with value_cols[1]:
            notes = st.text_input("Notes", value=(record or {}).get("notes") or "", key=f"{prefix}.notes")
        saved = st.form_submit_button("Log value", use_container_width=True)
    if saved:
        if _run_mutation(repositories.save_record, habit["id"], selected_day, value, notes.strip() or None):
            st.rerun()


def habit_heading_html(habit, value, target):
    category = habit.get("category") or {}
    badge = ""
    if category:
        color = html.escape(category.get("color") or "#4F46E5", quote=True)
        label = f"{category.get('icon') or ''} {category.get('name') or ''}".strip()
        badge = f" <span class='category-chip' style='background:{color}'>{html.escape(label)}</span>"
    done = " ✅" if is_complete(value, target) else ""
    return f"<span class='habit-name'>{html.escape(habit['name'])}</span>{done}{badge}"


def _render_habit_row(habit, record, selected_day, category_options):
    target = max(int(habit.get("target") or 1), 1)
    value = int((record or {}).get("value") or 0)

    st.markdown("<div class='panel'>", unsafe_allow_html=True)
    row_cols = st.columns([4.2, 0.45, 0.45, 0.45, 0.45, 0.45])
    with row_cols[0]:
        st.markdown(habit_heading_html(habit, value, target), unsafe_allow_html=True)
        if habit.get("description"):
            st.markdown(f"<div class='habit-meta'>{html.escape(habit['description'])}</div>", unsafe_allow_html=True)
        st.progress(record_progress(value, target) / 100, text=f"{value} / {target} {habit.get('uom') or 'times'}")
    for idx, (action, symbol) in enumerate(RECORD_ACTIONS.items(), start=1):
        with row_cols[idx]:
            if st.button(symbol, key=f"today.{action}.{habit['id']}", help=action.title(), type="tertiary"):
                _adjust(habit["id"], selected_day, action)
    with row_cols[5]:
        editing = session_slices.editing_habit(SLICE) == habit["id"]
        if st.button("✕" if editing else "✎", key=f"today.toggle_edit.{habit['id']}", type="tertiary"):
            session_slices.toggle_editing(SLICE, habit["id"])
            st.rerun()
    if session_slices.editing_habit(SLICE) == habit["id"]:
        _render_value_form(habit, record, selected_day)
        _render_edit_form(habit, category_options)
    st.markdown("</div>", unsafe_allow_html=True)


def render_today_tab(ctx):
    user_email = ctx["current_user_email"]
    st.markdown("<div class='section-title'>Today</div>", unsafe_allow_html=True)

    selected_day = session_slices.selected_day(SLICE)
    selected_day = st.date_input("Date", value=selected_day, key="today.date_input")
    session_slices.set_value(SLICE, "selected_day", selected_day)

    categories = loaders.load_categories(user_email)
    category_options = _category_options(categories)

    filter_labels = ["All categories"] + [label for label in category_options if category_options[label]]
    filter_label = st.selectbox("Category", filter_labels, key="today.category_filter")
    category_id = category_options.get(filter_label)

    habits = loaders.load_habits(user_email, category_id=category_id)
    records = loaders.load_day_records(user_email, selected_day.isoformat())

    if not habits:
        st.info("No habits yet. Add your first one below.")
    else:
        completed = sum(
            1 for habit in habits
            if is_complete((records.get(habit["id"]) or {}).get("value"), habit.get("target"))
        )
        st.caption(f"{completed} of {len(habits)} habits complete on {selected_day.strftime('%a, %b %d')}")
        for habit in habits:
            _render_habit_row(habit, records.get(habit["id"]), selected_day, category_options)

    _render_add_form(category_options)
