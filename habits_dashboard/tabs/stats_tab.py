from datetime import date

import streamlit as st

from habits_dashboard.constants import ACTIVITY_WINDOW_DAYS, INTENSITY_LABELS
from habits_dashboard.data import loaders
from habits_dashboard.metrics import summarize_activity
from habits_dashboard.state import session_slices
from habits_dashboard.theme import get_active_theme
from habits_dashboard.visualizations import activity_heatmap, daily_value_chart

SLICE = "stats"


def _select_habit(habits):
    labels = {habit["name"]: habit for habit in habits}
    names = list(labels)
    remembered = session_slices.get_value(SLICE, "habit_name")
    index = names.index(remembered) if remembered in names else 0
    name = st.selectbox("Habit", names, index=index, key="stats.habit")
    session_slices.set_value(SLICE, "habit_name", name)
    return labels[name]


def _render_legend():
    _, theme = get_active_theme()
    swatches = "".join(
        f"<span class='category-chip' style='background:{color}; color:{theme['text_main']}'>{label}</span> "
        for color, label in zip(theme["intensity"], INTENSITY_LABELS)
    )
    st.markdown(swatches, unsafe_allow_html=True)


def render_stats_tab(ctx):
    user_email = ctx["current_user_email"]
    st.markdown("<div class='section-title'>Statistics</div>", unsafe_allow_html=True)

    habits = loaders.load_habits(user_email)
    if not habits:
        st.info("Create a habit to see its statistics.")
        return

    habit = _select_habit(habits)
    today = date.today()
    target = max(int(habit.get("target") or 1), 1)
    uom = habit.get("uom") or "times"

    records = loaders.load_activity_records(user_email, habit["id"], today.isoformat())
    summary = summarize_activity(records, target, today=today)
    server_stats = loaders.load_habit_stats(user_email, habit["id"], today.isoformat())

    st.markdown(f"<div class='small-label'>Last {ACTIVITY_WINDOW_DAYS} days</div>", unsafe_allow_html=True)
    summary_cols = st.columns(4)
    summary_cols[0].metric("Current streak", f"{summary.current_streak} d")
    summary_cols[1].metric("Longest streak", f"{summary.longest_streak} d")
    summary_cols[2].metric("Days with records", summary.completed_days)
    summary_cols[3].metric("Completion rate", f"{summary.completion_rate}%")
    if summary.longest_run_start:
        st.caption(f"Longest streak started on {summary.longest_run_start.strftime('%b %d, %Y')}")

    if server_stats:
        period_cols = st.columns(3)
        period_cols[0].metric("This week", server_stats.get("weeklyCompletion", 0))
        period_cols[1].metric("This month", server_stats.get("monthlyCompletion", 0))
        period_cols[2].metric("All time", server_stats.get("totalCompletions", 0))

    st.plotly_chart(
        activity_heatmap(summary.grid, uom=uom, title="Activity"),
        use_container_width=True,
        config={"displayModeBar": False},
    )
    _render_legend()

    _, theme = get_active_theme()
    st.plotly_chart(
        daily_value_chart(summary.days, target, f"Daily {uom}", theme["accent"]),
        use_container_width=True,
        config={"displayModeBar": False},
    )
