import streamlit as st

from habits_dashboard.tabs.categories_tab import render_categories_tab
from habits_dashboard.tabs.settings_tab import render_settings_tab
from habits_dashboard.tabs.stats_tab import render_stats_tab
from habits_dashboard.tabs.today_tab import render_today_tab


TAB_OPTIONS = [
    "Today",
    "Statistics",
    "Categories",
    "Settings",
]


def render_router(ctx):
    active = st.session_state.get("ui.active_tab", TAB_OPTIONS[0])
    active = st.segmented_control(
        "Workspace",
        TAB_OPTIONS,
        key="ui.active_tab",
        default=active,
    )

    if active == "Statistics":
        return _render_stats(ctx)

    if active == "Categories":
        return _render_categories(ctx)

    if active == "Settings":
        return render_settings_tab(ctx)

    return _render_today(ctx)


@st.fragment
def _render_today(ctx):
    render_today_tab(ctx)


@st.fragment
def _render_stats(ctx):
    render_stats_tab(ctx)


@st.fragment
def _render_categories(ctx):
    render_categories_tab(ctx)
