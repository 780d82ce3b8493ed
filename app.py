import html
from datetime import date

import streamlit as st

from habits_dashboard.auth import (
    enforce_login,
    get_current_user_email,
    get_display_name,
    get_secret,
    load_local_env,
)
from habits_dashboard.constants import ACTIVITY_WINDOW_DAYS, DAY_LABELS, GRID_WEEKS
from habits_dashboard.context import DashboardContext
from habits_dashboard.data import loaders, repositories
from habits_dashboard.logging_config import configure_logging
from habits_dashboard.router import render_router
from habits_dashboard.theme import inject_theme_css, load_theme_preference

st.set_page_config(page_title="Habit Tracker", layout="wide")

load_local_env()
configure_logging()

repositories.configure(
    get_secret,
    get_current_user_email,
    invalidate_callback=loaders.invalidate,
)

enforce_login()

if not repositories.api_enabled():
    st.error("API_BASE_URL and BACKEND_SESSION_SECRET must be configured to reach the habits API.")
    st.stop()

current_user_email = get_current_user_email()
current_user_name = get_display_name(current_user_email)
theme_name = load_theme_preference(current_user_email)
inject_theme_css()

st.markdown(
    f"<div class='section-title'>Hi {html.escape(current_user_name)}, {date.today().strftime('%A, %b %d')}</div>",
    unsafe_allow_html=True,
)

context = DashboardContext(
    current_user_email=current_user_email,
    display_name=current_user_name,
    theme_name=theme_name,
    constants={
        "DAY_LABELS": DAY_LABELS,
        "ACTIVITY_WINDOW_DAYS": ACTIVITY_WINDOW_DAYS,
        "GRID_WEEKS": GRID_WEEKS,
    },
)

render_router(context)
