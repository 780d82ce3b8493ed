import logging

import streamlit as st

from habits_dashboard.constants import DARK_THEMES, DEFAULT_THEME, THEMES
from habits_dashboard.data import repositories

logger = logging.getLogger(__name__)

THEME_STATE_KEY = "ui.theme"
THEME_LOADED_KEY = "ui.theme_loaded_for"

THEME_PRESETS = {
    "dark": {
        "bg_main": "#121017",
        "bg_card": "#1e1a27",
        "bg_panel": "#2a2335",
        "border": "#5b4f70",
        "text_main": "#f3edf9",
        "text_soft": "#c8bbd8",
        "button": "#5f4f79",
        "button_hover": "#725f90",
        "accent": "#8e79af",
        "plot_grid": "#3d3550",
        "plot_marker_line": "#ddd1ea",
        "divider": "rgba(255,255,255,0.08)",
        "intensity": ["#241e30", "#3b4a6b", "#4f6fa3", "#6e96d6", "#8fd19e"],
    },
    "light": {
        "bg_main": "#f7f3ed",
        "bg_card": "#fff9f1",
        "bg_panel": "#f6efe3",
        "border": "#c4b59f",
        "text_main": "#1b1b1b",
        "text_soft": "#5d5d5d",
        "button": "#b29a7d",
        "button_hover": "#9f876b",
        "accent": "#8f7aa9",
        "plot_grid": "#d9ccbb",
        "plot_marker_line": "#ffffff",
        "divider": "rgba(0,0,0,0.08)",
        "intensity": ["#ece4d8", "#c6dbef", "#9ecae1", "#6baed6", "#31a354"],
    },
}


def palette_for(theme_name):
    base = "dark" if theme_name in DARK_THEMES else "light"
    return THEME_PRESETS[base]


def load_theme_preference(user_email):
    """Read the saved theme for this user into session state, once per user."""
    if st.session_state.get(THEME_LOADED_KEY) == user_email and THEME_STATE_KEY in st.session_state:
        return st.session_state[THEME_STATE_KEY]
    name = repositories.get_theme()
    if name not in THEMES:
        name = DEFAULT_THEME
    st.session_state[THEME_STATE_KEY] = name
    st.session_state[THEME_LOADED_KEY] = user_email
    return name


def save_theme_preference(name):
    if name not in THEMES:
        raise ValueError(f"Unknown theme: {name}")
    repositories.set_theme(name)
    st.session_state[THEME_STATE_KEY] = name
    logger.info("Saved theme preference %s", name)


def get_active_theme():
    name = st.session_state.get(THEME_STATE_KEY, DEFAULT_THEME)
    if name not in THEMES:
        name = DEFAULT_THEME
    return name, palette_for(name)


def inject_theme_css():
    active_name, theme = get_active_theme()
    st.markdown(
        f"""
<style>
:root {{
    --bg-main: {theme['bg_main']};
    --bg-card: {theme['bg_card']};
    --bg-panel: {theme['bg_panel']};
    --border: {theme['border']};
    --text-main: {theme['text_main']};
    --text-soft: {theme['text_soft']};
    --button: {theme['button']};
    --button-hover: {theme['button_hover']};
    --accent: {theme['accent']};
    --divider: {theme['divider']};
}}
.stApp {{
    background: var(--bg-main);
    color: var(--text-main);
}}
.section-title {{
    font-size: 1.4rem;
    font-weight: 600;
    color: var(--text-main);
    margin: 4px 0 12px 0;
}}
.small-label {{
    font-size: 0.78rem;
    text-transform: uppercase;
    letter-spacing: 0.06em;
    color: var(--text-soft);
}}
.panel {{
    background: var(--bg-panel);
    border: 1px solid var(--border);
    border-radius: 12px;
    padding: 10px 14px;
    margin-bottom: 10px;
}}
.habit-name {{
    font-weight: 600;
    color: var(--text-main);
}}
.habit-meta {{
    font-size: 0.8rem;
    color: var(--text-soft);
}}
.category-chip {{
    display: inline-block;
    padding: 1px 8px;
    border-radius: 999px;
    font-size: 0.75rem;
    color: #ffffff;
}}
.stButton > button {{
    background: var(--button);
    color: var(--text-main);
    border: 1px solid var(--border);
}}
.stButton > button:hover {{
    background: var(--button-hover);
}}
</style>
""",
        unsafe_allow_html=True,
    )
    return {"name": active_name, "palette": theme}
