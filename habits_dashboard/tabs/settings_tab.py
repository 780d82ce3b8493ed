import streamlit as st

from habits_dashboard.constants import THEMES
from habits_dashboard.data import loaders, repositories
from habits_dashboard.theme import get_active_theme, save_theme_preference


def render_settings_tab(ctx):
    st.markdown("<div class='section-title'>Settings</div>", unsafe_allow_html=True)

    active_name, _ = get_active_theme()
    with st.form(key="settings.theme_form"):
        theme = st.selectbox("Theme", THEMES, index=THEMES.index(active_name), key="settings.theme")
        saved = st.form_submit_button("Save theme")
    if saved and theme != active_name:
        try:
            save_theme_preference(theme)
        except Exception as exc:
            st.warning(str(exc))
            loaders.invalidate()
            return
        st.rerun()

    st.markdown("<div class='small-label'>Archived habits</div>", unsafe_allow_html=True)
    habits = loaders.load_habits(ctx["current_user_email"], include_archived=True)
    archived = [habit for habit in habits if habit.get("archived")]
    if not archived:
        st.caption("Nothing archived.")
    for habit in archived:
        row_cols = st.columns([5, 1])
        row_cols[0].markdown(habit["name"])
        if row_cols[1].button("Restore", key=f"settings.restore.{habit['id']}", type="tertiary"):
            try:
                repositories.archive_habit(habit["id"], False)
            except Exception as exc:
                st.warning(str(exc))
                loaders.invalidate()
                return
            st.rerun()
