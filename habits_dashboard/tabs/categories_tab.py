import streamlit as st

from habits_dashboard.constants import CATEGORY_ICONS, DEFAULT_CATEGORY_COLOR, DEFAULT_CATEGORY_ICON
from habits_dashboard.data import loaders, repositories


def _save_new_category():
    name = (st.session_state.get("categories.new.name") or "").strip()
    if not name:
        st.warning("Category name is required.")
        return
    try:
        repositories.create_category(
            name,
            color=st.session_state.get("categories.new.color", DEFAULT_CATEGORY_COLOR),
            icon=st.session_state.get("categories.new.icon", DEFAULT_CATEGORY_ICON),
        )
    except Exception as exc:
        st.warning(str(exc))
        loaders.invalidate()
        return
    st.rerun()


def _render_category(category, habit_counts):
    prefix = f"categories.{category['id']}"
    icon = category.get("icon") or DEFAULT_CATEGORY_ICON
    with st.expander(f"{icon} {category['name']} ({habit_counts.get(category['id'], 0)} habits)"):
        with st.form(key=f"{prefix}.form"):
            form_cols = st.columns([3, 1, 1])
            with form_cols[0]:
                name = st.text_input("Name", value=category["name"], key=f"{prefix}.name")
            with form_cols[1]:
                color = st.color_picker("Color", value=category.get("color") or DEFAULT_CATEGORY_COLOR, key=f"{prefix}.color")
            with form_cols[2]:
                icons = CATEGORY_ICONS if icon in CATEGORY_ICONS else CATEGORY_ICONS + [icon]
                icon = st.selectbox("Icon", icons, index=icons.index(icon), key=f"{prefix}.icon")
            saved = st.form_submit_button("Save", use_container_width=True)
        if saved:
            try:
                repositories.update_category(category["id"], name, color=color, icon=icon)
                st.rerun()
            except Exception as exc:
                st.warning(str(exc))
                loaders.invalidate()

        if st.button("Delete category", key=f"{prefix}.delete"):
            try:
                result = repositories.delete_category(category["id"]) or {}
            except Exception as exc:
                st.warning(str(exc))
                loaders.invalidate()
                return
            detached = int(result.get("detached_habits", 0) or 0)
            if detached:
                st.toast(f"{detached} habits moved to no category")
            st.rerun()


def render_categories_tab(ctx):
    user_email = ctx["current_user_email"]
    st.markdown("<div class='section-title'>Categories</div>", unsafe_allow_html=True)

    categories = loaders.load_categories(user_email)
    habits = loaders.load_habits(user_email)
    habit_counts = {}
    for habit in habits:
        if habit.get("category_id"):
            habit_counts[habit["category_id"]] = habit_counts.get(habit["category_id"], 0) + 1

    if not categories:
        st.caption("No categories yet.")
    for category in categories:
        _render_category(category, habit_counts)

    with st.form(key="categories.add_form", clear_on_submit=True):
        add_cols = st.columns([3, 1, 1])
        with add_cols[0]:
            st.text_input("New category", key="categories.new.name", placeholder="Health")
        with add_cols[1]:
            st.color_picker("Color", value=DEFAULT_CATEGORY_COLOR, key="categories.new.color")
        with add_cols[2]:
            st.selectbox("Icon", CATEGORY_ICONS, key="categories.new.icon")
        submitted = st.form_submit_button("Add category", use_container_width=True)
    if submitted:
        _save_new_category()
