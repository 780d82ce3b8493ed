from __future__ import annotations

import os
from urllib.parse import urlparse

import streamlit as st

ENV_PATH = os.path.join(os.path.dirname(__file__), "..", ".env")

ENV_FALLBACK_KEYS = {
    ("auth", "redirect_uri"): "AUTH_REDIRECT_URI",
    ("auth", "cookie_secret"): "AUTH_COOKIE_SECRET",
    ("auth", "client_id"): "AUTH_CLIENT_ID",
    ("auth", "client_secret"): "AUTH_CLIENT_SECRET",
    ("auth", "server_metadata_url"): "AUTH_SERVER_METADATA_URL",
    ("app", "allowed_emails"): "ALLOWED_EMAILS",
    ("app", "API_BASE_URL"): "API_BASE_URL",
    ("app", "BACKEND_SESSION_SECRET"): "BACKEND_SESSION_SECRET",
}


def load_local_env():
    if not os.path.exists(ENV_PATH):
        return
    with open(ENV_PATH, "r", encoding="utf-8") as env_file:
        for raw_line in env_file:
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


def get_secret(path, default=None):
    env_key = ENV_FALLBACK_KEYS.get(tuple(path))
    if env_key:
        env_value = os.getenv(env_key)
        if env_value:
            return env_value
    try:
        current = st.secrets
        for key in path:
            if key not in current:
                return default
            current = current[key]
    except (FileNotFoundError, KeyError, TypeError):
        return default
    return current


def allowed_emails():
    raw = get_secret(("app", "allowed_emails")) or ""
    return {email.strip().lower() for email in str(raw).split(",") if email.strip()}


def auth_configured():
    return bool(
        get_secret(("auth", "redirect_uri"))
        and get_secret(("auth", "cookie_secret"))
        and get_secret(("auth", "client_id"))
        and get_secret(("auth", "client_secret"))
    )


def enforce_login():
    if not auth_configured():
        st.markdown("<div class='section-title'>Login Setup Required</div>", unsafe_allow_html=True)
        st.markdown("Configure an OpenID Connect provider in `.streamlit/secrets.toml` before using the app.")
        st.code(
            "[auth]\n"
            "redirect_uri = \"http://localhost:8501/oauth2callback\"\n"
            "cookie_secret = \"LONG_RANDOM_SECRET\"\n"
            "client_id = \"YOUR_CLIENT_ID\"\n"
            "client_secret = \"YOUR_CLIENT_SECRET\"\n"
            "server_metadata_url = \"https://accounts.google.com/.well-known/openid-configuration\"\n\n"
            "[app]\n"
            "API_BASE_URL = \"http://localhost:8000\"\n"
            "BACKEND_SESSION_SECRET = \"same value as the API\"",
            language="toml",
        )
        st.stop()

    redirect_uri = (get_secret(("auth", "redirect_uri")) or "").strip()
    if urlparse(redirect_uri).path != "/oauth2callback":
        st.error("Invalid auth.redirect_uri. For st.login it must end with /oauth2callback.")
        st.stop()

    if not st.user.is_logged_in:
        st.markdown("<div class='section-title'>Login Required</div>", unsafe_allow_html=True)
        st.markdown("Sign in to track your habits.")
        if st.button("Log in", key="auth.login"):
            st.login()
        st.stop()

    user_email = get_current_user_email()
    allowed = allowed_emails()
    if allowed and user_email not in allowed:
        st.error("Access denied for this account.")
        if st.button("Logout", key="auth.logout_denied"):
            st.logout()
        st.stop()

    with st.sidebar:
        st.caption(f"Logged in as: {user_email}")
        if st.button("Logout", key="auth.logout"):
            st.logout()


def get_current_user_email():
    return str(getattr(st.user, "email", "") or "").strip().lower()


def get_display_name(user_email):
    user_name = str(getattr(st.user, "name", "") or "").strip()
    if user_name:
        return user_name.split()[0]
    local = (user_email or "").split("@")[0].replace(".", " ").strip()
    return local.title() if local else "User"
