from __future__ import annotations

import base64
import hashlib
import json
import logging

from cryptography.fernet import Fernet, InvalidToken
from fastapi import Header, HTTPException, Request

from habits_api.settings import get_settings

logger = logging.getLogger(__name__)


def _fernet() -> Fernet:
    settings = get_settings()
    digest = hashlib.sha256(settings.backend_session_secret.encode("utf-8")).digest()
    key = base64.urlsafe_b64encode(digest)
    return Fernet(key)


def _check_allowed(email: str) -> str:
    settings = get_settings()
    if settings.allowed_emails and email not in settings.allowed_emails:
        raise HTTPException(status_code=403, detail="User not allowed")
    return email


def issue_session_token(user_email: str) -> str:
    payload = json.dumps({"email": user_email}).encode("utf-8")
    return _fernet().encrypt(payload).decode("utf-8")


def read_session_token(token: str) -> str:
    """Return the email stored in a session token, or raise 401 if it is invalid or expired."""
    settings = get_settings()
    try:
        raw = _fernet().decrypt(token.encode("utf-8"), ttl=settings.session_max_age_seconds)
        email = str(json.loads(raw.decode("utf-8")).get("email") or "").strip().lower()
    except (InvalidToken, ValueError, AttributeError):
        logger.debug("Rejected session token")
        raise HTTPException(status_code=401, detail="Invalid or expired session") from None
    if not email:
        raise HTTPException(status_code=401, detail="Invalid or expired session")
    return email


async def require_backend_caller(
    x_user_email: str | None = Header(default=None, alias="X-User-Email"),
    x_backend_token: str | None = Header(default=None, alias="X-Backend-Token"),
) -> str:
    settings = get_settings()
    if not x_backend_token or x_backend_token != settings.backend_session_secret:
        raise HTTPException(status_code=401, detail="Invalid backend token")
    if not x_user_email or not x_user_email.strip():
        raise HTTPException(status_code=401, detail="Missing user email")
    return _check_allowed(x_user_email.strip().lower())


async def require_user_email(request: Request) -> str:
    settings = get_settings()
    token = request.cookies.get(settings.session_cookie_name)
    if not token:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return _check_allowed(read_session_token(token))
