from __future__ import annotations

from fastapi import APIRouter, Depends, Response

from habits_api.auth import issue_session_token, require_backend_caller, require_user_email
from habits_api.settings import get_settings

router = APIRouter()


@router.post("/v1/auth/session")
async def open_session(response: Response, user_email: str = Depends(require_backend_caller)):
    settings = get_settings()
    response.set_cookie(
        settings.session_cookie_name,
        issue_session_token(user_email),
        max_age=settings.session_max_age_seconds,
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
    )
    return {"user_email": user_email, "expires_in": settings.session_max_age_seconds}


@router.get("/v1/auth/session")
async def current_session(user_email: str = Depends(require_user_email)):
    return {"user_email": user_email}


@router.delete("/v1/auth/session")
async def close_session(response: Response):
    response.delete_cookie(get_settings().session_cookie_name)
    return {"ok": True}
