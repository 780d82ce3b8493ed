from __future__ import annotations

from fastapi import APIRouter, Depends

from habits_api.auth import require_user_email
from habits_api import repositories
from habits_api.schemas import THEMES, ThemePayload

router = APIRouter()


@router.get("/v1/settings/theme")
async def get_theme(user_email: str = Depends(require_user_email)):
    return {"theme": await repositories.get_theme(user_email), "available": list(THEMES)}


@router.put("/v1/settings/theme")
async def set_theme(payload: ThemePayload, user_email: str = Depends(require_user_email)):
    theme = await repositories.set_theme(user_email, payload.theme)
    return {"theme": theme}
