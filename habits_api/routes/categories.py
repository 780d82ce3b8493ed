from __future__ import annotations

from fastapi import APIRouter, Depends

from habits_api.auth import require_user_email
from habits_api import repositories
from habits_api.schemas import CategoryCreate

router = APIRouter()


@router.get("/v1/categories")
async def list_categories(user_email: str = Depends(require_user_email)):
    return {"items": await repositories.list_categories(user_email)}


@router.post("/v1/categories", status_code=201)
async def create_category(payload: CategoryCreate, user_email: str = Depends(require_user_email)):
    return await repositories.create_category(user_email, payload.name, payload.color, payload.icon)


@router.put("/v1/categories/{category_id}")
async def update_category(category_id: str, payload: CategoryCreate, user_email: str = Depends(require_user_email)):
    return await repositories.update_category(user_email, category_id, payload.name, payload.color, payload.icon)


@router.delete("/v1/categories/{category_id}")
async def delete_category(category_id: str, user_email: str = Depends(require_user_email)):
    detached = await repositories.delete_category(user_email, category_id)
    return {"ok": True, "detached_habits": detached}
