from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from habits_api.auth import require_user_email
from habits_api import repositories
from habits_api.schemas import HabitArchivePayload, HabitCreate

router = APIRouter()


@router.get("/v1/habits")
async def list_habits(
    category_id: str | None = Query(default=None, alias="categoryId"),
    include_archived: bool = Query(default=False),
    user_email: str = Depends(require_user_email),
):
    return {"items": await repositories.list_habits(user_email, category_id, include_archived)}


@router.post("/v1/habits", status_code=201)
async def create_habit(payload: HabitCreate, user_email: str = Depends(require_user_email)):
    return await repositories.create_habit(user_email, payload.model_dump())


@router.get("/v1/habits/{habit_id}")
async def get_habit(habit_id: str, user_email: str = Depends(require_user_email)):
    return await repositories.get_habit(user_email, habit_id)


@router.put("/v1/habits/{habit_id}")
async def update_habit(habit_id: str, payload: HabitCreate, user_email: str = Depends(require_user_email)):
    return await repositories.update_habit(user_email, habit_id, payload.model_dump())


@router.put("/v1/habits/{habit_id}/archive")
async def archive_habit(habit_id: str, payload: HabitArchivePayload, user_email: str = Depends(require_user_email)):
    return await repositories.set_habit_archived(user_email, habit_id, payload.archived)


@router.delete("/v1/habits/{habit_id}")
async def delete_habit(habit_id: str, user_email: str = Depends(require_user_email)):
    await repositories.delete_habit(user_email, habit_id)
    return {"ok": True}


@router.get("/v1/habits/{habit_id}/stats")
async def habit_stats(habit_id: str, user_email: str = Depends(require_user_email)):
    return await repositories.habit_stats(user_email, habit_id)
