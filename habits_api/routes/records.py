from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from habits_api.auth import require_user_email
from habits_api import repositories
from habits_api.schemas import RecordAdjust, RecordPatch, RecordUpsert

router = APIRouter()


@router.get("/v1/habit-records")
async def list_records(
    habit_id: str | None = Query(default=None),
    start_date: str | None = Query(default=None),
    end_date: str | None = Query(default=None),
    day: str | None = Query(default=None, alias="date"),
    user_email: str = Depends(require_user_email),
):
    items = await repositories.list_records(user_email, habit_id, start_date, end_date, day)
    return {"items": items}


@router.post("/v1/habit-records", status_code=201)
async def upsert_record(payload: RecordUpsert, user_email: str = Depends(require_user_email)):
    record = await repositories.upsert_record(
        user_email, payload.habit_id, payload.date, payload.value, payload.notes
    )
    return {"record": record}


@router.post("/v1/habit-records/adjust")
async def adjust_record(payload: RecordAdjust, user_email: str = Depends(require_user_email)):
    return await repositories.adjust_record(user_email, payload.habit_id, payload.date, payload.action)


@router.get("/v1/habit-records/{record_id}")
async def get_record(record_id: str, user_email: str = Depends(require_user_email)):
    return await repositories.get_record(user_email, record_id)


@router.put("/v1/habit-records/{record_id}")
async def update_record(record_id: str, payload: RecordPatch, user_email: str = Depends(require_user_email)):
    record = await repositories.update_record(user_email, record_id, payload.value, payload.notes)
    return {"record": record}


@router.delete("/v1/habit-records/{record_id}")
async def delete_record(record_id: str, user_email: str = Depends(require_user_email)):
    await repositories.delete_record(user_email, record_id)
    return {"ok": True}
