from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from wellness.db import get_db
from wellness.models import MoodLog, User
from wellness.schemas import MoodLogCreate, MoodLogOut
from wellness.services.auth_service import get_current_user

# server-side mood_logs table; the dashboard's moodEntries history is a separate path
router = APIRouter(prefix="/mood-logs", tags=["mood-logs"])

@router.post("", response_model=MoodLogOut, status_code=status.HTTP_201_CREATED)
async def create_mood_log(
    req: MoodLogCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    log = MoodLog(user_id=current_user.id, **req.model_dump())
    db.add(log)
    await db.commit()
    await db.refresh(log)
    return log

@router.get("", response_model=List[MoodLogOut])
async def list_mood_logs(
    limit: int = Query(50, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    q = (
        select(MoodLog)
        .where(MoodLog.user_id == current_user.id)
        .order_by(MoodLog.created_at.desc(), MoodLog.id.desc())
        .limit(limit)
    )
    result = await db.execute(q)
    return result.scalars().all()
