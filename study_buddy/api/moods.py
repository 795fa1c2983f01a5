from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from study_buddy.core.database import get_db
from study_buddy.core.security import get_current_user, ensure_self
from study_buddy.models.user import User
from study_buddy.schemas.mood_schema import MoodLogItem, MoodLogList
from study_buddy.services.history import get_mood_logs

router = APIRouter(prefix="/api", tags=["moods"])


@router.get("/moodlogs/{user_id}", response_model=MoodLogList)
async def list_mood_logs(
    user_id: int,
    days: Optional[int] = Query(None, ge=1),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_self(current_user, user_id)
    logs = await get_mood_logs(db, user_id, days=days)
    return MoodLogList(moodLogs=[MoodLogItem.from_entry(entry) for entry in logs])
