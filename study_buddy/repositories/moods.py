from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from study_buddy.models.mood import MoodLog
from study_buddy.repositories.base import MoodLogStore


class MoodLogRepository(MoodLogStore):
    def __init__(self, db: AsyncSession):
        self.db = db

    def add(self, entry: MoodLog) -> None:
        self.db.add(entry)

    async def recent(self, user_id: int, since: Optional[datetime] = None) -> Sequence[MoodLog]:
        """Mood logs across all subjects, newest first."""
        query = select(MoodLog).filter(MoodLog.user_id == user_id)
        if since is not None:
            query = query.filter(MoodLog.timestamp >= since)
        result = await self.db.execute(
            query.order_by(MoodLog.timestamp.desc(), MoodLog.id.desc())
        )
        return result.scalars().all()

    async def delete_for(self, user_id: int, subject_id: int) -> int:
        result = await self.db.execute(
            delete(MoodLog).where(
                MoodLog.user_id == user_id,
                MoodLog.subject_id == subject_id,
            )
        )
        return result.rowcount or 0
