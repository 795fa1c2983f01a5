from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from study_buddy.models.subject import Subject
from study_buddy.repositories.base import SubjectStore


class SubjectRepository(SubjectStore):
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list(self) -> List[Subject]:
        result = await self.db.execute(select(Subject).order_by(Subject.id.asc()))
        return list(result.scalars().all())

    async def get_by_name(self, name: str) -> Optional[Subject]:
        result = await self.db.execute(select(Subject).filter(Subject.name == name))
        return result.scalar_one_or_none()
