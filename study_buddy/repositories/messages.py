from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from study_buddy.models.chat import ChatMessage
from study_buddy.repositories.base import ChatMessageStore


class ChatMessageRepository(ChatMessageStore):
    def __init__(self, db: AsyncSession):
        self.db = db

    def add(self, message: ChatMessage) -> None:
        self.db.add(message)

    async def history(self, user_id: int, subject_id: int, limit: Optional[int] = None) -> List[ChatMessage]:
        """
        Messages for (user, subject), oldest first.
        With `limit`, only the most recent `limit` messages are returned,
        still oldest first.
        """
        query = select(ChatMessage).filter(
            ChatMessage.user_id == user_id,
            ChatMessage.subject_id == subject_id,
        )
        if limit is None:
            result = await self.db.execute(
                query.order_by(ChatMessage.timestamp.asc(), ChatMessage.id.asc())
            )
            return list(result.scalars().all())

        result = await self.db.execute(
            query.order_by(ChatMessage.timestamp.desc(), ChatMessage.id.desc()).limit(limit)
        )
        rows = list(result.scalars().all())
        rows.reverse()
        return rows

    async def get_for_user(self, message_id: int, user_id: int) -> Optional[ChatMessage]:
        result = await self.db.execute(
            select(ChatMessage).filter(
                ChatMessage.id == message_id,
                ChatMessage.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def delete_for(self, user_id: int, subject_id: int) -> int:
        result = await self.db.execute(
            delete(ChatMessage).where(
                ChatMessage.user_id == user_id,
                ChatMessage.subject_id == subject_id,
            )
        )
        return result.rowcount or 0
