from datetime import timedelta
from typing import List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from study_buddy.core.errors import InternalError, InvalidSubject, NotFound
from study_buddy.models.chat import ChatMessage
from study_buddy.models.mood import MoodLog
from study_buddy.models.subject import Subject
from study_buddy.repositories.messages import ChatMessageRepository
from study_buddy.repositories.moods import MoodLogRepository
from study_buddy.repositories.subjects import SubjectRepository
from study_buddy.utils.logger import get_logger
from study_buddy.utils.timeutils import utcnow

logger = get_logger("study_buddy.services.history")


async def _resolve_subject(db: AsyncSession, name: str) -> Subject:
    subject = await SubjectRepository(db).get_by_name(name)
    if subject is None:
        raise InvalidSubject()
    return subject


async def get_history(db: AsyncSession, user_id: int, subject: str, limit: Optional[int] = None) -> List[ChatMessage]:
    subject_row = await _resolve_subject(db, subject)
    messages = await ChatMessageRepository(db).history(user_id, subject_row.id, limit=limit)
    logger.info("Chat history retrieved", extra={"user_id": user_id, "subject": subject, "count": len(messages)})
    return messages


async def get_mood_logs(db: AsyncSession, user_id: int, days: Optional[int] = None) -> Sequence[MoodLog]:
    since = utcnow() - timedelta(days=days) if days is not None else None
    logs = await MoodLogRepository(db).recent(user_id, since=since)
    logger.info("Mood logs retrieved", extra={"user_id": user_id, "days": days, "count": len(logs)})
    return logs


async def clear_history(db: AsyncSession, user_id: int, subject: str) -> int:
    """Delete every message and mood log for (user, subject). Safe to repeat."""
    subject_row = await _resolve_subject(db, subject)
    try:
        removed = await ChatMessageRepository(db).delete_for(user_id, subject_row.id)
        removed += await MoodLogRepository(db).delete_for(user_id, subject_row.id)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("Clear history failed", extra={"user_id": user_id, "subject": subject, "error": str(e)})
        raise InternalError("Failed to clear history.") from e
    logger.info("History cleared", extra={"user_id": user_id, "subject": subject, "removed": removed})
    return removed


async def set_saved(db: AsyncSession, user_id: int, message_id: int, saved: bool) -> ChatMessage:
    """Flip the saved flag on one of the user's own messages."""
    message = await ChatMessageRepository(db).get_for_user(message_id, user_id)
    if message is None:
        raise NotFound("Message not found.")
    message.is_saved = saved
    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("Saving message flag failed", extra={"user_id": user_id, "message_id": message_id, "error": str(e)})
        raise InternalError("Failed to update message.") from e
    return message
