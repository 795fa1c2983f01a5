from dataclasses import dataclass
from datetime import timedelta
from typing import Dict, List

from fastapi import Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from study_buddy.core.config import settings
from study_buddy.core.database import get_db
from study_buddy.core.errors import InternalError, InvalidSubject
from study_buddy.models.chat import ChatMessage
from study_buddy.models.mood import MoodLog
from study_buddy.repositories.base import ChatMessageStore, MoodLogStore, SubjectStore
from study_buddy.repositories.messages import ChatMessageRepository
from study_buddy.repositories.moods import MoodLogRepository
from study_buddy.repositories.subjects import SubjectRepository
from study_buddy.services.completion import (
    CompletionError,
    CompletionResult,
    NOT_CONFIGURED,
    UNEXPECTED_ERROR,
    OpenRouterClient,
    get_completion_client,
)
from study_buddy.services.context_cache import ContextCache, get_context_cache
from study_buddy.services.sentiment import Sentiment, SentimentAnalyzer, get_sentiment_analyzer
from study_buddy.utils.logger import get_logger
from study_buddy.utils.timeutils import utcnow

logger = get_logger("study_buddy.services.orchestrator")


@dataclass(frozen=True)
class ChatTurn:
    ai_response: str
    sentiment: Sentiment
    fallback_reason: str | None = None

    @property
    def using_fallback(self) -> bool:
        return self.fallback_reason is not None


def system_prompt(subject: str) -> str:
    return (
        f"You are an expert tutor in {subject}. Use the provided context when relevant. "
        "Explain concepts clearly at a college level, provide examples when helpful, "
        "and be concise, clear, and encouraging."
    )


def build_messages(subject: str, message: str, context: str, excerpt_chars: int = 1500) -> List[Dict[str, str]]:
    """Completion request: a system turn naming the subject, then the user's turn."""
    if context:
        user_content = f"Context: {context[:excerpt_chars]}\n\nQuestion: {message}"
    else:
        user_content = message
    return [
        {"role": "system", "content": system_prompt(subject)},
        {"role": "user", "content": user_content},
    ]


def fallback_response(subject: str, message: str) -> str:
    """Canned reply used whenever the provider gives us nothing."""
    if "?" in message:
        follow_up = (
            "That's an interesting question. In this subject, we typically start by "
            "breaking it into its core concepts and working through an example together."
        )
    else:
        follow_up = "Could you tell me more about what you're looking to understand?"
    return f"I'm here to help with {subject}! {follow_up}"


class ChatOrchestrator:
    """
    One chat turn: resolve the subject, ask the provider (or fall back),
    score the user's message and record the exchange.
    """

    def __init__(
        self,
        db: AsyncSession,
        provider: OpenRouterClient,
        context_cache: ContextCache,
        analyzer: SentimentAnalyzer,
        subjects: SubjectStore = None,
        messages: ChatMessageStore = None,
        moods: MoodLogStore = None,
        excerpt_chars: int = 1500,
        max_tokens: int = 1000,
        temperature: float = 0.7,
    ):
        self.db = db
        self.provider = provider
        self.context_cache = context_cache
        self.analyzer = analyzer
        self.subjects = subjects or SubjectRepository(db)
        self.messages = messages or ChatMessageRepository(db)
        self.moods = moods or MoodLogRepository(db)
        self.excerpt_chars = excerpt_chars
        self.max_tokens = max_tokens
        self.temperature = temperature

    async def ask(self, subject: str, message: str, context: str) -> CompletionResult:
        """Single provider attempt; any failure becomes a fallback result."""
        if not self.provider.configured:
            return CompletionResult.fallback(fallback_response(subject, message), NOT_CONFIGURED)

        try:
            text = await self.provider.complete(
                build_messages(subject, message, context, self.excerpt_chars),
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
        except CompletionError as e:
            logger.warning("Completion provider failed, using fallback", extra={
                "subject": subject,
                "reason": e.reason,
                "error": e.detail,
            })
            return CompletionResult.fallback(fallback_response(subject, message), e.reason)
        except Exception as e:
            logger.exception("Completion provider raised unexpectedly, using fallback", extra={
                "subject": subject,
                "error": repr(e),
            })
            return CompletionResult.fallback(fallback_response(subject, message), UNEXPECTED_ERROR)
        return CompletionResult.ok(text)

    async def handle_chat(self, user_id: int, subject: str, message: str) -> ChatTurn:
        try:
            subject_row = await self.subjects.get_by_name(subject)
        except SQLAlchemyError as e:
            logger.error("Subject lookup failed", extra={"user_id": user_id, "error": str(e)})
            raise InternalError("An error occurred during chat processing.") from e
        if subject_row is None:
            raise InvalidSubject()

        asked_at = utcnow()
        context = self.context_cache.fetch(user_id, subject)
        result = await self.ask(subject, message, context)
        sentiment = self.analyzer.score(message)

        answered_at = utcnow()
        if answered_at <= asked_at:
            answered_at = asked_at + timedelta(microseconds=1)

        self.messages.add(ChatMessage(
            user_id=user_id,
            subject_id=subject_row.id,
            sender="user",
            text=message,
            timestamp=asked_at,
            sentiment_score=sentiment.score,
            sentiment_magnitude=sentiment.magnitude,
        ))
        self.messages.add(ChatMessage(
            user_id=user_id,
            subject_id=subject_row.id,
            sender="ai",
            text=result.text,
            timestamp=answered_at,
        ))
        self.moods.add(MoodLog(
            user_id=user_id,
            subject_id=subject_row.id,
            timestamp=asked_at,
            score=sentiment.score,
            magnitude=sentiment.magnitude,
            message=message,
        ))
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to save chat turn", extra={
                "user_id": user_id,
                "subject": subject,
                "error": str(e),
            })
            raise InternalError("An error occurred during chat processing.") from e

        logger.info("Chat turn saved", extra={
            "user_id": user_id,
            "subject": subject,
            "using_fallback": result.is_fallback,
            "fallback_reason": result.fallback_reason,
            "has_context": bool(context),
            "score": sentiment.score,
        })
        return ChatTurn(ai_response=result.text, sentiment=sentiment, fallback_reason=result.fallback_reason)


def get_orchestrator(
    db: AsyncSession = Depends(get_db),
    provider: OpenRouterClient = Depends(get_completion_client),
    cache: ContextCache = Depends(get_context_cache),
    analyzer: SentimentAnalyzer = Depends(get_sentiment_analyzer),
) -> ChatOrchestrator:
    return ChatOrchestrator(
        db,
        provider=provider,
        context_cache=cache,
        analyzer=analyzer,
        excerpt_chars=settings.CONTEXT_EXCERPT_CHARS,
        max_tokens=settings.OPENROUTER_MAX_TOKENS,
        temperature=settings.OPENROUTER_TEMPERATURE,
    )
