from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.ext.asyncio import AsyncSession

from study_buddy.core.database import get_db
from study_buddy.core.errors import InvalidSubject, ValidationError
from study_buddy.core.rate_limit import rate_limit
from study_buddy.core.security import get_current_user, ensure_self
from study_buddy.models.user import User
from study_buddy.repositories.subjects import SubjectRepository
from study_buddy.schemas.chat_schema import (
    ChatRequest,
    ChatResponse,
    ChatHistoryItem,
    ChatHistoryList,
    ClearHistoryRequest,
    ContextUpload,
    ContextUploadResponse,
    MessageResponse,
    SavedFlagResponse,
    SavedFlagUpdate,
    SentimentOut,
)
from study_buddy.services import history as history_service
from study_buddy.services.context_cache import ContextCache, get_context_cache
from study_buddy.services.orchestrator import ChatOrchestrator, get_orchestrator
from study_buddy.utils.logger import get_logger
from study_buddy.utils.pdf_loader import PdfReadError, extract_text_from_pdf

logger = get_logger("study_buddy.api.chat")

router = APIRouter(prefix="/api", tags=["chat"])

MAX_PDF_MB = 10


async def _require_subject(db: AsyncSession, subject: str) -> None:
    if await SubjectRepository(db).get_by_name(subject) is None:
        raise InvalidSubject()


# Chat Endpoint
@router.post("/chat", response_model=ChatResponse)
async def chat(
    body: ChatRequest,
    orchestrator: ChatOrchestrator = Depends(get_orchestrator),
    current_user: User = Depends(get_current_user),
):
    """
    Main chat endpoint.
    1. Ask the completion provider (with any uploaded context) or fall back
    2. Record both messages and the mood log
    3. Return the reply and the sentiment of the user's message
    """
    ensure_self(current_user, body.userId)
    await rate_limit(f"chat:{current_user.id}", limit=100, window=60)

    logger.info("Chat request received", extra={
        "user_id": current_user.id,
        "subject": body.subject,
        "message_length": len(body.message),
    })

    turn = await orchestrator.handle_chat(current_user.id, body.subject, body.message)

    return ChatResponse(
        aiResponse=turn.ai_response,
        sentiment=SentimentOut(**turn.sentiment.as_dict()),
        usingFallback=turn.using_fallback,
    )


# ------ Reference context -----
@router.post("/upload-pdf-content", response_model=ContextUploadResponse)
async def upload_pdf_content(
    body: ContextUpload,
    db: AsyncSession = Depends(get_db),
    cache: ContextCache = Depends(get_context_cache),
    current_user: User = Depends(get_current_user),
):
    """Store text the browser already extracted from a PDF as chat context."""
    ensure_self(current_user, body.userId)
    await _require_subject(db, body.subject)

    cache.store(current_user.id, body.subject, body.content)
    logger.info("PDF content stored", extra={"user_id": current_user.id, "subject": body.subject, "file_name": body.fileName})
    return ContextUploadResponse(message="PDF content stored for context.", fileName=body.fileName, characters=len(body.content))


@router.post("/upload-pdf", response_model=ContextUploadResponse)
async def upload_pdf(
    subject: str = Form(...),
    file: UploadFile = File(...),
    db: AsyncSession = Depends(get_db),
    cache: ContextCache = Depends(get_context_cache),
    current_user: User = Depends(get_current_user),
):
    """Extract text from an uploaded PDF server-side and store it as chat context."""
    if not file.filename or not file.filename.lower().endswith(".pdf"):
        logger.warning("Invalid file type", extra={"file_name": file.filename})
        raise ValidationError("Only PDF files are allowed.")
    await _require_subject(db, subject)

    pdf_bytes = await file.read()
    if len(pdf_bytes) > MAX_PDF_MB * 1024 * 1024:
        raise ValidationError(f"File too large. Max size is {MAX_PDF_MB} MB.")

    try:
        content = await run_in_threadpool(extract_text_from_pdf, pdf_bytes)
    except PdfReadError as e:
        logger.warning("PDF extraction failed", extra={"file_name": file.filename, "error": str(e)})
        raise ValidationError("Could not read the PDF file.") from e

    cache.store(current_user.id, subject, content)
    logger.info("PDF text extracted", extra={"user_id": current_user.id, "subject": subject, "content_length": len(content)})
    return ContextUploadResponse(message="PDF content stored for context.", fileName=file.filename, characters=len(content))


# ------ History -----
@router.get("/history/{user_id}", response_model=ChatHistoryList)
async def get_chat_history(
    user_id: int,
    subject: str = Query(..., min_length=1),
    limit: Optional[int] = Query(None, ge=1, le=1000),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_self(current_user, user_id)
    messages = await history_service.get_history(db, user_id, subject, limit=limit)
    return ChatHistoryList(history=[ChatHistoryItem.from_message(m) for m in messages])


@router.delete("/clear-history/{user_id}", response_model=MessageResponse)
async def clear_history(
    user_id: int,
    body: ClearHistoryRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_self(current_user, user_id)
    await history_service.clear_history(db, user_id, body.subject)
    return MessageResponse(message="History cleared successfully.")


@router.patch("/messages/{message_id}/saved", response_model=SavedFlagResponse)
async def set_message_saved(
    message_id: int,
    body: SavedFlagUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    message = await history_service.set_saved(db, current_user.id, message_id, body.saved)
    return SavedFlagResponse(id=message.id, isSaved=message.is_saved)
