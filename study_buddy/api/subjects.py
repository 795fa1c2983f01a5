import time

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from study_buddy.core.database import get_db
from study_buddy.repositories.subjects import SubjectRepository
from study_buddy.schemas.subject_schema import HealthResponse, SubjectList, SubjectResponse
from study_buddy.services.completion import OpenRouterClient, get_completion_client
from study_buddy.utils.logger import get_logger

logger = get_logger("study_buddy.api.subjects")

router = APIRouter(prefix="/api", tags=["meta"])

STARTED_AT = time.monotonic()


@router.get("/subjects", response_model=SubjectList)
async def list_subjects(db: AsyncSession = Depends(get_db)):
    subjects = await SubjectRepository(db).list()
    return SubjectList(subjects=[SubjectResponse.model_validate(s) for s in subjects])


@router.get("/health", response_model=HealthResponse)
async def health(
    db: AsyncSession = Depends(get_db),
    provider: OpenRouterClient = Depends(get_completion_client),
):
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error("Health check failed", extra={"error": str(e)})
        return JSONResponse(status_code=500, content={"status": "Unhealthy", "error": "Database unavailable"})

    return HealthResponse(
        status="OK",
        database=db.bind.dialect.name,
        openRouterConfigured=provider.configured,
        uptime=round(time.monotonic() - STARTED_AT, 3),
    )
