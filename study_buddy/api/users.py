from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from study_buddy.core.database import get_db
from study_buddy.core.errors import NotFound
from study_buddy.core.security import get_current_user, ensure_self
from study_buddy.models.user import User
from study_buddy.repositories.users import UserRepository
from study_buddy.schemas.user_schema import UserResponse
from study_buddy.utils.logger import get_logger

logger = get_logger("study_buddy.api.users")

router = APIRouter(prefix="/api", tags=["users"])


@router.get("/user/{user_id}", response_model=UserResponse)
async def get_user(user_id: int, db: AsyncSession = Depends(get_db), current_user: User = Depends(get_current_user)):
    ensure_self(current_user, user_id)
    user = await UserRepository(db).get(user_id)
    if not user:
        raise NotFound("User not found.")
    logger.info("Fetched user", extra={"user_id": user_id})
    return user
