from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from study_buddy.core.database import get_db
from study_buddy.core.security import issue_token
from study_buddy.core.rate_limit import rate_limit
from study_buddy.schemas.user_schema import UserCreate, UserLogin, TokenResponse, UserSummary
from study_buddy.services.credentials import CredentialService

router = APIRouter(prefix="/api", tags=["auth"])

# ------ Register User -----
@router.post("/signup", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def signup(user: UserCreate, db: AsyncSession = Depends(get_db)):
    # 5 attempts per hour per email
    await rate_limit(f"signup:{user.email}", limit=5, window=3600)

    new_user = await CredentialService(db).register(user.name, user.email, user.password)

    return TokenResponse(
        message="User registered successfully!",
        userId=new_user.id,
        token=issue_token(new_user.id),
        user=UserSummary(name=new_user.name, email=new_user.email),
    )

# ------ Login User -----
@router.post("/login", response_model=TokenResponse)
async def login(credentials: UserLogin, db: AsyncSession = Depends(get_db)):
    # 10 attempts per 5 minutes per email
    await rate_limit(f"login:{credentials.email}", limit=10, window=300)

    db_user = await CredentialService(db).authenticate(credentials.email, credentials.password)

    return TokenResponse(
        message="Logged in successfully!",
        userId=db_user.id,
        token=issue_token(db_user.id),
        user=UserSummary(name=db_user.name, email=db_user.email),
    )
