from datetime import datetime, timedelta, timezone
from typing import Optional
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jose import jwt, JWTError
from sqlalchemy.ext.asyncio import AsyncSession
from study_buddy.core.database import get_db
from study_buddy.core.config import settings
from study_buddy.core.errors import Unauthenticated, TokenRejected, Forbidden
from study_buddy.models.user import User
from study_buddy.utils.logger import get_logger

logger = get_logger("study_buddy.core.security")

# Password hashing
import bcrypt

# Reads the Authorization: Bearer <token> header; missing tokens are handled below
oauth_scheme = OAuth2PasswordBearer(tokenUrl="api/login", auto_error=False)

# ------ Password Hashing -----
def hash_password(password: str) -> str:
    """Hash password using bcrypt. Safely handles 72-byte limit.

    Returns hashed password as string.
    """
    password_bytes = password.encode('utf-8')[:72]

    if not password_bytes:
        raise ValueError("Password cannot be empty")

    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    hashed = bcrypt.hashpw(password_bytes, salt)

    return hashed.decode('utf-8')

def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against bcrypt hash."""
    # Truncate to 72 bytes like hash_password does
    password_bytes = plain_password.encode('utf-8')[:72]

    if not password_bytes:
        return False

    if isinstance(hashed_password, str):
        hashed_password = hashed_password.encode('utf-8')

    try:
        return bcrypt.checkpw(password_bytes, hashed_password)
    except ValueError:
        # Stored value is not a bcrypt hash
        return False

# ------ Session tokens -----
def issue_token(user_id: int, expires_delta: Optional[timedelta] = None) -> str:
    """Create a signed session token for `user_id`, valid for one day by default."""
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    token = jwt.encode(
        {"sub": str(user_id), "exp": expire},
        settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM
    )
    logger.debug("Access token created", extra={"user_id": user_id})
    return token

def verify_token(token: Optional[str]) -> int:
    """
    Decode a session token and return the embedded user id.

    Raises Unauthenticated when no token is given and TokenRejected when it
    is malformed, expired or signed with another key.
    """
    if not token:
        raise Unauthenticated()
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
            options={"require_exp": True, "require_sub": True},
        )
    except jwt.ExpiredSignatureError:
        logger.warning("Token expired")
        raise TokenRejected()
    except JWTError as e:
        logger.warning("Token decode failed", extra={"error": str(e)})
        raise TokenRejected()

    sub = payload.get("sub")
    try:
        return int(sub)
    except (TypeError, ValueError):
        logger.warning("Token subject is not a user id", extra={"sub": sub})
        raise TokenRejected()

# ------ Get Current User -----
async def get_current_user(token: Optional[str] = Depends(oauth_scheme), db: AsyncSession = Depends(get_db)) -> User:
    """
    Dependency used in protected routes.
    - Reads the bearer token from the Authorization header (401 if absent).
    - Verifies it (403 if invalid or expired).
    - Loads the User from DB (403 if the user no longer exists).
    """
    user_id = verify_token(token)

    user = await db.get(User, user_id)
    if user is None:
        logger.warning("Authentication failed - user not found", extra={"user_id": user_id})
        raise TokenRejected()

    logger.debug("User authenticated", extra={"user_id": user.id})
    return user

def ensure_self(current_user: User, target_user_id: Optional[int]) -> None:
    """Reject requests that name a user other than the token's owner."""
    if target_user_id is not None and target_user_id != current_user.id:
        logger.warning("Access denied", extra={"user_id": current_user.id, "target_user_id": target_user_id})
        raise Forbidden()
