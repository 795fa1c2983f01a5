from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from study_buddy.core.errors import Conflict, InternalError, InvalidCredentials
from study_buddy.core.security import hash_password, verify_password
from study_buddy.models.user import User
from study_buddy.repositories.base import UserStore
from study_buddy.repositories.users import UserRepository
from study_buddy.utils.logger import get_logger
from study_buddy.utils.timeutils import utcnow

logger = get_logger("study_buddy.services.credentials")

# Checked against when the email is unknown, so both failures cost one bcrypt round
_DUMMY_HASH = hash_password("not-a-real-password")


class CredentialService:
    def __init__(self, db: AsyncSession, users: UserStore = None):
        self.db = db
        self.users = users or UserRepository(db)

    async def register(self, name: str, email: str, password: str) -> User:
        logger.info("User registration attempt", extra={"email": email})

        if await self.users.get_by_email(email) is not None:
            logger.warning("Registration failed - email exists", extra={"email": email})
            raise Conflict()

        try:
            user = await self.users.add(name=name, email=email, password_hash=hash_password(password))
        except IntegrityError as e:
            # Lost a race with a concurrent signup for the same email
            await self.db.rollback()
            logger.warning("Registration failed - email exists", extra={"email": email})
            raise Conflict() from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Registration failed - database error", extra={"email": email, "error": str(e)})
            raise InternalError("An error occurred during registration.") from e

        logger.info("User registered successfully", extra={"user_id": user.id, "email": email})
        return user

    async def authenticate(self, email: str, password: str) -> User:
        logger.info("Login attempt", extra={"email": email})

        user = await self.users.get_by_email(email)
        if user is None:
            verify_password(password, _DUMMY_HASH)
            logger.warning("Login failed - invalid credentials", extra={"email": email})
            raise InvalidCredentials()

        if not verify_password(password, user.password_hash):
            logger.warning("Login failed - invalid credentials", extra={"email": email})
            raise InvalidCredentials()

        try:
            await self.users.touch_last_login(user, utcnow())
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Login failed - could not record last login", extra={"user_id": user.id, "error": str(e)})
            raise InternalError("An error occurred during login.") from e

        logger.info("Login successful", extra={"user_id": user.id, "email": email})
        return user
