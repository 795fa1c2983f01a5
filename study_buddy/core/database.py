from pathlib import Path

from sqlalchemy import event, select
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool
from study_buddy.core.config import settings
from study_buddy.utils.logger import get_logger

logger = get_logger("study_buddy.core.database")

Base = declarative_base()

DEFAULT_SUBJECTS = [
    {"name": "Quantum Physics", "color": "#7209b7", "icon": "atom"},
    {"name": "Molecular Biology", "color": "#2a9d8f", "icon": "dna"},
    {"name": "Organic Chemistry", "color": "#e76f51", "icon": "flask"},
    {"name": "Calculus", "color": "#4361ee", "icon": "square-root-alt"},
    {"name": "Computer Science", "color": "#f72585", "icon": "laptop-code"},
    {"name": "World History", "color": "#e9c46a", "icon": "landmark"},
]

# Convert database URL to use an async driver
def _get_async_db_url(sync_url: str) -> str:
    """Convert sync database URL to async URL (asyncpg for PostgreSQL, aiosqlite for SQLite)."""
    if sync_url.startswith("postgresql://"):
        return sync_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    elif sync_url.startswith("postgres://"):
        return sync_url.replace("postgres://", "postgresql+asyncpg://", 1)
    elif sync_url.startswith("postgresql+psycopg2://"):
        return sync_url.replace("postgresql+psycopg2://", "postgresql+asyncpg://", 1)
    elif sync_url.startswith("sqlite://"):
        return sync_url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    else:
        # Assume it's already async
        return sync_url


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(
    database_url: str,
    pool_size: int = 10,
    max_overflow: int = 0,
    pool_timeout: float = 30.0,
) -> AsyncEngine:
    """
    Create the async engine behind every session.

    Pooled URLs get a bounded queue pool: once `pool_size + max_overflow`
    connections are checked out, callers wait up to `pool_timeout` seconds.
    In-memory SQLite shares one connection so every session sees the same
    database.
    """
    url = make_url(_get_async_db_url(database_url))
    is_sqlite = url.get_backend_name() == "sqlite"

    if is_sqlite and url.database in (None, "", ":memory:"):
        engine = create_async_engine(
            url,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    else:
        if is_sqlite and url.database:
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)
        engine = create_async_engine(
            url,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_timeout=pool_timeout,
            pool_pre_ping=True,
        )

    if is_sqlite:
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return engine


engine = build_engine(
    settings.DATABASE_URL,
    pool_size=settings.DB_POOL_SIZE,
    max_overflow=settings.DB_MAX_OVERFLOW,
    pool_timeout=settings.DB_POOL_TIMEOUT,
)

AsyncSessionLocal = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


async def seed_subjects(session: AsyncSession) -> int:
    """Insert the default subjects when the table is empty. Returns rows added."""
    from study_buddy.models.subject import Subject

    existing = await session.execute(select(Subject.id).limit(1))
    if existing.first() is not None:
        return 0
    session.add_all(Subject(**subject) for subject in DEFAULT_SUBJECTS)
    await session.commit()
    logger.info("Default subjects seeded", extra={"count": len(DEFAULT_SUBJECTS)})
    return len(DEFAULT_SUBJECTS)


async def init_db(bind: AsyncEngine = None) -> None:
    """Create tables and seed reference data."""
    # Register every model on Base.metadata
    from study_buddy.models import chat, mood, subject, user  # noqa: F401

    bind = bind or engine
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    sessionmaker = async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)
    async with sessionmaker() as session:
        await seed_subjects(session)
    logger.info("Database tables created", extra={"dialect": bind.dialect.name})


async def get_db():
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()
