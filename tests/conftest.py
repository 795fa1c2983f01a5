import os
import tempfile

# Settings are read at import time
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["OPENROUTER_API_KEY"] = ""
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ.pop("REDIS_URL", None)
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="study-buddy-logs-"))

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from study_buddy.core.database import build_engine, get_db, init_db
from study_buddy.main import app
from study_buddy.services.completion import OpenRouterClient, get_completion_client
from study_buddy.services.context_cache import ContextCache, get_context_cache

PROVIDER_URL = "https://openrouter.test/api/v1/chat/completions"


def make_provider(handler=None, api_key="test-key"):
    """OpenRouter client backed by an in-process handler instead of the network."""
    transport = httpx.MockTransport(handler) if handler is not None else None
    return OpenRouterClient(
        api_key=api_key,
        model="test/model",
        url=PROVIDER_URL,
        timeout=5,
        referer="http://localhost:3000/",
        transport=transport,
    )


def completion_payload(text):
    return {"choices": [{"message": {"role": "assistant", "content": text}}]}


@pytest.fixture
async def engine():
    engine = build_engine("sqlite+aiosqlite://")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def sessionmaker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(sessionmaker):
    async with sessionmaker() as session:
        yield session


@pytest.fixture
def context_cache():
    return ContextCache()


@pytest.fixture
def provider():
    """Unconfigured provider: every chat takes the fallback path."""
    return make_provider(api_key=None)


@pytest.fixture
async def client(sessionmaker, context_cache, provider):
    async def override_get_db():
        async with sessionmaker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_context_cache] = lambda: context_cache
    app.dependency_overrides[get_completion_client] = lambda: provider

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()


def use_provider(provider):
    """Swap the completion client the app hands to the chat route."""
    app.dependency_overrides[get_completion_client] = lambda: provider


async def signup(client, name="Ada", email="ada@x.com", password="secret123"):
    response = await client.post("/api/signup", json={"name": name, "email": email, "password": password})
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
async def ada(client):
    """Registered user: (user_id, auth headers)."""
    data = await signup(client)
    return data["userId"], {"Authorization": f"Bearer {data['token']}"}
