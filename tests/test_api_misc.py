import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from study_buddy.core import rate_limit as rate_limit_module
from study_buddy.core.errors import RateLimited


class FakeRedis:
    def __init__(self, fail=False):
        self.counts = {}
        self.expiries = {}
        self.fail = fail

    async def incr(self, key):
        if self.fail:
            raise RedisConnectionError("redis is down")
        self.counts[key] = self.counts.get(key, 0) + 1
        return self.counts[key]

    async def expire(self, key, seconds):
        self.expiries[key] = seconds


async def test_subjects_are_seeded(client):
    response = await client.get("/api/subjects")

    assert response.status_code == 200
    subjects = response.json()["subjects"]
    names = [s["name"] for s in subjects]
    assert "Quantum Physics" in names and "Molecular Biology" in names
    assert set(subjects[0]) == {"id", "name", "color", "icon"}


async def test_health_reports_database_and_provider(client):
    response = await client.get("/api/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "OK"
    assert data["database"] == "sqlite"
    assert data["openRouterConfigured"] is False
    assert data["uptime"] >= 0


async def test_unknown_route_returns_json_not_found(client):
    response = await client.get("/api/does-not-exist")

    assert response.status_code == 404
    assert response.json() == {"error": "Endpoint not found"}


async def test_rate_limit_blocks_after_limit(monkeypatch):
    fake = FakeRedis()
    monkeypatch.setattr(rate_limit_module, "get_redis", lambda: fake)

    await rate_limit_module.rate_limit("login:ada@x.com", limit=2, window=300)
    await rate_limit_module.rate_limit("login:ada@x.com", limit=2, window=300)
    with pytest.raises(RateLimited):
        await rate_limit_module.rate_limit("login:ada@x.com", limit=2, window=300)

    assert fake.expiries == {"rate:login:ada@x.com": 300}


async def test_rate_limit_is_skipped_when_redis_fails(monkeypatch):
    monkeypatch.setattr(rate_limit_module, "get_redis", lambda: FakeRedis(fail=True))

    for _ in range(5):
        await rate_limit_module.rate_limit("chat:1", limit=1)


async def test_rate_limited_signup_returns_429(client, monkeypatch):
    fake = FakeRedis()
    fake.counts["rate:signup:ada@x.com"] = 5
    monkeypatch.setattr(rate_limit_module, "get_redis", lambda: fake)

    response = await client.post("/api/signup", json={"name": "Ada", "email": "ada@x.com", "password": "secret123"})

    assert response.status_code == 429
    assert response.json() == {"error": "Rate limit exceeded"}
