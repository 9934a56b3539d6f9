"""Health Routes — banner, liveness and readiness."""

import blog_api.infrastructure.database as db_module


async def test_banner(client):
    res = await client.get("/")
    assert res.status_code == 200
    body = res.json()
    assert body["message"] == "Blog API is running!"
    assert body["docs"] == "/api-docs"


async def test_liveness(client):
    res = await client.get("/api/health/")
    assert res.status_code == 200
    assert res.json()["status"] == "healthy"


async def test_readiness_with_database(client):
    res = await client.get("/api/health/ready")
    assert res.status_code == 200
    assert res.json()["checks"] == {"database": "healthy"}


async def test_readiness_without_database(client, monkeypatch):
    async def broken():
        raise ConnectionRefusedError("db down")

    monkeypatch.setattr(db_module.db_manager, "health_check", broken)
    res = await client.get("/api/health/ready")
    assert res.status_code == 503
    assert res.json()["status"] == "not_ready"
