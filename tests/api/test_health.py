"""Health endpoint tests."""

from httpx import ASGITransport, AsyncClient

from stockroom.api.main import app


async def test_health():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        resp = await ac.get("/api/health")

    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "healthy"
    assert data["uptime_seconds"] >= 0


async def test_db_health(initialized_db):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        resp = await ac.get("/api/health/db")

    data = resp.json()
    assert data["status"] == "healthy"
    assert data["database"]["available"] is True
    assert data["database"]["name"] == "sqlite"
