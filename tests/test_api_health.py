"""Tests for health check endpoints."""

from httpx import AsyncClient
from sqlalchemy.exc import OperationalError

from cardkeeper.db.operations import upsert_cards


class TestHealthEndpoint:
    async def test_health_returns_healthy(self, client: AsyncClient) -> None:
        """Liveness probe returns healthy."""
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestReadyEndpoint:
    async def test_ready_with_empty_catalog(self, client: AsyncClient) -> None:
        response = await client.get("/ready")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ready"
        assert data["database"] == "connected"
        assert data["catalog_cards"] == 0

    async def test_ready_reports_catalog_size(
        self, client: AsyncClient, session_factory, sample_catalog
    ) -> None:
        async with session_factory() as session:
            await upsert_cards(session, sample_catalog)
            await session.commit()

        response = await client.get("/ready")

        assert response.json()["catalog_cards"] == len(sample_catalog)

    async def test_not_ready_when_database_fails(self, client: AsyncClient, monkeypatch) -> None:
        async def broken_count(session):
            raise OperationalError("SELECT count(*)", {}, Exception("database is locked"))

        monkeypatch.setattr("cardkeeper.api.health.count_cards", broken_count)

        response = await client.get("/ready")

        assert response.status_code == 503
        assert response.json()["status"] == "not ready"
        assert response.json()["database"] == "disconnected"
