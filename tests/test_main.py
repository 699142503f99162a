"""Tests for application wiring: health, middleware, lifespan, error handling."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

from userapi import main as main_module
from userapi.database import get_db
from userapi.deps import get_user_mapper
from userapi.main import app
from userapi.mappers import UserMapper


@pytest.mark.asyncio
async def test_health_reports_healthy(client: AsyncClient) -> None:
    response = await client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["checks"] == {"database": True}


@pytest.mark.asyncio
async def test_health_returns_503_on_database_failure(client: AsyncClient) -> None:
    async def mock_get_db():
        mock_session = MagicMock()
        mock_session.execute.side_effect = Exception("DB Down")
        yield mock_session

    app.dependency_overrides[get_db] = mock_get_db
    try:
        response = await client.get("/health")
    finally:
        app.dependency_overrides.pop(get_db, None)

    assert response.status_code == 503
    data = response.json()
    assert data["status"] == "unhealthy"
    assert data["checks"]["database"] is False


@pytest.mark.asyncio
async def test_request_id_generated_when_absent(fake_client: AsyncClient) -> None:
    response = await fake_client.get("/users")
    assert response.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_request_id_echoed(fake_client: AsyncClient) -> None:
    response = await fake_client.get("/users", headers={"X-Request-ID": "abc"})
    assert response.headers["X-Request-ID"] == "abc"


@pytest.mark.asyncio
async def test_unexpected_error_returns_json_500() -> None:
    broken = AsyncMock(spec=UserMapper)
    broken.find_by_id.side_effect = RuntimeError("boom")
    app.dependency_overrides[get_user_mapper] = lambda: broken

    try:
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/users/1", headers={"X-Request-ID": "rid-1"})
    finally:
        app.dependency_overrides.pop(get_user_mapper, None)

    assert response.status_code == 500
    assert response.headers["X-Request-ID"] == "rid-1"
    data = response.json()
    assert data["detail"] == "An internal server error occurred. Please try again later."
    assert data["trace"] is None
    assert data["request_id"] == "rid-1"


@pytest.mark.asyncio
async def test_lifespan_runs_boot_checks_and_closes_db(monkeypatch) -> None:
    validate = AsyncMock(return_value=True)
    init_db = AsyncMock()
    close_db = AsyncMock()
    monkeypatch.setattr(main_module.Bootloader, "validate", validate)
    monkeypatch.setattr(main_module, "init_db", init_db)
    monkeypatch.setattr(main_module, "close_db", close_db)

    async with main_module.lifespan(app):
        validate.assert_awaited_once_with(mode=main_module.BootMode.CRITICAL)
        init_db.assert_awaited_once()
        close_db.assert_not_awaited()

    close_db.assert_awaited_once()
