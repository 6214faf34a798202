"""Pytest fixtures for HR payroll tests."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from dataclasses import replace
from typing import Any

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from hr_payroll.api.app import create_app
from hr_payroll.api.dependencies import get_db_session
from hr_payroll.cli import bootstrap_admin
from hr_payroll.config import Settings
from hr_payroll.database import create_engine_for, create_schema, make_session_factory
from hr_payroll.models import User
from hr_payroll.services import QueryCache
from tests.payloads import ADMIN_CPF, ADMIN_PASSWORD, branch_payload, employee_payload

# In-memory SQLite shared by every session of a test through a static pool
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create a fresh test database per test."""
    engine = create_engine_for(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return make_session_factory(engine)


@pytest.fixture
async def session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for each test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def cache() -> QueryCache:
    return QueryCache(max_size=100, default_ttl=60)


@pytest.fixture
def settings() -> Settings:
    """Test settings: permissions and transition rules enforced."""
    return replace(
        Settings.from_env(),
        database_url=TEST_DATABASE_URL,
        environment="testing",
        secret_key="test-secret",
        token_ttl_seconds=3600,
        enforce_permissions=True,
        strict_status_transitions=True,
        create_schema=False,
    )


@pytest.fixture
def app(settings: Settings, session_factory: async_sessionmaker[AsyncSession]) -> FastAPI:
    """Application wired to the test database."""
    app = create_app(settings)

    async def override_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_db_session
    return app


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client for the test application."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture
async def admin_user(app: FastAPI, session_factory: async_sessionmaker[AsyncSession]) -> User:
    """An administrator with every permission."""
    async with session_factory() as session:
        user, _ = await bootstrap_admin(
            session,
            name="Admin",
            email="admin@example.com",
            cpf=ADMIN_CPF,
            password=ADMIN_PASSWORD,
            cache=app.state.cache,
        )
    return user


@pytest.fixture
def admin_headers(app: FastAPI, admin_user: User) -> dict[str, str]:
    token = app.state.signer.issue(admin_user.id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def branch(client: AsyncClient, admin_headers: dict[str, str]) -> dict[str, Any]:
    response = await client.post("/api/branches", json=branch_payload(), headers=admin_headers)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
async def employee(
    client: AsyncClient, admin_headers: dict[str, str], branch: dict[str, Any]
) -> dict[str, Any]:
    response = await client.post(
        "/api/employees", json=employee_payload(branch["id"]), headers=admin_headers
    )
    assert response.status_code == 201, response.text
    return response.json()
