"""Integration test fixtures: real Postgres via testcontainers.

Requires Docker to be running.
Run with: pytest tests/integration -v
"""

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from sleeplog.domain.orm import Base


@pytest.fixture(scope="session")
def pg_container():
    """Session-scoped PostgreSQL container."""
    from testcontainers.postgres import PostgresContainer

    with PostgresContainer("postgres:16-alpine") as pg:
        yield pg


@pytest.fixture(scope="session")
def pg_url(pg_container):
    """Async connection URL for the testcontainers Postgres instance."""
    # testcontainers gives us a psycopg2 URL; convert to asyncpg
    url = pg_container.get_connection_url()
    return url.replace("psycopg2", "asyncpg")


@pytest.fixture
async def async_engine(pg_url):
    """Create engine and initialize schema."""
    engine = create_async_engine(pg_url, echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def db_session(async_engine) -> AsyncSession:
    """Provide an async session on a freshly created schema."""
    session_factory = async_sessionmaker(async_engine, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest.fixture
async def api_client(db_session):
    """httpx client against the ASGI app, with the service backed by Postgres."""
    from main import app
    from sleeplog.api import get_service
    from sleeplog.repository import SleepLogRepository
    from sleeplog.service import SleepLogService
    from tests.conftest import TODAY

    def override_service():
        return SleepLogService(SleepLogRepository(db_session), today=lambda: TODAY)

    app.dependency_overrides[get_service] = override_service
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
