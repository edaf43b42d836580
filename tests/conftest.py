# This project was developed with assistance from AI tools.
"""Shared test fixtures.

Unit tests run against an in-memory SQLite database (aiosqlite) built from
the ORM metadata, and against ``MockSalesforceClient`` for every CRM call.
Route tests drive the real app through ``httpx.ASGITransport`` so the app,
the session, and the test all share one event loop.
"""

import httpx
import pytest
import pytest_asyncio
from db import Base, get_db
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from lead_lens.core import auth as core_auth
from lead_lens.main import app
from lead_lens.services.salesforce.client import get_crm_client
from lead_lens.services.salesforce.mock import MockSalesforceClient


@pytest.fixture(autouse=True)
def _fast_bcrypt(monkeypatch):
    """Minimum bcrypt cost so credential tests stay fast."""
    monkeypatch.setattr(core_auth, "BCRYPT_ROUNDS", 4)


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def db_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    factory = async_sessionmaker(bind=db_engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session


# ---------------------------------------------------------------------------
# CRM + HTTP
# ---------------------------------------------------------------------------


@pytest.fixture
def crm():
    return MockSalesforceClient()


@pytest_asyncio.fixture
async def api(db_session, crm):
    """HTTP client against the app with the test session and mock CRM injected."""

    async def _get_db():
        yield db_session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_crm_client] = lambda: crm
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
