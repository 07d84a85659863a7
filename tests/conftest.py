"""
Pytest configuration and fixtures for testing.

Provides:
- Database fixtures (temporary SQLite file per test via aiosqlite)
- The FastAPI app with get_session overridden
- httpx clients talking to the app in process (ASGITransport)
- Requesters for the usual roles

Usage:
    pytest tests/ -v
"""

import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./ticketdesk-test.db")
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["MONITORING_ENABLE_METRICS"] = "false"
os.environ["LOG_ENABLE_FILE_LOGGING"] = "false"

from typing import AsyncGenerator

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool
from sqlmodel import SQLModel

from ticketdesk.app import create_app
from ticketdesk.client import TicketSessionController, TicketStoreClient
from ticketdesk.core.database import get_session
from ticketdesk.core.security import Requester
from ticketdesk.db import Customer, Site
from ticketdesk.db.enums import UserRole

API_BASE_URL = "http://testserver/api/v1"


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def test_engine(tmp_path):
    """Fresh SQLite database file per test."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'ticketdesk.db'}",
        poolclass=NullPool,
        echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def customer_with_sites(session_factory):
    """One customer with two sites, plus a second customer with one site."""
    async with session_factory() as session:
        acme = Customer(customer_name="Acme Corp")
        globex = Customer(customer_name="Globex")
        session.add_all([acme, globex])
        await session.flush()

        hq = Site(site_name="Acme HQ", customer_id=acme.id)
        plant = Site(site_name="Acme Plant", customer_id=acme.id)
        globex_site = Site(site_name="Globex Tower", customer_id=globex.id)
        session.add_all([hq, plant, globex_site])
        await session.commit()

        return {
            "customer": acme,
            "sites": [hq, plant],
            "other_customer": globex,
            "other_site": globex_site,
        }


# ============================================================================
# Application Fixtures
# ============================================================================

@pytest.fixture(scope="session")
def app():
    return create_app()


@pytest.fixture
def api_app(app, session_factory):
    """The app with every request served from the per-test database."""

    async def override_get_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                if session.in_transaction():
                    await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session
    yield app
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def http_client(api_app) -> AsyncGenerator[httpx.AsyncClient, None]:
    transport = httpx.ASGITransport(app=api_app)
    async with httpx.AsyncClient(transport=transport, base_url=API_BASE_URL) as client:
        yield client


@pytest_asyncio.fixture
async def store_client(api_app) -> AsyncGenerator[TicketStoreClient, None]:
    client = TicketStoreClient(API_BASE_URL, transport=httpx.ASGITransport(app=api_app))
    yield client
    await client.aclose()


@pytest.fixture
def controller(store_client) -> TicketSessionController:
    """Session controller backed by the real HTTP store client."""
    return TicketSessionController(store_client, store_client, store_client, timeout=5)


# ============================================================================
# Requester Fixtures
# ============================================================================

@pytest.fixture
def admin() -> Requester:
    return Requester(user_id=1, role=UserRole.SUPERADMIN.value)


@pytest.fixture
def creator() -> Requester:
    return Requester(user_id=10, role=UserRole.USER.value)


@pytest.fixture
def assignee() -> Requester:
    return Requester(user_id=20, role=UserRole.USER.value)


@pytest.fixture
def outsider() -> Requester:
    return Requester(user_id=99, role=UserRole.USER.value)
