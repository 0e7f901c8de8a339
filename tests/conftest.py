"""Pytest configuration and fixtures for Tax Scanner tests.

Provides an in-memory database, a repository bound to it, and helpers for
faking the remote rate files and the geocoding API.
"""

from __future__ import annotations

import os

# Configuration is read at import time by the web app
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from collections.abc import Callable

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from taxscanner.config import ImportConfig
from taxscanner.db.connection import enable_sqlite_savepoints
from taxscanner.db.models import Base
from taxscanner.db.repository import JurisdictionRepository

TEXAS_TEST_URL = "https://rates.test/texas/taxrates.txt"
ILLINOIS_TEST_URL = "https://rates.test/illinois/rates.csv"


@pytest_asyncio.fixture()
async def db_session() -> AsyncSession:
    """Create in-memory database for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    enable_sqlite_savepoints(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    SessionLocal = async_sessionmaker(engine, expire_on_commit=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        await session.close()
        await engine.dispose()


@pytest.fixture
def repository(db_session: AsyncSession) -> JurisdictionRepository:
    return JurisdictionRepository(db_session)


@pytest.fixture
def import_config() -> ImportConfig:
    return ImportConfig(texas_url=TEXAS_TEST_URL, illinois_url=ILLINOIS_TEST_URL)


@pytest_asyncio.fixture()
async def mock_http() -> Callable[..., httpx.AsyncClient]:
    """Build AsyncClients answering every request through a handler.

    Usage:
        client = mock_http(lambda request: httpx.Response(200, text="..."))
    """
    clients: list[httpx.AsyncClient] = []

    def _build(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        clients.append(client)
        return client

    yield _build

    for client in clients:
        await client.aclose()


@pytest.fixture
def serve_file(mock_http):
    """Client serving one fixed body, plus the list of requests it received.

    Usage:
        client, requests = serve_file("line\\tline", status_code=200)
    """

    def _serve(text: str, status_code: int = 200) -> tuple[httpx.AsyncClient, list]:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(status_code, text=text)

        return mock_http(handler), requests

    return _serve
