"""Tests for taxscanner.web.routes.health."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from taxscanner.db.connection import get_db
from taxscanner.web.routes import health


@pytest.fixture
def session():
    return AsyncMock()


@pytest.fixture
def client(session):
    test_app = FastAPI()
    test_app.include_router(health.router)

    async def _db():
        yield session

    test_app.dependency_overrides[get_db] = _db
    return TestClient(test_app)


def test_health_ok(client):
    body = client.get("/health").json()

    assert body["status"] == "ok"
    assert body["database"] == "connected"
    assert "timestamp" in body
    assert body["uptime"] >= 0


def test_health_database_down(client, session):
    session.execute.side_effect = OperationalError("SELECT 1", {}, Exception("refused"))

    body = client.get("/health").json()

    assert body["status"] == "error"
    assert body["database"] == "disconnected"
