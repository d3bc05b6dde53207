"""Shared fixtures for API tests."""

import uuid
from collections.abc import AsyncGenerator, Callable
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

from xenon_gatekeeper.api.app import app, ip_blocklist, security_monitor
from xenon_gatekeeper.auth.tokens import create_access_token
from xenon_gatekeeper.config import settings
from xenon_gatekeeper.storage.database import get_session

TENANT_ID = uuid.UUID("0190f4a2-7c1e-7a3b-9d2e-5f6a7b8c9d0e")

AuthHeaders = Callable[..., dict[str, str]]


@pytest.fixture()
def mock_session() -> AsyncMock:
    session = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture()
async def client(mock_session: AsyncMock) -> AsyncGenerator[AsyncClient]:
    """AsyncClient against the app with DB replaced by a mock session.

    Process-wide block list and failure counters are reset around each test.
    """
    app.dependency_overrides[get_session] = lambda: mock_session
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()
    for entry in ip_blocklist.entries():
        ip_blocklist.unblock(entry.ip)
    security_monitor.reset()


@pytest.fixture()
def auth_headers() -> AuthHeaders:
    """Build an Authorization header from claims."""

    def _build(**claims: Any) -> dict[str, str]:
        token = create_access_token(claims, settings)
        return {"Authorization": f"Bearer {token}"}

    return _build


@pytest.fixture()
def tenant_headers(auth_headers: AuthHeaders) -> dict[str, str]:
    return auth_headers(
        sub="user-1",
        tenant_id=str(TENANT_ID),
        realm="tenant",
        email="dr.sara@clinic.ae",
    )


@pytest.fixture()
def admin_headers(auth_headers: AuthHeaders) -> dict[str, str]:
    return auth_headers(sub="ops-1", realm="platform-admin")
