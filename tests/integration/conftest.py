"""Shared fixtures for integration tests requiring live infrastructure."""

from __future__ import annotations

import uuid
from collections.abc import AsyncGenerator

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine

from xenon_gatekeeper.auth.context import TenantContext, tenant_context_store
from xenon_gatekeeper.config import get_settings
from xenon_gatekeeper.storage.filters import TenantSession
from xenon_gatekeeper.storage.orm import Tenant

# ── Engine (module-scoped, shared across test module) ──────────────


@pytest.fixture(scope="module")
async def async_engine() -> AsyncGenerator[AsyncEngine]:
    """Create an async engine from settings (module-scoped)."""
    engine = create_async_engine(
        get_settings().database_url,
        pool_size=5,
        max_overflow=0,
    )
    yield engine
    await engine.dispose()


# ── Session with savepoint rollback ───────────────────────────────


@pytest.fixture()
async def db_session(
    async_engine: AsyncEngine,
) -> AsyncGenerator[AsyncSession]:
    """Provide a tenant-filtered session wrapped in a transaction.

    Rolled back after the test. Suitable for repository tests that use
    ``flush()`` but NOT ``commit()``.
    """
    async with async_engine.connect() as conn:
        trans = await conn.begin()
        session = AsyncSession(
            bind=conn,
            expire_on_commit=False,
            sync_session_class=TenantSession,
        )

        yield session

        await session.close()
        await trans.rollback()


# ── Seeds (savepoint) ─────────────────────────────────────────────


@pytest.fixture()
async def seed_tenant(db_session: AsyncSession) -> Tenant:
    """Create a Tenant (3 branches, 2 users) under a super-admin context."""
    with tenant_context_store.scope(TenantContext(is_super_admin=True)):
        tenant = Tenant(
            name=f"test-tenant-{uuid.uuid4().hex[:8]}",
            plan_code="growth",
            max_branches=3,
            max_users=2,
        )
        db_session.add(tenant)
        await db_session.flush()
    return tenant
