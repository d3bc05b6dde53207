"""License guard and branch grants against a live PostgreSQL."""

from __future__ import annotations

import uuid

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from xenon_gatekeeper.auth.branches import BranchAccessService
from xenon_gatekeeper.auth.context import TenantContext, tenant_context_store
from xenon_gatekeeper.errors import LicenseLimitExceededError
from xenon_gatekeeper.licensing.service import LicenseGuardService
from xenon_gatekeeper.result import Ok
from xenon_gatekeeper.storage.orm import Tenant
from xenon_gatekeeper.storage.repositories import (
    BranchRepository,
    TenantRepository,
    TenantUserRepository,
)

pytestmark = pytest.mark.requires_db


async def test_guardrails_follow_usage(
    db_session: AsyncSession, seed_tenant: Tenant
) -> None:
    ctx = TenantContext(tenant_id=seed_tenant.id, user_id="u-1")
    with tenant_context_store.scope(ctx):
        branches = BranchRepository(db_session, seed_tenant.id)
        users = TenantUserRepository(db_session, seed_tenant.id)
        guard = LicenseGuardService(db_session)

        await branches.create(name="Deira")
        await users.create(user_id="u-1")
        await users.create(user_id="u-2")

        result = await guard.get_guardrails(seed_tenant.id)
        assert isinstance(result, Ok)
        assert result.value.current_branches == 1
        assert result.value.can_add_branch is True
        assert result.value.can_add_user is False

        with pytest.raises(LicenseLimitExceededError):
            await guard.ensure_can_add_user(seed_tenant.id)


async def test_branch_grants(db_session: AsyncSession, seed_tenant: Tenant) -> None:
    ctx = TenantContext(tenant_id=seed_tenant.id, user_id="u-1")
    with tenant_context_store.scope(ctx):
        repo = BranchRepository(db_session, seed_tenant.id)
        granted = await repo.create(name="Deira")
        other = await repo.create(name="Marina")
        await repo.grant(user_id="u-1", branch_id=granted.id)

        service = BranchAccessService(db_session, ctx)
        assert await service.has_access_to_branch(granted.id) is True
        assert await service.has_access_to_branch(other.id) is False


async def test_other_tenant_rows_hidden(
    db_session: AsyncSession, seed_tenant: Tenant
) -> None:
    with tenant_context_store.scope(TenantContext(is_super_admin=True)):
        other = await TenantRepository(db_session).create(
            name=f"other-{uuid.uuid4().hex[:8]}"
        )
        hidden = await BranchRepository(db_session, other.id).create(name="Hidden")

    ctx = TenantContext(tenant_id=seed_tenant.id, user_id="u-1")
    with tenant_context_store.scope(ctx):
        db_session.expunge_all()
        repo = BranchRepository(db_session, other.id)
        assert await repo.get_by_id(hidden.id) is None
