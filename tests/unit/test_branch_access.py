"""Tests for BranchAccessService and branch repository grants."""

import uuid
from unittest.mock import AsyncMock, MagicMock, patch

from xenon_gatekeeper.auth.branches import BranchAccessService
from xenon_gatekeeper.auth.context import TenantContext
from xenon_gatekeeper.storage.orm import Branch, UserBranch
from xenon_gatekeeper.storage.repositories import BranchRepository

TENANT_ID = uuid.uuid4()


def _mock_session() -> AsyncMock:
    session = AsyncMock()
    session.add = MagicMock()
    return session


class TestBranchAccessService:
    async def test_super_admin_always_allowed(self) -> None:
        session = _mock_session()
        service = BranchAccessService(session, TenantContext(is_super_admin=True))
        assert await service.has_access_to_branch(99) is True
        session.execute.assert_not_awaited()

    async def test_anonymous_denied(self) -> None:
        service = BranchAccessService(_mock_session(), TenantContext())
        assert await service.has_access_to_branch(1) is False

    async def test_tenant_without_user_denied(self) -> None:
        service = BranchAccessService(
            _mock_session(), TenantContext(tenant_id=TENANT_ID)
        )
        assert await service.has_access_to_branch(1) is False

    async def test_delegates_to_grant_lookup(self) -> None:
        ctx = TenantContext(tenant_id=TENANT_ID, user_id="u-1")
        with patch(
            "xenon_gatekeeper.auth.branches.BranchRepository.has_grant",
            new_callable=AsyncMock,
            return_value=True,
        ) as has_grant:
            service = BranchAccessService(_mock_session(), ctx)
            assert await service.has_access_to_branch(7) is True
        has_grant.assert_awaited_once_with(user_id="u-1", branch_id=7)


class TestBranchRepository:
    async def test_create_sets_tenant_id(self) -> None:
        session = _mock_session()
        repo = BranchRepository(session, TENANT_ID)

        await repo.create(name="Deira", company_id=4)

        branch: Branch = session.add.call_args[0][0]
        assert isinstance(branch, Branch)
        assert branch.tenant_id == TENANT_ID
        assert branch.company_id == 4
        session.flush.assert_awaited_once()

    async def test_grant_sets_tenant_id(self) -> None:
        session = _mock_session()
        repo = BranchRepository(session, TENANT_ID)

        await repo.grant(user_id="u-1", branch_id=7)

        grant: UserBranch = session.add.call_args[0][0]
        assert grant.tenant_id == TENANT_ID
        assert grant.branch_id == 7

    async def test_has_grant(self) -> None:
        session = _mock_session()
        result = MagicMock()
        result.scalar_one.return_value = 1
        session.execute.return_value = result

        repo = BranchRepository(session, TENANT_ID)
        assert await repo.has_grant(user_id="u-1", branch_id=7) is True

        stmt = session.execute.call_args[0][0]
        sql = str(stmt)
        assert "user_branches" in sql
        assert "branches.is_active" in sql

    async def test_has_grant_none(self) -> None:
        session = _mock_session()
        result = MagicMock()
        result.scalar_one.return_value = 0
        session.execute.return_value = result

        repo = BranchRepository(session, TENANT_ID)
        assert await repo.has_grant(user_id="u-1", branch_id=7) is False
