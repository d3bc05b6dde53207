"""Repositories for tenants, branches and tenant users."""

from __future__ import annotations

import uuid
from collections.abc import Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from xenon_gatekeeper.storage.orm import Branch, Tenant, TenantUser, UserBranch


class TenantRepository:
    """Platform-level access to tenant records and their usage counters."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        *,
        name: str,
        plan_code: str = "starter",
        max_branches: int = 1,
        max_users: int = 5,
    ) -> Tenant:
        tenant = Tenant(
            name=name,
            plan_code=plan_code,
            max_branches=max_branches,
            max_users=max_users,
        )
        self._session.add(tenant)
        await self._session.flush()
        return tenant

    async def get_by_id(self, tenant_id: uuid.UUID) -> Tenant | None:
        stmt = select(Tenant).where(Tenant.id == tenant_id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def count_active_branches(self, tenant_id: uuid.UUID) -> int:
        stmt = (
            select(func.count())
            .select_from(Branch)
            .where(Branch.tenant_id == tenant_id, Branch.is_active.is_(True))
        )
        result = await self._session.execute(stmt)
        return result.scalar_one()

    async def count_active_users(self, tenant_id: uuid.UUID) -> int:
        stmt = (
            select(func.count())
            .select_from(TenantUser)
            .where(TenantUser.tenant_id == tenant_id, TenantUser.is_active.is_(True))
        )
        result = await self._session.execute(stmt)
        return result.scalar_one()


class BranchRepository:
    """Tenant-scoped repository for branches and branch grants.

    All queries are filtered by tenant_id explicitly, in addition to the
    session-level tenant filter.
    """

    def __init__(self, session: AsyncSession, tenant_id: uuid.UUID) -> None:
        self._session = session
        self._tenant_id = tenant_id

    async def create(self, *, name: str, company_id: int | None = None) -> Branch:
        branch = Branch(tenant_id=self._tenant_id, name=name, company_id=company_id)
        self._session.add(branch)
        await self._session.flush()
        return branch

    async def get_by_id(self, branch_id: int) -> Branch | None:
        stmt = select(Branch).where(
            Branch.id == branch_id,
            Branch.tenant_id == self._tenant_id,
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_all(self, *, include_inactive: bool = False) -> Sequence[Branch]:
        stmt = select(Branch).where(Branch.tenant_id == self._tenant_id)
        if not include_inactive:
            stmt = stmt.where(Branch.is_active.is_(True))
        result = await self._session.execute(stmt.order_by(Branch.id))
        return result.scalars().all()

    async def grant(self, *, user_id: str, branch_id: int) -> UserBranch:
        grant = UserBranch(tenant_id=self._tenant_id, user_id=user_id, branch_id=branch_id)
        self._session.add(grant)
        await self._session.flush()
        return grant

    async def has_grant(self, *, user_id: str, branch_id: int) -> bool:
        stmt = (
            select(func.count())
            .select_from(UserBranch)
            .join(Branch, UserBranch.branch_id == Branch.id)
            .where(
                UserBranch.user_id == user_id,
                UserBranch.branch_id == branch_id,
                UserBranch.tenant_id == self._tenant_id,
                Branch.tenant_id == self._tenant_id,
                Branch.is_active.is_(True),
            )
        )
        result = await self._session.execute(stmt)
        return result.scalar_one() > 0


class TenantUserRepository:
    """Tenant-scoped repository for users licensed under a tenant."""

    def __init__(self, session: AsyncSession, tenant_id: uuid.UUID) -> None:
        self._session = session
        self._tenant_id = tenant_id

    async def create(self, *, user_id: str, email: str | None = None) -> TenantUser:
        user = TenantUser(tenant_id=self._tenant_id, user_id=user_id, email=email)
        self._session.add(user)
        await self._session.flush()
        return user

    async def get_by_user_id(self, user_id: str) -> TenantUser | None:
        stmt = select(TenantUser).where(
            TenantUser.user_id == user_id,
            TenantUser.tenant_id == self._tenant_id,
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()
