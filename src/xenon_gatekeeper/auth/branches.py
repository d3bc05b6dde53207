"""Branch-level access decisions for the current tenant context."""

from __future__ import annotations

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from xenon_gatekeeper.auth.context import TenantContext
from xenon_gatekeeper.storage.repositories import BranchRepository


class BranchAccessChecker(Protocol):
    async def has_access_to_branch(self, branch_id: int) -> bool: ...


class BranchAccessService:
    """Answer whether the caller may work in a given branch.

    Super admins may access any branch. Everyone else needs a tenant,
    a user id, and a grant on an active branch of that tenant. Every call
    queries the database.
    """

    def __init__(self, session: AsyncSession, context: TenantContext) -> None:
        self._session = session
        self._context = context

    async def has_access_to_branch(self, branch_id: int) -> bool:
        if self._context.is_super_admin:
            return True
        if self._context.tenant_id is None or self._context.user_id is None:
            return False
        repo = BranchRepository(self._session, self._context.tenant_id)
        return await repo.has_grant(user_id=self._context.user_id, branch_id=branch_id)
