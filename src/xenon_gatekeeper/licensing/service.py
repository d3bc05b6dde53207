"""License guard service: guardrails backed by live tenant counters."""

from __future__ import annotations

import uuid

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from xenon_gatekeeper.errors import LicenseLimitExceededError
from xenon_gatekeeper.licensing.guardrails import LicenseGuardrails
from xenon_gatekeeper.result import Err, Ok, Result
from xenon_gatekeeper.storage.repositories import TenantRepository

logger = structlog.get_logger()

TENANT_NOT_FOUND = "Tenant not found"


class LicenseGuardService:
    """Evaluate and enforce a tenant's branch/user limits.

    Counts are read fresh on every call; nothing is cached.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._tenants = TenantRepository(session)

    async def get_guardrails(self, tenant_id: uuid.UUID) -> Result[LicenseGuardrails]:
        tenant = await self._tenants.get_by_id(tenant_id)
        if tenant is None:
            return Err(TENANT_NOT_FOUND)

        current_branches = await self._tenants.count_active_branches(tenant_id)
        current_users = await self._tenants.count_active_users(tenant_id)
        return Ok(
            LicenseGuardrails.evaluate(
                max_branches=tenant.max_branches,
                max_users=tenant.max_users,
                current_branches=current_branches,
                current_users=current_users,
            )
        )

    async def ensure_can_add_branch(self, tenant_id: uuid.UUID) -> LicenseGuardrails:
        """Return current guardrails if another branch fits the plan.

        Raises:
            LookupError: if the tenant does not exist.
            LicenseLimitExceededError: if the branch limit is reached.
        """
        guardrails = await self._require_guardrails(tenant_id)
        if not guardrails.can_add_branch:
            logger.warning(
                "license_limit_reached",
                tenant_id=str(tenant_id),
                resource="branches",
                limit=guardrails.max_branches,
                current=guardrails.current_branches,
            )
            raise LicenseLimitExceededError(
                tenant_id, "branches", guardrails.max_branches
            )
        return guardrails

    async def ensure_can_add_user(self, tenant_id: uuid.UUID) -> LicenseGuardrails:
        """Return current guardrails if another user fits the plan.

        Raises:
            LookupError: if the tenant does not exist.
            LicenseLimitExceededError: if the user limit is reached.
        """
        guardrails = await self._require_guardrails(tenant_id)
        if not guardrails.can_add_user:
            logger.warning(
                "license_limit_reached",
                tenant_id=str(tenant_id),
                resource="users",
                limit=guardrails.max_users,
                current=guardrails.current_users,
            )
            raise LicenseLimitExceededError(tenant_id, "users", guardrails.max_users)
        return guardrails

    async def _require_guardrails(self, tenant_id: uuid.UUID) -> LicenseGuardrails:
        result = await self.get_guardrails(tenant_id)
        if isinstance(result, Err):
            raise LookupError(result.message)
        return result.value
