"""FastAPI dependency injection."""

from __future__ import annotations

from typing import Any, cast

import structlog
from fastapi import Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from xenon_gatekeeper.auth.branches import BranchAccessChecker, BranchAccessService
from xenon_gatekeeper.auth.claims import (
    get_email,
    get_required_tenant_id,
    is_platform_admin,
)
from xenon_gatekeeper.auth.context import ANONYMOUS, TenantCaller, TenantContext
from xenon_gatekeeper.billing.pricing import PricingCalculator
from xenon_gatekeeper.errors import AccessDeniedError
from xenon_gatekeeper.licensing.service import LicenseGuardService
from xenon_gatekeeper.masking import mask_email
from xenon_gatekeeper.security.abuse import SecurityEventMonitor
from xenon_gatekeeper.security.blocklist import InMemoryIpBlocklist
from xenon_gatekeeper.storage.database import get_session

__all__ = [
    "get_branch_access_checker",
    "get_claims",
    "get_ip_blocklist",
    "get_license_guard_service",
    "get_pricing_calculator",
    "get_security_monitor",
    "get_session",
    "get_tenant_context",
    "require_authenticated",
    "require_platform_admin",
    "require_tenant",
]

logger = structlog.get_logger()

_get_session = Depends(get_session)


async def get_claims(request: Request) -> dict[str, Any]:
    """Claims resolved by TenantContextMiddleware (empty when anonymous)."""
    return cast(dict[str, Any], getattr(request.state, "claims", {}))


async def get_tenant_context(request: Request) -> TenantContext:
    """TenantContext resolved by TenantContextMiddleware."""
    return cast(TenantContext, getattr(request.state, "tenant_context", ANONYMOUS))


_get_claims = Depends(get_claims)
_get_tenant_context = Depends(get_tenant_context)


async def require_authenticated(
    claims: dict[str, Any] = _get_claims,
) -> dict[str, Any]:
    """Claims of an authenticated caller.

    Raises:
        HTTPException 401: no valid bearer token on the request.
    """
    if not claims:
        raise HTTPException(
            status_code=401,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return claims


_require_authenticated = Depends(require_authenticated)


async def require_tenant(
    request: Request,
    claims: dict[str, Any] = _require_authenticated,
    context: TenantContext = _get_tenant_context,
) -> TenantCaller:
    """Authenticated caller bound to a tenant.

    Raises:
        HTTPException 403: the token carries no valid tenant id.
    """
    try:
        tenant_id = get_required_tenant_id(claims)
    except AccessDeniedError as e:
        logger.warning(
            "tenant_required",
            path=request.url.path,
            user_id=context.user_id,
            email=mask_email(get_email(claims)),
            reason=str(e),
        )
        raise HTTPException(status_code=403, detail="Forbidden") from e
    return TenantCaller(
        tenant_id=tenant_id,
        user_id=context.user_id,
        company_id=context.company_id,
        is_super_admin=context.is_super_admin,
    )


async def require_platform_admin(
    request: Request,
    claims: dict[str, Any] = _require_authenticated,
    context: TenantContext = _get_tenant_context,
) -> TenantContext:
    """Caller from the platform-admin realm.

    Raises:
        HTTPException 403: caller is not in the platform-admin realm.
    """
    if not is_platform_admin(claims):
        logger.warning(
            "platform_admin_required",
            path=request.url.path,
            user_id=context.user_id,
        )
        raise HTTPException(status_code=403, detail="Forbidden")
    return context


async def get_branch_access_checker(
    context: TenantContext = _get_tenant_context,
    session: AsyncSession = _get_session,
) -> BranchAccessChecker:
    return BranchAccessService(session, context)


async def get_license_guard_service(
    session: AsyncSession = _get_session,
) -> LicenseGuardService:
    return LicenseGuardService(session)


async def get_pricing_calculator(request: Request) -> PricingCalculator:
    """Retrieve PricingCalculator from app state.

    Initialized during lifespan startup.
    """
    return cast(PricingCalculator, request.app.state.pricing_calculator)


async def get_ip_blocklist(request: Request) -> InMemoryIpBlocklist:
    return cast(InMemoryIpBlocklist, request.app.state.ip_blocklist)


async def get_security_monitor(request: Request) -> SecurityEventMonitor:
    return cast(SecurityEventMonitor, request.app.state.security_monitor)
