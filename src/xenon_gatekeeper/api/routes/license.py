"""License summary endpoint."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from xenon_gatekeeper.api.deps import get_license_guard_service, require_tenant
from xenon_gatekeeper.api.schemas import LicenseSummaryResponse
from xenon_gatekeeper.auth.context import TenantCaller
from xenon_gatekeeper.licensing.service import LicenseGuardService
from xenon_gatekeeper.result import Err

router = APIRouter(tags=["license"])

TenantDep = Annotated[TenantCaller, Depends(require_tenant)]
GuardDep = Annotated[LicenseGuardService, Depends(get_license_guard_service)]


@router.get("/license")
async def get_license_summary(
    tenant: TenantDep,
    guard: GuardDep,
) -> LicenseSummaryResponse:
    """Branch/user limits of the caller's tenant and how much is used."""
    result = await guard.get_guardrails(tenant.tenant_id)
    if isinstance(result, Err):
        raise HTTPException(status_code=404, detail=result.message)
    return LicenseSummaryResponse.model_validate(result.value)
