"""Branch endpoints for the caller's tenant."""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from xenon_gatekeeper.api.deps import (
    get_license_guard_service,
    get_session,
    require_tenant,
)
from xenon_gatekeeper.api.schemas import BranchCreateRequest, BranchResponse
from xenon_gatekeeper.auth.branch_gate import BranchGate
from xenon_gatekeeper.auth.context import TenantCaller
from xenon_gatekeeper.licensing.service import LicenseGuardService
from xenon_gatekeeper.storage.repositories import BranchRepository

logger = structlog.get_logger()

router = APIRouter(tags=["branches"])

SessionDep = Annotated[AsyncSession, Depends(get_session)]
TenantDep = Annotated[TenantCaller, Depends(require_tenant)]
GuardDep = Annotated[LicenseGuardService, Depends(get_license_guard_service)]


@router.get("/branches")
async def list_branches(tenant: TenantDep, session: SessionDep) -> list[BranchResponse]:
    """Active branches of the caller's tenant."""
    repo = BranchRepository(session, tenant.tenant_id)
    branches = await repo.list_all()
    return [BranchResponse.model_validate(b) for b in branches]


@router.post("/branches", status_code=201)
async def create_branch(
    body: BranchCreateRequest,
    tenant: TenantDep,
    session: SessionDep,
    guard: GuardDep,
) -> BranchResponse:
    """Open a new branch if the tenant's plan has room for it.

    Raises:
        LicenseLimitExceededError: mapped to 409 by the app.
    """
    try:
        await guard.ensure_can_add_branch(tenant.tenant_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e

    repo = BranchRepository(session, tenant.tenant_id)
    try:
        branch = await repo.create(name=body.name, company_id=body.company_id)
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        raise HTTPException(status_code=409, detail="Branch already exists") from e

    logger.info("branch_created", branch_id=branch.id, tenant_id=str(tenant.tenant_id))
    return BranchResponse.model_validate(branch)


@router.get("/branches/{branch_id}")
async def get_branch(
    branch_id: int,
    tenant: TenantDep,
    session: SessionDep,
    _access: BranchGate,
) -> BranchResponse:
    """Branch details; requires access to that branch."""
    repo = BranchRepository(session, tenant.tenant_id)
    branch = await repo.get_by_id(branch_id)
    if branch is None:
        raise HTTPException(status_code=404, detail="Branch not found")
    return BranchResponse.model_validate(branch)
