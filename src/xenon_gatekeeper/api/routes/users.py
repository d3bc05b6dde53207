"""Licensed users of the caller's tenant."""

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
from xenon_gatekeeper.api.schemas import TenantUserCreateRequest, TenantUserResponse
from xenon_gatekeeper.auth.context import TenantCaller
from xenon_gatekeeper.licensing.service import LicenseGuardService
from xenon_gatekeeper.masking import mask_email
from xenon_gatekeeper.storage.repositories import TenantUserRepository

logger = structlog.get_logger()

router = APIRouter(tags=["users"])

SessionDep = Annotated[AsyncSession, Depends(get_session)]
TenantDep = Annotated[TenantCaller, Depends(require_tenant)]
GuardDep = Annotated[LicenseGuardService, Depends(get_license_guard_service)]

USER_EXISTS = "User already licensed"


@router.post("/users", status_code=201)
async def add_tenant_user(
    body: TenantUserCreateRequest,
    tenant: TenantDep,
    session: SessionDep,
    guard: GuardDep,
) -> TenantUserResponse:
    """License a user under the caller's tenant if the plan has room.

    Raises:
        LicenseLimitExceededError: mapped to 409 by the app.
    """
    repo = TenantUserRepository(session, tenant.tenant_id)
    if await repo.get_by_user_id(body.user_id) is not None:
        raise HTTPException(status_code=409, detail=USER_EXISTS)

    try:
        await guard.ensure_can_add_user(tenant.tenant_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e

    try:
        user = await repo.create(user_id=body.user_id, email=body.email)
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        raise HTTPException(status_code=409, detail=USER_EXISTS) from e

    logger.info(
        "tenant_user_added",
        user_id=body.user_id,
        email=mask_email(body.email),
        tenant_id=str(tenant.tenant_id),
    )
    return TenantUserResponse.model_validate(user)
