"""IP block list administration (platform admins only)."""

from datetime import timedelta
from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, HTTPException

from xenon_gatekeeper.api.deps import (
    get_ip_blocklist,
    get_security_monitor,
    require_platform_admin,
)
from xenon_gatekeeper.api.schemas import (
    BlockedIpResponse,
    BlockIpRequest,
    IpStatusResponse,
)
from xenon_gatekeeper.auth.context import TenantContext
from xenon_gatekeeper.security.abuse import SecurityEventMonitor
from xenon_gatekeeper.security.blocklist import InMemoryIpBlocklist

logger = structlog.get_logger()

router = APIRouter(tags=["security"])

AdminDep = Annotated[TenantContext, Depends(require_platform_admin)]
BlocklistDep = Annotated[InMemoryIpBlocklist, Depends(get_ip_blocklist)]
MonitorDep = Annotated[SecurityEventMonitor, Depends(get_security_monitor)]


@router.get("/security/blocked-ips")
async def list_blocked_ips(
    admin: AdminDep,
    blocklist: BlocklistDep,
) -> list[BlockedIpResponse]:
    """Currently blocked addresses, oldest first."""
    return [BlockedIpResponse.model_validate(e) for e in blocklist.entries()]


@router.post("/security/blocked-ips", status_code=201)
async def block_ip(
    body: BlockIpRequest,
    admin: AdminDep,
    blocklist: BlocklistDep,
) -> BlockedIpResponse:
    """Block an address, optionally for a limited time."""
    duration = (
        timedelta(minutes=body.duration_minutes)
        if body.duration_minutes is not None
        else None
    )
    entry = blocklist.block(body.ip, body.reason, duration)
    logger.warning(
        "ip_blocked_manually",
        ip=body.ip,
        reason=body.reason,
        admin_user_id=admin.user_id,
    )
    return BlockedIpResponse.model_validate(entry)


@router.delete("/security/blocked-ips/{ip}", status_code=204)
async def unblock_ip(ip: str, admin: AdminDep, blocklist: BlocklistDep) -> None:
    """Remove an address from the block list."""
    if not blocklist.unblock(ip):
        raise HTTPException(status_code=404, detail="IP not blocked")
    logger.info("ip_unblocked", ip=ip, admin_user_id=admin.user_id)


@router.get("/security/ips/{ip}")
async def get_ip_status(
    ip: str,
    admin: AdminDep,
    blocklist: BlocklistDep,
    monitor: MonitorDep,
) -> IpStatusResponse:
    """Block status and recent authentication failures for an address."""
    return IpStatusResponse(
        ip=ip,
        is_blocked=blocklist.is_blocked(ip),
        recent_failures=monitor.failure_count(ip),
    )
