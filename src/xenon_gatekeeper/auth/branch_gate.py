"""Branch authorization dependency.

Add to any route that receives a branch identifier::

    @router.get("/branches/{branch_id}/stock")
    async def stock(branch_id: int, _: BranchGate) -> ...: ...

The branch id is taken from the ``branch_id`` path parameter or the
``branchId`` / ``branch_id`` query parameter. Requests without one pass
through untouched.
"""

from __future__ import annotations

from typing import Annotated

import structlog
from fastapi import Depends, HTTPException, Request

from xenon_gatekeeper.api.deps import get_branch_access_checker, get_tenant_context
from xenon_gatekeeper.auth.branches import BranchAccessChecker
from xenon_gatekeeper.auth.context import TenantContext

logger = structlog.get_logger()

BRANCH_PARAM_NAMES: tuple[str, ...] = ("branch_id", "branchId")

_checker_dep = Depends(get_branch_access_checker)
_context_dep = Depends(get_tenant_context)


def _requested_branch(request: Request) -> str | None:
    for name in BRANCH_PARAM_NAMES:
        value = request.path_params.get(name)
        if value is None:
            value = request.query_params.get(name)
        if value is not None and str(value).strip():
            return str(value).strip()
    return None


async def require_branch_access(
    request: Request,
    context: TenantContext = _context_dep,
    checker: BranchAccessChecker = _checker_dep,
) -> int | None:
    """Reject the request unless the caller may access the requested branch.

    Returns:
        The requested branch id, or None when the request names no branch.

    Raises:
        HTTPException 403: branch id is malformed or access is denied.
    """
    raw = _requested_branch(request)
    if raw is None:
        return None

    try:
        branch_id: int | None = int(raw)
    except ValueError:
        branch_id = None

    if branch_id is None or not await checker.has_access_to_branch(branch_id):
        logger.warning(
            "branch_access_denied",
            branch_id=raw,
            tenant_id=str(context.tenant_id) if context.tenant_id else None,
            user_id=context.user_id,
            path=request.url.path,
        )
        raise HTTPException(status_code=403, detail="Forbidden")

    return branch_id


BranchGate = Annotated[int | None, Depends(require_branch_access)]
