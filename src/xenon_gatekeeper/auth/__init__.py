"""Identity, tenant context and branch access.

Note: ``require_branch_access`` lives in ``auth.branch_gate`` and is NOT
re-exported here to avoid a circular import (auth → branch_gate → api.deps
→ auth). Import directly:
``from xenon_gatekeeper.auth.branch_gate import require_branch_access``.
"""

from xenon_gatekeeper.auth.context import (
    TenantContext,
    TenantContextStore,
    tenant_context_store,
)

__all__ = ["TenantContext", "TenantContextStore", "tenant_context_store"]
