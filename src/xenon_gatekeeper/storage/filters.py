"""Row-level tenant filtering for ORM queries.

Every SELECT issued through a ``TenantSession`` gets an extra criterion on
all ``TenantScoped`` entities, taken from ``tenant_context_store``:

- super admin: no filter;
- tenant context: ``tenant_id == <current tenant>``;
- no tenant: ``tenant_id IS NULL`` (matches nothing).
"""

from sqlalchemy import event
from sqlalchemy.orm import ORMExecuteState, Session, with_loader_criteria

from xenon_gatekeeper.auth.context import tenant_context_store
from xenon_gatekeeper.storage.orm import TenantScoped


class TenantSession(Session):
    """Session whose SELECTs are scoped to the current tenant context."""


@event.listens_for(TenantSession, "do_orm_execute")
def _apply_tenant_criteria(execute_state: ORMExecuteState) -> None:
    if not execute_state.is_select or execute_state.is_column_load:
        return

    context = tenant_context_store.get()
    if context.is_super_admin:
        return

    tenant_id = context.tenant_id
    if tenant_id is None:
        criteria = with_loader_criteria(
            TenantScoped,
            lambda cls: cls.tenant_id.is_(None),
            include_aliases=True,
        )
    else:
        criteria = with_loader_criteria(
            TenantScoped,
            lambda cls: cls.tenant_id == tenant_id,
            include_aliases=True,
        )
    execute_state.statement = execute_state.statement.options(criteria)
