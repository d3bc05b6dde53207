"""Tenant context for request processing.

``TenantContext`` is the resolved identity of the caller. Request handlers
receive it explicitly through a FastAPI dependency. ``tenant_context_store``
additionally exposes it to the data layer (see ``storage.filters``); it is
backed by a ContextVar, so every request task sees only its own value.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass

from xenon_gatekeeper.auth.claims import (
    Claims,
    get_company_id,
    get_tenant_id,
    get_user_id,
    is_super_admin,
)


@dataclass(frozen=True)
class TenantContext:
    """Resolved tenant identity of the current request."""

    tenant_id: uuid.UUID | None = None
    company_id: int | None = None
    is_super_admin: bool = False
    user_id: str | None = None

    @classmethod
    def anonymous(cls) -> TenantContext:
        return cls()

    @classmethod
    def from_claims(cls, claims: Claims) -> TenantContext:
        return cls(
            tenant_id=get_tenant_id(claims),
            company_id=get_company_id(claims),
            is_super_admin=is_super_admin(claims),
            user_id=get_user_id(claims),
        )

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None or self.tenant_id is not None


@dataclass(frozen=True)
class TenantCaller:
    """Authenticated caller whose token names a valid tenant."""

    tenant_id: uuid.UUID
    user_id: str | None = None
    company_id: int | None = None
    is_super_admin: bool = False


ANONYMOUS = TenantContext.anonymous()


class TenantContextStore:
    """Per-request holder of the current TenantContext.

    Prefer :meth:`scope`, which restores the previous state on every exit
    path. ``set``/``clear`` are available for callers that manage the
    lifetime themselves.
    """

    def __init__(self, name: str = "tenant_context") -> None:
        self._var: ContextVar[TenantContext] = ContextVar(name, default=ANONYMOUS)

    def get(self) -> TenantContext:
        return self._var.get()

    def set(self, context: TenantContext) -> Token[TenantContext]:
        return self._var.set(context)

    def clear(self, token: Token[TenantContext] | None = None) -> None:
        """Drop the current context.

        With a token from :meth:`set`, the state before that call is
        restored; without one, the anonymous context is installed.
        """
        if token is not None:
            self._var.reset(token)
        else:
            self._var.set(ANONYMOUS)

    @contextmanager
    def scope(self, context: TenantContext) -> Iterator[TenantContext]:
        token = self.set(context)
        try:
            yield context
        finally:
            self.clear(token)


tenant_context_store = TenantContextStore()
