"""Domain-specific exceptions for xenon-gatekeeper."""

from __future__ import annotations

import uuid


class AccessDeniedError(Exception):
    """The caller is not authorized for the requested resource.

    The message is for logs only; responses always carry a generic body.
    """


class LicenseLimitExceededError(Exception):
    """Tenant has reached a licensed capacity limit."""

    def __init__(self, tenant_id: uuid.UUID, resource: str, limit: int) -> None:
        self.tenant_id = tenant_id
        self.resource = resource
        self.limit = limit
        super().__init__(
            f"Tenant {tenant_id} reached the {resource} limit of its plan ({limit})"
        )
