"""Read identity facts from an authenticated principal's claims.

Claims are passed explicitly as a mapping (typically the decoded bearer
token payload). Every reader is a pure projection: missing or malformed
values come back as ``None`` so that only the ``required`` variants decide
whether absence is an authorization failure.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from typing import Any

from xenon_gatekeeper.errors import AccessDeniedError

Claims = Mapping[str, Any]

TENANT_ID_CLAIM = "tenant_id"
COMPANY_ID_CLAIM = "company_id"
EMAIL_CLAIM = "email"
REALM_CLAIM = "realm"
# Checked in order; "nameid" is the short JWT name of the NameIdentifier claim.
USER_ID_CLAIMS: tuple[str, ...] = ("nameid", "sub")
ROLE_CLAIMS: tuple[str, ...] = ("role", "roles")

PLATFORM_ADMIN_REALM = "platform-admin"
TENANT_REALM = "tenant"
SUPER_ADMIN_ROLE = "SuperAdmin"


def _get_str(claims: Claims, key: str) -> str | None:
    value = claims.get(key)
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def get_tenant_id(claims: Claims) -> uuid.UUID | None:
    """Tenant id claim as a UUID, or None if absent or unparsable."""
    raw = _get_str(claims, TENANT_ID_CLAIM)
    if raw is None:
        return None
    try:
        return uuid.UUID(raw)
    except ValueError:
        return None


def get_required_tenant_id(claims: Claims) -> uuid.UUID:
    """Tenant id claim as a UUID.

    Raises:
        AccessDeniedError: if the claim is absent or not a valid UUID.
    """
    tenant_id = get_tenant_id(claims)
    if tenant_id is None:
        raise AccessDeniedError("Tenant ID not found in claims")
    return tenant_id


def get_user_id(claims: Claims) -> str | None:
    for key in USER_ID_CLAIMS:
        value = _get_str(claims, key)
        if value is not None:
            return value
    return None


def get_email(claims: Claims) -> str | None:
    return _get_str(claims, EMAIL_CLAIM)


def get_realm(claims: Claims) -> str | None:
    return _get_str(claims, REALM_CLAIM)


def get_company_id(claims: Claims) -> int | None:
    raw = _get_str(claims, COMPANY_ID_CLAIM)
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


def get_roles(claims: Claims) -> frozenset[str]:
    """All role names, whether issued as a single string or a list."""
    roles: set[str] = set()
    for key in ROLE_CLAIMS:
        value = claims.get(key)
        if isinstance(value, str):
            roles.add(value)
        elif isinstance(value, list | tuple | set | frozenset):
            roles.update(str(v) for v in value)
    return frozenset(roles)


def is_platform_admin(claims: Claims) -> bool:
    return get_realm(claims) == PLATFORM_ADMIN_REALM


def is_tenant_user(claims: Claims) -> bool:
    return get_realm(claims) == TENANT_REALM


def is_super_admin(claims: Claims) -> bool:
    return is_platform_admin(claims) or SUPER_ADMIN_ROLE in get_roles(claims)
