"""CLI for tenant, branch and user license management.

Usage::

    uv run python -m scripts.manage_tenant <command> [options]

Commands:
    create-tenant       Create a new tenant with plan limits
    set-limits          Change a tenant's plan and limits
    list-tenants        List all tenants with usage
    add-branch          Add a branch (checked against the plan limit)
    add-user            License a user (checked against the plan limit)
    grant-branch        Allow a user to work in a branch
    show-license        Print a tenant's guardrails
    issue-token         Sign a development access token
"""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Callable
from typing import NoReturn

from sqlalchemy import create_engine, func, select
from sqlalchemy.exc import IntegrityError

from xenon_gatekeeper.auth.claims import (
    SUPER_ADMIN_ROLE,
    TENANT_ID_CLAIM,
    TENANT_REALM,
)
from xenon_gatekeeper.auth.context import TenantContext, tenant_context_store
from xenon_gatekeeper.auth.tokens import create_access_token
from xenon_gatekeeper.config import settings
from xenon_gatekeeper.licensing.guardrails import LicenseGuardrails
from xenon_gatekeeper.masking import mask_email
from xenon_gatekeeper.storage.filters import TenantSession
from xenon_gatekeeper.storage.orm import Branch, Tenant, TenantUser, UserBranch

PLATFORM_CONTEXT = TenantContext(is_super_admin=True)


def get_sync_session() -> TenantSession:
    """Create sync session for CLI operations.

    Uses the same database URL as the async app (psycopg v3
    handles both sync and async natively). Commands run under a
    super-admin context so the tenant filter does not hide rows.
    """
    engine = create_engine(settings.database_url)
    return TenantSession(engine)


def _fail(message: str) -> NoReturn:
    print(message, file=sys.stderr)
    sys.exit(1)


def _get_tenant(session: TenantSession, name: str) -> Tenant:
    tenant = session.execute(
        select(Tenant).where(Tenant.name == name)
    ).scalar_one_or_none()
    if tenant is None:
        _fail(f"Tenant not found: {name}")
    return tenant


def _guardrails(session: TenantSession, tenant: Tenant) -> LicenseGuardrails:
    branches = session.execute(
        select(func.count())
        .select_from(Branch)
        .where(Branch.tenant_id == tenant.id, Branch.is_active.is_(True))
    ).scalar_one()
    users = session.execute(
        select(func.count())
        .select_from(TenantUser)
        .where(TenantUser.tenant_id == tenant.id, TenantUser.is_active.is_(True))
    ).scalar_one()
    return LicenseGuardrails.evaluate(
        max_branches=tenant.max_branches,
        max_users=tenant.max_users,
        current_branches=branches,
        current_users=users,
    )


def create_tenant(args: argparse.Namespace) -> None:
    """Create a new tenant."""
    with get_sync_session() as session:
        existing = session.execute(
            select(Tenant).where(Tenant.name == args.name)
        ).scalar_one_or_none()
        if existing is not None:
            _fail(f"Tenant already exists: {args.name}")

        tenant = Tenant(
            name=args.name,
            plan_code=args.plan,
            max_branches=args.max_branches,
            max_users=args.max_users,
        )
        session.add(tenant)
        session.commit()
        print(f"Tenant created: {args.name} (id: {tenant.id})")
        print(
            f"   Plan: {args.plan}, branches: {args.max_branches}, "
            f"users: {args.max_users}"
        )


def set_limits(args: argparse.Namespace) -> None:
    """Change plan and limits. Existing usage above the new limits is kept."""
    with get_sync_session() as session:
        tenant = _get_tenant(session, args.name)
        if args.plan is not None:
            tenant.plan_code = args.plan
        if args.max_branches is not None:
            tenant.max_branches = args.max_branches
        if args.max_users is not None:
            tenant.max_users = args.max_users
        session.commit()
        print(
            f"Limits updated: {args.name} ({tenant.plan_code}, "
            f"branches: {tenant.max_branches}, users: {tenant.max_users})"
        )


def list_tenants(_args: argparse.Namespace) -> None:
    """List all tenants with branch/user usage."""
    with get_sync_session() as session:
        tenants = session.execute(select(Tenant).order_by(Tenant.name)).scalars().all()

        if not tenants:
            print("No tenants found.")
            return

        print("Tenants:")
        for i, tenant in enumerate(tenants, 1):
            status = "active" if tenant.is_active else "inactive"
            g = _guardrails(session, tenant)
            print(
                f"  {i}. {tenant.name} ({status}, {tenant.plan_code}) "
                f"branches {g.current_branches}/{g.max_branches} "
                f"users {g.current_users}/{g.max_users}"
            )


def add_branch(args: argparse.Namespace) -> None:
    """Add a branch if the tenant's plan has room for it."""
    with get_sync_session() as session:
        tenant = _get_tenant(session, args.tenant)
        if not _guardrails(session, tenant).can_add_branch:
            _fail(
                f"Branch limit reached for {args.tenant} "
                f"({tenant.max_branches}); upgrade the plan first"
            )

        branch = Branch(tenant_id=tenant.id, name=args.name, company_id=args.company_id)
        session.add(branch)
        try:
            session.commit()
        except IntegrityError:
            session.rollback()
            _fail(f"Branch already exists: {args.name}")
        print(f"Branch created: {args.name} (id: {branch.id})")


def add_user(args: argparse.Namespace) -> None:
    """License a user under a tenant if the plan has room."""
    with get_sync_session() as session:
        tenant = _get_tenant(session, args.tenant)
        if not _guardrails(session, tenant).can_add_user:
            _fail(
                f"User limit reached for {args.tenant} "
                f"({tenant.max_users}); upgrade the plan first"
            )

        user = TenantUser(tenant_id=tenant.id, user_id=args.user_id, email=args.email)
        session.add(user)
        try:
            session.commit()
        except IntegrityError:
            session.rollback()
            _fail(f"User already licensed: {args.user_id}")
        email = f" ({mask_email(args.email)})" if args.email else ""
        print(f"User added: {args.user_id}{email} -> {args.tenant}")


def grant_branch(args: argparse.Namespace) -> None:
    """Allow a tenant user to work in one of the tenant's branches."""
    with get_sync_session() as session:
        tenant = _get_tenant(session, args.tenant)
        branch = session.execute(
            select(Branch).where(
                Branch.id == args.branch_id, Branch.tenant_id == tenant.id
            )
        ).scalar_one_or_none()
        if branch is None:
            _fail(f"Branch {args.branch_id} not found in {args.tenant}")

        session.add(
            UserBranch(tenant_id=tenant.id, user_id=args.user_id, branch_id=branch.id)
        )
        try:
            session.commit()
        except IntegrityError:
            session.rollback()
            _fail(f"Grant already exists: {args.user_id} -> {branch.name}")
        print(f"Access granted: {args.user_id} -> {branch.name} (id: {branch.id})")


def show_license(args: argparse.Namespace) -> None:
    """Print guardrails as JSON."""
    with get_sync_session() as session:
        tenant = _get_tenant(session, args.tenant)
        summary = {"tenant": tenant.name, "plan": tenant.plan_code}
        summary.update(_guardrails(session, tenant).to_dict())
        print(json.dumps(summary, indent=2))


def issue_token(args: argparse.Namespace) -> None:
    """Sign an access token for local testing."""
    claims: dict[str, object] = {"sub": args.user_id}
    if args.super_admin:
        claims["role"] = SUPER_ADMIN_ROLE
    else:
        with get_sync_session() as session:
            tenant = _get_tenant(session, args.tenant)
        claims[TENANT_ID_CLAIM] = str(tenant.id)
        claims["realm"] = TENANT_REALM
    if args.email:
        claims["email"] = args.email
    print(create_access_token(claims, settings))


def main() -> None:
    """Parse arguments and dispatch to command handler."""
    parser = argparse.ArgumentParser(description="Tenant license management CLI")
    sub = parser.add_subparsers(dest="command", required=True)

    # create-tenant
    p = sub.add_parser("create-tenant", help="Create a new tenant")
    p.add_argument("--name", required=True, help="Tenant name")
    p.add_argument("--plan", default="starter", help="Plan code")
    p.add_argument("--max-branches", type=int, default=1, help="Branch limit")
    p.add_argument("--max-users", type=int, default=5, help="User limit")

    # set-limits
    p = sub.add_parser("set-limits", help="Change plan and limits")
    p.add_argument("--name", required=True, help="Tenant name")
    p.add_argument("--plan", help="Plan code")
    p.add_argument("--max-branches", type=int, help="Branch limit")
    p.add_argument("--max-users", type=int, help="User limit")

    # list-tenants
    sub.add_parser("list-tenants", help="List all tenants")

    # add-branch
    p = sub.add_parser("add-branch", help="Add a branch to a tenant")
    p.add_argument("--tenant", required=True, help="Tenant name")
    p.add_argument("--name", required=True, help="Branch name")
    p.add_argument("--company-id", type=int, help="Company id")

    # add-user
    p = sub.add_parser("add-user", help="License a user under a tenant")
    p.add_argument("--tenant", required=True, help="Tenant name")
    p.add_argument("--user-id", required=True, help="Identity provider subject")
    p.add_argument("--email", help="User email")

    # grant-branch
    p = sub.add_parser("grant-branch", help="Grant a user access to a branch")
    p.add_argument("--tenant", required=True, help="Tenant name")
    p.add_argument("--user-id", required=True, help="Identity provider subject")
    p.add_argument("--branch-id", type=int, required=True, help="Branch id")

    # show-license
    p = sub.add_parser("show-license", help="Show tenant guardrails")
    p.add_argument("--tenant", required=True, help="Tenant name")

    # issue-token
    p = sub.add_parser("issue-token", help="Sign a development access token")
    p.add_argument("--user-id", required=True, help="Subject claim")
    p.add_argument("--tenant", help="Tenant name")
    p.add_argument("--email", help="Email claim")
    p.add_argument("--super-admin", action="store_true", help="Issue a SuperAdmin token")

    args = parser.parse_args()
    if args.command == "issue-token" and not args.super_admin and not args.tenant:
        parser.error("issue-token needs --tenant unless --super-admin is given")

    commands: dict[str, Callable[[argparse.Namespace], None]] = {
        "create-tenant": create_tenant,
        "set-limits": set_limits,
        "list-tenants": list_tenants,
        "add-branch": add_branch,
        "add-user": add_user,
        "grant-branch": grant_branch,
        "show-license": show_license,
        "issue-token": issue_token,
    }
    with tenant_context_store.scope(PLATFORM_CONTEXT):
        commands[args.command](args)


if __name__ == "__main__":
    main()
