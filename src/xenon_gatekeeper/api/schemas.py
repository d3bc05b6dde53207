"""Request/response schemas for the API layer."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from xenon_gatekeeper.billing.plans import PlanCode
from xenon_gatekeeper.billing.pricing import BillingCycle, Currency

# --- License ---


class LicenseSummaryResponse(BaseModel):
    """Capacity of the current tenant versus its plan limits.

    Usage percentages are not capped: a tenant above its limit reports
    more than 100.
    """

    model_config = ConfigDict(from_attributes=True)

    max_branches: int
    max_users: int
    current_branches: int
    current_users: int
    can_add_branch: bool
    can_add_user: bool
    remaining_branches: int
    remaining_users: int
    branch_usage_percent: float
    user_usage_percent: float


# --- Pricing ---


class PlanResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    code: PlanCode
    name: str
    description: str
    monthly_price: Decimal
    annual_price: Decimal
    included_branches: int
    included_users: int
    extra_branch_price: Decimal
    extra_user_price: Decimal
    features: list[str]
    support_level: str
    is_recommended: bool


class PricingEstimateRequest(BaseModel):
    """Request body for POST /pricing/estimate."""

    plan_code: PlanCode
    branches: int = Field(default=1, ge=0, le=10_000)
    users: int = Field(default=1, ge=0, le=100_000)
    billing_cycle: BillingCycle = BillingCycle.MONTHLY
    currency: Currency = Currency.AED


class LineItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    label: str
    amount: Decimal
    is_discount: bool


class PricingEstimateResponse(BaseModel):
    """Quote for a plan configuration. Amounts are in ``currency``."""

    model_config = ConfigDict(from_attributes=True)

    plan_code: PlanCode
    plan_name: str
    billing_cycle: BillingCycle
    currency: Currency
    months: int
    branches: int
    users: int
    included_branches: int
    included_users: int
    extra_branches: int
    extra_users: int
    base_price: Decimal
    extra_branches_price: Decimal
    extra_users_price: Decimal
    subtotal: Decimal
    discount_percent: Decimal
    discount_amount: Decimal
    total: Decimal
    monthly_equivalent: Decimal
    breakdown: list[LineItemResponse]


# --- Branches ---


class BranchCreateRequest(BaseModel):
    """Request body for POST /branches."""

    name: str = Field(..., min_length=1, max_length=200)
    company_id: int | None = None


class BranchResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    company_id: int | None
    is_active: bool


# --- Tenant users ---


class TenantUserCreateRequest(BaseModel):
    """Request body for POST /users."""

    user_id: str = Field(..., min_length=1, max_length=200)
    email: str | None = Field(default=None, max_length=320)


class TenantUserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    email: str | None
    is_active: bool


# --- Security ---

MAX_BLOCK_MINUTES = 525_600


class BlockIpRequest(BaseModel):
    """Request body for POST /security/blocked-ips."""

    ip: str = Field(..., min_length=1, max_length=64)
    reason: str = Field(default="manual", min_length=1, max_length=100)
    duration_minutes: int | None = Field(
        default=None,
        ge=1,
        le=MAX_BLOCK_MINUTES,
        description="Block lifetime (at most one year); omit to block until removed.",
    )


class BlockedIpResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    ip: str
    reason: str
    blocked_at: datetime
    expires_at: datetime | None


class IpStatusResponse(BaseModel):
    ip: str
    is_blocked: bool
    recent_failures: int
