"""Subscription price estimates.

A quote is computed from a plan, the requested branch/user counts and a
billing cycle:

    base      = monthly price x months
    extras    = max(0, requested - included) x unit price x months
    subtotal  = base + extra branches + extra users
    discount  = subtotal x cycle discount
    total     = subtotal - discount

Amounts are converted from the catalog currency (AED) at fixed rates and
rounded to two decimals.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import StrEnum

from xenon_gatekeeper.billing.plans import Plan, PlanCatalog, PlanCode
from xenon_gatekeeper.result import Err, Ok, Result

CENTS = Decimal("0.01")


class BillingCycle(StrEnum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    SEMI_ANNUAL = "semi_annual"
    ANNUAL = "annual"


class Currency(StrEnum):
    AED = "AED"
    USD = "USD"


CYCLE_MONTHS: dict[BillingCycle, int] = {
    BillingCycle.MONTHLY: 1,
    BillingCycle.QUARTERLY: 3,
    BillingCycle.SEMI_ANNUAL: 6,
    BillingCycle.ANNUAL: 12,
}

CYCLE_DISCOUNT_PERCENT: dict[BillingCycle, Decimal] = {
    BillingCycle.MONTHLY: Decimal("0"),
    BillingCycle.QUARTERLY: Decimal("5"),
    BillingCycle.SEMI_ANNUAL: Decimal("10"),
    BillingCycle.ANNUAL: Decimal("15"),
}

# Units of the target currency per 1 AED.
EXCHANGE_RATES: dict[Currency, Decimal] = {
    Currency.AED: Decimal("1"),
    Currency.USD: Decimal("0.27"),
}

CYCLE_LABELS: dict[BillingCycle, str] = {
    BillingCycle.MONTHLY: "Monthly",
    BillingCycle.QUARTERLY: "Quarterly",
    BillingCycle.SEMI_ANNUAL: "Semi-annual",
    BillingCycle.ANNUAL: "Annual",
}


def _round(amount: Decimal) -> Decimal:
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def _months_label(months: int) -> str:
    return "1 month" if months == 1 else f"{months} months"


@dataclass(frozen=True)
class LineItem:
    label: str
    amount: Decimal
    is_discount: bool = False


@dataclass(frozen=True)
class PricingEstimate:
    """Computed quote for a plan configuration."""

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
    breakdown: tuple[LineItem, ...]


class PricingCalculator:
    """Quote subscription prices from the plan catalog."""

    def __init__(self, catalog: PlanCatalog) -> None:
        self._catalog = catalog

    def active_plans(self) -> list[Plan]:
        return self._catalog.active_plans()

    def estimate(
        self,
        plan_code: PlanCode,
        branches: int,
        users: int,
        cycle: BillingCycle = BillingCycle.MONTHLY,
        currency: Currency = Currency.AED,
    ) -> Result[PricingEstimate]:
        """Quote *plan_code* for the requested capacity.

        Returns ``Err`` when the plan is unknown or no longer offered, or
        when a requested count is negative.
        """
        if branches < 0 or users < 0:
            return Err("Branches and users must be non-negative")

        plan = self._catalog.get_active(plan_code)
        if plan is None:
            return Err(f"Plan not found: {plan_code}")

        months = CYCLE_MONTHS[cycle]
        rate = EXCHANGE_RATES[currency]
        discount_percent = CYCLE_DISCOUNT_PERCENT[cycle]

        extra_branches = max(0, branches - plan.included_branches)
        extra_users = max(0, users - plan.included_users)

        base_price = _round(plan.monthly_price * months * rate)
        extra_branches_price = _round(
            plan.extra_branch_price * extra_branches * months * rate
        )
        extra_users_price = _round(plan.extra_user_price * extra_users * months * rate)
        subtotal = base_price + extra_branches_price + extra_users_price
        discount_amount = _round(subtotal * discount_percent / 100)
        total = subtotal - discount_amount
        monthly_equivalent = _round(total / months)

        period = _months_label(months)
        breakdown = [LineItem(f"{plan.name} Plan ({period})", base_price)]
        if extra_branches:
            breakdown.append(
                LineItem(
                    f"Extra Branches ({extra_branches} x {period})",
                    extra_branches_price,
                )
            )
        if extra_users:
            breakdown.append(
                LineItem(f"Extra Users ({extra_users} x {period})", extra_users_price)
            )
        if discount_amount:
            breakdown.append(
                LineItem(
                    f"{CYCLE_LABELS[cycle]} discount ({discount_percent}%)",
                    -discount_amount,
                    is_discount=True,
                )
            )

        return Ok(
            PricingEstimate(
                plan_code=plan_code,
                plan_name=plan.name,
                billing_cycle=cycle,
                currency=currency,
                months=months,
                branches=branches,
                users=users,
                included_branches=plan.included_branches,
                included_users=plan.included_users,
                extra_branches=extra_branches,
                extra_users=extra_users,
                base_price=base_price,
                extra_branches_price=extra_branches_price,
                extra_users_price=extra_users_price,
                subtotal=subtotal,
                discount_percent=discount_percent,
                discount_amount=discount_amount,
                total=total,
                monthly_equivalent=monthly_equivalent,
                breakdown=tuple(breakdown),
            )
        )
