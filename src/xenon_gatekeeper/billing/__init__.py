"""Plan catalog and subscription pricing."""

from xenon_gatekeeper.billing.plans import Plan, PlanCatalog, PlanCode, load_plan_catalog
from xenon_gatekeeper.billing.pricing import (
    BillingCycle,
    Currency,
    PricingCalculator,
    PricingEstimate,
)

__all__ = [
    "BillingCycle",
    "Currency",
    "Plan",
    "PlanCatalog",
    "PlanCode",
    "PricingCalculator",
    "PricingEstimate",
    "load_plan_catalog",
]
