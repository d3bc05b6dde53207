"""Subscription plan catalog.

Loaded from config/plans.yaml at startup, validated by Pydantic.
New plan or price change = YAML edit, no code changes.
"""

from decimal import Decimal
from enum import StrEnum
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, model_validator


class PlanCode(StrEnum):
    STARTER = "starter"
    GROWTH = "growth"
    ENTERPRISE = "enterprise"


class Plan(BaseModel):
    """Single plan definition. Prices are monthly, in the base currency."""

    code: PlanCode | None = None  # populated from dict key during validation
    name: str
    description: str = ""
    monthly_price: Decimal = Field(ge=0)
    annual_price: Decimal = Field(ge=0)
    included_branches: int = Field(ge=0)
    included_users: int = Field(ge=0)
    extra_branch_price: Decimal = Field(ge=0)
    extra_user_price: Decimal = Field(ge=0)
    features: list[str] = []
    support_level: str = ""
    is_active: bool = True
    is_recommended: bool = False
    sort_order: int = 0


class PlanCatalog(BaseModel):
    """Top-level catalog: plan code -> plan.

    Validates that at most one active plan is marked as recommended.
    """

    plans: dict[PlanCode, Plan]

    @model_validator(mode="after")
    def validate_plans(self) -> "PlanCatalog":
        """Populate plan codes and check the recommended flag."""
        for code, plan in self.plans.items():
            plan.code = code

        recommended = [
            str(p.code) for p in self.plans.values() if p.is_active and p.is_recommended
        ]
        if len(recommended) > 1:
            raise ValueError(
                f"At most one active plan can be recommended, got: {recommended}"
            )
        return self

    def get_active(self, code: PlanCode) -> Plan | None:
        """Return the plan if it exists and is offered."""
        plan = self.plans.get(code)
        if plan is None or not plan.is_active:
            return None
        return plan

    def active_plans(self) -> list[Plan]:
        """Offered plans in display order."""
        return sorted(
            (p for p in self.plans.values() if p.is_active),
            key=lambda p: p.sort_order,
        )


def load_plan_catalog(config_path: Path) -> PlanCatalog:
    """Load and validate the plan catalog from YAML.

    Args:
        config_path: Path to plans.yaml. Typically comes from
            Settings.plan_catalog_path.

    Raises:
        FileNotFoundError: if YAML file doesn't exist.
        ValueError: if YAML parsing or validation fails.
    """
    if not config_path.exists():
        raise FileNotFoundError(f"Plan catalog not found: {config_path}")

    try:
        raw = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ValueError(f"Failed to parse plan catalog '{config_path}': {e}") from e
    return PlanCatalog.model_validate(raw)
