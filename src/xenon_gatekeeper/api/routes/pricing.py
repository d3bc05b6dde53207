"""Public pricing endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from xenon_gatekeeper.api.deps import get_pricing_calculator
from xenon_gatekeeper.api.schemas import (
    PlanResponse,
    PricingEstimateRequest,
    PricingEstimateResponse,
)
from xenon_gatekeeper.billing.pricing import PricingCalculator
from xenon_gatekeeper.result import Err

router = APIRouter(tags=["pricing"])

CalculatorDep = Annotated[PricingCalculator, Depends(get_pricing_calculator)]


@router.get("/pricing/plans")
async def list_plans(calculator: CalculatorDep) -> list[PlanResponse]:
    """Plans currently offered, in display order."""
    return [PlanResponse.model_validate(p) for p in calculator.active_plans()]


@router.post("/pricing/estimate")
async def estimate_price(
    body: PricingEstimateRequest,
    calculator: CalculatorDep,
) -> PricingEstimateResponse:
    """Quote a plan for the requested branches, users and billing cycle."""
    result = calculator.estimate(
        body.plan_code,
        branches=body.branches,
        users=body.users,
        cycle=body.billing_cycle,
        currency=body.currency,
    )
    if isinstance(result, Err):
        raise HTTPException(status_code=404, detail=result.message)
    return PricingEstimateResponse.model_validate(result.value)
