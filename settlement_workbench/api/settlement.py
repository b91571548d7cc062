"""Settlement computation API endpoints.

Stateless endpoints over the calculator, the mixed-ratio solver and the
narrative fallback policy. Each request carries everything it needs.
"""

from decimal import Decimal
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from settlement_workbench.api.deps import (
    get_narrative_breaker,
    get_narrative_fallback,
    get_narrative_provider,
)
from settlement_workbench.core.logging import get_logger, settlement_context
from settlement_workbench.narrative.models import NarrativeRequest, NarrativeSource
from settlement_workbench.narrative.policy import resolve_narrative
from settlement_workbench.narrative.provider import FallbackNarrativeProvider, NarrativeProvider
from settlement_workbench.orchestration.circuit_breaker import CircuitBreaker
from settlement_workbench.settlement.calculator import compute_financials
from settlement_workbench.settlement.ledger import itemize_deductions
from settlement_workbench.settlement.models import (
    DeductionItem,
    DeductionMode,
    DeductionType,
    EstimationParameters,
    EstimationScenario,
)
from settlement_workbench.settlement.solver import (
    infer_ratio_from_general_amount,
    infer_ratio_from_special_amount,
)
from settlement_workbench.settlement.tax_rates import is_permitted_rate

logger = get_logger(__name__)

router = APIRouter(prefix="/api/settlement", tags=["settlement"])


class FinancialsRequest(BaseModel):
    """Payload for computing derived financials."""

    settlement_amount: Decimal
    deductions: list[DeductionItem] = Field(default_factory=list)
    deduction_mode: DeductionMode = DeductionMode.ESTIMATED
    estimation_scenario: EstimationScenario = EstimationScenario.SPECIAL
    params: EstimationParameters = Field(default_factory=EstimationParameters)


class DeductionLineResponse(BaseModel):
    """One itemized deduction."""

    id: str
    label: str
    type: DeductionType
    value: Decimal
    is_active: bool
    applied_amount: Decimal


class FinancialsResponse(BaseModel):
    """Derived financials with the itemized deduction breakdown."""

    total_deductions: Decimal
    base_payable: Decimal
    total_input_tax_deduction: Decimal
    invoice_total: Decimal
    special_amt: Decimal
    general_amt: Decimal
    net_payable: Decimal
    deductions: list[DeductionLineResponse]


class MixedRatioRequest(BaseModel):
    """Payload for inferring the mixed ratio from an edited amount."""

    edited: Literal["special", "general"]
    amount: Decimal
    base_payable: Decimal
    tax_rate: Decimal = Decimal("0.06")
    current_ratio: Decimal = Field(default=Decimal("0.5"), ge=0, le=1)


class MixedRatioResponse(BaseModel):
    """Inferred ratio; `updated` is false when the current ratio was kept."""

    mixed_special_ratio: Decimal
    updated: bool


class NarrativeResponse(BaseModel):
    """Audit narrative and where it came from."""

    text: str
    source: NarrativeSource


@router.post("/financials", response_model=FinancialsResponse)
async def calculate_financials(payload: FinancialsRequest) -> FinancialsResponse:
    """Compute derived financials for a settlement."""
    if not is_permitted_rate(payload.params.tax_rate):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Tax rate {payload.params.tax_rate} is not permitted",
        )

    financials = compute_financials(
        payload.settlement_amount,
        payload.deductions,
        payload.deduction_mode,
        payload.estimation_scenario,
        payload.params,
    )
    lines = itemize_deductions(payload.settlement_amount, payload.deductions)
    return FinancialsResponse(
        **financials.to_dict(),
        deductions=[DeductionLineResponse(**vars(line)) for line in lines],
    )


@router.post("/mixed-ratio", response_model=MixedRatioResponse)
async def infer_mixed_ratio(payload: MixedRatioRequest) -> MixedRatioResponse:
    """Infer the mixed special ratio from an edited special or general amount."""
    if payload.edited == "special":
        ratio = infer_ratio_from_special_amount(
            payload.amount, payload.base_payable, payload.tax_rate
        )
    else:
        ratio = infer_ratio_from_general_amount(payload.amount, payload.base_payable)

    if ratio is None:
        return MixedRatioResponse(mixed_special_ratio=payload.current_ratio, updated=False)
    return MixedRatioResponse(mixed_special_ratio=ratio, updated=True)


@router.post("/narrative", response_model=NarrativeResponse)
async def generate_narrative(
    payload: NarrativeRequest,
    provider: NarrativeProvider = Depends(get_narrative_provider),
    breaker: CircuitBreaker | None = Depends(get_narrative_breaker),
    fallback: FallbackNarrativeProvider | None = Depends(get_narrative_fallback),
) -> NarrativeResponse:
    """Write the audit narrative, falling back to the standard text on failure."""
    with settlement_context(payload.settlement.settlement_no):
        result = await resolve_narrative(payload, provider, breaker, fallback)
        logger.info("narrative_served", source=result.source.value)
    return NarrativeResponse(text=result.text, source=result.source)
