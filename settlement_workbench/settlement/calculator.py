"""Settlement financial computation.

Pure functions that turn a settlement amount, its deductions and the
input-tax simulation settings into the derived figures shown on the
settlement document:
- compute_financials: base payable, invoice mix, input-tax credit, net payable
- gross_up / extract_tax: tax-inclusive amount and its tax component
- split_mixed_base: exact special/general split of the base payable

All functions use Decimal arithmetic with no side effects or LLM calls.
Results are not rounded; quantize_currency is for presentation only.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import asdict, dataclass
from decimal import ROUND_HALF_UP, Decimal, localcontext

from settlement_workbench.settlement.ledger import total_deductions
from settlement_workbench.settlement.models import (
    DeductionItem,
    DeductionMode,
    EstimationParameters,
    EstimationScenario,
)

_ZERO = Decimal("0")
_ONE = Decimal("1")
_CENT = Decimal("0.01")


# =============================================================================
# Result
# =============================================================================


@dataclass(frozen=True)
class DerivedFinancials:
    """Figures derived from a settlement; recomputed, never stored.

    Attributes:
        total_deductions: Sum of active deductions.
        base_payable: Settlement amount less deductions, floored at zero.
        total_input_tax_deduction: Simulated input-tax credit.
        invoice_total: Face value of all invoices the vendor returns.
        special_amt: Tax-inclusive special (creditable) invoice amount.
        general_amt: General (non-creditable) invoice amount.
        net_payable: base_payable + total_input_tax_deduction.
    """

    total_deductions: Decimal
    base_payable: Decimal
    total_input_tax_deduction: Decimal
    invoice_total: Decimal
    special_amt: Decimal
    general_amt: Decimal
    net_payable: Decimal

    def to_dict(self) -> dict[str, Decimal]:
        """Serialize for API responses and narrative requests."""
        return asdict(self)


# =============================================================================
# Tax helpers
# =============================================================================


def gross_up(amount: Decimal, tax_rate: Decimal) -> Decimal:
    """Tax-inclusive amount for a tax-exclusive base."""
    return amount * (_ONE + tax_rate)


def extract_tax(tax_inclusive: Decimal, tax_rate: Decimal) -> Decimal:
    """Tax component contained in a tax-inclusive amount."""
    return tax_inclusive / (_ONE + tax_rate) * tax_rate


def split_mixed_base(base_payable: Decimal, ratio: Decimal) -> tuple[Decimal, Decimal]:
    """Split the base payable into special and general portions.

    The general portion is the remainder of a single subtraction, so the
    two parts always add back to base_payable.

    Returns:
        (base_from_special, base_from_general)
    """
    base_from_special = base_payable * ratio
    return base_from_special, base_payable - base_from_special


def quantize_currency(amount: Decimal) -> Decimal:
    """Round an amount to cents for display.

    Works for amounts of any magnitude; non-finite values are returned as is.
    """
    if not amount.is_finite():
        return amount
    with localcontext() as ctx:
        # integer digits, two decimals and a possible rounding carry
        ctx.prec = max(ctx.prec, amount.adjusted() + 4)
        return amount.quantize(_CENT, rounding=ROUND_HALF_UP)


# =============================================================================
# compute_financials
# =============================================================================


def compute_financials(
    settlement_amount: Decimal,
    deductions: Iterable[DeductionItem],
    deduction_mode: DeductionMode,
    estimation_scenario: EstimationScenario,
    params: EstimationParameters,
) -> DerivedFinancials:
    """Compute the derived financials of a settlement.

    In ACTUAL mode, input-tax credit is left to reconciliation against real
    invoices and every invoice figure is zero. In ESTIMATED mode the base
    payable is invoiced according to the scenario:

    - SPECIAL: the whole base on special invoices, grossed up by the rate.
    - GENERAL: the whole base on general invoices, no credit.
    - MIXED: mixed_special_ratio of the base on special invoices, the
      remainder on general invoices.

    The credit is the tax component extracted from the special amount.

    Args:
        settlement_amount: Amount settled this period.
        deductions: Deduction items; inactive ones are ignored.
        deduction_mode: ACTUAL or ESTIMATED.
        estimation_scenario: Invoice mix used in ESTIMATED mode.
        params: Tax rate and mixed ratio.

    Returns:
        DerivedFinancials with every figure populated.
    """
    deducted = total_deductions(settlement_amount, deductions)
    base_payable = max(_ZERO, settlement_amount - deducted)
    tax_rate = params.tax_rate

    special_amt = _ZERO
    general_amt = _ZERO
    input_tax = _ZERO
    invoice_total = _ZERO

    if deduction_mode == DeductionMode.ESTIMATED:
        if estimation_scenario == EstimationScenario.SPECIAL:
            special_amt = gross_up(base_payable, tax_rate)
            input_tax = extract_tax(special_amt, tax_rate)
            invoice_total = special_amt
        elif estimation_scenario == EstimationScenario.GENERAL:
            general_amt = base_payable
            invoice_total = general_amt
        elif estimation_scenario == EstimationScenario.MIXED:
            base_from_special, base_from_general = split_mixed_base(
                base_payable, params.mixed_special_ratio
            )
            special_amt = gross_up(base_from_special, tax_rate)
            general_amt = base_from_general
            input_tax = extract_tax(special_amt, tax_rate)
            invoice_total = special_amt + general_amt

    return DerivedFinancials(
        total_deductions=deducted,
        base_payable=base_payable,
        total_input_tax_deduction=input_tax,
        invoice_total=invoice_total,
        special_amt=special_amt,
        general_amt=general_amt,
        net_payable=base_payable + input_tax,
    )
