"""Deduction ledger: aggregate and itemize settlement deductions.

Pure functions with no validation of signs; the workbench UI is
responsible for input sanity.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from settlement_workbench.settlement.models import DeductionItem, DeductionType

_ZERO = Decimal("0")


@dataclass
class DeductionLine:
    """One row of the itemized deduction breakdown.

    Attributes:
        id: Deduction identifier.
        label: Display label.
        type: Rate-based or fixed.
        value: Configured rate fraction or fixed amount.
        is_active: Whether the deduction applies.
        applied_amount: Currency amount deducted (0 when inactive).
    """

    id: str
    label: str
    type: DeductionType
    value: Decimal
    is_active: bool
    applied_amount: Decimal


def deduction_amount(amount: Decimal, item: DeductionItem) -> Decimal:
    """Currency amount a single deduction takes from the settlement amount."""
    if not item.is_active:
        return _ZERO
    if item.type == DeductionType.RATE:
        return amount * item.value
    return item.value


def total_deductions(amount: Decimal, items: Iterable[DeductionItem]) -> Decimal:
    """Sum the active deductions against a settlement amount.

    Args:
        amount: Settlement amount rate-based items apply to.
        items: Deduction items in any order.

    Returns:
        Total deducted amount.
    """
    return sum((deduction_amount(amount, item) for item in items), _ZERO)


def itemize_deductions(
    amount: Decimal, items: Iterable[DeductionItem]
) -> list[DeductionLine]:
    """Break deductions down per item, preserving insertion order.

    Inactive items are kept with an applied amount of zero.
    """
    return [
        DeductionLine(
            id=item.id,
            label=item.label,
            type=item.type,
            value=item.value,
            is_active=item.is_active,
            applied_amount=deduction_amount(amount, item),
        )
        for item in items
    ]
