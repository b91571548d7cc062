"""Reverse solver for the mixed invoice ratio.

When a user edits the special or general invoice amount in MIXED mode,
these functions infer the mixed_special_ratio that reproduces it, so the
ratio remains the single source of truth. Out-of-range amounts saturate
the ratio at 0 or 1. A degenerate base payable yields None and the caller
keeps its current ratio.
"""

from __future__ import annotations

from decimal import Decimal

_ZERO = Decimal("0")
_ONE = Decimal("1")


def _clamp_ratio(ratio: Decimal) -> Decimal:
    return min(_ONE, max(_ZERO, ratio))


def infer_ratio_from_special_amount(
    special_amt: Decimal, base_payable: Decimal, tax_rate: Decimal
) -> Decimal | None:
    """Infer the mixed ratio from a tax-inclusive special invoice amount.

    Args:
        special_amt: Desired special invoice amount, tax included.
        base_payable: Current base payable.
        tax_rate: Rate used to strip the tax component.

    Returns:
        Ratio clamped to [0, 1], or None when base_payable <= 0.
    """
    if base_payable <= _ZERO:
        return None
    base_from_special = special_amt / (_ONE + tax_rate)
    return _clamp_ratio(base_from_special / base_payable)


def infer_ratio_from_general_amount(
    general_amt: Decimal, base_payable: Decimal
) -> Decimal | None:
    """Infer the mixed ratio from a general (tax-exclusive) invoice amount.

    Returns:
        Ratio clamped to [0, 1], or None when base_payable <= 0.
    """
    if base_payable <= _ZERO:
        return None
    return _clamp_ratio((base_payable - general_amt) / base_payable)
