"""Default deduction template and custom deduction factory."""

from __future__ import annotations

import uuid
from decimal import Decimal

from settlement_workbench.settlement.models import DeductionItem, DeductionType

NEW_DEDUCTION_LABEL = "New deduction"

# (id, label, type, value, is_active)
_DEFAULT_DEDUCTIONS: tuple[tuple[str, str, DeductionType, str, bool], ...] = (
    ("vat", "VAT (6%)", DeductionType.RATE, "0.06", True),
    ("additional", "Surtax (2%)", DeductionType.RATE, "0.02", True),
    ("signing", "Signing fee (2%)", DeductionType.RATE, "0.02", True),
    ("mgmt", "Branch franchise management fee", DeductionType.FIXED, "50000.00", True),
    ("bid_svc", "Bid service fee", DeductionType.FIXED, "3500.00", True),
    ("bid_bond", "Bid bond", DeductionType.FIXED, "0.00", False),
    ("perf_bond", "Performance bond", DeductionType.FIXED, "5000.00", True),
    ("guarantee", "Letter of guarantee fee", DeductionType.FIXED, "1200.00", True),
    ("fine", "Penalty", DeductionType.FIXED, "0.00", True),
    ("others", "Other deductions", DeductionType.FIXED, "0.00", True),
)


def default_deductions() -> tuple[DeductionItem, ...]:
    """Build the standard deduction lines applied to a franchise settlement."""
    return tuple(
        DeductionItem(
            id=item_id,
            label=label,
            type=deduction_type,
            value=Decimal(value),
            is_active=is_active,
        )
        for item_id, label, deduction_type, value, is_active in _DEFAULT_DEDUCTIONS
    )


def new_custom_deduction(existing_ids: set[str] | frozenset[str] = frozenset()) -> DeductionItem:
    """Create a blank user-added deduction with a fresh id.

    Args:
        existing_ids: Ids already in use on the settlement.

    Returns:
        Active FIXED deduction of zero, flagged as custom.
    """
    item_id = f"custom_{uuid.uuid4().hex[:12]}"
    while item_id in existing_ids:
        item_id = f"custom_{uuid.uuid4().hex[:12]}"
    return DeductionItem(
        id=item_id,
        label=NEW_DEDUCTION_LABEL,
        type=DeductionType.FIXED,
        value=Decimal("0"),
        is_active=True,
        is_custom=True,
    )
