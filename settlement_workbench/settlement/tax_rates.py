"""VAT rates offered for input-tax simulation.

Each permitted rate maps to the category of subcontracted work it normally
applies to. The set of rates a user may pick is configurable via
``PERMITTED_TAX_RATES``; descriptions exist for the standard rates.

Example:
    >>> from decimal import Decimal
    >>> from settlement_workbench.settlement.tax_rates import get_tax_rate_option
    >>> get_tax_rate_option(Decimal("0.09")).category
    'construction services / transport'
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from settlement_workbench.core.config import settings


@dataclass(frozen=True)
class TaxRateOption:
    """A selectable VAT rate.

    Attributes:
        rate: Rate as a fraction (0.06 means 6%).
        category: Kind of work the rate applies to.
    """

    rate: Decimal
    category: str

    @property
    def label(self) -> str:
        """Human-readable label, e.g. ``6.00% (design / technical services)``."""
        return f"{self.rate * 100:.2f}% ({self.category})"


_CATEGORIES: dict[Decimal, str] = {
    Decimal("0.06"): "design / technical services",
    Decimal("0.09"): "construction services / transport",
    Decimal("0.13"): "bulk materials / equipment leasing",
}


def get_tax_rate_option(rate: Decimal) -> TaxRateOption:
    """Return the option for a rate, with a generic category if unknown.

    Args:
        rate: Rate as a fraction.

    Returns:
        TaxRateOption describing the rate.
    """
    return TaxRateOption(rate=rate, category=_CATEGORIES.get(rate, "other"))


def permitted_tax_rates(rates: Iterable[Decimal] | None = None) -> list[TaxRateOption]:
    """List the rates a user may select, in configured order.

    Args:
        rates: Override for the configured rates (used in tests).

    Returns:
        One TaxRateOption per permitted rate.
    """
    source = settings.permitted_tax_rates if rates is None else rates
    return [get_tax_rate_option(rate) for rate in source]


def is_permitted_rate(rate: Decimal, rates: Iterable[Decimal] | None = None) -> bool:
    """Check whether a rate is one of the permitted rates."""
    source = settings.permitted_tax_rates if rates is None else rates
    return any(rate == allowed for allowed in source)
