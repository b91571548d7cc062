"""Tests for settlement financial computation.

Covers the ACTUAL and ESTIMATED branches, the three invoice scenarios,
the zero floor on base payable and the tax helper identities.
"""

from decimal import Decimal

import pytest

from settlement_workbench.settlement.calculator import (
    DerivedFinancials,
    compute_financials,
    extract_tax,
    gross_up,
    quantize_currency,
    split_mixed_base,
)
from settlement_workbench.settlement.models import (
    DeductionItem,
    DeductionMode,
    DeductionType,
    EstimationParameters,
    EstimationScenario,
)
from settlement_workbench.settlement.templates import default_deductions

SPECIAL = EstimationScenario.SPECIAL
GENERAL = EstimationScenario.GENERAL
MIXED = EstimationScenario.MIXED
ESTIMATED = DeductionMode.ESTIMATED


def _params(rate: str = "0.06", ratio: str = "0.5") -> EstimationParameters:
    return EstimationParameters(tax_rate=Decimal(rate), mixed_special_ratio=Decimal(ratio))


def _base_only(amount: str, scenario: EstimationScenario, **params: str) -> DerivedFinancials:
    """Compute with no deductions so base payable equals the amount."""
    return compute_financials(Decimal(amount), [], ESTIMATED, scenario, _params(**params))


# =============================================================================
# End-to-end with the default template
# =============================================================================


class TestDefaultSettlementSpecial:
    """250000 settlement, default deductions, 100% special invoices at 6%."""

    @pytest.fixture
    def result(self) -> DerivedFinancials:
        return compute_financials(
            Decimal("250000"), default_deductions(), ESTIMATED, SPECIAL, _params()
        )

    def test_total_deductions(self, result: DerivedFinancials) -> None:
        """250000 * 0.10 + 59700 = 84700."""
        assert result.total_deductions == Decimal("84700")

    def test_base_payable(self, result: DerivedFinancials) -> None:
        assert result.base_payable == Decimal("165300")

    def test_special_amount(self, result: DerivedFinancials) -> None:
        """165300 * 1.06 = 175218."""
        assert result.special_amt == Decimal("175218.00")

    def test_input_tax_deduction(self, result: DerivedFinancials) -> None:
        """165300 * 0.06 = 9918."""
        assert result.total_input_tax_deduction == Decimal("9918.00")

    def test_net_payable(self, result: DerivedFinancials) -> None:
        """Base payable plus input-tax credit."""
        assert result.net_payable == Decimal("175218.00")

    def test_invoice_total_is_special(self, result: DerivedFinancials) -> None:
        assert result.invoice_total == result.special_amt
        assert result.general_amt == Decimal("0")


# =============================================================================
# Branches
# =============================================================================


class TestActualMode:
    """ACTUAL mode defers input-tax credit to reconciliation."""

    @pytest.mark.parametrize("scenario", list(EstimationScenario))
    def test_no_invoice_figures(self, scenario: EstimationScenario) -> None:
        result = compute_financials(
            Decimal("250000"), default_deductions(), DeductionMode.ACTUAL, scenario, _params()
        )
        assert result.total_input_tax_deduction == 0
        assert result.invoice_total == 0
        assert result.special_amt == 0
        assert result.general_amt == 0
        assert result.net_payable == result.base_payable == Decimal("165300")


class TestGeneralScenario:
    def test_whole_base_on_general(self) -> None:
        result = _base_only("1000", GENERAL)
        assert result.general_amt == Decimal("1000")
        assert result.invoice_total == Decimal("1000")
        assert result.special_amt == 0
        assert result.total_input_tax_deduction == 0
        assert result.net_payable == Decimal("1000")


class TestMixedScenario:
    def test_half_split_at_six_percent(self) -> None:
        result = _base_only("1000", MIXED, ratio="0.5")
        assert result.special_amt == Decimal("530.00")
        assert result.general_amt == Decimal("500")
        assert result.total_input_tax_deduction == Decimal("30")
        assert result.invoice_total == Decimal("1030")
        assert result.net_payable == Decimal("1030")

    def test_ratio_one_matches_special(self) -> None:
        mixed = _base_only("165300", MIXED, ratio="1")
        special = _base_only("165300", SPECIAL)
        assert mixed.special_amt == special.special_amt
        assert mixed.total_input_tax_deduction == special.total_input_tax_deduction
        assert mixed.general_amt == 0

    def test_ratio_zero_matches_general(self) -> None:
        mixed = _base_only("165300", MIXED, ratio="0")
        general = _base_only("165300", GENERAL)
        assert mixed.general_amt == general.general_amt
        assert mixed.special_amt == 0
        assert mixed.total_input_tax_deduction == 0


# =============================================================================
# Edge cases and guarantees
# =============================================================================


class TestEdgeCases:
    def test_deductions_exceeding_amount_floor_at_zero(self) -> None:
        """A=100 with a fixed deduction of 500 gives base payable 0."""
        fine = DeductionItem(
            id="fine", label="Penalty", type=DeductionType.FIXED, value=Decimal("500")
        )
        result = compute_financials(Decimal("100"), [fine], ESTIMATED, SPECIAL, _params())
        assert result.total_deductions == Decimal("500")
        assert result.base_payable == Decimal("0")

    @pytest.mark.parametrize("scenario", list(EstimationScenario))
    def test_zero_base_zeroes_invoice_figures(self, scenario: EstimationScenario) -> None:
        result = _base_only("0", scenario, ratio="0.7")
        assert result.special_amt == 0
        assert result.general_amt == 0
        assert result.total_input_tax_deduction == 0
        assert result.net_payable == 0

    def test_zero_rate_special_equals_general(self) -> None:
        special = _base_only("165300", SPECIAL, rate="0")
        general = _base_only("165300", GENERAL, rate="0")
        assert special.special_amt == general.general_amt == Decimal("165300")
        assert special.total_input_tax_deduction == general.total_input_tax_deduction == 0
        assert special.net_payable == general.net_payable

    def test_negative_amount_is_total(self) -> None:
        """Negative input is not rejected; base payable still floors at zero."""
        result = _base_only("-500", SPECIAL)
        assert result.base_payable == 0
        assert result.net_payable == 0

    @pytest.mark.parametrize("scenario", list(EstimationScenario))
    def test_net_payable_not_below_base(self, scenario: EstimationScenario) -> None:
        result = compute_financials(
            Decimal("250000"), default_deductions(), ESTIMATED, scenario, _params("0.13", "0.3")
        )
        assert result.net_payable >= result.base_payable

    def test_deterministic(self) -> None:
        args = (Decimal("250000"), default_deductions(), ESTIMATED, MIXED, _params("0.09", "0.25"))
        assert compute_financials(*args) == compute_financials(*args)


class TestTaxHelpers:
    @pytest.mark.parametrize(
        ("amount", "rate"),
        [("1000", "0.06"), ("165300", "0.06"), ("1000", "0.09"), ("2500", "0.13"), ("777", "0")],
    )
    def test_extract_after_gross_up_recovers_tax(self, amount: str, rate: str) -> None:
        x, r = Decimal(amount), Decimal(rate)
        assert extract_tax(gross_up(x, r), r) == x * r

    @pytest.mark.parametrize(
        ("base", "ratio"),
        [("165300", "0.5"), ("1000", "0.333"), ("99999.99", "0.07"), ("0", "0.4"), ("1", "1")],
    )
    def test_mixed_split_is_exact(self, base: str, ratio: str) -> None:
        special, general = split_mixed_base(Decimal(base), Decimal(ratio))
        assert special + general == Decimal(base)

    def test_quantize_currency_rounds_half_up(self) -> None:
        assert quantize_currency(Decimal("10.005")) == Decimal("10.01")
        assert quantize_currency(Decimal("10.004")) == Decimal("10.00")

    def test_quantize_currency_beyond_context_precision(self) -> None:
        amount = Decimal("9" * 27 + ".995")
        assert quantize_currency(amount) == Decimal("1" + "0" * 27)
        assert quantize_currency(Decimal("1E+30")) == Decimal("1E+30")

    def test_quantize_currency_passes_infinity_through(self) -> None:
        assert quantize_currency(Decimal("Infinity")) == Decimal("Infinity")

    def test_to_dict_has_every_field(self) -> None:
        result = _base_only("1000", SPECIAL)
        assert set(result.to_dict()) == {
            "total_deductions",
            "base_payable",
            "total_input_tax_deduction",
            "invoice_total",
            "special_amt",
            "general_amt",
            "net_payable",
        }
