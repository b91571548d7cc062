"""Tests for settlement models, templates and tax rate options."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from settlement_workbench.settlement.models import (
    CurrentSettlement,
    DeductionItem,
    DeductionType,
    EstimationParameters,
)
from settlement_workbench.settlement.tax_rates import (
    get_tax_rate_option,
    is_permitted_rate,
    permitted_tax_rates,
)
from settlement_workbench.settlement.templates import (
    NEW_DEDUCTION_LABEL,
    default_deductions,
    new_custom_deduction,
)


class TestDeductionItem:
    def test_frozen(self) -> None:
        item = DeductionItem(id="x", label="X", type=DeductionType.FIXED, value=Decimal("1"))
        with pytest.raises(ValidationError):
            item.value = Decimal("2")

    def test_defaults(self) -> None:
        item = DeductionItem(id="x", label="X", type="rate", value="0.06")
        assert item.type == DeductionType.RATE
        assert item.value == Decimal("0.06")
        assert item.is_active is True
        assert item.is_custom is False


class TestCurrentSettlement:
    def test_find_deduction(self) -> None:
        settlement = CurrentSettlement(
            settlement_no="S-1",
            project_settlable_amount=Decimal("1"),
            settlement_amount=Decimal("1"),
            deductions=default_deductions(),
        )
        found = settlement.find_deduction("mgmt")
        assert found is not None
        assert found.value == Decimal("50000.00")
        assert settlement.find_deduction("missing") is None


class TestEstimationParameters:
    def test_defaults(self) -> None:
        params = EstimationParameters()
        assert params.tax_rate == Decimal("0.06")
        assert params.mixed_special_ratio == Decimal("0.5")

    @pytest.mark.parametrize("ratio", ["-0.01", "1.01"])
    def test_ratio_out_of_range_rejected(self, ratio: str) -> None:
        with pytest.raises(ValidationError):
            EstimationParameters(mixed_special_ratio=Decimal(ratio))

    def test_any_tax_rate_accepted(self) -> None:
        """The calculator must stay total, so the model does not restrict rates."""
        assert EstimationParameters(tax_rate=Decimal("0")).tax_rate == 0


class TestTemplates:
    def test_default_ids_unique_and_ordered(self) -> None:
        ids = [item.id for item in default_deductions()]
        assert ids[:3] == ["vat", "additional", "signing"]
        assert len(ids) == len(set(ids)) == 10

    def test_only_bid_bond_inactive(self) -> None:
        inactive = [item.id for item in default_deductions() if not item.is_active]
        assert inactive == ["bid_bond"]

    def test_new_custom_deduction(self) -> None:
        item = new_custom_deduction({"vat"})
        assert item.id.startswith("custom_")
        assert item.label == NEW_DEDUCTION_LABEL
        assert item.type == DeductionType.FIXED
        assert item.value == Decimal("0")
        assert item.is_active is True
        assert item.is_custom is True

    def test_new_custom_ids_are_fresh(self) -> None:
        first = new_custom_deduction()
        second = new_custom_deduction({first.id})
        assert first.id != second.id


class TestTaxRates:
    def test_default_permitted_rates(self) -> None:
        rates = [option.rate for option in permitted_tax_rates()]
        assert rates == [Decimal("0.06"), Decimal("0.09"), Decimal("0.13")]

    def test_label(self) -> None:
        assert get_tax_rate_option(Decimal("0.06")).label == "6.00% (design / technical services)"

    def test_unknown_rate_has_generic_category(self) -> None:
        assert get_tax_rate_option(Decimal("0.03")).category == "other"

    def test_is_permitted_rate_compares_by_value(self) -> None:
        assert is_permitted_rate(Decimal("0.090"))
        assert not is_permitted_rate(Decimal("0.05"))
        assert is_permitted_rate(Decimal("0.05"), [Decimal("0.05")])
