"""Pydantic models for subcontract settlement processing.

This module defines validated data models for:
- DeductionItem: One rate-based or fixed deduction line
- CurrentSettlement: The settlement being prepared, with its deductions
- EstimationParameters: Tax rate and special/general mix for simulation
- ProjectFinancials / SubcontractInfo: Read-only context shown on review

All monetary fields and rates use Decimal for precision. Models are frozen;
the workbench replaces them with updated copies instead of mutating fields.
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class DeductionType(str, Enum):
    """How a deduction value is applied to the settlement amount."""

    RATE = "rate"
    FIXED = "fixed"


class DeductionMode(str, Enum):
    """Whether input-tax credit is reconciled later or simulated now."""

    ACTUAL = "actual"
    ESTIMATED = "estimated"


class EstimationScenario(str, Enum):
    """Invoice mix assumed when simulating input-tax credit."""

    SPECIAL = "special"
    GENERAL = "general"
    MIXED = "mixed"


# =============================================================================
# Deductions
# =============================================================================


class DeductionItem(BaseModel):
    """Single deduction line on a settlement.

    For RATE items, value is a fraction of the settlement amount
    (0.06 means 6%). For FIXED items, value is a currency amount.
    Inactive items stay in the list and contribute nothing.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Unique deduction identifier")
    label: str = Field(description="Display label")
    type: DeductionType = Field(description="Rate-based or fixed amount")
    value: Decimal = Field(description="Rate fraction or fixed amount")
    is_active: bool = Field(default=True, description="Whether the item applies")
    is_custom: bool = Field(
        default=False, description="Added by the user rather than the template"
    )


class CurrentSettlement(BaseModel):
    """Settlement document under preparation."""

    model_config = ConfigDict(frozen=True)

    settlement_no: str = Field(description="Settlement document number")
    project_settlable_amount: Decimal = Field(
        description="Amount the project can currently settle"
    )
    settlement_amount: Decimal = Field(description="Amount settled this period")
    deductions: tuple[DeductionItem, ...] = Field(
        default=(), description="Deductions in display order"
    )

    def find_deduction(self, deduction_id: str) -> DeductionItem | None:
        """Return the deduction with the given id, if present."""
        for item in self.deductions:
            if item.id == deduction_id:
                return item
        return None


class EstimationParameters(BaseModel):
    """Inputs for estimated input-tax simulation.

    tax_rate is not restricted here so that the calculator stays total;
    the workbench limits user selection to the configured permitted rates.
    """

    model_config = ConfigDict(frozen=True)

    tax_rate: Decimal = Field(default=Decimal("0.06"), description="VAT rate")
    mixed_special_ratio: Decimal = Field(
        default=Decimal("0.5"),
        ge=Decimal("0"),
        le=Decimal("1"),
        description="Share of base payable invoiced on special invoices",
    )


# =============================================================================
# Review context
# =============================================================================


class ProjectFinancials(BaseModel):
    """Financial position of the parent project."""

    model_config = ConfigDict(frozen=True)

    project_name: str
    project_no: str
    project_belonging: str = Field(description="Owning organisation path")
    total_amount: Decimal
    invoiced_amount: Decimal
    received_amount: Decimal
    accumulated_sub_settlement: Decimal = Field(
        description="Subcontract settlements already made on this project"
    )
    available_funds: Decimal


class SubcontractInfo(BaseModel):
    """Subcontract the settlement is made against."""

    model_config = ConfigDict(frozen=True)

    contract_name: str
    contract_no: str
    vendor_name: str
    contract_amount: Decimal
    accumulated_settlement: Decimal
    unsettled_amount: Decimal
    cooperation_mode: str = Field(description="e.g. franchise, direct")
    accumulated_invoicing: Decimal
    paid_amount: Decimal
