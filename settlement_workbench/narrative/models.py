"""Request and result types for the settlement audit narrative."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from settlement_workbench.settlement.calculator import DerivedFinancials
from settlement_workbench.settlement.models import (
    CurrentSettlement,
    ProjectFinancials,
    SubcontractInfo,
)


class NarrativeSource(str, Enum):
    """Where a narrative came from."""

    PROVIDER = "provider"
    FALLBACK = "fallback"


class NarrativeRequest(BaseModel):
    """Everything the narrative provider sees about a settlement."""

    model_config = ConfigDict(frozen=True)

    project: ProjectFinancials
    subcontract: SubcontractInfo
    settlement: CurrentSettlement
    net_payable: Decimal = Field(description="Recommended payment amount")
    total_input_tax_deduction: Decimal = Field(description="Simulated input-tax credit")
    base_payable: Decimal = Field(description="Settlement amount after deductions")

    @classmethod
    def from_financials(
        cls,
        project: ProjectFinancials,
        subcontract: SubcontractInfo,
        settlement: CurrentSettlement,
        financials: DerivedFinancials,
    ) -> NarrativeRequest:
        """Build a request from a settlement and its derived financials."""
        return cls(
            project=project,
            subcontract=subcontract,
            settlement=settlement,
            net_payable=financials.net_payable,
            total_input_tax_deduction=financials.total_input_tax_deduction,
            base_payable=financials.base_payable,
        )


@dataclass(frozen=True, slots=True)
class NarrativeResult:
    """A settled narrative and its origin."""

    text: str
    source: NarrativeSource

    @property
    def is_fallback(self) -> bool:
        """Return True when the local fallback text was used."""
        return self.source == NarrativeSource.FALLBACK
