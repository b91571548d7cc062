"""Pytest configuration and shared fixtures for tests."""

from collections.abc import Iterator
from decimal import Decimal

import pytest

from settlement_workbench.narrative.models import NarrativeRequest
from settlement_workbench.orchestration.circuit_breaker import reset_all_breakers
from settlement_workbench.settlement.models import (
    CurrentSettlement,
    ProjectFinancials,
    SubcontractInfo,
)
from settlement_workbench.settlement.templates import default_deductions


class StubNarrativeProvider:
    """Provider returning fixed text and counting calls."""

    def __init__(self, text: str = "# Audit\n\n## Result\n\n**Approved**") -> None:
        self.text = text
        self.calls: list[NarrativeRequest] = []

    async def generate(self, request: NarrativeRequest) -> str:
        self.calls.append(request)
        return self.text


class FailingNarrativeProvider:
    """Provider that always raises."""

    def __init__(self, exc: Exception | None = None) -> None:
        self.exc = exc or RuntimeError("AI service unavailable")
        self.calls = 0

    async def generate(self, request: NarrativeRequest) -> str:
        self.calls += 1
        raise self.exc


@pytest.fixture
def project() -> ProjectFinancials:
    """Project context used on the review step."""
    return ProjectFinancials(
        project_name="Dayuan Village design project, phase 2, lot 1",
        project_no="PRJ-SZ-2024-001",
        project_belonging="Design Group - Shenzhen Branch - Division 1",
        total_amount=Decimal("3000000.00"),
        invoiced_amount=Decimal("1850000.00"),
        received_amount=Decimal("1200000.00"),
        accumulated_sub_settlement=Decimal("800000.00"),
        available_funds=Decimal("400000.00"),
    )


@pytest.fixture
def subcontract() -> SubcontractInfo:
    """Subcontract the settlement is made against."""
    return SubcontractInfo(
        contract_name="Landscape detailed design labour subcontract",
        contract_no="SUB-SZ-2024-005",
        vendor_name="Garden Engineering Consulting",
        contract_amount=Decimal("600000.00"),
        accumulated_settlement=Decimal("350000.00"),
        unsettled_amount=Decimal("250000.00"),
        cooperation_mode="franchise",
        accumulated_invoicing=Decimal("220000.00"),
        paid_amount=Decimal("200000.00"),
    )


@pytest.fixture
def settlement() -> CurrentSettlement:
    """Settlement of 250000 with the default deduction template."""
    return CurrentSettlement(
        settlement_no="FBJS-2024-1025-001",
        project_settlable_amount=Decimal("400000.00"),
        settlement_amount=Decimal("250000.00"),
        deductions=default_deductions(),
    )


@pytest.fixture
def narrative_request(
    project: ProjectFinancials,
    subcontract: SubcontractInfo,
    settlement: CurrentSettlement,
) -> NarrativeRequest:
    """Narrative request for the default settlement in special mode."""
    return NarrativeRequest(
        project=project,
        subcontract=subcontract,
        settlement=settlement,
        net_payable=Decimal("175218.00"),
        total_input_tax_deduction=Decimal("9918.00"),
        base_payable=Decimal("165300.00"),
    )


@pytest.fixture
def stub_provider() -> StubNarrativeProvider:
    return StubNarrativeProvider()


@pytest.fixture
def failing_provider() -> FailingNarrativeProvider:
    return FailingNarrativeProvider()


@pytest.fixture(autouse=True)
def _clear_breakers() -> Iterator[None]:
    """Keep the module-level breaker registry isolated between tests."""
    yield
    reset_all_breakers()
