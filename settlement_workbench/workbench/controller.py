"""Workbench controller: one settlement session.

Owns the settlement, its deductions, the simulation settings, the wizard
step and the audit narrative. Every mutator ends with an explicit
recompute, so `financials` always reflects the current inputs and no
reader triggers hidden recalculation.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Literal

from settlement_workbench.core.config import settings
from settlement_workbench.core.logging import get_logger
from settlement_workbench.narrative.models import NarrativeRequest, NarrativeResult
from settlement_workbench.narrative.policy import resolve_narrative
from settlement_workbench.narrative.provider import NarrativeProvider
from settlement_workbench.orchestration.circuit_breaker import CircuitBreaker
from settlement_workbench.orchestration.state_machine import (
    WIZARD_STEPS,
    TransitionNotAllowed,
    WorkbenchStateMachine,
    WorkbenchStep,
)
from settlement_workbench.settlement.calculator import DerivedFinancials, compute_financials
from settlement_workbench.settlement.ledger import DeductionLine, itemize_deductions
from settlement_workbench.settlement.models import (
    CurrentSettlement,
    DeductionItem,
    DeductionMode,
    DeductionType,
    EstimationParameters,
    EstimationScenario,
    ProjectFinancials,
    SubcontractInfo,
)
from settlement_workbench.settlement.solver import (
    infer_ratio_from_general_amount,
    infer_ratio_from_special_amount,
)
from settlement_workbench.settlement.tax_rates import (
    TaxRateOption,
    is_permitted_rate,
    permitted_tax_rates,
)
from settlement_workbench.settlement.templates import new_custom_deduction
from settlement_workbench.workbench.errors import (
    InvalidStepTransitionError,
    UnknownDeductionError,
    UnsupportedTaxRateError,
)

logger = get_logger(__name__)

Amount = Decimal | int | str

_ZERO = Decimal("0")
_ONE = Decimal("1")


def _to_decimal(value: Amount | float) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


class WorkbenchController:
    """Controller for a single settlement workbench session.

    Usage:
        controller = WorkbenchController(project, subcontract, settlement, provider=provider)
        controller.update_deduction("fine", value="2000")
        controller.set_estimation_scenario(EstimationScenario.MIXED)
        controller.edit_mixed_amount("special", "530")
        controller.advance()
        ...
        if controller.needs_narrative:
            await controller.request_narrative()
    """

    def __init__(
        self,
        project: ProjectFinancials,
        subcontract: SubcontractInfo,
        settlement: CurrentSettlement,
        *,
        provider: NarrativeProvider,
        breaker: CircuitBreaker | None = None,
        params: EstimationParameters | None = None,
        deduction_mode: DeductionMode = DeductionMode.ESTIMATED,
        estimation_scenario: EstimationScenario = EstimationScenario.SPECIAL,
        permitted_rates: list[Decimal] | None = None,
    ) -> None:
        """Start a session at the review step.

        Args:
            project: Parent project context.
            subcontract: Subcontract being settled.
            settlement: Settlement with its initial deductions.
            provider: Primary audit narrative provider.
            breaker: Optional circuit breaker guarding the provider.
            params: Initial tax rate and mixed ratio.
            deduction_mode: Initial deduction mode.
            estimation_scenario: Initial invoice mix scenario.
            permitted_rates: Selectable tax rates. Defaults to settings.
        """
        self.project = project
        self.subcontract = subcontract
        self._settlement = settlement
        self._params = params or EstimationParameters()
        self._deduction_mode = deduction_mode
        self._estimation_scenario = estimation_scenario
        self._permitted_rates = list(
            settings.permitted_tax_rates if permitted_rates is None else permitted_rates
        )

        self._provider = provider
        self._breaker = breaker
        self._narrative: NarrativeResult | None = None
        self._narrative_request: NarrativeRequest | None = None
        self._narrative_in_flight = False

        self._steps = WorkbenchStateMachine(settlement_no=settlement.settlement_no)
        self._log = logger.bind(settlement_no=settlement.settlement_no)
        self._financials = self.recompute()

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def settlement(self) -> CurrentSettlement:
        return self._settlement

    @property
    def params(self) -> EstimationParameters:
        return self._params

    @property
    def deduction_mode(self) -> DeductionMode:
        return self._deduction_mode

    @property
    def estimation_scenario(self) -> EstimationScenario:
        return self._estimation_scenario

    @property
    def financials(self) -> DerivedFinancials:
        """Derived financials as of the last mutation."""
        return self._financials

    @property
    def deduction_lines(self) -> list[DeductionLine]:
        """Itemized deductions in display order, inactive ones at zero."""
        return itemize_deductions(
            self._settlement.settlement_amount, self._settlement.deductions
        )

    @property
    def tax_rate_options(self) -> list[TaxRateOption]:
        return permitted_tax_rates(self._permitted_rates)

    def recompute(self) -> DerivedFinancials:
        """Recompute derived financials from the current inputs."""
        self._financials = compute_financials(
            self._settlement.settlement_amount,
            self._settlement.deductions,
            self._deduction_mode,
            self._estimation_scenario,
            self._params,
        )
        return self._financials

    # ------------------------------------------------------------------
    # Settlement and deductions
    # ------------------------------------------------------------------

    def set_settlement_amount(self, amount: Amount) -> DerivedFinancials:
        """Change the amount settled this period."""
        self._settlement = self._settlement.model_copy(
            update={"settlement_amount": _to_decimal(amount)}
        )
        return self.recompute()

    def update_deduction(
        self,
        deduction_id: str,
        *,
        label: str | None = None,
        type: DeductionType | None = None,
        value: Amount | None = None,
        is_active: bool | None = None,
    ) -> DeductionItem:
        """Update fields of one deduction in place, keeping its position.

        Raises:
            UnknownDeductionError: If no deduction has this id.
        """
        current = self._settlement.find_deduction(deduction_id)
        if current is None:
            raise UnknownDeductionError(deduction_id)

        changes: dict[str, object] = {}
        if label is not None:
            changes["label"] = label
        if type is not None:
            changes["type"] = type
        if value is not None:
            changes["value"] = _to_decimal(value)
        if is_active is not None:
            changes["is_active"] = is_active

        updated = current.model_copy(update=changes)
        self._replace_deductions(
            tuple(updated if item.id == deduction_id else item for item in self._settlement.deductions)
        )
        self._log.debug("deduction_updated", deduction_id=deduction_id, fields=sorted(changes))
        self.recompute()
        return updated

    def add_deduction(self) -> DeductionItem:
        """Append a blank custom deduction and return it."""
        existing_ids = {item.id for item in self._settlement.deductions}
        item = new_custom_deduction(existing_ids)
        self._replace_deductions((*self._settlement.deductions, item))
        self._log.info("deduction_added", deduction_id=item.id)
        self.recompute()
        return item

    def _replace_deductions(self, deductions: tuple[DeductionItem, ...]) -> None:
        self._settlement = self._settlement.model_copy(update={"deductions": deductions})

    # ------------------------------------------------------------------
    # Input-tax simulation
    # ------------------------------------------------------------------

    def set_deduction_mode(self, mode: DeductionMode) -> DerivedFinancials:
        self._deduction_mode = mode
        return self.recompute()

    def set_estimation_scenario(self, scenario: EstimationScenario) -> DerivedFinancials:
        self._estimation_scenario = scenario
        return self.recompute()

    def set_tax_rate(self, rate: Amount) -> DerivedFinancials:
        """Select a tax rate from the permitted set.

        Raises:
            UnsupportedTaxRateError: If the rate is not permitted.
        """
        tax_rate = _to_decimal(rate)
        if not is_permitted_rate(tax_rate, self._permitted_rates):
            raise UnsupportedTaxRateError(tax_rate, self._permitted_rates)
        self._params = self._params.model_copy(update={"tax_rate": tax_rate})
        return self.recompute()

    def set_mixed_ratio(self, ratio: Amount) -> DerivedFinancials:
        """Set the special-invoice share directly; clamped to [0, 1]."""
        clamped = min(_ONE, max(_ZERO, _to_decimal(ratio)))
        self._params = self._params.model_copy(update={"mixed_special_ratio": clamped})
        return self.recompute()

    def edit_mixed_amount(
        self, kind: Literal["special", "general"], amount: Amount
    ) -> bool:
        """Edit the special or general invoice amount in mixed mode.

        The edited amount is translated back into the mixed ratio. When the
        base payable is zero, nothing changes.

        Args:
            kind: "special" for the tax-inclusive special amount,
                "general" for the general amount.
            amount: The amount the user entered.

        Returns:
            True if the ratio was updated.
        """
        value = _to_decimal(amount)
        base_payable = self._financials.base_payable
        if kind == "special":
            ratio = infer_ratio_from_special_amount(value, base_payable, self._params.tax_rate)
        elif kind == "general":
            ratio = infer_ratio_from_general_amount(value, base_payable)
        else:
            raise ValueError(f"kind must be 'special' or 'general', got {kind!r}")

        if ratio is None:
            self._log.debug("mixed_amount_ignored", kind=kind, base_payable=base_payable)
            return False

        self._params = self._params.model_copy(update={"mixed_special_ratio": ratio})
        self.recompute()
        return True

    # ------------------------------------------------------------------
    # Wizard steps
    # ------------------------------------------------------------------

    @property
    def step(self) -> WorkbenchStep:
        return self._steps.step

    @property
    def is_submitted(self) -> bool:
        return self.step == WorkbenchStep.SUBMITTED

    @property
    def progress(self) -> float:
        """Fraction of the wizard completed, 0.0 at review, 1.0 at preview."""
        if self.is_submitted:
            return 1.0
        return WIZARD_STEPS.index(self.step) / (len(WIZARD_STEPS) - 1)

    def _fire(self, event: str, requested: WorkbenchStep | str) -> WorkbenchStep:
        try:
            self._steps.send(event)
        except TransitionNotAllowed as exc:
            raise InvalidStepTransitionError(self.step.value, str(requested)) from exc
        return self.step

    def advance(self) -> WorkbenchStep:
        """Move to the next wizard step."""
        return self._fire("advance", "next")

    def back(self) -> WorkbenchStep:
        """Return to the previous wizard step."""
        return self._fire("back", "previous")

    def go_to(self, step: WorkbenchStep) -> WorkbenchStep:
        """Jump back to an earlier (already completed) step.

        Raises:
            InvalidStepTransitionError: If the step is not before the current one.
        """
        if step == self.step:
            return self.step
        if (
            self.is_submitted
            or step not in WIZARD_STEPS
            or WIZARD_STEPS.index(step) > WIZARD_STEPS.index(self.step)
        ):
            raise InvalidStepTransitionError(self.step.value, step.value)
        while self.step != step:
            self._fire("back", step.value)
        return self.step

    def submit(self) -> WorkbenchStep:
        """Submit the settlement from the preview step."""
        return self._fire("submit", WorkbenchStep.SUBMITTED.value)

    # ------------------------------------------------------------------
    # Audit narrative
    # ------------------------------------------------------------------

    @property
    def narrative(self) -> NarrativeResult | None:
        return self._narrative

    @property
    def narrative_in_flight(self) -> bool:
        return self._narrative_in_flight

    @property
    def needs_narrative(self) -> bool:
        """True on preview/submitted when no narrative exists or is pending."""
        return (
            self.step in (WorkbenchStep.PREVIEW, WorkbenchStep.SUBMITTED)
            and self._narrative is None
            and not self._narrative_in_flight
        )

    @property
    def narrative_is_stale(self) -> bool:
        """True when the settlement changed after the narrative was written."""
        if self._narrative_request is None:
            return False
        return self._narrative_request != self.narrative_request()

    def narrative_request(self) -> NarrativeRequest:
        """Build the provider request from the current snapshot."""
        return NarrativeRequest.from_financials(
            self.project, self.subcontract, self._settlement, self._financials
        )

    async def request_narrative(self) -> NarrativeResult | None:
        """Obtain the audit narrative once per snapshot.

        Returns the existing narrative if one was already obtained. Returns
        None without calling the provider while another request is in
        flight. Provider failures resolve to the fallback narrative.
        """
        if self._narrative_in_flight:
            self._log.debug("narrative_request_ignored", reason="in_flight")
            return None
        if self._narrative is not None:
            return self._narrative

        self._narrative_in_flight = True
        request = self.narrative_request()
        try:
            result = await resolve_narrative(request, self._provider, self._breaker)
        finally:
            self._narrative_in_flight = False

        self._narrative = result
        self._narrative_request = request
        self._log.info("narrative_ready", source=result.source.value)
        return result

    def reset_narrative(self) -> None:
        """Discard the narrative so the next request calls the provider again."""
        if self._narrative_in_flight:
            self._log.debug("narrative_reset_ignored", reason="in_flight")
            return
        self._narrative = None
        self._narrative_request = None
        self._log.info("narrative_reset")
