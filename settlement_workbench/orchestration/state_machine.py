"""Wizard step state machine for the settlement workbench.

Declares which step changes are allowed; callbacks only log. The
workbench controller owns the data and decides what each step needs.
"""

from enum import Enum

import structlog
from statemachine import State, StateMachine
from statemachine.exceptions import TransitionNotAllowed

logger = structlog.get_logger()


class WorkbenchStep(str, Enum):
    """Wizard steps in display order, plus the final submitted state."""

    REVIEW = "review"
    DEDUCTIONS = "deductions"
    SIMULATION = "simulation"
    PREVIEW = "preview"
    SUBMITTED = "submitted"


WIZARD_STEPS: tuple[WorkbenchStep, ...] = (
    WorkbenchStep.REVIEW,
    WorkbenchStep.DEDUCTIONS,
    WorkbenchStep.SIMULATION,
    WorkbenchStep.PREVIEW,
)


class WorkbenchStateMachine(StateMachine):
    """State machine for the four-step settlement wizard.

    States:
    - review: check project and subcontract context (initial)
    - deductions: configure deduction items
    - simulation: choose deduction mode and invoice mix
    - preview: settlement document with audit narrative
    - submitted: settlement submitted (final)

    Transitions:
    - advance: review -> deductions -> simulation -> preview
    - back: one step earlier, never past review
    - submit: preview -> submitted
    """

    review = State(initial=True, value=WorkbenchStep.REVIEW)
    deductions = State(value=WorkbenchStep.DEDUCTIONS)
    simulation = State(value=WorkbenchStep.SIMULATION)
    preview = State(value=WorkbenchStep.PREVIEW)
    submitted = State(final=True, value=WorkbenchStep.SUBMITTED)

    advance = (
        review.to(deductions)
        | deductions.to(simulation)
        | simulation.to(preview)
    )
    back = (
        deductions.to(review)
        | simulation.to(deductions)
        | preview.to(simulation)
    )
    submit = preview.to(submitted)

    def __init__(self, settlement_no: str = "") -> None:
        """Initialize the wizard at the review step.

        Args:
            settlement_no: Settlement number, used for log correlation only
        """
        self.settlement_no = settlement_no
        super().__init__()

    @property
    def step(self) -> WorkbenchStep:
        """Current step as a WorkbenchStep."""
        return self.current_state.value

    def after_transition(self, event: str, source: State, target: State) -> None:
        """Log every step change."""
        logger.info(
            "workbench_step_changed",
            settlement_no=self.settlement_no,
            transition=event,
            from_step=source.id,
            to_step=target.id,
        )

    def on_enter_submitted(self) -> None:
        """Called when the settlement is submitted."""
        logger.info("settlement_submitted", settlement_no=self.settlement_no)


__all__ = [
    "WIZARD_STEPS",
    "TransitionNotAllowed",
    "WorkbenchStateMachine",
    "WorkbenchStep",
]
