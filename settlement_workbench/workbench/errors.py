"""Exceptions raised by the workbench controller."""

from decimal import Decimal


class WorkbenchError(Exception):
    """Base class for workbench input errors."""


class UnknownDeductionError(WorkbenchError, KeyError):
    """Raised when a deduction id is not on the settlement."""

    def __init__(self, deduction_id: str):
        self.deduction_id = deduction_id
        super().__init__(f"Unknown deduction id: {deduction_id}")

    def __str__(self) -> str:
        return self.args[0]


class UnsupportedTaxRateError(WorkbenchError, ValueError):
    """Raised when a selected tax rate is not permitted."""

    def __init__(self, rate: Decimal, permitted: list[Decimal]):
        self.rate = rate
        self.permitted = permitted
        allowed = ", ".join(str(value) for value in permitted)
        super().__init__(f"Tax rate {rate} is not permitted (allowed: {allowed})")


class InvalidStepTransitionError(WorkbenchError):
    """Raised when the wizard cannot move to the requested step."""

    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot move from step '{current}' to '{requested}'")
