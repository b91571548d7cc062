"""Settlement workbench session controller."""

from settlement_workbench.workbench.controller import WorkbenchController
from settlement_workbench.workbench.errors import (
    InvalidStepTransitionError,
    UnknownDeductionError,
    UnsupportedTaxRateError,
    WorkbenchError,
)

__all__ = [
    "InvalidStepTransitionError",
    "UnknownDeductionError",
    "UnsupportedTaxRateError",
    "WorkbenchController",
    "WorkbenchError",
]
