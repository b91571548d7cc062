"""Settlement computation: deductions, derived financials and mix solving."""

from settlement_workbench.settlement.calculator import (
    DerivedFinancials,
    compute_financials,
    extract_tax,
    gross_up,
    quantize_currency,
    split_mixed_base,
)
from settlement_workbench.settlement.ledger import (
    DeductionLine,
    itemize_deductions,
    total_deductions,
)
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

__all__ = [
    # Models
    "CurrentSettlement",
    "DeductionItem",
    "DeductionMode",
    "DeductionType",
    "EstimationParameters",
    "EstimationScenario",
    "ProjectFinancials",
    "SubcontractInfo",
    # Ledger
    "DeductionLine",
    "itemize_deductions",
    "total_deductions",
    # Calculator
    "DerivedFinancials",
    "compute_financials",
    "extract_tax",
    "gross_up",
    "quantize_currency",
    "split_mixed_base",
    # Solver
    "infer_ratio_from_general_amount",
    "infer_ratio_from_special_amount",
]
