"""Calculation modules for the payment plan and scenario engine."""

from .payment_plan import (
    ValidationResult,
    BuiltinExtras,
    PlanSummary,
    compute_tax_base,
    compute_tax,
    compute_full_price,
    compute_builtin_extras,
    compute_custom_amounts_total,
    compute_percent_of_full_total,
    compute_total,
    sum_stage_percents,
    validate,
    investment_cost,
    summarize_plan,
)
from .rows import row_value
from .stages import (
    StageTable,
    StageTableRow,
    allocate,
    allocate_across_stages,
    build_stage_table,
    stage_table_frame,
)
from .amortization import (
    LoanState,
    AmortizationStep,
    LoanSchedule,
    monthly_payment,
    step_loan,
    amortize_loan_schedule,
    remaining_balance,
)
from .scenario import (
    monthly_rate_from_annual,
    run_scenario,
    summarize_by_year,
    analysis_from_plan,
    timeline_frame,
    yearly_frame,
)
from .projection import (
    QuickOperations,
    ProjectionPoint,
    quick_operations,
    project_growth,
)
from .currency import FxRateTable, format_currency, format_pct
from .trace import TraceContext, TracedValue, trace
from .formula_registry import FormulaRegistry, FormulaDefinition, FormulaCategory

__all__ = [
    # Payment plan
    "ValidationResult",
    "BuiltinExtras",
    "PlanSummary",
    "compute_tax_base",
    "compute_tax",
    "compute_full_price",
    "compute_builtin_extras",
    "compute_custom_amounts_total",
    "compute_percent_of_full_total",
    "compute_total",
    "sum_stage_percents",
    "validate",
    "investment_cost",
    "summarize_plan",
    "row_value",
    # Stages
    "StageTable",
    "StageTableRow",
    "allocate",
    "allocate_across_stages",
    "build_stage_table",
    "stage_table_frame",
    # Loans
    "LoanState",
    "AmortizationStep",
    "LoanSchedule",
    "monthly_payment",
    "step_loan",
    "amortize_loan_schedule",
    "remaining_balance",
    # Scenario
    "monthly_rate_from_annual",
    "run_scenario",
    "summarize_by_year",
    "analysis_from_plan",
    "timeline_frame",
    "yearly_frame",
    # Quick projection
    "QuickOperations",
    "ProjectionPoint",
    "quick_operations",
    "project_growth",
    # Currency
    "FxRateTable",
    "format_currency",
    "format_pct",
    # Audit
    "TraceContext",
    "TracedValue",
    "trace",
    "FormulaRegistry",
    "FormulaDefinition",
    "FormulaCategory",
]
