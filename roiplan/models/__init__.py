"""Data models for the payment plan and scenario engine."""

from .lookups import (
    RowKind,
    BuiltinRow,
    BALANCE_EPSILON,
    DEFAULT_FX_RATES,
    POPULAR_CURRENCIES,
)
from .payment_plan import (
    PaymentPlanEditError,
    Row,
    Stage,
    PaymentPlanState,
    default_payment_plan,
    add_custom_amount_row,
    add_custom_percent_row,
    update_row,
    remove_row,
    add_stage,
    update_stage,
    remove_stage,
    set_percentages,
)
from .analysis import (
    LoanInput,
    AnalysisInput,
    TimelinePoint,
    ScenarioKPIs,
    YearlySummary,
    ExitSummary,
    ScenarioResult,
)

__all__ = [
    "RowKind",
    "BuiltinRow",
    "BALANCE_EPSILON",
    "DEFAULT_FX_RATES",
    "POPULAR_CURRENCIES",
    "PaymentPlanEditError",
    "Row",
    "Stage",
    "PaymentPlanState",
    "default_payment_plan",
    "add_custom_amount_row",
    "add_custom_percent_row",
    "update_row",
    "remove_row",
    "add_stage",
    "update_stage",
    "remove_stage",
    "set_percentages",
    "LoanInput",
    "AnalysisInput",
    "TimelinePoint",
    "ScenarioKPIs",
    "YearlySummary",
    "ExitSummary",
    "ScenarioResult",
]
