"""Payment plan aggregation: Tax Base, Full Price, Total and validation.

Every function here is a pure function of a PaymentPlanState and is
recomputed from scratch on each call. Derived values always follow the
same order:

    tax_base -> tax -> full_price -> notary / appraiser / % rows -> total

Missing amounts and missing built-in rows count as zero; validate() is the
single place that judges whether a state is usable.
"""

import math
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from ..models.lookups import BuiltinRow, RowKind, MAX_PERCENT, STAGE_SUM_SCALE, STAGE_SUM_TARGET
from ..models.payment_plan import PaymentPlanState
from .trace import trace


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validate(); truthy when the plan is usable."""

    ok: bool
    reason: Optional[str] = None

    def __bool__(self) -> bool:
        return self.ok


@dataclass(frozen=True)
class BuiltinExtras:
    """Built-in rows added on top of the Full Price."""

    furniture: float
    notary: float
    appraiser: float


@dataclass(frozen=True)
class PlanSummary:
    """All aggregate figures of a plan in one snapshot."""

    tax_base: float
    tax: float
    full_price: float
    furniture: float
    notary: float
    appraiser: float
    custom_amounts: float
    custom_percent_of_full: float
    total: float
    stage_percent_sum: float
    validation: ValidationResult


def _number(value: Optional[float]) -> float:
    return 0.0 if value is None else value


def _builtin_amount(
    state: PaymentPlanState,
    tag: BuiltinRow,
    index: Optional[Dict[BuiltinRow, int]] = None,
) -> float:
    """Stored amount of a built-in row, 0 when the row or value is missing."""
    if index is None:
        index = state.builtin_index()
    position = index.get(tag)
    if position is None:
        return 0.0
    return _number(state.rows[position].amount)


def compute_tax_base(state: PaymentPlanState) -> float:
    """Tax Base = apartment + parking."""
    index = state.builtin_index()
    apartment = _builtin_amount(state, BuiltinRow.APARTMENT, index)
    parking = _builtin_amount(state, BuiltinRow.PARKING, index)
    return trace(
        "plan.tax_base",
        apartment + parking,
        {"input.apartment": apartment, "input.parking": parking},
    )


def compute_tax(state: PaymentPlanState) -> float:
    tax_base = compute_tax_base(state)
    return trace(
        "plan.tax",
        (state.tax_percent / 100) * tax_base,
        {"plan.tax_base": tax_base, "input.tax_percent": state.tax_percent},
    )


def compute_full_price(state: PaymentPlanState) -> float:
    """Full Price = Tax Base + tax on the Tax Base."""
    tax_base = compute_tax_base(state)
    tax = compute_tax(state)
    return trace(
        "plan.full_price",
        tax_base + tax,
        {"plan.tax_base": tax_base, "plan.tax": tax},
    )


def compute_builtin_extras(state: PaymentPlanState) -> BuiltinExtras:
    full_price = compute_full_price(state)
    furniture = _builtin_amount(state, BuiltinRow.FURNITURE)
    notary = trace(
        "plan.notary",
        (state.notary_percent / 100) * full_price,
        {"plan.full_price": full_price, "input.notary_percent": state.notary_percent},
    )
    appraiser = trace(
        "plan.appraiser",
        (state.appraiser_percent / 100) * full_price,
        {"plan.full_price": full_price, "input.appraiser_percent": state.appraiser_percent},
    )
    return BuiltinExtras(furniture=furniture, notary=notary, appraiser=appraiser)


def compute_custom_amounts_total(state: PaymentPlanState) -> float:
    """Sum of user-added amount rows."""
    value = sum(
        _number(row.amount) for row in state.custom_rows() if row.kind == RowKind.AMOUNT
    )
    return trace("plan.custom_amounts", value, {})


def compute_percent_of_full_total(state: PaymentPlanState) -> float:
    """Sum of user-added rows priced as a percentage of the Full Price."""
    full_price = compute_full_price(state)
    value = sum(
        (_number(row.percent_of_full) / 100) * full_price
        for row in state.custom_rows()
        if row.kind == RowKind.PERCENT_OF_FULL
    )
    return trace("plan.custom_percent_of_full", value, {"plan.full_price": full_price})


def compute_total(state: PaymentPlanState) -> float:
    """Total = Full Price + furniture + notary + appraiser + custom rows."""
    full_price = compute_full_price(state)
    extras = compute_builtin_extras(state)
    custom_amounts = compute_custom_amounts_total(state)
    custom_percent = compute_percent_of_full_total(state)

    total = (
        full_price
        + extras.furniture
        + extras.notary
        + extras.appraiser
        + custom_amounts
        + custom_percent
    )
    return trace(
        "plan.total",
        total,
        {
            "plan.full_price": full_price,
            "input.furniture": extras.furniture,
            "plan.notary": extras.notary,
            "plan.appraiser": extras.appraiser,
            "plan.custom_amounts": custom_amounts,
            "plan.custom_percent_of_full": custom_percent,
        },
    )


def sum_stage_percents(state: PaymentPlanState) -> float:
    """Sum of stage percentages, ignoring non-finite entries."""
    value = sum(s.percent for s in state.stages if math.isfinite(s.percent))
    return trace("plan.stage_percent_sum", value, {})


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _is_valid_percent(value: float) -> bool:
    return math.isfinite(value) and 0 <= value <= MAX_PERCENT


def validate(state: PaymentPlanState) -> ValidationResult:
    """Check the plan invariants; the first failing check wins.

    Order: stage sum, amount rows, percent rows, global percentages,
    Full Price. Never raises.
    """
    stage_sum = sum_stage_percents(state)
    scaled = stage_sum * STAGE_SUM_SCALE
    if not math.isfinite(scaled) or _round_half_up(scaled) != STAGE_SUM_TARGET:
        return ValidationResult(
            False, f"Stage percentages must sum to 100%. Currently: {stage_sum:.2f}%."
        )

    for row in state.rows:
        if row.kind == RowKind.AMOUNT and row.amount is not None:
            if not math.isfinite(row.amount) or row.amount < 0:
                return ValidationResult(False, f'Row "{row.label}" must be a non-negative number.')
        if row.kind == RowKind.PERCENT_OF_FULL and row.percent_of_full is not None:
            if not _is_valid_percent(row.percent_of_full):
                return ValidationResult(
                    False, f'Row "{row.label}" percent must be between 0 and 1000.'
                )

    for value in (state.tax_percent, state.notary_percent, state.appraiser_percent):
        if not _is_valid_percent(value):
            return ValidationResult(False, "Percent values must be between 0 and 1000.")

    tax_base = compute_tax_base(state)
    full_price = compute_full_price(state)
    if not math.isfinite(full_price) or full_price < tax_base:
        return ValidationResult(False, "Full Price is invalid.")

    return ValidationResult(True)


def investment_cost(
    state: PaymentPlanState,
    notify: Optional[Callable[[str], None]] = None,
) -> Optional[float]:
    """Total of a valid plan, or None while the plan is invalid.

    Args:
        state: Payment plan to evaluate.
        notify: Optional sink called with the reason when the plan is invalid.

    Returns:
        The Total, or None when invalid or non-finite.
    """
    result = validate(state)
    if not result.ok:
        if notify is not None:
            notify(result.reason or "Invalid inputs.")
        return None

    total = compute_total(state)
    return total if math.isfinite(total) else None


def summarize_plan(state: PaymentPlanState) -> PlanSummary:
    """Compute every aggregate figure of the plan at once."""
    extras = compute_builtin_extras(state)
    return PlanSummary(
        tax_base=compute_tax_base(state),
        tax=compute_tax(state),
        full_price=compute_full_price(state),
        furniture=extras.furniture,
        notary=extras.notary,
        appraiser=extras.appraiser,
        custom_amounts=compute_custom_amounts_total(state),
        custom_percent_of_full=compute_percent_of_full_total(state),
        total=compute_total(state),
        stage_percent_sum=sum_stage_percents(state),
        validation=validate(state),
    )
