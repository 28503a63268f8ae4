"""Per-row valuation: what each payment-plan row puts in the 100% column."""

from typing import Optional

from ..models.lookups import BuiltinRow, RowKind
from ..models.payment_plan import PaymentPlanState, Row
from .payment_plan import (
    compute_builtin_extras,
    compute_full_price,
    compute_tax,
    compute_total,
)


def row_value(row: Row, state: PaymentPlanState) -> Optional[float]:
    """Contribution of a row to the 100% column.

    Args:
        row: The row to value.
        state: Plan the row belongs to (supplies Full Price and percentages).

    Returns:
        The amount, or None for separators. Rows missing the field their
        kind needs are valued at 0.
    """
    if row.kind == RowKind.SEPARATOR:
        return None

    if row.kind == RowKind.AMOUNT:
        return row.amount if row.amount is not None else 0.0

    if row.kind == RowKind.PERCENT_OF_FULL:
        percent = row.percent_of_full if row.percent_of_full is not None else 0.0
        return (percent / 100) * compute_full_price(state)

    if row.kind == RowKind.COMPUTED:
        return _computed_value(row.builtin, state)

    return 0.0


def _computed_value(builtin: Optional[BuiltinRow], state: PaymentPlanState) -> float:
    if builtin == BuiltinRow.TAX:
        return compute_tax(state)
    if builtin == BuiltinRow.FULL_PRICE:
        return compute_full_price(state)
    if builtin == BuiltinRow.NOTARY:
        return compute_builtin_extras(state).notary
    if builtin == BuiltinRow.APPRAISER:
        return compute_builtin_extras(state).appraiser
    if builtin == BuiltinRow.TOTAL:
        return compute_total(state)
    # computed row without a known derivation
    return 0.0
