"""Payment plan data model: line items, payment stages and the table state.

Editing helpers in this module never mutate their input. Each returns a new
PaymentPlanState so callers can keep the previous snapshot around (undo,
comparison) and recompute every derived value from scratch.
"""

from dataclasses import dataclass, field, replace
from datetime import date
from typing import Dict, List, Optional
from uuid import uuid4

from .lookups import (
    BuiltinRow,
    RowKind,
    DEFAULT_CURRENCY,
    DEFAULT_ROW_TEMPLATE,
    DEFAULT_STAGE_PERCENTS,
    DEFAULT_TAX_PERCENT,
    UNIQUE_BUILTINS,
)


class PaymentPlanEditError(ValueError):
    """Raised when an edit would break the structure of the table."""


def new_id() -> str:
    """Short random identifier for rows and stages."""
    return uuid4().hex[:10]


@dataclass(frozen=True)
class Row:
    """One payment-plan line item."""

    id: str
    label: str
    kind: RowKind
    amount: Optional[float] = None  # amount rows: value in the 100% column
    percent_of_full: Optional[float] = None  # percent_of_full rows: 2.5 means 2.5%
    builtin: Optional[BuiltinRow] = None
    is_locked: bool = False

    @property
    def is_builtin(self) -> bool:
        return self.builtin is not None

    @property
    def is_removable(self) -> bool:
        """Only user-added amount / percent rows can be deleted."""
        if self.builtin is not None:
            return False
        if self.kind in (RowKind.COMPUTED, RowKind.SEPARATOR):
            return False
        return self.label != "Total"


@dataclass(frozen=True)
class Stage:
    """A payment milestone taking a percentage slice of every amount."""

    id: str
    label: str
    date: str  # ISO date
    percent: float  # 0..100; all stages must sum to 100


@dataclass(frozen=True)
class PaymentPlanState:
    """Complete payment table: stages, global percentages and rows."""

    currency: str = DEFAULT_CURRENCY
    stages: List[Stage] = field(default_factory=list)  # excludes the 100% column
    tax_percent: float = DEFAULT_TAX_PERCENT  # applied to apartment + parking
    notary_percent: float = 0.0  # % of Full Price
    appraiser_percent: float = 0.0  # % of Full Price
    rows: List[Row] = field(default_factory=list)

    def __post_init__(self):
        seen = set()
        for row in self.rows:
            if row.builtin in UNIQUE_BUILTINS:
                if row.builtin in seen:
                    raise PaymentPlanEditError(f"Only one \"{BuiltinRow(row.builtin).value}\" row is allowed.")
                seen.add(row.builtin)

    def builtin_index(self) -> Dict[BuiltinRow, int]:
        """Map each built-in tag to the position of its first row."""
        index: Dict[BuiltinRow, int] = {}
        for position, row in enumerate(self.rows):
            if row.builtin is not None and row.builtin not in index:
                index[BuiltinRow(row.builtin)] = position
        return index

    def builtin_row(self, tag: BuiltinRow) -> Optional[Row]:
        position = self.builtin_index().get(tag)
        return self.rows[position] if position is not None else None

    def find_row(self, row_id: str) -> Row:
        for row in self.rows:
            if row.id == row_id:
                return row
        raise KeyError(f"Unknown row id: {row_id}")

    def find_stage(self, stage_id: str) -> Stage:
        for stage in self.stages:
            if stage.id == stage_id:
                return stage
        raise KeyError(f"Unknown stage id: {stage_id}")

    def custom_rows(self) -> List[Row]:
        """User-added rows that feed the Total directly."""
        return [
            row for row in self.rows
            if row.builtin is None
            and row.kind in (RowKind.AMOUNT, RowKind.PERCENT_OF_FULL)
        ]


def default_payment_plan(
    currency: str = DEFAULT_CURRENCY,
    today: Optional[date] = None,
) -> PaymentPlanState:
    """Build the table every new plan starts from.

    Args:
        currency: Plan currency code.
        today: Date stamped on the default stages (defaults to today).

    Returns:
        PaymentPlanState with the built-in rows and a 30/70 stage split.
    """
    iso_today = (today or date.today()).isoformat()

    rows = [
        Row(
            id=new_id(),
            label=label,
            kind=kind,
            amount=amount,
            builtin=builtin,
            is_locked=locked,
        )
        for label, kind, builtin, amount, locked in DEFAULT_ROW_TEMPLATE
    ]
    stages = [
        Stage(id=new_id(), label=f"Stage {n}", date=iso_today, percent=pct)
        for n, pct in enumerate(DEFAULT_STAGE_PERCENTS, start=1)
    ]

    return PaymentPlanState(currency=currency, stages=stages, rows=rows)


# === Row editing ===

def _insert_before_last(state: PaymentPlanState, row: Row) -> PaymentPlanState:
    # The last row is the Total; custom rows go right above it
    if not state.rows:
        return replace(state, rows=[row])
    return replace(state, rows=[*state.rows[:-1], row, state.rows[-1]])


def add_custom_amount_row(
    state: PaymentPlanState,
    label: str = "Custom Amount",
    amount: float = 0.0,
) -> PaymentPlanState:
    row = Row(id=new_id(), label=label, kind=RowKind.AMOUNT, amount=amount)
    return _insert_before_last(state, row)


def add_custom_percent_row(
    state: PaymentPlanState,
    label: str = "% of Full Price",
    percent: float = 1.0,
) -> PaymentPlanState:
    row = Row(id=new_id(), label=label, kind=RowKind.PERCENT_OF_FULL, percent_of_full=percent)
    return _insert_before_last(state, row)


_FROZEN_ROW_FIELDS = ("id", "kind", "builtin")


def update_row(state: PaymentPlanState, row_id: str, **changes) -> PaymentPlanState:
    """Edit the label or value of one row.

    Raises:
        KeyError: No row has this id.
        PaymentPlanEditError: The row is locked or the change touches
            its identity, kind or built-in tag.
    """
    row = state.find_row(row_id)

    frozen = [name for name in _FROZEN_ROW_FIELDS if name in changes]
    if frozen:
        raise PaymentPlanEditError(f"Cannot change {', '.join(frozen)} of row \"{row.label}\".")
    if row.is_locked and set(changes) - {"label"}:
        raise PaymentPlanEditError(f"Row \"{row.label}\" is locked.")

    updated = replace(row, **changes)
    return replace(state, rows=[updated if r.id == row_id else r for r in state.rows])


def remove_row(state: PaymentPlanState, row_id: str) -> PaymentPlanState:
    row = state.find_row(row_id)
    if not row.is_removable:
        raise PaymentPlanEditError("This row cannot be removed.")
    return replace(state, rows=[r for r in state.rows if r.id != row_id])


# === Stage editing ===

def add_stage(
    state: PaymentPlanState,
    label: Optional[str] = None,
    date_iso: Optional[str] = None,
) -> PaymentPlanState:
    """Append a new stage at 0%."""
    stage = Stage(
        id=new_id(),
        label=label or f"Stage {len(state.stages) + 1}",
        date=date_iso or date.today().isoformat(),
        percent=0.0,
    )
    return replace(state, stages=[*state.stages, stage])


def update_stage(state: PaymentPlanState, stage_id: str, **changes) -> PaymentPlanState:
    if "id" in changes:
        raise PaymentPlanEditError("Cannot change the id of a stage.")
    stage = state.find_stage(stage_id)
    updated = replace(stage, **changes)
    return replace(state, stages=[updated if s.id == stage_id else s for s in state.stages])


def remove_stage(state: PaymentPlanState, stage_id: str) -> PaymentPlanState:
    state.find_stage(stage_id)
    return replace(state, stages=[s for s in state.stages if s.id != stage_id])


def set_percentages(
    state: PaymentPlanState,
    tax_percent: Optional[float] = None,
    notary_percent: Optional[float] = None,
    appraiser_percent: Optional[float] = None,
) -> PaymentPlanState:
    """Update any of the global tax / notary / appraiser percentages."""
    changes = {
        name: value
        for name, value in (
            ("tax_percent", tax_percent),
            ("notary_percent", notary_percent),
            ("appraiser_percent", appraiser_percent),
        )
        if value is not None
    }
    return replace(state, **changes)
