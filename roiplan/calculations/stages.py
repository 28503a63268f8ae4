"""Split amounts across payment stages."""

import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import pandas as pd

from ..models.payment_plan import PaymentPlanState, Stage
from .payment_plan import compute_total
from .rows import row_value


@dataclass
class StageTableRow:
    """One plan row split across the stages."""

    row_id: str
    label: str
    base_amount: Optional[float]  # 100% column; None for separators
    stage_amounts: List[Optional[float]] = field(default_factory=list)


@dataclass
class StageTable:
    """The payment plan as a row x stage grid."""

    currency: str
    stage_labels: List[str]
    rows: List[StageTableRow]
    total: float
    fx_rate: Optional[float] = None
    fx_total: Optional[float] = None
    fx_stage_amounts: List[float] = field(default_factory=list)


def allocate(base_amount: float, stage_percent: float) -> float:
    """Share of an amount due at a stage."""
    return base_amount * stage_percent / 100


def allocate_across_stages(base_amount: float, stages: Sequence[Stage]) -> List[float]:
    return [allocate(base_amount, stage.percent) for stage in stages]


def build_stage_table(state: PaymentPlanState, fx_rate: Optional[float] = None) -> StageTable:
    """Value every row and split it across the plan's stages.

    Args:
        state: Payment plan.
        fx_rate: Optional rate (1 plan currency -> X target). When it is a
            positive finite number, the Total and its stage split are also
            converted; otherwise the converted fields stay empty.

    Returns:
        StageTable in row order.
    """
    rows = []
    for row in state.rows:
        base = row_value(row, state)
        if base is None:
            split: List[Optional[float]] = [None] * len(state.stages)
        else:
            split = list(allocate_across_stages(base, state.stages))
        rows.append(StageTableRow(row_id=row.id, label=row.label, base_amount=base, stage_amounts=split))

    total = compute_total(state)
    table = StageTable(
        currency=state.currency,
        stage_labels=[stage.label for stage in state.stages],
        rows=rows,
        total=total,
    )

    if fx_rate is not None and math.isfinite(fx_rate) and fx_rate > 0:
        table.fx_rate = fx_rate
        table.fx_total = total * fx_rate
        table.fx_stage_amounts = [allocate(total, stage.percent) * fx_rate for stage in state.stages]

    return table


def stage_table_frame(table: StageTable) -> pd.DataFrame:
    """DataFrame view of a StageTable: index row label, columns 100% + stages."""
    columns = ["100%", *table.stage_labels]
    data = [[r.base_amount, *r.stage_amounts] for r in table.rows]
    frame = pd.DataFrame(data, columns=columns, index=[r.label for r in table.rows], dtype="float64")
    frame.index.name = "Row"
    return frame
