"""Tests for stage allocation."""

import math

import pytest

from roiplan.calculations.payment_plan import compute_total
from roiplan.calculations.currency import FxRateTable
from roiplan.calculations.stages import (
    allocate,
    allocate_across_stages,
    build_stage_table,
    stage_table_frame,
)
from roiplan.models.lookups import RowKind
from roiplan.models.payment_plan import Row
from tests.fixtures.test_inputs import get_reference_plan


class TestAllocate:

    def test_allocate_percentage(self):
        assert allocate(119_900, 30) == pytest.approx(35_970)

    def test_zero_percent(self):
        assert allocate(119_900, 0) == 0

    def test_allocations_sum_to_base(self):
        state = get_reference_plan(stage_percents=(12.5, 33.3, 20.2, 34))
        total = compute_total(state)
        parts = allocate_across_stages(total, state.stages)

        assert len(parts) == 4
        assert sum(parts) == pytest.approx(total, rel=1e-12)


class TestBuildStageTable:
    """The plan as a row x stage grid."""

    def test_one_table_row_per_plan_row(self, reference_plan):
        table = build_stage_table(reference_plan)

        assert [r.row_id for r in table.rows] == [r.id for r in reference_plan.rows]
        assert table.stage_labels == ["Stage 1", "Stage 2"]

    def test_row_split(self, reference_plan):
        table = build_stage_table(reference_plan)
        apartment = table.rows[0]

        assert apartment.base_amount == 100_000
        assert apartment.stage_amounts == pytest.approx([30_000, 70_000])

    def test_separator_has_no_amounts(self, reference_plan):
        table = build_stage_table(reference_plan)
        separator = next(r for r in table.rows if r.row_id == "sep")

        assert separator.base_amount is None
        assert separator.stage_amounts == [None, None]

    def test_custom_percent_row_split(self):
        extra = (Row("c1", "Agency", RowKind.PERCENT_OF_FULL, percent_of_full=2),)
        table = build_stage_table(get_reference_plan(extra_rows=extra))
        agency = next(r for r in table.rows if r.row_id == "c1")

        assert agency.base_amount == pytest.approx(2_398)
        assert agency.stage_amounts == pytest.approx([719.4, 1_678.6])

    def test_no_fx_by_default(self, reference_plan):
        table = build_stage_table(reference_plan)
        assert table.fx_total is None
        assert table.fx_stage_amounts == []

    @pytest.mark.parametrize("fx_rate", [0.0, -1.0, math.nan, math.inf])
    def test_unusable_fx_rate_leaves_conversion_empty(self, reference_plan, fx_rate):
        table = build_stage_table(reference_plan, fx_rate=fx_rate)
        assert table.fx_rate is None
        assert table.fx_total is None
        assert table.fx_stage_amounts == []

    def test_unknown_currency_rate_leaves_conversion_empty(self, reference_plan):
        with pytest.warns(RuntimeWarning):
            rate = FxRateTable("EUR").rate("XYZ")
        assert build_stage_table(reference_plan, fx_rate=rate).fx_total is None

    def test_fx_conversion(self, reference_plan):
        table = build_stage_table(reference_plan, fx_rate=3.98)

        assert table.fx_total == pytest.approx(119_900 * 3.98)
        assert table.fx_stage_amounts == pytest.approx([
            35_970 * 3.98,
            83_930 * 3.98,
        ])

    def test_frame(self, reference_plan):
        frame = stage_table_frame(build_stage_table(reference_plan))

        assert list(frame.columns) == ["100%", "Stage 1", "Stage 2"]
        assert len(frame) == len(reference_plan.rows)
        assert frame.loc["Apartment", "Stage 2"] == pytest.approx(70_000)
        assert math.isnan(frame.loc["—", "100%"])
