"""Tests for per-row valuation."""

import pytest

from roiplan.calculations.rows import row_value
from roiplan.models.lookups import BuiltinRow, RowKind
from roiplan.models.payment_plan import Row
from tests.fixtures.test_inputs import get_reference_plan


class TestRowValue:
    """Each row kind contributes to the 100% column by its own rule."""

    def test_amount_row(self, reference_plan):
        row = reference_plan.find_row("apt")
        assert row_value(row, reference_plan) == 100_000

    def test_amount_row_unset_is_zero(self, reference_plan):
        row = Row("x", "Blank", RowKind.AMOUNT)
        assert row_value(row, reference_plan) == 0

    def test_percent_of_full_row(self, reference_plan):
        row = Row("x", "Agency", RowKind.PERCENT_OF_FULL, percent_of_full=2.5)
        assert row_value(row, reference_plan) == pytest.approx(0.025 * 119_900)

    def test_percent_of_full_row_unset_is_zero(self, reference_plan):
        row = Row("x", "Agency", RowKind.PERCENT_OF_FULL)
        assert row_value(row, reference_plan) == 0

    def test_separator_has_no_value(self, reference_plan):
        assert row_value(reference_plan.find_row("sep"), reference_plan) is None

    def test_tax_row(self, reference_plan):
        assert row_value(reference_plan.find_row("tax"), reference_plan) == pytest.approx(9_900)

    def test_full_price_row(self, reference_plan):
        assert row_value(reference_plan.find_row("full"), reference_plan) == pytest.approx(119_900)

    def test_notary_and_appraiser_rows(self):
        state = get_reference_plan(notary_percent=2, appraiser_percent=0.5)
        assert row_value(state.find_row("notary"), state) == pytest.approx(2_398)
        assert row_value(state.find_row("appr"), state) == pytest.approx(599.5)

    def test_total_row(self):
        state = get_reference_plan(furniture=3_000, notary_percent=1)
        assert row_value(state.find_row("total"), state) == pytest.approx(119_900 + 3_000 + 1_199)

    def test_computed_row_without_builtin_is_zero(self, reference_plan):
        row = Row("x", "Orphan", RowKind.COMPUTED)
        assert row_value(row, reference_plan) == 0

    def test_furniture_row_uses_its_amount(self):
        state = get_reference_plan(furniture=750)
        row = state.builtin_row(BuiltinRow.FURNITURE)
        assert row_value(row, state) == 750
