"""Tests for payment plan aggregation and validation."""

import math

import pytest

from roiplan.calculations.payment_plan import (
    compute_tax_base,
    compute_tax,
    compute_full_price,
    compute_builtin_extras,
    compute_total,
    sum_stage_percents,
    validate,
    investment_cost,
    summarize_plan,
)
from roiplan.models.lookups import BuiltinRow, RowKind
from roiplan.models.payment_plan import PaymentPlanState, Row, Stage
from tests.fixtures.test_inputs import get_reference_plan


class TestReferenceFigures:
    """Apartment 100,000 + parking 10,000 at 9% tax."""

    def test_tax_base(self, reference_plan):
        assert compute_tax_base(reference_plan) == 110_000

    def test_tax(self, reference_plan):
        assert compute_tax(reference_plan) == pytest.approx(9_900)

    def test_full_price(self, reference_plan):
        assert compute_full_price(reference_plan) == pytest.approx(119_900)

    def test_total_without_extras(self, reference_plan):
        assert compute_total(reference_plan) == pytest.approx(119_900)


class TestComputeTaxBase:
    """Tax base resolves apartment and parking by their built-in tag."""

    def test_missing_parking_counts_as_zero(self):
        state = get_reference_plan()
        state = PaymentPlanState(
            stages=state.stages,
            rows=[r for r in state.rows if r.builtin != BuiltinRow.PARKING],
        )
        assert compute_tax_base(state) == 100_000

    def test_unset_amount_counts_as_zero(self):
        state = get_reference_plan()
        rows = [
            Row(r.id, r.label, r.kind, amount=None, builtin=r.builtin)
            if r.builtin == BuiltinRow.APARTMENT else r
            for r in state.rows
        ]
        state = PaymentPlanState(stages=state.stages, rows=rows)
        assert compute_tax_base(state) == 10_000

    def test_empty_plan_is_zero(self):
        state = PaymentPlanState()
        assert compute_tax_base(state) == 0
        assert compute_full_price(state) == 0
        assert compute_total(state) == 0

    def test_custom_rows_do_not_enter_tax_base(self):
        extra = (Row("x", "Storage", RowKind.AMOUNT, amount=5_000),)
        state = get_reference_plan(extra_rows=extra)
        assert compute_tax_base(state) == 110_000


class TestComputeFullPrice:
    """Full Price = tax base x (1 + tax%)."""

    @pytest.mark.parametrize("tax_percent", [0, 5, 9, 17.5, 100, 1000])
    def test_full_price_identity(self, tax_percent):
        state = get_reference_plan(apartment=123_456.78, parking=9_876.5, tax_percent=tax_percent)
        expected = compute_tax_base(state) * (1 + tax_percent / 100)
        assert compute_full_price(state) == pytest.approx(expected, rel=1e-12)

    def test_full_price_at_least_base(self, reference_plan):
        assert compute_full_price(reference_plan) >= compute_tax_base(reference_plan)


class TestComputeTotal:
    """Total = Full Price + furniture + notary + appraiser + custom rows."""

    def test_builtin_extras(self):
        state = get_reference_plan(furniture=5_000, notary_percent=1, appraiser_percent=0.5)
        extras = compute_builtin_extras(state)

        assert extras.furniture == 5_000
        assert extras.notary == pytest.approx(1_199)
        assert extras.appraiser == pytest.approx(599.5)

    def test_total_with_all_extras(self):
        extra = (
            Row("c1", "Lawyer", RowKind.AMOUNT, amount=2_500),
            Row("c2", "Agency", RowKind.PERCENT_OF_FULL, percent_of_full=2),
        )
        state = get_reference_plan(
            furniture=5_000, notary_percent=1, appraiser_percent=0.5, extra_rows=extra
        )

        expected = 119_900 + 5_000 + 1_199 + 599.5 + 2_500 + 2_398
        assert compute_total(state) == pytest.approx(expected)

    def test_total_at_least_full_price(self):
        extra = (Row("c1", "Misc", RowKind.PERCENT_OF_FULL, percent_of_full=0.3),)
        state = get_reference_plan(furniture=1, notary_percent=2, extra_rows=extra)
        assert compute_total(state) >= compute_full_price(state)

    def test_percent_row_missing_value_is_zero(self):
        extra = (Row("c1", "Blank", RowKind.PERCENT_OF_FULL),)
        state = get_reference_plan(extra_rows=extra)
        assert compute_total(state) == pytest.approx(119_900)

    def test_recomputes_after_edit(self, reference_plan):
        """No cached values survive a change of inputs."""
        before = compute_total(reference_plan)
        changed = get_reference_plan(apartment=200_000)
        after = compute_total(changed)

        assert before == pytest.approx(119_900)
        assert after == pytest.approx(210_000 * 1.09)

    def test_idempotent(self, reference_plan):
        assert compute_total(reference_plan) == compute_total(reference_plan)


class TestSumStagePercents:

    def test_sum(self, reference_plan):
        assert sum_stage_percents(reference_plan) == 100

    def test_non_finite_percent_ignored(self):
        state = get_reference_plan(stage_percents=(40, math.nan, 60))
        assert sum_stage_percents(state) == 100

    def test_no_stages(self):
        state = PaymentPlanState(rows=get_reference_plan().rows)
        assert sum_stage_percents(state) == 0


class TestValidate:
    """Validation checks run in a fixed order; the first failure wins."""

    def test_reference_plan_is_valid(self, reference_plan):
        result = validate(reference_plan)
        assert result.ok
        assert result.reason is None
        assert bool(result) is True

    def test_stage_sum_below_100(self):
        result = validate(get_reference_plan(stage_percents=(30, 69)))
        assert not result.ok
        assert result.reason == "Stage percentages must sum to 100%. Currently: 99.00%."

    def test_stage_sum_above_100(self):
        result = validate(get_reference_plan(stage_percents=(50, 50.01)))
        assert not result.ok
        assert "must sum to 100%" in result.reason

    def test_stage_sum_tolerance(self):
        """Deviation under 0.0005 points rounds to 100.000."""
        assert validate(get_reference_plan(stage_percents=(30, 69.9996))).ok
        assert not validate(get_reference_plan(stage_percents=(30, 69.9994))).ok

    def test_overflowing_stage_sum(self):
        """Huge stage percents overflow the sum; validation reports it instead of raising."""
        result = validate(get_reference_plan(stage_percents=(1e308, 1e308)))
        assert not result.ok
        assert result.reason.startswith("Stage percentages must sum to 100%.")

    def test_scaled_stage_sum_overflow(self):
        result = validate(get_reference_plan(stage_percents=(1e306,)))
        assert not result.ok
        assert "must sum to 100%" in result.reason

    def test_fractional_stages_summing_to_100(self):
        assert validate(get_reference_plan(stage_percents=(33.3, 33.3, 33.4))).ok

    def test_negative_amount(self):
        result = validate(get_reference_plan(furniture=-1))
        assert not result.ok
        assert result.reason == 'Row "Furniture" must be a non-negative number.'

    def test_non_finite_amount(self):
        extra = (Row("c1", "Broken", RowKind.AMOUNT, amount=math.inf),)
        result = validate(get_reference_plan(extra_rows=extra))
        assert not result.ok
        assert result.reason == 'Row "Broken" must be a non-negative number.'

    def test_percent_row_out_of_range(self):
        extra = (Row("c1", "Agency", RowKind.PERCENT_OF_FULL, percent_of_full=1000.5),)
        result = validate(get_reference_plan(extra_rows=extra))
        assert not result.ok
        assert result.reason == 'Row "Agency" percent must be between 0 and 1000.'

    def test_percent_row_bounds_inclusive(self):
        extra = (
            Row("c1", "Zero", RowKind.PERCENT_OF_FULL, percent_of_full=0),
            Row("c2", "Max", RowKind.PERCENT_OF_FULL, percent_of_full=1000),
        )
        assert validate(get_reference_plan(extra_rows=extra)).ok

    @pytest.mark.parametrize("field", ["tax_percent", "notary_percent", "appraiser_percent"])
    @pytest.mark.parametrize("value", [-0.1, 1000.1, math.nan])
    def test_global_percent_out_of_range(self, field, value):
        result = validate(get_reference_plan(**{field: value}))
        assert not result.ok
        assert result.reason == "Percent values must be between 0 and 1000."

    def test_full_price_overflow(self):
        state = get_reference_plan(apartment=1e308, parking=1e308)
        result = validate(state)
        assert not result.ok
        assert result.reason == "Full Price is invalid."

    def test_stage_check_wins_over_row_check(self):
        state = get_reference_plan(stage_percents=(10,), furniture=-5, tax_percent=-1)
        result = validate(state)
        assert "Stage percentages" in result.reason

    def test_row_check_wins_over_percent_check(self):
        state = get_reference_plan(furniture=-5, tax_percent=-1)
        result = validate(state)
        assert result.reason.startswith('Row "Furniture"')

    def test_unset_amount_is_not_an_error(self):
        rows = [
            Row(r.id, r.label, r.kind, builtin=r.builtin)
            if r.builtin == BuiltinRow.FURNITURE else r
            for r in get_reference_plan().rows
        ]
        state = PaymentPlanState(stages=[Stage("s", "All", "2026-01-01", 100)], rows=rows)
        assert validate(state).ok


class TestInvestmentCost:
    """Investment cost is the Total of a valid plan, unknown otherwise."""

    def test_valid_plan_returns_total(self, reference_plan):
        assert investment_cost(reference_plan) == pytest.approx(119_900)

    def test_invalid_plan_returns_none(self):
        assert investment_cost(get_reference_plan(stage_percents=(50,))) is None

    def test_invalid_plan_notifies_reason(self):
        messages = []
        investment_cost(get_reference_plan(stage_percents=(50,)), notify=messages.append)

        assert messages == ["Stage percentages must sum to 100%. Currently: 50.00%."]

    def test_valid_plan_does_not_notify(self, reference_plan):
        messages = []
        investment_cost(reference_plan, notify=messages.append)
        assert messages == []


class TestSummarizePlan:

    def test_summary_matches_individual_functions(self):
        extra = (Row("c1", "Lawyer", RowKind.AMOUNT, amount=2_500),)
        state = get_reference_plan(notary_percent=1, extra_rows=extra)
        summary = summarize_plan(state)

        assert summary.tax_base == compute_tax_base(state)
        assert summary.full_price == compute_full_price(state)
        assert summary.total == compute_total(state)
        assert summary.custom_amounts == 2_500
        assert summary.stage_percent_sum == 100
        assert summary.validation.ok
