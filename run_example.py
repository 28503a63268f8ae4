#!/usr/bin/env python3
"""Example script: price a payment plan and run a financed purchase scenario."""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from roiplan.models.analysis import LoanInput
from roiplan.models.payment_plan import (
    default_payment_plan,
    add_custom_amount_row,
    set_percentages,
)
from roiplan.calculations.payment_plan import summarize_plan, investment_cost
from roiplan.calculations.stages import build_stage_table
from roiplan.calculations.currency import FxRateTable, format_currency, format_pct
from roiplan.calculations.scenario import analysis_from_plan, run_scenario
from roiplan.calculations.trace import TraceContext


def print_plan(state, fx_code: str = "ILS") -> None:
    summary = summarize_plan(state)
    fx = FxRateTable(state.currency)
    table = build_stage_table(state, fx_rate=fx.rate(fx_code))
    cur = state.currency

    print("=" * 70)
    print("PAYMENT PLAN")
    print("=" * 70)
    header = f"{'Row':<20}{'100%':>16}" + "".join(f"{label:>16}" for label in table.stage_labels)
    print(header)
    for row in table.rows:
        if row.base_amount is None:
            print("-" * len(header))
            continue
        cells = "".join(f"{amount:>16,.2f}" for amount in row.stage_amounts)
        print(f"{row.label:<20}{row.base_amount:>16,.2f}{cells}")
    if table.fx_total is not None:
        fx_cells = "".join(f"{amount:>16,.2f}" for amount in table.fx_stage_amounts)
        print(f"{'Total in ' + fx_code:<20}{table.fx_total:>16,.2f}{fx_cells}")
    else:
        print(f"{'Total in ' + fx_code:<20}{'n/a':>16}")
    print()
    print(f"Full Price: {format_currency(summary.full_price, cur)}")
    print(f"Total:      {format_currency(summary.total, cur)}")
    print(f"Stages:     {format_pct(summary.stage_percent_sum)}")
    print(f"Status:     {'valid' if summary.validation else summary.validation.reason}")


def main():
    state = default_payment_plan(currency="EUR")
    state = set_percentages(state, notary_percent=1.0, appraiser_percent=0.25)
    state = add_custom_amount_row(state, label="Lawyer", amount=2_500)

    print_plan(state)

    cost = investment_cost(state, notify=lambda reason: print(f"! {reason}"))
    if cost is None:
        return

    analysis = analysis_from_plan(
        state,
        monthly_rent=650,
        vacancy_pct=5,
        taxes_monthly=40,
        insurance_monthly=15,
        hoa_monthly=30,
        management_pct=8,
        maintenance_pct=5,
        appreciation_pct=3,
        rent_growth_pct=2,
        expense_inflation_pct=2.5,
        sale_year=10,
        selling_costs_pct=4,
        loans=[LoanInput(name="Mortgage", amount=90_000, rate_apr=5.5, term_years=25)],
    )

    with TraceContext() as ctx:
        result = run_scenario(analysis)

    cur = analysis.currency
    k = result.kpis
    print()
    print("=" * 70)
    print("SCENARIO")
    print("=" * 70)
    print(f"Debt service / month: {format_currency(k.monthly_payment_total, cur)}")
    print(f"NOI / month:          {format_currency(k.monthly_noi, cur)}")
    print(f"Cash flow / month:    {format_currency(k.monthly_cash_flow, cur)}")
    print(f"Cap rate:             {format_pct(k.cap_rate)}")
    print(f"Cash on cash:         {format_pct(k.cash_on_cash)}")
    print(f"DSCR:                 {k.dscr:.2f}x")
    print()
    print(f"{'Year':>4}{'NOI':>14}{'Cash Flow':>14}{'Principal':>14}{'Balance':>14}")
    for y in result.yearly:
        print(f"{y.year:>4}{y.noi:>14,.0f}{y.cash_flow:>14,.0f}{y.principal_paid:>14,.0f}{y.ending_balance:>14,.0f}")
    print()
    print(f"Net sale proceeds: {format_currency(result.exit.net_sale_proceeds, cur)}")
    print()
    print(ctx.summary())


if __name__ == "__main__":
    main()
