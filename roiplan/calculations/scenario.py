"""Month-by-month purchase scenario: rent, expenses, loans, cash and equity.

The simulation runs over months 0..sale_year*12 inclusive. Month 0 is the
purchase month: the down payment, closing and rehab costs are invested and
the first month of operations and debt service is booked. From month 1 on,
rent, expenses and market value grow at compounded monthly rates.

Nothing here raises on bad numbers. A zero purchase price or a loan with no
term produces NaN / inf in the affected outputs, and callers are expected
to check for finiteness (AnalysisInput.validate() flags such inputs).
"""

import math
from dataclasses import asdict
from typing import Dict, List

import pandas as pd

from ..models.analysis import (
    AnalysisInput,
    ExitSummary,
    ScenarioKPIs,
    ScenarioResult,
    TimelinePoint,
    YearlySummary,
)
from ..models.payment_plan import PaymentPlanState
from .amortization import LoanState, step_loan
from .payment_plan import compute_full_price, compute_total
from .trace import trace


def monthly_rate_from_annual(annual_pct: float) -> float:
    """Compounded monthly rate equivalent to an annual percentage."""
    base = 1 + annual_pct / 100
    if base < 0:
        return math.nan
    return base ** (1 / 12) - 1


def _divide(numerator: float, denominator: float) -> float:
    # IEEE semantics instead of ZeroDivisionError
    if denominator == 0:
        if numerator == 0 or math.isnan(numerator):
            return math.nan
        return math.copysign(math.inf, numerator)
    return numerator / denominator


def _floor_at_one(value: float) -> float:
    # NaN propagates
    return value if math.isnan(value) else max(1.0, value)


def run_scenario(
    analysis: AnalysisInput,
    corrected_cash_on_cash: bool = False,
) -> ScenarioResult:
    """Simulate the purchase and derive KPIs.

    Args:
        analysis: Scenario inputs (assumed validated by the caller).
        corrected_cash_on_cash: Use the mean annual cash flow for the
            cash-on-cash KPI instead of the terminal cumulative figure x 12.

    Returns:
        ScenarioResult with KPIs, one TimelinePoint per month, yearly
        roll-up and the exit at the last month.
    """
    months = max(0, analysis.total_months)
    rent_growth = monthly_rate_from_annual(analysis.rent_growth_pct)
    expense_inflation = monthly_rate_from_annual(analysis.expense_inflation_pct)
    appreciation = monthly_rate_from_annual(analysis.appreciation_pct)

    loans = [LoanState.from_input(loan) for loan in analysis.loans]
    total_loan_balance = sum(loan.balance for loan in loans)
    market_value = analysis.purchase_price

    # Day-0 cash: down payment + closing + rehab
    down_payment = analysis.purchase_price - total_loan_balance
    cumulative_cash_invested = down_payment + analysis.closing_costs + analysis.rehab_costs
    cumulative_net_cash_flow = -cumulative_cash_invested

    rent = analysis.monthly_rent
    taxes = analysis.taxes_monthly
    insurance = analysis.insurance_monthly
    hoa = analysis.hoa_monthly
    other = analysis.other_monthly

    timeline: List[TimelinePoint] = []

    for month in range(months + 1):
        if month > 0:
            rent *= 1 + rent_growth
            taxes *= 1 + expense_inflation
            insurance *= 1 + expense_inflation
            hoa *= 1 + expense_inflation
            other *= 1 + expense_inflation
            market_value *= 1 + appreciation

        effective_rent = rent * (1 - analysis.vacancy_pct / 100)
        management = effective_rent * (analysis.management_pct / 100)
        maintenance = effective_rent * (analysis.maintenance_pct / 100)
        operating_expenses = taxes + insurance + hoa + other + management + maintenance
        noi = effective_rent - operating_expenses

        debt_service = 0.0
        principal_paid = 0.0
        interest_paid = 0.0
        for loan in loans:
            if loan.is_active(month):
                step = step_loan(loan)
                debt_service += step.payment
                principal_paid += step.principal
                interest_paid += step.interest

        total_loan_balance = sum(loan.balance for loan in loans)

        cash_flow = noi - debt_service
        cumulative_net_cash_flow += cash_flow
        if cash_flow < 0:
            # Shortfalls are funded by the owner
            cumulative_cash_invested += -cash_flow

        timeline.append(TimelinePoint(
            month=month,
            year=month // 12,
            market_value=market_value,
            total_loan_balance=total_loan_balance,
            cumulative_cash_invested=cumulative_cash_invested,
            cumulative_net_cash_flow=cumulative_net_cash_flow,
            equity=market_value - total_loan_balance,
            noi=noi,
            debt_service=debt_service,
            cash_flow=cash_flow,
            principal_paid=principal_paid,
            interest_paid=interest_paid,
        ))

    kpis = _calculate_kpis(analysis, loans, timeline, corrected_cash_on_cash)

    return ScenarioResult(
        kpis=kpis,
        timeline=timeline,
        yearly=summarize_by_year(timeline),
        exit=_calculate_exit(analysis, timeline[-1]),
    )


def _calculate_kpis(
    analysis: AnalysisInput,
    loans: List[LoanState],
    timeline: List[TimelinePoint],
    corrected_cash_on_cash: bool,
) -> ScenarioKPIs:
    """KPIs from purchase-day inputs and the terminal cumulative figures.

    Management and maintenance are taken on gross rent here, while the
    monthly simulation takes them on effective rent.
    """
    rent = analysis.monthly_rent
    effective_rent = rent * (1 - analysis.vacancy_pct / 100)
    expenses = (
        analysis.fixed_expenses_monthly
        + rent * (analysis.management_pct + analysis.maintenance_pct) / 100
    )

    payment_total = trace(
        "scenario.monthly_payment_total",
        sum(loan.payment for loan in loans),
        {f"loan.{loan.name}": loan.payment for loan in loans},
    )
    noi = trace(
        "scenario.monthly_noi",
        effective_rent - expenses,
        {"effective_rent": effective_rent, "operating_expenses": expenses},
    )
    cash_flow = trace(
        "scenario.monthly_cash_flow",
        noi - payment_total,
        {"scenario.monthly_noi": noi, "scenario.monthly_payment_total": payment_total},
    )
    cap_rate = trace(
        "scenario.cap_rate",
        _divide(noi * 12, analysis.purchase_price) * 100,
        {"scenario.monthly_noi": noi, "input.purchase_price": analysis.purchase_price},
    )

    last = timeline[-1]
    trace("scenario.cumulative_net_cash_flow", last.cumulative_net_cash_flow, {})
    trace("scenario.cumulative_cash_invested", last.cumulative_cash_invested, {})
    cash_invested = _floor_at_one(last.cumulative_cash_invested)
    if corrected_cash_on_cash:
        mean_monthly_cash_flow = sum(p.cash_flow for p in timeline) / len(timeline)
        cash_on_cash = mean_monthly_cash_flow * 12 / cash_invested * 100
        note = "mean annual cash flow / cash invested"
    else:
        cash_on_cash = last.cumulative_net_cash_flow * 12 / cash_invested * 100
        note = ""
    cash_on_cash = trace(
        "scenario.cash_on_cash",
        cash_on_cash,
        {
            "scenario.cumulative_net_cash_flow": last.cumulative_net_cash_flow,
            "scenario.cumulative_cash_invested": last.cumulative_cash_invested,
        },
        notes=note,
    )

    dscr = trace(
        "scenario.dscr",
        noi / _floor_at_one(payment_total),
        {"scenario.monthly_noi": noi, "scenario.monthly_payment_total": payment_total},
    )

    return ScenarioKPIs(
        monthly_payment_total=payment_total,
        monthly_noi=noi,
        monthly_cash_flow=cash_flow,
        cap_rate=cap_rate,
        cash_on_cash=cash_on_cash,
        dscr=dscr,
    )


def summarize_by_year(timeline: List[TimelinePoint]) -> List[YearlySummary]:
    """Roll month figures up to one row per year index."""
    by_year: Dict[int, List[TimelinePoint]] = {}
    for point in timeline:
        by_year.setdefault(point.year, []).append(point)

    return [
        YearlySummary(
            year=year,
            noi=sum(p.noi for p in points),
            cash_flow=sum(p.cash_flow for p in points),
            principal_paid=sum(p.principal_paid for p in points),
            interest_paid=sum(p.interest_paid for p in points),
            ending_balance=points[-1].total_loan_balance,
        )
        for year, points in sorted(by_year.items())
    ]


def _calculate_exit(analysis: AnalysisInput, last: TimelinePoint) -> ExitSummary:
    sale_price = last.market_value
    selling_costs = sale_price * analysis.selling_costs_pct / 100
    return ExitSummary(
        sale_price=sale_price,
        selling_costs=selling_costs,
        loan_payoff=last.total_loan_balance,
        net_sale_proceeds=sale_price - selling_costs - last.total_loan_balance,
    )


def analysis_from_plan(state: PaymentPlanState, **inputs) -> AnalysisInput:
    """Scenario inputs priced from a payment plan.

    The purchase price is the plan's Full Price; everything the Total adds
    on top (furniture, fees, custom rows) becomes closing costs.

    Args:
        state: Payment plan.
        **inputs: Any other AnalysisInput field (rent, loans, growth, ...).
    """
    full_price = compute_full_price(state)
    fields = {
        "purchase_price": full_price,
        "closing_costs": compute_total(state) - full_price,
        "currency": state.currency,
    }
    fields.update(inputs)
    return AnalysisInput(**fields)


def timeline_frame(result: ScenarioResult) -> pd.DataFrame:
    """DataFrame of the timeline indexed by month."""
    frame = pd.DataFrame([asdict(point) for point in result.timeline])
    if frame.empty:
        return frame
    return frame.set_index("month")


def yearly_frame(result: ScenarioResult) -> pd.DataFrame:
    frame = pd.DataFrame([asdict(row) for row in result.yearly])
    if frame.empty:
        return frame
    return frame.set_index("year")
