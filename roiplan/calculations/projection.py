"""Quick operations figures and the simple growth projection.

These are the lightweight numbers shown next to the payment plan before a
full scenario is set up: one operating-expense ratio, simple monthly growth
rates (annual / 12) and no financing.
"""

import math
from dataclasses import dataclass
from typing import List, Optional

from ..models.lookups import DEFAULT_HORIZON_MONTHS, MAX_HORIZON_MONTHS


@dataclass(frozen=True)
class QuickOperations:
    noi_annual: float
    cap_rate: float  # Fraction of investment cost; NaN when not computable


@dataclass(frozen=True)
class ProjectionPoint:
    """One month of the simple projection."""

    month: int
    year_label: str  # "Y1" for months 0-11
    price: float
    equity_gain: float  # price - purchase-day price
    net_cf_month: float
    cumulative_net_cf: float


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def quick_operations(
    investment_cost: Optional[float],
    monthly_rent: float,
    opex_pct_of_rent: float,
) -> QuickOperations:
    """Annual NOI and cap rate on the investment cost.

    Args:
        investment_cost: Plan Total, or None while the plan is invalid.
        monthly_rent: Current monthly rent.
        opex_pct_of_rent: Operating expenses as % of rent (clamped to 0-100).
    """
    opex = _clamp(opex_pct_of_rent / 100, 0.0, 1.0)
    noi_annual = monthly_rent * (1 - opex) * 12

    if not math.isfinite(noi_annual) or noi_annual < 0:
        return QuickOperations(noi_annual=noi_annual, cap_rate=math.nan)
    if investment_cost is None or not math.isfinite(investment_cost) or investment_cost <= 0:
        return QuickOperations(noi_annual=noi_annual, cap_rate=math.nan)

    return QuickOperations(noi_annual=noi_annual, cap_rate=noi_annual / investment_cost)


def project_growth(
    full_price: float,
    monthly_rent: float,
    prop_appreciation_pct_year: float,
    rent_appreciation_pct_year: float,
    opex_pct_of_rent: float,
    horizon_months: int = DEFAULT_HORIZON_MONTHS,
) -> List[ProjectionPoint]:
    """Project price and net rent from the plan's Full Price.

    Returns:
        Points for months 0..horizon inclusive; horizon is clamped to
        1..600 months.
    """
    if not math.isfinite(horizon_months):
        horizon_months = DEFAULT_HORIZON_MONTHS
    months = int(_clamp(int(horizon_months), 1, MAX_HORIZON_MONTHS))

    monthly_prop = (prop_appreciation_pct_year / 100) / 12
    monthly_rent_growth = (rent_appreciation_pct_year / 100) / 12
    opex = _clamp(opex_pct_of_rent / 100, 0.0, 1.0)

    points = []
    cumulative = 0.0
    for month in range(months + 1):
        price = full_price * (1 + monthly_prop) ** month
        rent = monthly_rent * (1 + monthly_rent_growth) ** month
        net_cf = rent * (1 - opex)
        cumulative += net_cf
        points.append(ProjectionPoint(
            month=month,
            year_label=f"Y{month // 12 + 1}",
            price=price,
            equity_gain=price - full_price,
            net_cf_month=net_cf,
            cumulative_net_cf=cumulative,
        ))

    return points
