"""Inputs and outputs of the scenario (cash flow / amortization) engine."""

import math
from dataclasses import dataclass, field
from typing import List, Optional

from .lookups import DEFAULT_CURRENCY


@dataclass(frozen=True)
class LoanInput:
    """A fixed-rate loan financing the purchase."""

    name: str = "Loan"
    amount: float = 0.0  # Principal
    rate_apr: float = 0.0  # Annual rate, 6 means 6%
    term_years: float = 30  # Loan total term
    start_month: int = 0  # Offset for second liens or rehab loans
    balloon_month: Optional[int] = None  # Carried, not yet modeled
    points_pct: Optional[float] = None  # Carried, not yet modeled
    origination_fee: Optional[float] = None  # Carried, not yet modeled

    @property
    def rate_monthly(self) -> float:
        return (self.rate_apr / 100) / 12

    @property
    def num_periods(self) -> float:
        """Number of monthly payments; fractional terms are kept as-is."""
        return self.term_years * 12


@dataclass
class AnalysisInput:
    """Complete input parameters for one purchase scenario.

    All percentages are percent numbers (5 means 5%). Monthly figures are
    purchase-day values; they grow from month 1 onward.
    """

    # === Purchase ===
    purchase_price: float = 0.0
    closing_costs: float = 0.0
    rehab_costs: float = 0.0

    # === Operations (monthly) ===
    monthly_rent: float = 0.0
    vacancy_pct: float = 0.0
    taxes_monthly: float = 0.0
    insurance_monthly: float = 0.0
    hoa_monthly: float = 0.0
    management_pct: float = 0.0  # Of effective rent
    maintenance_pct: float = 0.0  # Of effective rent
    other_monthly: float = 0.0

    # === Growth (annual) ===
    appreciation_pct: float = 0.0
    rent_growth_pct: float = 0.0
    expense_inflation_pct: float = 0.0

    # === Exit ===
    sale_year: float = 10  # Fractional years end on the last whole month
    selling_costs_pct: float = 0.0

    currency: str = DEFAULT_CURRENCY

    loans: List[LoanInput] = field(default_factory=list)

    @property
    def total_months(self) -> int:
        months = self.sale_year * 12
        if not math.isfinite(months):
            return 0
        return math.floor(months)

    @property
    def fixed_expenses_monthly(self) -> float:
        return self.taxes_monthly + self.insurance_monthly + self.hoa_monthly + self.other_monthly

    def validate(self) -> List[str]:
        """Validate inputs and return list of errors.

        The scenario engine itself never raises; callers use this to decide
        whether its output is meaningful.

        Returns:
            List of validation error messages. Empty if valid.
        """
        errors = []

        for name in ("purchase_price", "closing_costs", "rehab_costs", "monthly_rent",
                     "taxes_monthly", "insurance_monthly", "hoa_monthly", "other_monthly"):
            value = getattr(self, name)
            if not value >= 0:
                errors.append(f"{name} must be a non-negative number, got {value}")

        for name in ("vacancy_pct", "management_pct", "maintenance_pct", "selling_costs_pct"):
            value = getattr(self, name)
            if not 0 <= value <= 100:
                errors.append(f"{name} must be 0-100, got {value}")

        if not 0 <= self.sale_year < math.inf:
            errors.append(f"sale_year must be a non-negative number, got {self.sale_year}")

        for loan in self.loans:
            if not loan.amount >= 0:
                errors.append(f"loan '{loan.name}' amount must be non-negative, got {loan.amount}")
            if not loan.rate_apr >= 0:
                errors.append(f"loan '{loan.name}' rate must be non-negative, got {loan.rate_apr}")
            if not loan.term_years > 0:
                errors.append(f"loan '{loan.name}' term must be positive, got {loan.term_years}")
            if loan.start_month < 0:
                errors.append(f"loan '{loan.name}' start_month must be non-negative")

        return errors


@dataclass(frozen=True)
class TimelinePoint:
    """One simulated month."""

    month: int
    year: int
    market_value: float
    total_loan_balance: float
    cumulative_cash_invested: float  # Down payment + fees + absorbed negative cash flow
    cumulative_net_cash_flow: float  # Signed
    equity: float  # market_value - total_loan_balance

    # Month figures, used for the yearly roll-up
    noi: float = 0.0
    debt_service: float = 0.0
    cash_flow: float = 0.0
    principal_paid: float = 0.0
    interest_paid: float = 0.0


@dataclass(frozen=True)
class ScenarioKPIs:
    """Headline figures for a scenario, based on purchase-day inputs."""

    monthly_payment_total: float
    monthly_noi: float
    monthly_cash_flow: float
    cap_rate: float  # %
    cash_on_cash: float  # %
    dscr: float


@dataclass(frozen=True)
class YearlySummary:
    """Month figures summed over one year index."""

    year: int
    noi: float
    cash_flow: float
    principal_paid: float
    interest_paid: float
    ending_balance: float


@dataclass(frozen=True)
class ExitSummary:
    """Sale at the end of the hold."""

    sale_price: float
    selling_costs: float
    loan_payoff: float
    net_sale_proceeds: float


@dataclass
class ScenarioResult:
    """Complete scenario analysis result."""

    kpis: ScenarioKPIs
    timeline: List[TimelinePoint] = field(default_factory=list)
    yearly: List[YearlySummary] = field(default_factory=list)
    exit: Optional[ExitSummary] = None
