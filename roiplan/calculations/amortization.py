"""Fixed-rate loan amortization."""

import math
from dataclasses import dataclass, field
from typing import List

import numpy_financial as npf

from ..models.analysis import LoanInput
from ..models.lookups import BALANCE_EPSILON


@dataclass
class LoanState:
    """Running state of one loan inside a single simulation."""

    name: str
    rate_monthly: float
    num_periods: float  # May be fractional; the last payment is capped at the balance
    payment: float
    balance: float
    start_month: int = 0

    @classmethod
    def from_input(cls, loan: LoanInput) -> "LoanState":
        rate_monthly = loan.rate_monthly
        num_periods = loan.num_periods
        return cls(
            name=loan.name,
            rate_monthly=rate_monthly,
            num_periods=num_periods,
            payment=monthly_payment(rate_monthly, num_periods, loan.amount),
            balance=loan.amount,
            start_month=loan.start_month or 0,
        )

    def is_active(self, month: int) -> bool:
        """True when the loan is serviced in this month."""
        return (
            self.start_month <= month < self.start_month + self.num_periods
            and self.balance > BALANCE_EPSILON
        )


@dataclass(frozen=True)
class AmortizationStep:
    """Split of one payment."""

    payment: float
    interest: float
    principal: float
    balance: float  # After the payment


@dataclass
class LoanSchedule:
    """Full amortization schedule of a loan."""

    payment: float
    periods: List[AmortizationStep] = field(default_factory=list)

    @property
    def total_interest(self) -> float:
        return sum(p.interest for p in self.periods)

    @property
    def total_principal(self) -> float:
        return sum(p.principal for p in self.periods)

    def period(self, n: int) -> AmortizationStep:
        """Step for payment number n (1-indexed)."""
        if n < 1 or n > len(self.periods):
            raise IndexError(f"Period {n} out of range [1, {len(self.periods)}]")
        return self.periods[n - 1]


def monthly_payment(rate_monthly: float, num_periods: float, principal: float) -> float:
    """Level payment that retires the principal over num_periods.

    Args:
        rate_monthly: Monthly interest rate (0.005 for 6% APR).
        num_periods: Number of monthly payments.
        principal: Amount borrowed.

    Returns:
        Positive monthly payment. principal / num_periods when the rate is
        zero; NaN when there are no periods.
    """
    if num_periods <= 0:
        return math.nan
    if rate_monthly == 0:
        return principal / num_periods
    # npf.pmt returns the payment as a negative cash flow
    return float(-npf.pmt(rate_monthly, num_periods, principal))


def step_loan(loan: LoanState) -> AmortizationStep:
    """Apply one payment to the loan, updating its balance in place."""
    interest = loan.balance * loan.rate_monthly
    principal = min(loan.payment - interest, loan.balance)
    loan.balance -= principal
    return AmortizationStep(
        payment=loan.payment,
        interest=interest,
        principal=principal,
        balance=loan.balance,
    )


def amortize_loan_schedule(loan: LoanInput) -> LoanSchedule:
    """Payment and per-period interest / principal / balance of a loan.

    Periods stop at the end of the term or once the balance is paid off.
    """
    state = LoanState.from_input(loan)
    schedule = LoanSchedule(payment=state.payment)

    periods = math.ceil(state.num_periods) if math.isfinite(state.num_periods) else 0
    for _period in range(periods):
        if state.balance <= BALANCE_EPSILON:
            break
        schedule.periods.append(step_loan(state))

    return schedule


def remaining_balance(
    principal: float,
    rate_monthly: float,
    payment: float,
    months_elapsed: int,
) -> float:
    """Closed-form balance after a number of level payments.

    Balance = P x (1 + r)^n - PMT x [((1 + r)^n - 1) / r]
    """
    if rate_monthly == 0:
        return max(0.0, principal - payment * months_elapsed)

    growth_factor = (1 + rate_monthly) ** months_elapsed
    balance = principal * growth_factor - payment * ((growth_factor - 1) / rate_monthly)
    return max(0.0, balance)
