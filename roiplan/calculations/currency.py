"""Exchange-rate lookup and display formatting.

Rates are quoted as 1 unit of the plan currency -> X target currency.
Fetching live rates is left to the caller; the table only merges whatever
mapping it is handed and falls back to DEFAULT_FX_RATES.
"""

import math
import warnings
from typing import Dict, Mapping, Optional

from ..models.lookups import DEFAULT_FX_RATES, POPULAR_CURRENCIES


class FxRateTable:
    """Known exchange rates from one base currency."""

    def __init__(self, base_currency: str, rates: Optional[Mapping[str, float]] = None):
        self.base_currency = base_currency
        self._rates: Dict[str, float] = dict(DEFAULT_FX_RATES if rates is None else rates)
        self._rates[base_currency] = 1.0

    @property
    def rates(self) -> Dict[str, float]:
        return dict(self._rates)

    def rate(self, currency: str) -> float:
        """Rate to convert one base unit into `currency`.

        Returns 1.0 for the base currency, the known rate otherwise, then
        the static fallback, and 0.0 (with a RuntimeWarning) when nothing
        is known.
        """
        if currency == self.base_currency:
            return 1.0
        if currency in self._rates:
            return self._rates[currency]
        if currency in DEFAULT_FX_RATES:
            return DEFAULT_FX_RATES[currency]
        warnings.warn(
            f"No exchange rate for {self.base_currency}->{currency}; using 0.",
            RuntimeWarning,
            stacklevel=2,
        )
        return 0.0

    def convert(self, amount: float, currency: str) -> float:
        return amount * self.rate(currency)

    def merge(self, fetched: Mapping[str, float]) -> "FxRateTable":
        """New table preferring fetched rates for the popular currencies.

        Non-numeric or non-positive fetched values are ignored.
        """
        merged = dict(self._rates)
        for code in POPULAR_CURRENCIES:
            value = fetched.get(code)
            if isinstance(value, (int, float)) and math.isfinite(value) and value > 0:
                merged[code] = float(value)
        return FxRateTable(self.base_currency, merged)


def format_currency(amount: Optional[float], currency: str) -> str:
    """Display string for an amount, "NaN" when missing."""
    if amount is None or (isinstance(amount, float) and math.isnan(amount)):
        return "NaN"
    if math.isinf(amount):
        return f"{currency} {'-' if amount < 0 else ''}inf"
    return f"{currency} {amount:,.2f}"


def format_pct(value: float) -> str:
    """Percent number (12.34) as "12.3%"."""
    return f"{value:.1f}%"
