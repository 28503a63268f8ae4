"""Lookup tables and constants for the payment plan and scenario engine."""

from enum import Enum
from typing import Dict, Tuple


class RowKind(str, Enum):
    """How a payment-plan row contributes to the 100% column."""

    AMOUNT = "amount"  # User enters an amount
    PERCENT_OF_FULL = "percent_of_full"  # User enters X%, amount = X% of Full Price
    COMPUTED = "computed"  # System computed (Tax, Full Price, Total, ...)
    SEPARATOR = "separator"


class BuiltinRow(str, Enum):
    """Tags for the fixed rows every payment plan starts with."""

    APARTMENT = "apartment"
    PARKING = "parking"
    TAX = "tax"
    FULL_PRICE = "full_price"
    FURNITURE = "furniture"
    NOTARY = "notary"
    APPRAISER = "appraiser"
    TOTAL = "total"


# Built-ins that may appear at most once in a plan
UNIQUE_BUILTINS = (BuiltinRow.TAX, BuiltinRow.FULL_PRICE, BuiltinRow.TOTAL)

# Stage percentages are compared as round(sum * 1000) == 100000,
# i.e. a tolerance of 0.001 percentage points.
STAGE_SUM_SCALE = 1000
STAGE_SUM_TARGET = 100 * STAGE_SUM_SCALE

MAX_PERCENT = 1000.0

# Loans with a balance below this are treated as paid off
BALANCE_EPSILON = 1e-8

DEFAULT_CURRENCY = "EUR"
DEFAULT_TAX_PERCENT = 9.0

# Projection horizon bounds (months)
DEFAULT_HORIZON_MONTHS = 120
MAX_HORIZON_MONTHS = 600

# Target currencies offered next to the plan currency
POPULAR_CURRENCIES: Tuple[str, ...] = ("ILS", "USD", "GBP", "RON", "JPY", "CHF", "AUD")

# Fallback rates, 1 unit of the plan currency -> X target
DEFAULT_FX_RATES: Dict[str, float] = {
    "ILS": 3.98,
    "USD": 1.08,
    "GBP": 0.84,
    "RON": 4.97,
    "JPY": 168.0,
    "CHF": 0.95,
    "AUD": 1.62,
}

# (label, kind, builtin, amount, locked) for a fresh plan, in display order
DEFAULT_ROW_TEMPLATE = (
    ("Apartment", RowKind.AMOUNT, BuiltinRow.APARTMENT, 100_000.0, False),
    ("Parking", RowKind.AMOUNT, BuiltinRow.PARKING, 10_000.0, False),
    ("TAX", RowKind.COMPUTED, BuiltinRow.TAX, None, True),
    ("Full Price", RowKind.COMPUTED, BuiltinRow.FULL_PRICE, None, True),
    ("—", RowKind.SEPARATOR, None, None, False),
    ("Furniture", RowKind.AMOUNT, BuiltinRow.FURNITURE, 0.0, False),
    ("Notary", RowKind.COMPUTED, BuiltinRow.NOTARY, None, True),
    ("Appraiser", RowKind.COMPUTED, BuiltinRow.APPRAISER, None, True),
    ("Total", RowKind.COMPUTED, BuiltinRow.TOTAL, None, True),
)

# Default stage split for a fresh plan
DEFAULT_STAGE_PERCENTS = (30.0, 70.0)
