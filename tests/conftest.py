"""Pytest configuration and shared fixtures."""

import pytest
import sys
from pathlib import Path

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from tests.fixtures.test_inputs import (
    get_reference_plan,
    get_rental_analysis,
    get_negative_cash_flow_analysis,
)


@pytest.fixture
def reference_plan():
    """Apartment 100k + parking 10k at 9% tax, split 30/70."""
    return get_reference_plan()


@pytest.fixture
def rental_analysis():
    """Leveraged rental with a 200k / 6% / 30y mortgage."""
    return get_rental_analysis()


@pytest.fixture
def negative_cash_flow_analysis():
    return get_negative_cash_flow_analysis()
