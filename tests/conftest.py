"""Canonical test fixtures.

Fixture: $200K loan, 3.5% rate, 30yr fixed, monthly payments.
"""

import pytest
from decimal import Decimal

from amcalc.data.cache import InMemoryCalculationCache
from amcalc.models.amortization import AmortizationInputs, PaymentFrequency


@pytest.fixture
def standard_inputs() -> AmortizationInputs:
    """$200K, 3.5%, 30 years, monthly."""
    return AmortizationInputs(
        principal=Decimal("200000"),
        interest_rate=Decimal("3.5"),
        term_years=30,
        payment_frequency=PaymentFrequency.MONTHLY,
    )


@pytest.fixture
def ten_year_inputs() -> AmortizationInputs:
    """$100K, 5%, 10 years, monthly."""
    return AmortizationInputs(
        principal=Decimal("100000"),
        interest_rate=Decimal("5"),
        term_years=10,
    )


@pytest.fixture
def memory_cache() -> InMemoryCalculationCache:
    return InMemoryCalculationCache()
