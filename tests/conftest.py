"""
Pytest configuration and shared fixtures.
"""

import pytest
import sys
import os
from decimal import Decimal

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from moneymath.calculations.amortization import LoanRequest


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "integration: marks integration tests")


@pytest.fixture
def standard_loan():
    """500,000 at 10% over 60 months."""
    return LoanRequest(
        principal=Decimal("500000"),
        annual_rate_percent=Decimal("10"),
        tenure_months=60,
    )
