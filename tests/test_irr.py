"""
Tests for XIRR, CAGR and absolute return.
"""

import logging

import pytest
from datetime import date
from decimal import Decimal

from moneymath.calculations.irr import (
    MAX_ITERATIONS,
    calculate_absolute_return,
    calculate_cagr,
    calculate_xirr,
    calculate_xnpv,
    cash_flow_summary,
    solve_xirr,
)


class TestXIRRCalculations:
    """Test XIRR on dated cash flows."""

    def test_one_year_twenty_percent(self):
        """Invest 100,000 and receive 120,000 365 days later."""
        dates = [date(2023, 1, 1), date(2024, 1, 1)]
        xirr = calculate_xirr(dates, [-100000, 120000])
        assert abs(xirr - Decimal("20")) < Decimal("0.5")

    def test_result_is_percent_with_four_places(self):
        dates = [date(2023, 1, 1), date(2024, 1, 1)]
        xirr = calculate_xirr(dates, [-100, 110])
        assert xirr.as_tuple().exponent == -4
        assert abs(xirr - Decimal("10")) < Decimal("0.01")

    def test_multiple_flows(self):
        """Test XIRR calculation with actual dates."""
        dates = [
            date(2025, 1, 1),
            date(2026, 1, 1),
            date(2027, 1, 1),
        ]
        xirr = calculate_xirr(dates, [-100, 50, 60])
        assert xirr > 0  # Should be positive return
        assert xirr < 20  # Should be reasonable

    def test_negative_return(self):
        dates = [date(2023, 1, 1), date(2024, 1, 1)]
        assert calculate_xirr(dates, [-100, 80]) < 0

    def test_order_independent(self):
        """Offsets are measured from the earliest date, not the first entry."""
        in_order = calculate_xirr(
            [date(2023, 1, 1), date(2023, 7, 1), date(2024, 1, 1)], [-1000, -500, 1700]
        )
        shuffled = calculate_xirr(
            [date(2024, 1, 1), date(2023, 1, 1), date(2023, 7, 1)], [1700, -1000, -500]
        )
        assert abs(in_order - shuffled) <= Decimal("0.0001")

    def test_solution_zeroes_npv(self):
        dates = [date(2022, 3, 15), date(2023, 1, 10), date(2024, 6, 30)]
        amounts = [-50000, -25000, 90000]
        solution = solve_xirr(dates, amounts)
        assert solution.converged is True
        assert solution.reason == "converged"
        assert 1 <= solution.iterations <= MAX_ITERATIONS
        assert abs(calculate_xnpv(dates, amounts, solution.rate)) < 1

    def test_half_capital_lost(self):
        """The first Newton step overshoots below -100%; the search recovers."""
        dates = [date(2023, 1, 1), date(2024, 1, 1)]
        xirr = calculate_xirr(dates, [-100, 50])
        assert abs(xirr - Decimal("-50")) < Decimal("0.5")

        solution = solve_xirr(dates, [-100, 50])
        assert solution.converged is True
        assert solution.reason == "converged"
        assert -1 < solution.rate < 0

    def test_same_day_flows_stall(self):
        """With every flow on one date the derivative is zero."""
        dates = [date(2023, 1, 1), date(2023, 1, 1)]
        solution = solve_xirr(dates, [-100, 50])
        assert solution.converged is False
        assert solution.reason == "stalled"
        assert solution.rate == 0.1

    def test_non_convergence_logged(self, caplog):
        dates = [date(2023, 1, 1), date(2023, 1, 1)]
        with caplog.at_level(logging.WARNING, logger="moneymath.calculations.irr"):
            xirr = calculate_xirr(dates, [-100, 50])
        assert xirr == Decimal("10.0000")
        assert any(
            record.levelno == logging.WARNING and "did not converge" in record.getMessage()
            for record in caplog.records
        )

    def test_validation(self):
        with pytest.raises(ValueError):
            calculate_xirr([date(2023, 1, 1)], [-100])
        with pytest.raises(ValueError):
            calculate_xirr([date(2023, 1, 1), date(2024, 1, 1)], [-100])
        with pytest.raises(ValueError):
            calculate_xirr([date(2023, 1, 1), date(2024, 1, 1)], [-100, -10])
        with pytest.raises(ValueError):
            calculate_xirr([date(2023, 1, 1), date(2024, 1, 1)], [100, 10])


class TestReturns:
    """Test CAGR and absolute return."""

    def test_cagr(self):
        """100 growing to 121 over 2 years is 10% a year."""
        assert abs(calculate_cagr(100, 121, 2) - Decimal("10")) < Decimal("0.001")

    def test_cagr_degenerate(self):
        assert calculate_cagr(0, 121, 2) == 0
        assert calculate_cagr(100, 121, 0) == 0

    def test_cagr_total_loss(self):
        assert calculate_cagr(100, 0, 2) == Decimal("-100")

    def test_absolute_return(self):
        assert calculate_absolute_return(100000, 120000) == Decimal("20.0000")
        assert calculate_absolute_return(100000, 90000) == Decimal("-10.0000")
        assert calculate_absolute_return(0, 90000) == 0

    def test_cash_flow_summary(self):
        summary = cash_flow_summary([-1000, -500, 1800])
        assert summary.invested == Decimal("1500")
        assert summary.returned == Decimal("1800")
        assert summary.multiple == Decimal("1.2")
