"""
Rate of Return Calculations

XIRR via Newton-Raphson on irregular dated cash flows, plus CAGR and
absolute return. Results are expressed as percentages.
"""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import List, Sequence

import numpy as np

from moneymath.calculations.decimal_math import (
    HUNDRED,
    ZERO,
    Number,
    quantize,
    to_decimal,
)

logger = logging.getLogger(__name__)

MAX_ITERATIONS = 1000
PRECISION = 1e-6
DEFAULT_GUESS = 0.1
DAYS_PER_YEAR = 365.0
RESULT_SCALE = 4


@dataclass(frozen=True)
class XirrSolution:
    """
    Outcome of the Newton-Raphson search.

    reason is one of "converged", "stalled" (derivative ~ 0),
    "max_iterations" or "diverged" (the step produced a non-finite rate).
    """

    rate: float
    iterations: int
    converged: bool
    reason: str

    @property
    def percent(self) -> Decimal:
        """The rate as a percentage rounded to RESULT_SCALE places."""
        return quantize(Decimal(repr(self.rate * 100)), RESULT_SCALE)


@dataclass(frozen=True)
class CashFlowSummary:
    invested: Decimal
    returned: Decimal
    multiple: Decimal


def _year_fractions(dates: Sequence[date]) -> np.ndarray:
    """Years elapsed since the earliest date, on an actual/365 basis."""
    base_date = min(dates)
    return np.array([(d - base_date).days for d in dates], dtype=float) / DAYS_PER_YEAR


def _validate_cash_flows(dates: Sequence[date], amounts: Sequence[Number]) -> None:
    if len(amounts) != len(dates):
        raise ValueError("Cash flows and dates arrays must have same length")

    if len(amounts) < 2:
        raise ValueError("At least 2 cash flows required for XIRR")

    values = [to_decimal(amount) for amount in amounts]
    if not any(v < 0 for v in values) or not any(v > 0 for v in values):
        raise ValueError("Cash flows must contain both positive and negative values")


def calculate_xnpv(
    dates: Sequence[date], amounts: Sequence[Number], rate: float
) -> float:
    """NPV of dated cash flows at an annual rate (as a fraction)."""
    flows = np.array([float(a) for a in amounts], dtype=float)
    years = _year_fractions(dates)
    return float(np.sum(flows / np.power(1.0 + rate, years)))


def _xnpv_derivative(flows: np.ndarray, years: np.ndarray, rate: float) -> float:
    return float(np.sum(-flows * years / np.power(1.0 + rate, years + 1.0)))


def solve_xirr(
    dates: Sequence[date], amounts: Sequence[Number], guess: float = DEFAULT_GUESS
) -> XirrSolution:
    """
    Find the rate where the XNPV of the cash flows is zero.

    Newton-Raphson from ``guess``; stops when the step is below PRECISION,
    when the derivative vanishes, or after MAX_ITERATIONS. In the latter
    cases the last rate is returned with converged=False. A step that would
    leave the domain rate > -1 is damped to halfway between the current
    rate and -1.

    Raises:
        ValueError: For mismatched lengths, fewer than 2 flows, or flows
            lacking an outflow or an inflow
    """
    _validate_cash_flows(dates, amounts)

    flows = np.array([float(a) for a in amounts], dtype=float)
    years = _year_fractions(dates)
    rate = guess

    with np.errstate(all="ignore"):
        for iteration in range(1, MAX_ITERATIONS + 1):
            npv = float(np.sum(flows / np.power(1.0 + rate, years)))
            dnpv = _xnpv_derivative(flows, years, rate)

            if abs(dnpv) < PRECISION:
                return XirrSolution(rate, iteration, False, "stalled")

            new_rate = rate - npv / dnpv
            if not np.isfinite(new_rate):
                return XirrSolution(rate, iteration, False, "diverged")
            if new_rate <= -1.0:
                new_rate = (rate - 1.0) / 2

            if abs(new_rate - rate) < PRECISION:
                return XirrSolution(new_rate, iteration, True, "converged")

            rate = new_rate

    return XirrSolution(rate, MAX_ITERATIONS, False, "max_iterations")


def calculate_xirr(
    dates: Sequence[date], amounts: Sequence[Number], guess: float = DEFAULT_GUESS
) -> Decimal:
    """
    Calculate XIRR (IRR with specific dates).

    Args:
        dates: Date of each cash flow
        amounts: Signed amounts (negative = investment, positive = inflow)
        guess: Initial rate guess as a fraction (default 0.1 = 10%)

    Returns:
        Annual rate as a percentage, e.g. Decimal("15.5000") for 15.5%

    Raises:
        ValueError: If the cash flows cannot be solved
    """
    solution = solve_xirr(dates, amounts, guess)
    if not solution.converged:
        logger.warning(
            "XIRR did not converge (%s after %d iterations), returning %.6f",
            solution.reason,
            solution.iterations,
            solution.rate,
        )
    xirr = solution.percent
    logger.debug("Calculated XIRR: %s%%", xirr)
    return xirr


def calculate_cagr(beginning_value: Number, ending_value: Number, years: float) -> Decimal:
    """
    Compound annual growth rate as a percentage.

    (ending / beginning)^(1 / years) - 1; 0 when beginning or years <= 0.
    """
    beginning = to_decimal(beginning_value)
    if beginning <= 0 or years <= 0:
        return quantize(ZERO, RESULT_SCALE)

    ratio = max(float(to_decimal(ending_value) / beginning), 0.0)
    cagr = (ratio ** (1.0 / years) - 1.0) * 100
    return quantize(Decimal(repr(cagr)), RESULT_SCALE)


def calculate_absolute_return(invested: Number, current_value: Number) -> Decimal:
    """(current - invested) / invested as a percentage; 0 when nothing invested."""
    invested = to_decimal(invested)
    if invested == 0:
        return quantize(ZERO, RESULT_SCALE)

    gain = to_decimal(current_value) - invested
    return quantize(gain * HUNDRED / invested, RESULT_SCALE)


def cash_flow_summary(amounts: Sequence[Number]) -> CashFlowSummary:
    """Totals of outflows and inflows and the resulting multiple."""
    values: List[Decimal] = [to_decimal(a) for a in amounts]
    invested = -sum((v for v in values if v < 0), ZERO)
    returned = sum((v for v in values if v > 0), ZERO)
    multiple = quantize(returned / invested, RESULT_SCALE) if invested else ZERO
    return CashFlowSummary(invested, returned, multiple)
