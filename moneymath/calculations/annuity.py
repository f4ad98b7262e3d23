"""
Annuity and Growth Calculations

The shared formula library: compound growth, discounting and level
periodic cash flow (annuity) valuation.

All rates are annual percentages (12 means 12%). Annuity functions work on
monthly periods and divide the annual rate by 12. Non-positive amounts or
period counts return zero instead of raising.
"""

import logging
from decimal import Decimal

from moneymath.calculations.decimal_math import (
    ONE,
    ZERO,
    Number,
    is_positive,
    monthly_rate,
    percent_to_fraction,
    power,
    quantize,
    safe_divide,
    to_decimal,
)

logger = logging.getLogger(__name__)


def future_value(
    present_value: Number, annual_rate_percent: Number, years: Number
) -> Decimal:
    """
    Calculate Future Value: FV = PV * (1 + r)^n

    Example: 100 at 10% for 5 years -> 161.051

    Args:
        present_value: Initial amount
        annual_rate_percent: Annual rate (e.g., 10 for 10%)
        years: Whole years of compounding; fractional years are truncated

    Returns:
        Future value; 0 for a non-positive amount or negative years
    """
    logger.debug(
        "FV: pv=%s, rate=%s, years=%s", present_value, annual_rate_percent, years
    )
    years = to_decimal(years)
    if not is_positive(present_value) or years < 0:
        return ZERO

    factor = power(ONE + percent_to_fraction(annual_rate_percent), int(years))
    return quantize(to_decimal(present_value) * factor)


def present_value(
    future_amount: Number, annual_rate_percent: Number, years: Number
) -> Decimal:
    """
    Calculate Present Value: PV = FV / (1 + r)^n

    Example: 100000 needed in 5 years at 10% -> 62092.13 today
    """
    logger.debug(
        "PV: fv=%s, rate=%s, years=%s", future_amount, annual_rate_percent, years
    )
    if not is_positive(future_amount):
        return ZERO

    growth_of_one = future_value(ONE, annual_rate_percent, years)
    return safe_divide(future_amount, growth_of_one)


def adjust_for_inflation(
    current_value: Number, inflation_percent: Number, years: Number
) -> Decimal:
    """Project today's amount forward at the inflation rate."""
    return future_value(current_value, inflation_percent, years)


def annuity_future_value(
    payment: Number, annual_rate_percent: Number, months: int
) -> Decimal:
    """
    Calculate Annuity Future Value: FVA = PMT * ((1 + r)^n - 1) / r

    Lump sum accumulated from ``months`` level end-of-month deposits.
    Example: 10000/month at 12% for 60 months -> ~816,697
    """
    logger.debug(
        "FVA: pmt=%s, rate=%s, months=%s", payment, annual_rate_percent, months
    )
    if not is_positive(payment) or months is None or months <= 0:
        return ZERO

    payment = to_decimal(payment)
    rate = monthly_rate(annual_rate_percent)
    if rate == 0:
        return quantize(payment * months)

    growth = power(ONE + rate, months)
    return quantize(payment * safe_divide(growth - ONE, rate))


def annuity_present_value(
    payment: Number, annual_rate_percent: Number, months: int
) -> Decimal:
    """
    Calculate Annuity Present Value: PVA = PMT * (1 - (1 + r)^-n) / r

    Corpus required today to fund ``months`` level withdrawals.
    """
    logger.debug(
        "PVA: pmt=%s, rate=%s, months=%s", payment, annual_rate_percent, months
    )
    if not is_positive(payment) or months is None or months <= 0:
        return ZERO

    payment = to_decimal(payment)
    rate = monthly_rate(annual_rate_percent)
    if rate == 0:
        return quantize(payment * months)

    discount = power(ONE + rate, -months)
    return quantize(payment * safe_divide(ONE - discount, rate))


def sinking_fund_payment(
    target: Number, annual_rate_percent: Number, months: int
) -> Decimal:
    """
    Level monthly deposit that accumulates to ``target``.

    Inverse of annuity_future_value: PMT = FV * r / ((1 + r)^n - 1)
    """
    if not is_positive(target) or months is None or months <= 0:
        return ZERO

    target = to_decimal(target)
    rate = monthly_rate(annual_rate_percent)
    if rate == 0:
        return safe_divide(target, months)

    growth = power(ONE + rate, months)
    return quantize(target * safe_divide(rate, growth - ONE))
