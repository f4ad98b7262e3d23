"""
Personal Finance Calculation Engine

Pure, deterministic engines for loans, savings plans, retirement sizing,
withdrawal plans, rates of return and realized gains.
All money is computed with exact decimals.
"""

from moneymath.calculations import (
    allocation,
    amortization,
    annuity,
    cashflow,
    decimal_math,
    fifo,
    irr,
    portfolio,
    retirement,
    stepup,
    withdrawal,
)

__all__ = [
    "allocation",
    "amortization",
    "annuity",
    "cashflow",
    "decimal_math",
    "fifo",
    "irr",
    "portfolio",
    "retirement",
    "stepup",
    "withdrawal",
]
