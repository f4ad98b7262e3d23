"""
Loan Amortization Calculations

Implements EMI derivation, month-by-month amortization schedules with
mid-schedule prepayments, and prepayment impact analysis.
"""

import enum
import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Sequence

from dateutil.relativedelta import relativedelta

from moneymath.calculations.charts import ChartPoint, sample_series
from moneymath.calculations.decimal_math import (
    EPSILON,
    ONE,
    ZERO,
    Number,
    monthly_rate,
    percent_of,
    power,
    quantize,
    round2,
    safe_divide,
    to_decimal,
)
from moneymath.calculations.guards import zero_on_invalid

logger = logging.getLogger(__name__)

MAX_COMPARED_LOANS = 5


class PrepaymentPolicy(str, enum.Enum):
    """What a prepayment buys: fewer months or a smaller installment."""

    SHORTEN_TENURE = "shorten_tenure"
    REDUCE_INSTALLMENT = "reduce_installment"


@dataclass(frozen=True)
class PrepaymentEvent:
    """Lump sum paid after the regular installment of ``month`` (1-based)."""

    month: int
    amount: Decimal
    policy: PrepaymentPolicy = PrepaymentPolicy.SHORTEN_TENURE

    def __post_init__(self):
        if self.month < 1:
            raise ValueError("Prepayment month must be 1 or later")
        if to_decimal(self.amount) <= 0:
            raise ValueError("Prepayment amount must be positive")


@dataclass(frozen=True)
class AmortizationRow:
    month: int
    year: int
    opening_balance: Decimal
    installment: Decimal
    interest: Decimal
    principal: Decimal
    closing_balance: Decimal
    cumulative_interest: Decimal
    cumulative_principal: Decimal
    prepayment: Decimal = ZERO
    payment_date: Optional[date] = None


@dataclass(frozen=True)
class LoanRequest:
    principal: Decimal
    annual_rate_percent: Decimal
    tenure_months: int
    prepayments: Sequence[PrepaymentEvent] = ()
    start_date: Optional[date] = None


@dataclass
class PrepaymentImpact:
    total_prepayment: Decimal
    interest_saved: Decimal
    months_saved: int  # meaningful for SHORTEN_TENURE
    new_installment: Decimal  # meaningful for REDUCE_INSTALLMENT
    original_total_cost: Decimal
    new_total_cost: Decimal


@dataclass
class LoanAnalysis:
    emi: Decimal
    total_amount_payable: Decimal
    total_interest_payable: Decimal
    effective_tenure_months: int
    principal_amount: Decimal
    interest_percentage: Decimal
    schedule: List[AmortizationRow] = field(default_factory=list)
    prepayment_impact: Optional[PrepaymentImpact] = None
    principal_vs_interest_chart: List[ChartPoint] = field(default_factory=list)
    balance_over_time_chart: List[ChartPoint] = field(default_factory=list)


@dataclass
class LoanComparison:
    analyses: List[LoanAnalysis]
    best_option: str
    recommendation: str


def level_installment(balance: Decimal, rate: Decimal, months: int) -> Decimal:
    """
    Installment that pays off ``balance`` in ``months`` at a per-month rate.

    EMI = P * r * (1 + r)^n / ((1 + r)^n - 1), or P / n when r is 0.
    """
    if months <= 0 or balance <= 0:
        return ZERO
    if rate == 0:
        return safe_divide(balance, months)

    growth = power(ONE + rate, months)
    return quantize(balance * safe_divide(rate * growth, growth - ONE))


def calculate_emi(
    principal: Number, annual_rate_percent: Number, tenure_months: int
) -> Decimal:
    """
    Calculate the monthly installment (EMI) for a loan.

    Args:
        principal: Loan amount
        annual_rate_percent: Annual interest rate (e.g., 8.5 for 8.5%)
        tenure_months: Loan tenure in months

    Returns:
        EMI at internal precision; 0 for a non-positive principal or tenure
    """
    logger.debug(
        "EMI: principal=%s, rate=%s, months=%s",
        principal,
        annual_rate_percent,
        tenure_months,
    )
    principal = to_decimal(principal)
    if principal <= 0 or tenure_months is None or tenure_months <= 0:
        return ZERO
    return level_installment(principal, monthly_rate(annual_rate_percent), tenure_months)


def _events_by_month(
    prepayments: Optional[Sequence[PrepaymentEvent]],
) -> Dict[int, List[PrepaymentEvent]]:
    grouped: Dict[int, List[PrepaymentEvent]] = {}
    for event in prepayments or ():
        grouped.setdefault(event.month, []).append(event)
    return grouped


def generate_amortization_schedule(
    principal: Number,
    annual_rate_percent: Number,
    tenure_months: int,
    prepayments: Optional[Sequence[PrepaymentEvent]] = None,
    start_date: Optional[date] = None,
) -> List[AmortizationRow]:
    """
    Generate a month-by-month amortization schedule.

    The schedule stops early once the balance falls below one currency
    unit. Prepayments are applied after the regular payment of their month;
    REDUCE_INSTALLMENT re-derives the EMI over the remaining nominal months.

    Args:
        principal: Loan principal amount
        annual_rate_percent: Annual interest rate as a percentage
        tenure_months: Nominal tenure in months
        prepayments: Optional prepayment events
        start_date: Date of first payment; rows carry payment dates when set

    Returns:
        List of amortization rows (empty for a degenerate loan)
    """
    balance = to_decimal(principal)
    if balance <= 0 or tenure_months is None or tenure_months <= 0:
        return []

    rate = monthly_rate(annual_rate_percent)
    installment = level_installment(balance, rate, tenure_months)
    events = _events_by_month(prepayments)

    schedule = []
    cumulative_interest = ZERO
    cumulative_principal = ZERO

    for month in range(1, tenure_months + 1):
        if balance <= EPSILON:
            break

        opening_balance = balance
        interest = quantize(balance * rate)
        principal_paid = installment - interest
        payment = installment

        # Final row pays off exactly what is left
        if principal_paid >= balance or month == tenure_months:
            principal_paid = balance
            payment = interest + principal_paid

        balance = max(ZERO, balance - principal_paid)
        closing_balance = balance
        cumulative_interest += interest
        cumulative_principal += principal_paid

        prepaid = ZERO
        for event in events.get(month, ()):
            amount = min(to_decimal(event.amount), balance)
            balance -= amount
            prepaid += amount
            if event.policy == PrepaymentPolicy.REDUCE_INSTALLMENT:
                installment = level_installment(balance, rate, tenure_months - month)
                logger.debug("Month %d: installment reset to %s", month, installment)

        schedule.append(
            AmortizationRow(
                month=month,
                year=(month - 1) // 12 + 1,
                opening_balance=round2(opening_balance),
                installment=round2(payment),
                interest=round2(interest),
                principal=round2(principal_paid),
                closing_balance=round2(closing_balance),
                cumulative_interest=round2(cumulative_interest),
                cumulative_principal=round2(cumulative_principal),
                prepayment=round2(prepaid),
                payment_date=(
                    start_date + relativedelta(months=month - 1) if start_date else None
                ),
            )
        )

        if balance < EPSILON:
            break

    return schedule


def calculate_total_interest(schedule: List[AmortizationRow]) -> Decimal:
    """Total interest paid over the schedule."""
    return schedule[-1].cumulative_interest if schedule else round2(ZERO)


def calculate_total_principal(schedule: List[AmortizationRow]) -> Decimal:
    """Total scheduled principal (prepayments excluded)."""
    return schedule[-1].cumulative_principal if schedule else round2(ZERO)


def calculate_prepayment_impact(
    original_schedule: List[AmortizationRow],
    schedule: List[AmortizationRow],
    tenure_months: int,
    emi: Decimal,
) -> PrepaymentImpact:
    """
    Compare a schedule with prepayments against the plain schedule.

    Args:
        original_schedule: Schedule generated without prepayments
        schedule: Schedule generated with the caller's prepayments
        tenure_months: Nominal tenure
        emi: Original installment

    Returns:
        PrepaymentImpact with interest and months saved
    """
    total_prepayment = sum((row.prepayment for row in schedule), ZERO)
    new_interest = calculate_total_interest(schedule)
    new_principal = calculate_total_principal(schedule)

    return PrepaymentImpact(
        total_prepayment=round2(total_prepayment),
        interest_saved=round2(calculate_total_interest(original_schedule) - new_interest),
        months_saved=tenure_months - len(schedule),
        new_installment=schedule[-1].installment if schedule else round2(ZERO),
        original_total_cost=round2(emi * tenure_months),
        new_total_cost=round2(new_interest + new_principal + total_prepayment),
    )


def _valid_loan(request: LoanRequest) -> bool:
    return (
        to_decimal(request.principal) > 0
        and request.tenure_months is not None
        and request.tenure_months >= 1
    )


def _empty_loan_analysis(request: LoanRequest) -> LoanAnalysis:
    zero = round2(ZERO)
    return LoanAnalysis(
        emi=zero,
        total_amount_payable=zero,
        total_interest_payable=zero,
        effective_tenure_months=0,
        principal_amount=zero,
        interest_percentage=zero,
    )


@zero_on_invalid(_valid_loan, _empty_loan_analysis)
def analyze_loan(request: LoanRequest) -> LoanAnalysis:
    """
    Full loan analysis: EMI, schedule, totals, prepayment impact and charts.

    A non-positive principal or tenure yields an all-zero analysis.
    """
    logger.info(
        "Analyzing loan: principal=%s, rate=%s%%, tenure=%s months, prepayments=%d",
        request.principal,
        request.annual_rate_percent,
        request.tenure_months,
        len(request.prepayments or ()),
    )
    for event in request.prepayments or ():
        if event.month > request.tenure_months:
            logger.warning(
                "Prepayment in month %d is past the %d-month tenure and will not apply",
                event.month,
                request.tenure_months,
            )
    principal = to_decimal(request.principal)
    emi = calculate_emi(principal, request.annual_rate_percent, request.tenure_months)

    schedule = generate_amortization_schedule(
        principal,
        request.annual_rate_percent,
        request.tenure_months,
        request.prepayments,
        request.start_date,
    )
    total_interest = calculate_total_interest(schedule)

    impact = None
    if request.prepayments:
        original_schedule = generate_amortization_schedule(
            principal, request.annual_rate_percent, request.tenure_months
        )
        impact = calculate_prepayment_impact(
            original_schedule, schedule, request.tenure_months, emi
        )

    return LoanAnalysis(
        emi=round2(emi),
        total_amount_payable=round2(principal + total_interest),
        total_interest_payable=total_interest,
        effective_tenure_months=len(schedule),
        principal_amount=round2(principal),
        interest_percentage=round2(percent_of(total_interest, principal)),
        schedule=schedule,
        prepayment_impact=impact,
        principal_vs_interest_chart=sample_series(
            schedule, lambda row: f"Month {row.month}", lambda row: row.cumulative_principal
        ),
        balance_over_time_chart=sample_series(
            schedule, lambda row: f"Month {row.month}", lambda row: row.closing_balance
        ),
    )


def compare_loans(requests: Sequence[LoanRequest]) -> LoanComparison:
    """
    Analyse 2-5 loan options and pick the one with the lowest total interest.

    Raises:
        ValueError: If fewer than 2 or more than 5 options are given
    """
    if len(requests) < 2:
        raise ValueError("At least 2 loan options required")
    if len(requests) > MAX_COMPARED_LOANS:
        raise ValueError(f"Compare at most {MAX_COMPARED_LOANS} loans at a time")

    logger.info("Comparing %d loan options", len(requests))
    analyses = [analyze_loan(request) for request in requests]

    best_index = min(
        range(len(analyses)), key=lambda i: analyses[i].total_interest_payable
    )
    best_option = f"Loan Option {best_index + 1}"
    recommendation = (
        f"{best_option} has the lowest total interest of "
        f"{analyses[best_index].total_interest_payable}"
    )
    return LoanComparison(
        analyses=analyses, best_option=best_option, recommendation=recommendation
    )
