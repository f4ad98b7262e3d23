"""
Systematic Withdrawal Simulation

Month-by-month simulation of a corpus that earns a return while a (possibly
inflation-indexed) withdrawal is taken out, with a sustainability verdict.
"""

import enum
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional

from moneymath.calculations.charts import ChartPoint, sample_series
from moneymath.calculations.decimal_math import (
    EPSILON,
    ONE,
    ZERO,
    clamp,
    monthly_rate,
    percent_of,
    quantize,
    round2,
    safe_divide,
    to_decimal,
)
from moneymath.calculations.guards import zero_on_invalid

logger = logging.getLogger(__name__)

SAFE_RATE_FLOOR = Decimal("3")
SAFE_RATE_CEILING = Decimal("6")


class SustainabilityOutlook(str, enum.Enum):
    EXHAUSTED = "exhausted"
    GROWING = "growing"
    SAFE = "safe"
    RISKY = "risky"
    DECLINING = "declining"


@dataclass(frozen=True)
class WithdrawalRequest:
    starting_corpus: Decimal
    monthly_withdrawal: Decimal
    annual_return_percent: Decimal
    duration_years: int
    inflation_percent: Optional[Decimal] = None
    inflation_adjusted: bool = False


@dataclass(frozen=True)
class WithdrawalRow:
    month: int
    year: int
    opening_balance: Decimal
    investment_return: Decimal
    withdrawal: Decimal
    closing_balance: Decimal
    net_change: Decimal


@dataclass(frozen=True)
class WithdrawalYearSummary:
    year: int
    starting_corpus: Decimal
    total_returns: Decimal
    total_withdrawals: Decimal
    ending_corpus: Decimal
    average_monthly_withdrawal: Decimal
    corpus_growing: bool


@dataclass
class WithdrawalSimulation:
    starting_corpus: Decimal
    initial_monthly_withdrawal: Decimal
    final_corpus: Decimal
    total_withdrawn: Decimal
    total_returns: Decimal
    effective_duration_months: int
    is_sustainable: bool
    outlook: SustainabilityOutlook
    message: str
    withdrawal_rate: Decimal
    safe_withdrawal_rate: Decimal
    monthly_breakdown: List[WithdrawalRow] = field(default_factory=list)
    yearly_summary: List[WithdrawalYearSummary] = field(default_factory=list)
    corpus_chart: List[ChartPoint] = field(default_factory=list)
    withdrawal_chart: List[ChartPoint] = field(default_factory=list)


def calculate_safe_withdrawal_rate(
    expected_return_percent: Decimal, inflation_percent: Decimal
) -> Decimal:
    """Real return, constrained to the conventional 3%-6% band."""
    real_return = to_decimal(expected_return_percent) - to_decimal(inflation_percent)
    return clamp(real_return, SAFE_RATE_FLOOR, SAFE_RATE_CEILING)


def simulate_withdrawals(
    starting_corpus: Decimal,
    initial_withdrawal: Decimal,
    monthly_return_rate: Decimal,
    total_months: int,
    monthly_inflation_factor: Decimal = ONE,
) -> List[WithdrawalRow]:
    """
    Run the month-by-month simulation.

    The withdrawal grows by ``monthly_inflation_factor`` from month 2 on and
    is capped at the available balance. Stops once the corpus falls below
    one currency unit.
    """
    rows = []
    corpus = to_decimal(starting_corpus)
    withdrawal = to_decimal(initial_withdrawal)

    for month in range(1, total_months + 1):
        if corpus < EPSILON:
            break

        opening_balance = corpus
        investment_return = quantize(corpus * monthly_return_rate)
        if month > 1:
            withdrawal = quantize(withdrawal * monthly_inflation_factor)

        actual_withdrawal = min(withdrawal, corpus)
        corpus = max(ZERO, corpus + investment_return - actual_withdrawal)

        rows.append(
            WithdrawalRow(
                month=month,
                year=(month - 1) // 12 + 1,
                opening_balance=round2(opening_balance),
                investment_return=round2(investment_return),
                withdrawal=round2(actual_withdrawal),
                closing_balance=round2(corpus),
                net_change=round2(investment_return - actual_withdrawal),
            )
        )

        if corpus < EPSILON:
            logger.warning("Corpus exhausted at month %d", month)
            break

    return rows


def summarize_years(rows: List[WithdrawalRow]) -> List[WithdrawalYearSummary]:
    """Roll monthly rows up into calendar-year-of-plan summaries."""
    summary = []
    for start in range(0, len(rows), 12):
        year_rows = rows[start : start + 12]
        total_returns = sum((row.investment_return for row in year_rows), ZERO)
        total_withdrawals = sum((row.withdrawal for row in year_rows), ZERO)
        opening = year_rows[0].opening_balance
        ending = year_rows[-1].closing_balance
        summary.append(
            WithdrawalYearSummary(
                year=start // 12 + 1,
                starting_corpus=opening,
                total_returns=round2(total_returns),
                total_withdrawals=round2(total_withdrawals),
                ending_corpus=ending,
                average_monthly_withdrawal=round2(
                    safe_divide(total_withdrawals, len(year_rows))
                ),
                corpus_growing=ending > opening,
            )
        )
    return summary


def classify_sustainability(
    is_sustainable: bool,
    final_corpus: Decimal,
    starting_corpus: Decimal,
    withdrawal_rate: Decimal,
    safe_withdrawal_rate: Decimal,
) -> SustainabilityOutlook:
    """Ordered checks: exhaustion, then growth, then rate vs safe rate."""
    if not is_sustainable or final_corpus < EPSILON:
        return SustainabilityOutlook.EXHAUSTED
    if final_corpus > starting_corpus:
        return SustainabilityOutlook.GROWING
    if withdrawal_rate <= safe_withdrawal_rate:
        return SustainabilityOutlook.SAFE
    if withdrawal_rate > safe_withdrawal_rate:
        return SustainabilityOutlook.RISKY
    return SustainabilityOutlook.DECLINING


def describe_outlook(
    outlook: SustainabilityOutlook,
    withdrawal_rate: Decimal,
    safe_withdrawal_rate: Decimal,
) -> str:
    if outlook == SustainabilityOutlook.EXHAUSTED:
        return "UNSUSTAINABLE: Corpus will be fully exhausted within the specified duration."
    if outlook == SustainabilityOutlook.GROWING:
        return (
            "HIGHLY SUSTAINABLE: Your corpus is growing even with withdrawals. "
            "Consider increasing withdrawals or reducing risk exposure."
        )
    if outlook == SustainabilityOutlook.SAFE:
        return (
            f"SUSTAINABLE: Your withdrawal rate ({withdrawal_rate:.2f}%) is within "
            f"safe limits ({safe_withdrawal_rate:.2f}%). "
            "Corpus should last throughout retirement."
        )
    if outlook == SustainabilityOutlook.RISKY:
        return (
            f"RISKY: Your withdrawal rate ({withdrawal_rate:.2f}%) exceeds safe "
            f"limits ({safe_withdrawal_rate:.2f}%). "
            "Consider reducing withdrawals or increasing corpus."
        )
    return "CAUTION: Corpus is declining. Monitor regularly and adjust withdrawals if needed."


def _valid_withdrawal(request: WithdrawalRequest) -> bool:
    return (
        to_decimal(request.starting_corpus) > 0
        and to_decimal(request.monthly_withdrawal) >= 0
        and request.duration_years is not None
        and request.duration_years > 0
    )


def _empty_simulation(request: WithdrawalRequest) -> WithdrawalSimulation:
    zero = round2(ZERO)
    return WithdrawalSimulation(
        starting_corpus=zero,
        initial_monthly_withdrawal=zero,
        final_corpus=zero,
        total_withdrawn=zero,
        total_returns=zero,
        effective_duration_months=0,
        is_sustainable=False,
        outlook=SustainabilityOutlook.EXHAUSTED,
        message="",
        withdrawal_rate=zero,
        safe_withdrawal_rate=zero,
    )


@zero_on_invalid(_valid_withdrawal, _empty_simulation)
def calculate_withdrawal_plan(request: WithdrawalRequest) -> WithdrawalSimulation:
    """
    Simulate a systematic withdrawal plan and judge its sustainability.

    Sustainable means the corpus lasted the full duration and ended above
    zero. A non-positive corpus or duration yields an all-zero result.
    """
    logger.info(
        "Simulating withdrawals: corpus=%s, withdrawal=%s, duration=%s years",
        request.starting_corpus,
        request.monthly_withdrawal,
        request.duration_years,
    )
    starting_corpus = to_decimal(request.starting_corpus)
    monthly_withdrawal = to_decimal(request.monthly_withdrawal)
    inflation_percent = to_decimal(request.inflation_percent)

    inflation_factor = ONE
    if request.inflation_adjusted:
        inflation_factor = ONE + monthly_rate(inflation_percent)

    requested_months = request.duration_years * 12
    rows = simulate_withdrawals(
        starting_corpus,
        monthly_withdrawal,
        monthly_rate(request.annual_return_percent),
        requested_months,
        inflation_factor,
    )

    final_corpus = rows[-1].closing_balance if rows else round2(starting_corpus)
    effective_months = len(rows)
    is_sustainable = effective_months >= requested_months and final_corpus > 0

    withdrawal_rate = percent_of(monthly_withdrawal * 12, starting_corpus)
    safe_rate = calculate_safe_withdrawal_rate(
        request.annual_return_percent, inflation_percent
    )
    outlook = classify_sustainability(
        is_sustainable, final_corpus, starting_corpus, withdrawal_rate, safe_rate
    )

    return WithdrawalSimulation(
        starting_corpus=round2(starting_corpus),
        initial_monthly_withdrawal=round2(monthly_withdrawal),
        final_corpus=final_corpus,
        total_withdrawn=round2(sum((row.withdrawal for row in rows), ZERO)),
        total_returns=round2(sum((row.investment_return for row in rows), ZERO)),
        effective_duration_months=effective_months,
        is_sustainable=is_sustainable,
        outlook=outlook,
        message=describe_outlook(outlook, withdrawal_rate, safe_rate),
        withdrawal_rate=round2(withdrawal_rate),
        safe_withdrawal_rate=round2(safe_rate),
        monthly_breakdown=rows,
        yearly_summary=summarize_years(rows),
        corpus_chart=sample_series(
            rows, lambda row: f"Month {row.month}", lambda row: row.closing_balance
        ),
        withdrawal_chart=sample_series(
            rows,
            lambda row: f"Year {row.year}",
            lambda row: row.withdrawal,
            include_last=False,
        ),
    )
