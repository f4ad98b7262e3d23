"""
Retirement Corpus Sizing

Sizes the corpus needed at retirement, the shortfall against existing
savings, and the monthly contribution that closes it. Also produces
year-by-year corpus trajectories before and after retirement.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List

from moneymath.calculations.annuity import (
    adjust_for_inflation,
    annuity_present_value,
    future_value,
    sinking_fund_payment,
)
from moneymath.calculations.charts import ChartPoint
from moneymath.calculations.decimal_math import (
    ONE,
    ZERO,
    percent_to_fraction,
    quantize,
    round2,
    to_decimal,
)
from moneymath.calculations.guards import zero_on_invalid

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetirementRequest:
    current_age: int
    retirement_age: int
    life_expectancy: int
    current_monthly_expense: Decimal
    inflation_percent: Decimal
    pre_retirement_return_percent: Decimal
    post_retirement_return_percent: Decimal
    existing_corpus: Decimal = ZERO


@dataclass(frozen=True)
class RetirementProjectionRow:
    """One year of a trajectory; only one of contribution/withdrawal is set."""

    year: int
    age: int
    corpus_at_start: Decimal
    contribution: Decimal
    withdrawal: Decimal
    investment_return: Decimal
    corpus_at_end: Decimal


@dataclass
class RetirementPlan:
    inflated_monthly_expense: Decimal
    inflated_annual_expense: Decimal
    required_corpus: Decimal
    projected_existing_corpus: Decimal
    shortfall: Decimal
    required_monthly_contribution: Decimal
    total_contribution_needed: Decimal
    years_to_retirement: int
    years_in_retirement: int
    pre_retirement: List[RetirementProjectionRow] = field(default_factory=list)
    post_retirement: List[RetirementProjectionRow] = field(default_factory=list)
    corpus_growth_chart: List[ChartPoint] = field(default_factory=list)


def _valid_ages(request: RetirementRequest) -> bool:
    return (
        request.retirement_age > request.current_age
        and request.life_expectancy >= request.retirement_age
    )


def _empty_plan(request: RetirementRequest) -> RetirementPlan:
    zero = round2(ZERO)
    return RetirementPlan(
        inflated_monthly_expense=zero,
        inflated_annual_expense=zero,
        required_corpus=zero,
        projected_existing_corpus=zero,
        shortfall=zero,
        required_monthly_contribution=zero,
        total_contribution_needed=zero,
        years_to_retirement=0,
        years_in_retirement=0,
    )


def project_accumulation(
    start_age: int,
    years: int,
    starting_corpus: Decimal,
    monthly_contribution: Decimal,
    annual_return_percent: Decimal,
) -> List[RetirementProjectionRow]:
    """Grow a corpus with yearly contributions and returns."""
    rate = percent_to_fraction(annual_return_percent)
    annual_contribution = to_decimal(monthly_contribution) * 12
    corpus = to_decimal(starting_corpus)

    rows = []
    for year in range(1, years + 1):
        investment_return = quantize(corpus * rate)
        corpus_at_end = corpus + annual_contribution + investment_return
        rows.append(
            RetirementProjectionRow(
                year=year,
                age=start_age + year,
                corpus_at_start=round2(corpus),
                contribution=round2(annual_contribution),
                withdrawal=round2(ZERO),
                investment_return=round2(investment_return),
                corpus_at_end=round2(corpus_at_end),
            )
        )
        corpus = corpus_at_end
    return rows


def project_drawdown(
    start_age: int,
    years: int,
    starting_corpus: Decimal,
    annual_withdrawal: Decimal,
    annual_return_percent: Decimal,
    inflation_percent: Decimal,
) -> List[RetirementProjectionRow]:
    """Run a corpus down with inflation-indexed yearly withdrawals."""
    rate = percent_to_fraction(annual_return_percent)
    inflation_factor = ONE + percent_to_fraction(inflation_percent)
    withdrawal = to_decimal(annual_withdrawal)
    corpus = to_decimal(starting_corpus)

    rows = []
    for year in range(1, years + 1):
        investment_return = quantize(corpus * rate)
        corpus_at_end = max(ZERO, corpus + investment_return - withdrawal)
        rows.append(
            RetirementProjectionRow(
                year=year,
                age=start_age + year,
                corpus_at_start=round2(corpus),
                contribution=round2(ZERO),
                withdrawal=round2(withdrawal),
                investment_return=round2(investment_return),
                corpus_at_end=round2(corpus_at_end),
            )
        )
        corpus = corpus_at_end
        withdrawal = quantize(withdrawal * inflation_factor)
    return rows


@zero_on_invalid(_valid_ages, _empty_plan)
def plan_retirement(request: RetirementRequest) -> RetirementPlan:
    """
    Size a retirement plan.

    1. Inflate today's monthly expense to the retirement date.
    2. Required corpus = PV of that expense over the retirement months.
    3. Grow existing corpus to retirement; shortfall = required - projected.
    4. Solve the monthly contribution that accumulates the shortfall.

    Ages out of order (retirement <= current, life expectancy < retirement)
    yield an all-zero plan.
    """
    logger.info(
        "Planning retirement: age %s -> %s, life expectancy %s",
        request.current_age,
        request.retirement_age,
        request.life_expectancy,
    )
    years_to_retirement = request.retirement_age - request.current_age
    years_in_retirement = request.life_expectancy - request.retirement_age
    months_to_retirement = years_to_retirement * 12

    inflated_expense = adjust_for_inflation(
        request.current_monthly_expense, request.inflation_percent, years_to_retirement
    )
    required_corpus = annuity_present_value(
        inflated_expense,
        request.post_retirement_return_percent,
        years_in_retirement * 12,
    )
    projected_existing = future_value(
        request.existing_corpus,
        request.pre_retirement_return_percent,
        years_to_retirement,
    )
    # Taken on the reported figures so shortfall == required - projected exactly
    shortfall = max(ZERO, round2(required_corpus) - round2(projected_existing))

    monthly_contribution = ZERO
    if shortfall > 0:
        monthly_contribution = sinking_fund_payment(
            shortfall, request.pre_retirement_return_percent, months_to_retirement
        )
    logger.debug(
        "Required corpus=%s, projected=%s, shortfall=%s, contribution=%s",
        required_corpus,
        projected_existing,
        shortfall,
        monthly_contribution,
    )

    pre_retirement = project_accumulation(
        request.current_age,
        years_to_retirement,
        to_decimal(request.existing_corpus),
        monthly_contribution,
        request.pre_retirement_return_percent,
    )
    corpus_at_retirement = (
        pre_retirement[-1].corpus_at_end if pre_retirement else projected_existing
    )
    post_retirement = project_drawdown(
        request.retirement_age,
        years_in_retirement,
        corpus_at_retirement,
        inflated_expense * 12,
        request.post_retirement_return_percent,
        request.inflation_percent,
    )

    chart = [
        ChartPoint(f"Age {row.age}", row.corpus_at_end)
        for row in pre_retirement + post_retirement
    ]

    return RetirementPlan(
        inflated_monthly_expense=round2(inflated_expense),
        inflated_annual_expense=round2(inflated_expense * 12),
        required_corpus=round2(required_corpus),
        projected_existing_corpus=round2(projected_existing),
        shortfall=round2(shortfall),
        required_monthly_contribution=round2(monthly_contribution),
        total_contribution_needed=round2(monthly_contribution * months_to_retirement),
        years_to_retirement=years_to_retirement,
        years_in_retirement=years_in_retirement,
        pre_retirement=pre_retirement,
        post_retirement=post_retirement,
        corpus_growth_chart=chart,
    )
