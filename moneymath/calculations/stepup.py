"""
Step-up Contribution Projection

Projects a monthly contribution (SIP) that increases by a fixed percentage
every year. Each year's deposits are valued as a 12-month annuity and then
compounded annually to the end of the horizon.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List

from moneymath.calculations.annuity import annuity_future_value, future_value
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

MONTHS_PER_YEAR = 12


@dataclass(frozen=True)
class StepUpRequest:
    monthly_contribution: Decimal
    annual_return_percent: Decimal
    years: int
    annual_stepup_percent: Decimal = ZERO


@dataclass(frozen=True)
class StepUpYearRecord:
    year: int
    monthly_contribution: Decimal
    yearly_contribution: Decimal
    value_at_year_end: Decimal
    value_at_horizon: Decimal  # value_at_year_end grown to the final year


@dataclass
class StepUpProjection:
    total_invested: Decimal
    maturity_value: Decimal
    wealth_gained: Decimal
    first_year_monthly_contribution: Decimal
    last_year_monthly_contribution: Decimal
    yearly_breakdown: List[StepUpYearRecord] = field(default_factory=list)
    maturity_curve: List[ChartPoint] = field(default_factory=list)


def _valid_stepup(request: StepUpRequest) -> bool:
    return (
        request.years is not None
        and request.years > 0
        and to_decimal(request.monthly_contribution) > 0
    )


def _empty_stepup(request: StepUpRequest) -> StepUpProjection:
    zero = round2(ZERO)
    return StepUpProjection(
        total_invested=zero,
        maturity_value=zero,
        wealth_gained=zero,
        first_year_monthly_contribution=zero,
        last_year_monthly_contribution=zero,
    )


@zero_on_invalid(_valid_stepup, _empty_stepup)
def project_stepup(request: StepUpRequest) -> StepUpProjection:
    """
    Project a step-up contribution plan year by year.

    Year y contributes C * (1 + S)^(y-1) per month. Its 12 deposits are
    valued at year end, then grown over the (Y - y) remaining years.
    """
    logger.info(
        "Projecting step-up plan: contribution=%s, return=%s%%, years=%s, step-up=%s%%",
        request.monthly_contribution,
        request.annual_return_percent,
        request.years,
        request.annual_stepup_percent,
    )
    stepup_factor = ONE + percent_to_fraction(request.annual_stepup_percent)
    contribution = to_decimal(request.monthly_contribution)

    breakdown = []
    curve = []
    total_invested = ZERO
    maturity_value = ZERO

    for year in range(1, request.years + 1):
        yearly_contribution = contribution * MONTHS_PER_YEAR
        value_at_year_end = annuity_future_value(
            contribution, request.annual_return_percent, MONTHS_PER_YEAR
        )
        value_at_horizon = future_value(
            value_at_year_end, request.annual_return_percent, request.years - year
        )

        total_invested += yearly_contribution
        maturity_value += value_at_horizon

        breakdown.append(
            StepUpYearRecord(
                year=year,
                monthly_contribution=round2(contribution),
                yearly_contribution=round2(yearly_contribution),
                value_at_year_end=round2(value_at_year_end),
                value_at_horizon=round2(value_at_horizon),
            )
        )
        curve.append(ChartPoint(f"Year {year}", round2(maturity_value)))

        contribution = quantize(contribution * stepup_factor)

    return StepUpProjection(
        total_invested=round2(total_invested),
        maturity_value=round2(maturity_value),
        wealth_gained=round2(maturity_value - total_invested),
        first_year_monthly_contribution=breakdown[0].monthly_contribution,
        last_year_monthly_contribution=breakdown[-1].monthly_contribution,
        yearly_breakdown=breakdown,
        maturity_curve=curve,
    )
