"""
Household Cash Flow Projections

Projects monthly income and expenses forward year by year, with separate
annual growth rates, and reports savings and savings rate.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional, Sequence

from moneymath.calculations.charts import ChartPoint
from moneymath.calculations.decimal_math import (
    ONE,
    ZERO,
    percent_of,
    percent_to_fraction,
    quantize,
    round2,
    safe_divide,
    to_decimal,
)
from moneymath.calculations.guards import zero_on_invalid

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CashflowItem:
    name: str
    monthly_amount: Decimal
    category: Optional[str] = None  # e.g. "Fixed", "Variable", "Discretionary"


@dataclass(frozen=True)
class CashflowRequest:
    incomes: Sequence[CashflowItem]
    expenses: Sequence[CashflowItem]
    projection_years: int
    income_growth_percent: Decimal = ZERO
    expense_growth_percent: Decimal = ZERO


@dataclass(frozen=True)
class YearlyCashflow:
    year: int
    monthly_income: Decimal
    monthly_expense: Decimal
    monthly_net_cashflow: Decimal
    annual_income: Decimal
    annual_expense: Decimal
    annual_savings: Decimal
    savings_rate: Decimal
    cumulative_savings: Decimal


@dataclass(frozen=True)
class ItemBreakdown:
    name: str
    monthly_amount: Decimal
    percentage: Decimal
    category: Optional[str]


@dataclass
class CashflowProjection:
    current_monthly_income: Decimal
    current_monthly_expense: Decimal
    current_net_cashflow: Decimal
    current_savings_rate: Decimal
    average_annual_income: Decimal
    average_annual_expense: Decimal
    total_savings: Decimal
    average_savings_rate: Decimal
    projections: List[YearlyCashflow] = field(default_factory=list)
    income_breakdown: List[ItemBreakdown] = field(default_factory=list)
    expense_breakdown: List[ItemBreakdown] = field(default_factory=list)
    income_vs_expense_chart: List[ChartPoint] = field(default_factory=list)
    savings_chart: List[ChartPoint] = field(default_factory=list)
    savings_rate_chart: List[ChartPoint] = field(default_factory=list)


def calculate_total(items: Sequence[CashflowItem]) -> Decimal:
    return sum((to_decimal(item.monthly_amount) for item in items), ZERO)


def calculate_savings_rate(net_cashflow: Decimal, income: Decimal) -> Decimal:
    """Net cash flow as a percentage of income (0 without income)."""
    return percent_of(net_cashflow, income)


def generate_projections(
    monthly_income: Decimal,
    monthly_expense: Decimal,
    years: int,
    income_growth_percent: Decimal,
    expense_growth_percent: Decimal,
) -> List[YearlyCashflow]:
    """Grow income and expense once per year and accumulate savings."""
    income_factor = ONE + percent_to_fraction(income_growth_percent)
    expense_factor = ONE + percent_to_fraction(expense_growth_percent)

    projections = []
    cumulative_savings = ZERO
    for year in range(1, years + 1):
        annual_income = monthly_income * 12
        annual_expense = monthly_expense * 12
        annual_savings = annual_income - annual_expense
        net = monthly_income - monthly_expense
        cumulative_savings += annual_savings

        projections.append(
            YearlyCashflow(
                year=year,
                monthly_income=round2(monthly_income),
                monthly_expense=round2(monthly_expense),
                monthly_net_cashflow=round2(net),
                annual_income=round2(annual_income),
                annual_expense=round2(annual_expense),
                annual_savings=round2(annual_savings),
                savings_rate=round2(calculate_savings_rate(net, monthly_income)),
                cumulative_savings=round2(cumulative_savings),
            )
        )

        monthly_income = quantize(monthly_income * income_factor)
        monthly_expense = quantize(monthly_expense * expense_factor)

    return projections


def generate_breakdown(
    items: Sequence[CashflowItem], total: Decimal
) -> List[ItemBreakdown]:
    return [
        ItemBreakdown(
            name=item.name,
            monthly_amount=round2(item.monthly_amount),
            percentage=round2(percent_of(item.monthly_amount, total)),
            category=item.category,
        )
        for item in items
    ]


def _valid_cashflow(request: CashflowRequest) -> bool:
    return bool(request.incomes) and request.projection_years > 0


def _empty_cashflow(request: CashflowRequest) -> CashflowProjection:
    zero = round2(ZERO)
    return CashflowProjection(
        current_monthly_income=zero,
        current_monthly_expense=zero,
        current_net_cashflow=zero,
        current_savings_rate=zero,
        average_annual_income=zero,
        average_annual_expense=zero,
        total_savings=zero,
        average_savings_rate=zero,
    )


@zero_on_invalid(_valid_cashflow, _empty_cashflow)
def project_cashflow(request: CashflowRequest) -> CashflowProjection:
    """Project household cash flow over ``projection_years`` years."""
    logger.info("Projecting cashflow for %s years", request.projection_years)

    monthly_income = calculate_total(request.incomes)
    monthly_expense = calculate_total(request.expenses)
    net = monthly_income - monthly_expense

    projections = generate_projections(
        monthly_income,
        monthly_expense,
        request.projection_years,
        request.income_growth_percent,
        request.expense_growth_percent,
    )
    count = len(projections)

    income_vs_expense = []
    for row in projections:
        income_vs_expense.append(ChartPoint(f"Year {row.year} Income", row.annual_income))
        income_vs_expense.append(ChartPoint(f"Year {row.year} Expense", row.annual_expense))

    return CashflowProjection(
        current_monthly_income=round2(monthly_income),
        current_monthly_expense=round2(monthly_expense),
        current_net_cashflow=round2(net),
        current_savings_rate=round2(calculate_savings_rate(net, monthly_income)),
        average_annual_income=round2(
            safe_divide(sum((p.annual_income for p in projections), ZERO), count)
        ),
        average_annual_expense=round2(
            safe_divide(sum((p.annual_expense for p in projections), ZERO), count)
        ),
        total_savings=round2(sum((p.annual_savings for p in projections), ZERO)),
        average_savings_rate=round2(
            safe_divide(sum((p.savings_rate for p in projections), ZERO), count)
        ),
        projections=projections,
        income_breakdown=generate_breakdown(request.incomes, monthly_income),
        expense_breakdown=generate_breakdown(request.expenses, monthly_expense),
        income_vs_expense_chart=income_vs_expense,
        savings_chart=[
            ChartPoint(f"Year {p.year}", p.cumulative_savings) for p in projections
        ],
        savings_rate_chart=[
            ChartPoint(f"Year {p.year}", p.savings_rate) for p in projections
        ],
    )
