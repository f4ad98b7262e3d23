"""
Calculator API endpoints.

These endpoints accept plan inputs and return the computed projections.
"""

from dataclasses import asdict
from datetime import date
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from moneymath.calculations import (
    allocation,
    amortization,
    cashflow,
    retirement,
    stepup,
    withdrawal,
)

router = APIRouter()


class PrepaymentInput(BaseModel):
    """A lump-sum prepayment after the regular payment of ``month``."""

    month: int = Field(ge=1)
    amount: Decimal = Field(gt=0)
    policy: amortization.PrepaymentPolicy = amortization.PrepaymentPolicy.SHORTEN_TENURE


class LoanInput(BaseModel):
    """Input for loan analysis."""

    principal: Decimal
    annual_rate_percent: Decimal = Field(ge=0, le=50)
    tenure_months: int = Field(le=600)
    prepayments: List[PrepaymentInput] = []
    start_date: Optional[date] = None

    def to_request(self) -> amortization.LoanRequest:
        return amortization.LoanRequest(
            principal=self.principal,
            annual_rate_percent=self.annual_rate_percent,
            tenure_months=self.tenure_months,
            prepayments=tuple(
                amortization.PrepaymentEvent(p.month, p.amount, p.policy)
                for p in self.prepayments
            ),
            start_date=self.start_date,
        )


class LoanComparisonInput(BaseModel):
    loan_options: List[LoanInput] = Field(min_length=2, max_length=5)


class StepUpInput(BaseModel):
    monthly_contribution: Decimal
    annual_return_percent: Decimal = Field(ge=0, le=50)
    years: int = Field(le=50)
    annual_stepup_percent: Decimal = Field(default=Decimal("0"), ge=0, le=50)


class RetirementInput(BaseModel):
    current_age: int = Field(ge=0, le=120)
    retirement_age: int = Field(ge=0, le=120)
    life_expectancy: int = Field(ge=0, le=130)
    current_monthly_expense: Decimal = Field(gt=0)
    inflation_percent: Decimal = Field(ge=0, le=20)
    pre_retirement_return_percent: Decimal = Field(ge=0, le=30)
    post_retirement_return_percent: Decimal = Field(ge=0, le=20)
    existing_corpus: Decimal = Field(default=Decimal("0"), ge=0)


class WithdrawalInput(BaseModel):
    starting_corpus: Decimal
    monthly_withdrawal: Decimal
    annual_return_percent: Decimal = Field(ge=0, le=30)
    duration_years: int = Field(le=50)
    inflation_percent: Optional[Decimal] = Field(default=None, ge=0, le=20)
    inflation_adjusted: bool = False


class CashflowItemInput(BaseModel):
    name: str = Field(min_length=1)
    monthly_amount: Decimal = Field(gt=0)
    category: Optional[str] = None


class CashflowInput(BaseModel):
    incomes: List[CashflowItemInput] = Field(min_length=1)
    expenses: List[CashflowItemInput] = Field(min_length=1)
    projection_years: int = Field(ge=1, le=30)
    income_growth_percent: Decimal = Field(default=Decimal("0"), ge=0, le=50)
    expense_growth_percent: Decimal = Field(default=Decimal("0"), ge=0, le=20)


class HoldingInput(BaseModel):
    asset_name: str = Field(min_length=1)
    current_value: Decimal = Field(ge=0)


class TargetInput(BaseModel):
    asset_name: str = Field(min_length=1)
    target_percentage: Decimal = Field(ge=0, le=100)


class RebalanceInput(BaseModel):
    current_holdings: List[HoldingInput] = Field(min_length=1)
    target_allocations: List[TargetInput] = Field(min_length=1)
    fresh_investment: Optional[Decimal] = Field(default=None, ge=0)


@router.post("/loan")
async def analyze_loan(inputs: LoanInput):
    """EMI, amortization schedule and prepayment impact for a loan."""
    try:
        result = amortization.analyze_loan(inputs.to_request())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return asdict(result)


@router.post("/loan/compare")
async def compare_loans(inputs: LoanComparisonInput):
    """Analyse several loan options and pick the cheapest."""
    try:
        result = amortization.compare_loans(
            [option.to_request() for option in inputs.loan_options]
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return asdict(result)


@router.post("/stepup")
async def project_stepup(inputs: StepUpInput):
    """Project a step-up monthly contribution plan."""
    result = stepup.project_stepup(stepup.StepUpRequest(**inputs.model_dump()))
    return asdict(result)


@router.post("/retirement")
async def plan_retirement(inputs: RetirementInput):
    """Size the retirement corpus and the monthly contribution needed."""
    result = retirement.plan_retirement(
        retirement.RetirementRequest(**inputs.model_dump())
    )
    return asdict(result)


@router.post("/withdrawal")
async def simulate_withdrawal(inputs: WithdrawalInput):
    """Simulate a systematic withdrawal plan."""
    result = withdrawal.calculate_withdrawal_plan(
        withdrawal.WithdrawalRequest(**inputs.model_dump())
    )
    return asdict(result)


@router.post("/cashflow")
async def project_cashflow(inputs: CashflowInput):
    """Project household income, expenses and savings."""
    result = cashflow.project_cashflow(
        cashflow.CashflowRequest(
            incomes=[cashflow.CashflowItem(**item.model_dump()) for item in inputs.incomes],
            expenses=[
                cashflow.CashflowItem(**item.model_dump()) for item in inputs.expenses
            ],
            projection_years=inputs.projection_years,
            income_growth_percent=inputs.income_growth_percent,
            expense_growth_percent=inputs.expense_growth_percent,
        )
    )
    return asdict(result)


@router.post("/allocation")
async def rebalance(inputs: RebalanceInput):
    """Suggest trades that bring holdings back to target allocation."""
    result = allocation.calculate_rebalancing(
        allocation.RebalanceRequest(
            holdings=[
                allocation.AssetHolding(h.asset_name, h.current_value)
                for h in inputs.current_holdings
            ],
            targets=[
                allocation.TargetAllocation(t.asset_name, t.target_percentage)
                for t in inputs.target_allocations
            ],
            fresh_investment=inputs.fresh_investment,
        )
    )
    return asdict(result)
