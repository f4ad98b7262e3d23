"""
Portfolio API endpoints: rates of return, FIFO gains and analytics.

Prices and transactions are supplied by the caller; nothing is stored.
"""

from dataclasses import asdict
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from moneymath.calculations import fifo, irr, portfolio
from moneymath.config import get_settings

router = APIRouter()


class XIRRInput(BaseModel):
    """Input for XIRR calculation."""

    dates: List[date]
    amounts: List[Decimal]
    guess_percent: Optional[float] = Field(default=None, gt=-100)


class XIRRResponse(BaseModel):
    """Response with XIRR calculation."""

    xirr_percent: Decimal
    converged: bool
    reason: str
    iterations: int
    invested: Decimal
    returned: Decimal
    multiple: Decimal


class ReturnsInput(BaseModel):
    beginning_value: Decimal
    ending_value: Decimal
    years: float


class ReturnsResponse(BaseModel):
    cagr_percent: Decimal
    absolute_return_percent: Decimal


class LotInput(BaseModel):
    identifier: str
    acquisition_date: date
    quantity: Decimal = Field(gt=0)
    unit_cost: Decimal = Field(ge=0)


class FifoInput(BaseModel):
    lots: List[LotInput]
    quantity_to_sell: Decimal = Field(gt=0)
    sale_price: Decimal = Field(ge=0)


class TransactionInput(BaseModel):
    identifier: str
    transaction_type: portfolio.TransactionType
    symbol: str
    transaction_date: date
    quantity: Decimal = Field(gt=0)
    unit_price: Decimal = Field(ge=0)
    asset_type: str = "EQUITY"
    charges: Decimal = Field(default=Decimal("0"), ge=0)


class AnalyticsInput(BaseModel):
    transactions: List[TransactionInput]
    prices: Dict[str, Decimal] = {}
    as_of: date


@router.post("/xirr", response_model=XIRRResponse)
async def calculate_xirr_endpoint(inputs: XIRRInput):
    """Calculate XIRR for dated cash flows."""
    guess_percent = inputs.guess_percent
    if guess_percent is None:
        guess_percent = get_settings().xirr_guess_percent

    try:
        solution = irr.solve_xirr(inputs.dates, inputs.amounts, guess_percent / 100)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    summary = irr.cash_flow_summary(inputs.amounts)
    return XIRRResponse(
        xirr_percent=solution.percent,
        converged=solution.converged,
        reason=solution.reason,
        iterations=solution.iterations,
        invested=summary.invested,
        returned=summary.returned,
        multiple=summary.multiple,
    )


@router.post("/returns", response_model=ReturnsResponse)
async def calculate_returns(inputs: ReturnsInput):
    """CAGR and absolute return between two values."""
    return ReturnsResponse(
        cagr_percent=irr.calculate_cagr(
            inputs.beginning_value, inputs.ending_value, inputs.years
        ),
        absolute_return_percent=irr.calculate_absolute_return(
            inputs.beginning_value, inputs.ending_value
        ),
    )


@router.post("/fifo")
async def calculate_fifo_gain(inputs: FifoInput):
    """Realized gain for a sale matched oldest-lot-first."""
    lots = [
        fifo.Lot(lot.identifier, lot.acquisition_date, lot.quantity, lot.unit_cost)
        for lot in inputs.lots
    ]
    try:
        result = fifo.match_fifo(lots, inputs.quantity_to_sell, inputs.sale_price)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return asdict(result)


@router.post("/analytics")
async def portfolio_analytics(inputs: AnalyticsInput):
    """Portfolio-level analytics over a supplied transaction history."""
    transactions = [portfolio.Transaction(**txn.model_dump()) for txn in inputs.transactions]
    try:
        result = portfolio.analyze_portfolio(transactions, inputs.prices, inputs.as_of)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return asdict(result)
