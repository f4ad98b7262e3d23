"""
Portfolio Analytics

Pure analytics over a caller-supplied transaction history and current
unit prices: FIFO realized gains, open holdings, XIRR, CAGR and an
asset-type breakdown. Prices are opaque inputs; nothing is fetched.
"""

import enum
import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, List, Mapping, Optional, Sequence

from moneymath.calculations import irr
from moneymath.calculations.decimal_math import (
    ZERO,
    percent_of,
    quantize,
    round2,
    to_decimal,
)
from moneymath.calculations.fifo import FifoResult, Lot, match_fifo, remaining_lots

logger = logging.getLogger(__name__)


class TransactionType(str, enum.Enum):
    BUY = "BUY"
    SELL = "SELL"
    DIVIDEND = "DIVIDEND"


@dataclass(frozen=True)
class Transaction:
    identifier: str
    transaction_type: TransactionType
    symbol: str
    transaction_date: date
    quantity: Decimal
    unit_price: Decimal
    asset_type: str = "EQUITY"
    charges: Decimal = ZERO

    @property
    def gross_amount(self) -> Decimal:
        return to_decimal(self.quantity) * to_decimal(self.unit_price)

    @property
    def net_amount(self) -> Decimal:
        """Cash that changed hands: charges add to a buy, reduce a sale."""
        if self.transaction_type == TransactionType.SELL:
            return self.gross_amount - to_decimal(self.charges)
        return self.gross_amount + to_decimal(self.charges)


@dataclass(frozen=True)
class OpenHolding:
    symbol: str
    asset_type: str
    quantity: Decimal
    invested: Decimal
    current_price: Decimal
    current_value: Decimal
    unrealized_gain: Decimal
    unrealized_gain_percent: Decimal


@dataclass(frozen=True)
class AssetTypeBreakdown:
    asset_type: str
    invested: Decimal
    current_value: Decimal
    gain: Decimal
    gain_percent: Decimal
    allocation_percent: Decimal
    holdings_count: int


@dataclass(frozen=True)
class RealizedSale:
    transaction_identifier: str
    symbol: str
    sale_date: date
    match: FifoResult


@dataclass
class PortfolioAnalytics:
    total_invested: Decimal
    current_value: Decimal
    total_gain: Decimal
    total_gain_percent: Decimal
    realized_gain: Decimal
    unrealized_gain: Decimal
    xirr: Decimal
    absolute_return: Decimal
    cagr: Decimal
    total_dividends: Decimal
    first_investment_date: Optional[date] = None
    last_transaction_date: Optional[date] = None
    duration_days: int = 0
    holdings: List[OpenHolding] = field(default_factory=list)
    asset_breakdown: List[AssetTypeBreakdown] = field(default_factory=list)
    realized_sales: List[RealizedSale] = field(default_factory=list)


def _empty_analytics() -> PortfolioAnalytics:
    zero = round2(ZERO)
    return PortfolioAnalytics(
        total_invested=zero,
        current_value=zero,
        total_gain=zero,
        total_gain_percent=zero,
        realized_gain=zero,
        unrealized_gain=zero,
        xirr=zero,
        absolute_return=zero,
        cagr=zero,
        total_dividends=zero,
    )


def _portfolio_xirr(
    transactions: Sequence[Transaction], current_value: Decimal, as_of: date
) -> Decimal:
    dates = []
    amounts = []
    for txn in transactions:
        if txn.transaction_type == TransactionType.BUY:
            dates.append(txn.transaction_date)
            amounts.append(-txn.net_amount)
        elif txn.transaction_type == TransactionType.SELL:
            dates.append(txn.transaction_date)
            amounts.append(txn.net_amount)

    if current_value > 0:
        dates.append(as_of)
        amounts.append(current_value)

    if len(dates) < 2:
        return round2(ZERO)

    try:
        return irr.calculate_xirr(dates, amounts)
    except ValueError as e:
        logger.error("Error calculating portfolio XIRR: %s", e)
        return round2(ZERO)


def _asset_breakdown(
    holdings: List[OpenHolding], total_value: Decimal
) -> List[AssetTypeBreakdown]:
    grouped: Dict[str, List[OpenHolding]] = {}
    for holding in holdings:
        grouped.setdefault(holding.asset_type, []).append(holding)

    breakdown = []
    for asset_type, group in grouped.items():
        invested = sum((h.invested for h in group), ZERO)
        value = sum((h.current_value for h in group), ZERO)
        gain = value - invested
        breakdown.append(
            AssetTypeBreakdown(
                asset_type=asset_type,
                invested=round2(invested),
                current_value=round2(value),
                gain=round2(gain),
                gain_percent=quantize(percent_of(gain, invested), 4),
                allocation_percent=round2(percent_of(value, total_value)),
                holdings_count=len(group),
            )
        )
    return breakdown


def analyze_portfolio(
    transactions: Sequence[Transaction],
    prices: Mapping[str, Decimal],
    as_of: date,
) -> PortfolioAnalytics:
    """
    Compute portfolio analytics as of a valuation date.

    Args:
        transactions: BUY/SELL/DIVIDEND history, any order
        prices: Current unit price per symbol; a missing symbol is valued
            at its average cost
        as_of: Valuation date for XIRR, CAGR and duration

    Returns:
        PortfolioAnalytics (all zero for an empty history)

    Raises:
        InsufficientHistoryError: If a SELL exceeds the units bought before it
    """
    if not transactions:
        return _empty_analytics()

    logger.info("Analyzing portfolio of %d transactions as of %s", len(transactions), as_of)
    ordered = sorted(transactions, key=lambda t: t.transaction_date)

    lots: Dict[str, List[Lot]] = {}
    asset_types: Dict[str, str] = {}
    realized_sales = []
    realized_gain = ZERO
    dividends = ZERO

    for txn in ordered:
        if txn.transaction_type == TransactionType.BUY:
            asset_types[txn.symbol] = txn.asset_type
            lots.setdefault(txn.symbol, []).append(
                Lot(
                    txn.identifier,
                    txn.transaction_date,
                    to_decimal(txn.quantity),
                    to_decimal(txn.unit_price),
                )
            )
        elif txn.transaction_type == TransactionType.SELL:
            symbol_lots = lots.get(txn.symbol, [])
            match = match_fifo(symbol_lots, txn.quantity, txn.unit_price)
            lots[txn.symbol] = remaining_lots(symbol_lots, txn.quantity)
            realized_gain += match.total_realized_gain
            realized_sales.append(
                RealizedSale(txn.identifier, txn.symbol, txn.transaction_date, match)
            )
        else:
            dividends += txn.gross_amount

    holdings = []
    for symbol, open_lots in lots.items():
        quantity = sum((to_decimal(lot.quantity) for lot in open_lots), ZERO)
        if quantity <= 0:
            continue
        invested = sum(
            (to_decimal(lot.quantity) * to_decimal(lot.unit_cost) for lot in open_lots), ZERO
        )
        price = to_decimal(prices.get(symbol), default=invested / quantity)
        value = quantity * price
        holdings.append(
            OpenHolding(
                symbol=symbol,
                asset_type=asset_types[symbol],
                quantity=quantity,
                invested=round2(invested),
                current_price=price,
                current_value=round2(value),
                unrealized_gain=round2(value - invested),
                unrealized_gain_percent=quantize(percent_of(value - invested, invested), 4),
            )
        )

    total_invested = sum((h.invested for h in holdings), ZERO)
    current_value = sum((h.current_value for h in holdings), ZERO)
    unrealized_gain = current_value - total_invested
    total_gain = realized_gain + unrealized_gain

    buy_dates = [t.transaction_date for t in ordered if t.transaction_type == TransactionType.BUY]
    first_investment = min(buy_dates) if buy_dates else as_of
    duration_days = (as_of - first_investment).days
    years = duration_days / 365.0

    return PortfolioAnalytics(
        total_invested=round2(total_invested),
        current_value=round2(current_value),
        total_gain=round2(total_gain),
        total_gain_percent=quantize(percent_of(total_gain, total_invested), 4),
        realized_gain=round2(realized_gain),
        unrealized_gain=round2(unrealized_gain),
        xirr=_portfolio_xirr(ordered, current_value, as_of),
        absolute_return=irr.calculate_absolute_return(total_invested, current_value),
        cagr=irr.calculate_cagr(total_invested, current_value, years),
        total_dividends=round2(dividends),
        first_investment_date=first_investment,
        last_transaction_date=ordered[-1].transaction_date,
        duration_days=duration_days,
        holdings=holdings,
        asset_breakdown=_asset_breakdown(holdings, current_value),
        realized_sales=realized_sales,
    )
