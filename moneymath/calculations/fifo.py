"""
FIFO Lot Matching

Matches a sale against purchase lots oldest-first to compute realized gains.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import List, Sequence

from moneymath.calculations.decimal_math import (
    DISPLAY_SCALE,
    ZERO,
    Number,
    percent_of,
    quantize,
    to_decimal,
)
from moneymath.exceptions import InsufficientHistoryError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Lot:
    """A purchase lot; lots are supplied oldest first."""

    identifier: str
    acquisition_date: date
    quantity: Decimal
    unit_cost: Decimal


@dataclass(frozen=True)
class FifoBatch:
    """The slice of one lot consumed by a sale."""

    lot_identifier: str
    acquisition_date: date
    quantity_sold: Decimal
    unit_cost: Decimal
    sale_price: Decimal
    cost_basis: Decimal
    sale_value: Decimal
    gain: Decimal
    gain_percent: Decimal


@dataclass
class FifoResult:
    total_realized_gain: Decimal
    total_realized_gain_percent: Decimal
    total_sale_value: Decimal
    total_cost_basis: Decimal
    batches: List[FifoBatch] = field(default_factory=list)


def _gain_percent(gain: Decimal, cost_basis: Decimal) -> Decimal:
    if cost_basis <= 0:
        return quantize(ZERO, DISPLAY_SCALE)
    return quantize(percent_of(gain, cost_basis), DISPLAY_SCALE)


def match_fifo(
    lots: Sequence[Lot], quantity_to_sell: Number, sale_price: Number
) -> FifoResult:
    """
    Consume lots in the given order until the sale quantity is covered.

    Args:
        lots: Purchase lots, oldest first (never re-ordered)
        quantity_to_sell: Units being sold
        sale_price: Price per unit received

    Returns:
        FifoResult with one batch per consumed lot slice

    Raises:
        ValueError: If quantity_to_sell is not positive
        InsufficientHistoryError: If the lots cannot cover the sale
    """
    quantity_to_sell = to_decimal(quantity_to_sell)
    sale_price = to_decimal(sale_price)
    logger.info("Calculating FIFO gain for %s units at %s", quantity_to_sell, sale_price)

    if quantity_to_sell <= 0:
        raise ValueError("Quantity to sell must be positive")
    if not lots:
        raise InsufficientHistoryError(quantity_to_sell, ZERO)

    batches = []
    remaining = quantity_to_sell
    total_cost_basis = ZERO
    total_sale_value = ZERO

    for lot in lots:
        if remaining <= 0:
            break

        lot_quantity = to_decimal(lot.quantity)
        if lot_quantity <= 0:
            continue

        quantity = min(remaining, lot_quantity)
        unit_cost = to_decimal(lot.unit_cost)
        cost_basis = quantity * unit_cost
        sale_value = quantity * sale_price
        gain = sale_value - cost_basis

        batches.append(
            FifoBatch(
                lot_identifier=lot.identifier,
                acquisition_date=lot.acquisition_date,
                quantity_sold=quantity,
                unit_cost=unit_cost,
                sale_price=sale_price,
                cost_basis=cost_basis,
                sale_value=sale_value,
                gain=gain,
                gain_percent=_gain_percent(gain, cost_basis),
            )
        )

        total_cost_basis += cost_basis
        total_sale_value += sale_value
        remaining -= quantity

    if remaining > 0:
        raise InsufficientHistoryError(quantity_to_sell, quantity_to_sell - remaining)

    total_gain = total_sale_value - total_cost_basis
    return FifoResult(
        total_realized_gain=total_gain,
        total_realized_gain_percent=_gain_percent(total_gain, total_cost_basis),
        total_sale_value=total_sale_value,
        total_cost_basis=total_cost_basis,
        batches=batches,
    )


def remaining_lots(lots: Sequence[Lot], quantity_sold: Number) -> List[Lot]:
    """
    Lots left open after ``quantity_sold`` units were matched FIFO.

    The partially consumed lot keeps its identity with a reduced quantity.
    """
    remaining = to_decimal(quantity_sold)
    open_lots = []
    for lot in lots:
        lot_quantity = to_decimal(lot.quantity)
        if remaining >= lot_quantity:
            remaining -= lot_quantity
            continue
        open_lots.append(
            Lot(lot.identifier, lot.acquisition_date, lot_quantity - remaining, lot.unit_cost)
        )
        remaining = ZERO
    return open_lots
