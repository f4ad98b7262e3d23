"""
Tests for FIFO lot matching.
"""

import pytest
from datetime import date
from decimal import Decimal

from moneymath.calculations.fifo import Lot, match_fifo, remaining_lots
from moneymath.exceptions import CalculationError, InsufficientHistoryError


@pytest.fixture
def lots():
    """Three purchase lots, oldest first: 35 units in total."""
    return [
        Lot("L1", date(2022, 1, 10), Decimal("10"), Decimal("100")),
        Lot("L2", date(2022, 6, 10), Decimal("20"), Decimal("110")),
        Lot("L3", date(2023, 2, 1), Decimal("5"), Decimal("120")),
    ]


class TestFifoMatching:
    """Test oldest-first matching of a sale."""

    def test_exact_quantity_consumes_all_lots(self, lots):
        result = match_fifo(lots, Decimal("35"), Decimal("150"))
        assert [batch.lot_identifier for batch in result.batches] == ["L1", "L2", "L3"]
        assert sum(batch.quantity_sold for batch in result.batches) == Decimal("35")
        assert result.total_cost_basis == Decimal("3800")
        assert result.total_sale_value == Decimal("5250")
        assert result.total_realized_gain == Decimal("1450")
        assert result.total_realized_gain_percent == Decimal("38.16")

    def test_one_unit_more_raises(self, lots):
        with pytest.raises(InsufficientHistoryError) as exc_info:
            match_fifo(lots, Decimal("36"), Decimal("150"))
        assert exc_info.value.requested == Decimal("36")
        assert exc_info.value.matched == Decimal("35")
        assert exc_info.value.remainder == Decimal("1")
        assert "Insufficient holdings" in str(exc_info.value)

    def test_partial_lot(self, lots):
        result = match_fifo(lots, Decimal("15"), Decimal("90"))
        assert len(result.batches) == 2
        assert result.batches[0].quantity_sold == Decimal("10")
        assert result.batches[1].quantity_sold == Decimal("5")
        assert result.batches[1].gain == Decimal("-100")
        assert result.total_realized_gain == Decimal("-200")

    def test_oldest_lot_first(self, lots):
        """Order of the lots given is the order they are consumed."""
        result = match_fifo(list(reversed(lots)), Decimal("5"), Decimal("150"))
        assert result.batches[0].lot_identifier == "L3"

    def test_empty_lots_raise(self):
        with pytest.raises(InsufficientHistoryError):
            match_fifo([], Decimal("1"), Decimal("10"))

    def test_empty_lots_is_a_calculation_error(self):
        with pytest.raises(CalculationError):
            match_fifo([], Decimal("1"), Decimal("10"))

    def test_non_positive_quantity(self, lots):
        with pytest.raises(ValueError):
            match_fifo(lots, Decimal("0"), Decimal("10"))

    def test_zero_quantity_lots_skipped(self):
        lots = [
            Lot("EMPTY", date(2022, 1, 1), Decimal("0"), Decimal("50")),
            Lot("L1", date(2022, 2, 1), Decimal("4"), Decimal("100")),
        ]
        result = match_fifo(lots, Decimal("4"), Decimal("100"))
        assert [batch.lot_identifier for batch in result.batches] == ["L1"]
        assert result.total_realized_gain == 0
        assert result.total_realized_gain_percent == Decimal("0.00")


class TestRemainingLots:
    """Test what is left open after a sale."""

    def test_partial_lot_keeps_identity(self, lots):
        remaining = remaining_lots(lots, Decimal("15"))
        assert [lot.identifier for lot in remaining] == ["L2", "L3"]
        assert remaining[0].quantity == Decimal("15")
        assert remaining[0].unit_cost == Decimal("110")

    def test_everything_sold(self, lots):
        assert remaining_lots(lots, Decimal("35")) == []

    def test_nothing_sold(self, lots):
        assert remaining_lots(lots, Decimal("0")) == lots
