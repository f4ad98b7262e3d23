"""
Tests for portfolio analytics over a transaction history.
"""

import pytest
from datetime import date
from decimal import Decimal

from moneymath.calculations.portfolio import (
    Transaction,
    TransactionType,
    analyze_portfolio,
)
from moneymath.exceptions import InsufficientHistoryError

AS_OF = date(2025, 1, 1)


@pytest.fixture
def transactions():
    return [
        Transaction("T1", TransactionType.BUY, "ACME", date(2023, 1, 1), Decimal("10"), Decimal("100")),
        Transaction("T2", TransactionType.BUY, "ACME", date(2023, 7, 1), Decimal("10"), Decimal("120")),
        Transaction("T3", TransactionType.SELL, "ACME", date(2024, 1, 1), Decimal("5"), Decimal("150")),
        Transaction("T4", TransactionType.DIVIDEND, "ACME", date(2024, 2, 1), Decimal("15"), Decimal("2")),
        Transaction(
            "T5",
            TransactionType.BUY,
            "BONDFUND",
            date(2023, 3, 1),
            Decimal("100"),
            Decimal("10"),
            asset_type="DEBT",
        ),
    ]


@pytest.fixture
def prices():
    return {"ACME": Decimal("160"), "BONDFUND": Decimal("11")}


class TestPortfolioAnalytics:
    """Test analytics across holdings."""

    def test_realized_and_unrealized(self, transactions, prices):
        analytics = analyze_portfolio(transactions, prices, AS_OF)
        assert analytics.realized_gain == Decimal("250.00")
        assert analytics.total_invested == Decimal("2700.00")
        assert analytics.current_value == Decimal("3500.00")
        assert analytics.unrealized_gain == Decimal("800.00")
        assert analytics.total_gain == Decimal("1050.00")
        assert analytics.total_dividends == Decimal("30.00")

    def test_open_holdings_after_fifo_sale(self, transactions, prices):
        analytics = analyze_portfolio(transactions, prices, AS_OF)
        acme = analytics.holdings[0]
        assert acme.symbol == "ACME"
        assert acme.quantity == Decimal("15")
        # 5 left from the first lot at 100, all 10 of the second at 120
        assert acme.invested == Decimal("1700.00")
        assert acme.current_value == Decimal("2400.00")
        assert acme.unrealized_gain == Decimal("700.00")

    def test_realized_sales_detail(self, transactions, prices):
        analytics = analyze_portfolio(transactions, prices, AS_OF)
        assert len(analytics.realized_sales) == 1
        sale = analytics.realized_sales[0]
        assert sale.transaction_identifier == "T3"
        assert [batch.lot_identifier for batch in sale.match.batches] == ["T1"]

    def test_dates_and_returns(self, transactions, prices):
        analytics = analyze_portfolio(transactions, prices, AS_OF)
        assert analytics.first_investment_date == date(2023, 1, 1)
        assert analytics.last_transaction_date == date(2024, 2, 1)
        assert analytics.duration_days == 731
        assert analytics.xirr > 0
        assert analytics.cagr > 0
        assert analytics.absolute_return == Decimal("29.6296")

    def test_asset_breakdown(self, transactions, prices):
        analytics = analyze_portfolio(transactions, prices, AS_OF)
        breakdown = {item.asset_type: item for item in analytics.asset_breakdown}
        assert breakdown["EQUITY"].allocation_percent == Decimal("68.57")
        assert breakdown["DEBT"].allocation_percent == Decimal("31.43")
        assert breakdown["DEBT"].gain == Decimal("100.00")
        assert breakdown["EQUITY"].holdings_count == 1

    def test_missing_price_uses_average_cost(self, transactions):
        analytics = analyze_portfolio(transactions, {"ACME": Decimal("160")}, AS_OF)
        bond = analytics.holdings[1]
        assert bond.current_value == Decimal("1000.00")
        assert bond.unrealized_gain == Decimal("0.00")

    def test_sale_before_purchase_raises(self):
        history = [
            Transaction("B1", TransactionType.BUY, "ACME", date(2023, 6, 1), Decimal("10"), Decimal("100")),
            Transaction("S1", TransactionType.SELL, "ACME", date(2023, 1, 1), Decimal("5"), Decimal("90")),
        ]
        with pytest.raises(InsufficientHistoryError):
            analyze_portfolio(history, {}, AS_OF)

    def test_empty_history(self):
        analytics = analyze_portfolio([], {}, AS_OF)
        assert analytics.total_invested == 0
        assert analytics.xirr == 0
        assert analytics.holdings == []


class TestTransaction:
    """Test transaction amounts."""

    def test_charges(self):
        buy = Transaction(
            "B", TransactionType.BUY, "X", date(2024, 1, 1), Decimal("10"), Decimal("100"),
            charges=Decimal("5"),
        )
        sell = Transaction(
            "S", TransactionType.SELL, "X", date(2024, 2, 1), Decimal("10"), Decimal("100"),
            charges=Decimal("5"),
        )
        assert buy.gross_amount == Decimal("1000")
        assert buy.net_amount == Decimal("1005")
        assert sell.net_amount == Decimal("995")
