"""
Tests for asset allocation rebalancing.
"""

from decimal import Decimal

from moneymath.calculations.allocation import (
    AssetHolding,
    RebalanceRequest,
    TargetAllocation,
    calculate_rebalancing,
)


class TestRebalancing:
    """Test asset allocation rebalancing."""

    def test_overweight_and_underweight(self):
        plan = calculate_rebalancing(
            RebalanceRequest(
                holdings=[
                    AssetHolding("Equity", Decimal("70000")),
                    AssetHolding("Debt", Decimal("30000")),
                ],
                targets=[
                    TargetAllocation("Equity", Decimal("60")),
                    TargetAllocation("Debt", Decimal("40")),
                ],
            )
        )
        actions = {action.asset_name: action for action in plan.actions}
        assert actions["Equity"].action == "SELL"
        assert actions["Equity"].amount == Decimal("10000.00")
        assert actions["Debt"].action == "BUY"
        assert plan.total_buy_amount == plan.total_sell_amount == Decimal("10000.00")
        assert plan.is_balanced is False
        assert plan.analyses[0].drift == Decimal("10.00")

    def test_fresh_investment_is_distributed(self):
        plan = calculate_rebalancing(
            RebalanceRequest(
                holdings=[
                    AssetHolding("Equity", Decimal("60000")),
                    AssetHolding("Debt", Decimal("40000")),
                ],
                targets=[
                    TargetAllocation("Equity", Decimal("60")),
                    TargetAllocation("Debt", Decimal("40")),
                ],
                fresh_investment=Decimal("50000"),
            )
        )
        assert plan.total_portfolio_value == Decimal("150000.00")
        assert plan.total_buy_amount == Decimal("50000.00")
        assert plan.total_sell_amount == Decimal("0.00")

    def test_small_drift_holds(self):
        plan = calculate_rebalancing(
            RebalanceRequest(
                holdings=[
                    AssetHolding("Equity", Decimal("60050")),
                    AssetHolding("Debt", Decimal("39950")),
                ],
                targets=[
                    TargetAllocation("Equity", Decimal("60")),
                    TargetAllocation("Debt", Decimal("40")),
                ],
            )
        )
        assert all(action.action == "HOLD" for action in plan.actions)
        assert plan.is_balanced is True

    def test_missing_holding_is_bought(self):
        plan = calculate_rebalancing(
            RebalanceRequest(
                holdings=[AssetHolding("Equity", Decimal("100000"))],
                targets=[
                    TargetAllocation("Equity", Decimal("90")),
                    TargetAllocation("Gold", Decimal("10")),
                ],
            )
        )
        gold = plan.actions[1]
        assert gold.action == "BUY"
        assert gold.amount == Decimal("10000.00")
