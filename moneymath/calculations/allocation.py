"""
Asset Allocation Rebalancing

Compares current holdings per asset class with target percentages and
suggests BUY / SELL / HOLD actions.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional, Sequence

from moneymath.calculations.charts import ChartPoint
from moneymath.calculations.decimal_math import (
    HUNDRED,
    ZERO,
    percent_of,
    round2,
    to_decimal,
)

logger = logging.getLogger(__name__)

# Adjustments within this band are not worth a trade
ACTION_THRESHOLD = Decimal("100")
BALANCED_DRIFT = Decimal("1")


@dataclass(frozen=True)
class AssetHolding:
    asset_name: str  # "Equity", "Debt", "Gold", "Cash"
    current_value: Decimal


@dataclass(frozen=True)
class TargetAllocation:
    asset_name: str
    target_percentage: Decimal


@dataclass(frozen=True)
class RebalanceRequest:
    holdings: Sequence[AssetHolding]
    targets: Sequence[TargetAllocation]
    fresh_investment: Optional[Decimal] = None


@dataclass(frozen=True)
class AssetAnalysis:
    asset_name: str
    current_value: Decimal
    current_percentage: Decimal
    target_percentage: Decimal
    drift: Decimal
    target_value: Decimal
    adjustment_needed: Decimal


@dataclass(frozen=True)
class RebalancingAction:
    asset_name: str
    action: str  # "BUY", "SELL" or "HOLD"
    amount: Decimal
    recommendation: str


@dataclass
class RebalancePlan:
    total_portfolio_value: Decimal
    total_buy_amount: Decimal
    total_sell_amount: Decimal
    is_balanced: bool
    analyses: List[AssetAnalysis] = field(default_factory=list)
    actions: List[RebalancingAction] = field(default_factory=list)
    allocation_chart: List[ChartPoint] = field(default_factory=list)


def _action_for(asset_name: str, adjustment: Decimal) -> RebalancingAction:
    amount = round2(abs(adjustment))
    if adjustment > ACTION_THRESHOLD:
        return RebalancingAction(
            asset_name, "BUY", amount, f"Invest {amount} more in {asset_name}"
        )
    if adjustment < -ACTION_THRESHOLD:
        return RebalancingAction(
            asset_name, "SELL", amount, f"Redeem {amount} from {asset_name}"
        )
    return RebalancingAction(
        asset_name, "HOLD", round2(ZERO), f"{asset_name} is balanced"
    )


def calculate_rebalancing(request: RebalanceRequest) -> RebalancePlan:
    """
    Work out how far each asset class drifted from its target.

    Fresh investment is added to the portfolio total before targets are
    applied, so it is distributed by the BUY actions.
    """
    logger.info(
        "Calculating rebalancing for %d holdings against %d targets",
        len(request.holdings),
        len(request.targets),
    )
    current = {}
    for holding in request.holdings:
        current[holding.asset_name] = current.get(holding.asset_name, ZERO) + to_decimal(
            holding.current_value
        )

    total_value = sum(current.values(), ZERO) + to_decimal(request.fresh_investment)

    analyses = []
    actions = []
    for target in request.targets:
        current_value = current.get(target.asset_name, ZERO)
        target_percentage = to_decimal(target.target_percentage)
        current_percentage = percent_of(current_value, total_value)
        target_value = round2(total_value * target_percentage / HUNDRED)
        adjustment = target_value - current_value

        analyses.append(
            AssetAnalysis(
                asset_name=target.asset_name,
                current_value=round2(current_value),
                current_percentage=round2(current_percentage),
                target_percentage=round2(target_percentage),
                drift=round2(current_percentage - target_percentage),
                target_value=target_value,
                adjustment_needed=round2(adjustment),
            )
        )
        actions.append(_action_for(target.asset_name, adjustment))

    return RebalancePlan(
        total_portfolio_value=round2(total_value),
        total_buy_amount=round2(sum((a.amount for a in actions if a.action == "BUY"), ZERO)),
        total_sell_amount=round2(
            sum((a.amount for a in actions if a.action == "SELL"), ZERO)
        ),
        is_balanced=all(abs(a.drift) < BALANCED_DRIFT for a in analyses),
        analyses=analyses,
        actions=actions,
        allocation_chart=[
            ChartPoint(a.asset_name, a.current_percentage) for a in analyses
        ],
    )
