"""Startup cost estimate: category totals, cash reserve and initial capital."""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence

from finplan.config import get_settings
from finplan.entities import CostCategory, StartupCost
from finplan.errors import InvalidInput

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StartupCostEstimate:
    """
    - total_startup_cost: One-time costs plus opening inventory
    - recommended_cash_reserve: Monthly costs x reserve months
    - total_initial_capital: Startup cost plus reserve
    """
    one_time: float
    monthly: float
    inventory: float
    reserve_months: int
    total_startup_cost: float
    recommended_cash_reserve: float
    total_initial_capital: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totals": {
                "oneTime": self.one_time,
                "monthly": self.monthly,
                "inventory": self.inventory,
            },
            "summary": {
                "totalStartupCost": self.total_startup_cost,
                "monthlyOperatingCost": self.monthly,
                "recommendedCashReserve": self.recommended_cash_reserve,
                "totalInitialCapital": self.total_initial_capital,
            },
            "reserveMonths": self.reserve_months,
        }


def estimate_startup_costs(costs: Sequence[StartupCost], reserve_months: Optional[int] = None) -> StartupCostEstimate:
    """Total a list of startup costs. An empty list gives an all-zero estimate."""
    if reserve_months is None:
        reserve_months = get_settings().cash_reserve_months
    if isinstance(reserve_months, bool) or not isinstance(reserve_months, int) or reserve_months < 0:
        raise InvalidInput(f"reserve_months must be a non-negative integer, got {reserve_months!r}", "reserveMonths")

    totals = {category: 0.0 for category in CostCategory}
    for cost in costs:
        totals[cost.category] += cost.amount

    startup_total = totals[CostCategory.ONE_TIME] + totals[CostCategory.INVENTORY]
    reserve = totals[CostCategory.MONTHLY] * reserve_months

    logger.debug("Startup estimate over %d costs: %.2f initial capital", len(costs), startup_total + reserve)
    return StartupCostEstimate(
        one_time=totals[CostCategory.ONE_TIME],
        monthly=totals[CostCategory.MONTHLY],
        inventory=totals[CostCategory.INVENTORY],
        reserve_months=reserve_months,
        total_startup_cost=startup_total,
        recommended_cash_reserve=reserve,
        total_initial_capital=startup_total + reserve,
    )
