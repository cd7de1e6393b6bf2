"""
Break-even model.

All four calculator modes share one contribution-margin routine:

    units = (fixedCosts + targetProfit) / (price - variableCost - share * price)

where share is a target profit expressed as a fraction of revenue. standard
and findUnits use targetProfit = share = 0; profitTarget sets one of them;
findPrice inverts the same identity for price at a given unit volume.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from finplan.entities import BreakEvenInputs, BreakEvenMode
from finplan.errors import (
    ArithmeticDegenerate,
    InvalidInput,
    InvalidTargetMargin,
    require_non_negative,
    require_number,
    require_positive,
    safe_divide,
)

logger = logging.getLogger(__name__)


def break_even_price(fixed_costs: float, variable_cost_per_unit: float, target_volume: float) -> float:
    """
    Price at which target_volume units exactly cover all costs.

    Returns 0 when target_volume <= 0. Callers treat 0 as "undefined",
    not as a valid price.
    """
    fixed_costs = require_non_negative(fixed_costs, "fixedCosts")
    variable_cost_per_unit = require_non_negative(variable_cost_per_unit, "variableCostPerUnit")
    target_volume = require_number(target_volume, "targetVolume")

    if target_volume <= 0:
        return 0.0
    return variable_cost_per_unit + fixed_costs / target_volume


def optimal_price(break_even: float, target_profit_percentage: float) -> float:
    """
    Price that earns target_profit_percentage of revenue over the break-even price.

    Returns 0 when break_even <= 0 or the target is <= 0.

    Raises:
        InvalidTargetMargin: target_profit_percentage >= 100
    """
    break_even = require_number(break_even, "breakEvenPrice")
    target_profit_percentage = require_number(target_profit_percentage, "targetProfitPercentage")

    if target_profit_percentage >= 100:
        raise InvalidTargetMargin(
            f"Target profit percentage must be below 100, got {target_profit_percentage}",
            "targetProfitPercentage"
        )
    if break_even <= 0 or target_profit_percentage <= 0:
        return 0.0
    return break_even / (1 - target_profit_percentage / 100)


def units_for_margin(
    fixed_costs: float,
    price: float,
    variable_cost_per_unit: float,
    target_profit: float = 0.0,
    revenue_share: float = 0.0
) -> float:
    """
    Unit volume at which revenue covers fixed costs, variable costs and a profit target.

    Args:
        fixed_costs: Fixed costs for the period
        price: Selling price per unit
        variable_cost_per_unit: Variable cost per unit
        target_profit: Profit amount to earn on top of costs
        revenue_share: Profit to earn as a fraction of revenue (0.2 = 20%)

    Raises:
        InvalidInput: price does not exceed variable cost
        ArithmeticDegenerate: the revenue share consumes the whole contribution margin
    """
    contribution_margin = price - variable_cost_per_unit
    if contribution_margin <= 0:
        raise InvalidInput(
            "Selling price per unit must be greater than variable cost per unit",
            "sellingPricePerUnit"
        )

    effective_margin = contribution_margin - revenue_share * price
    if effective_margin <= 0:
        raise ArithmeticDegenerate(
            f"A {revenue_share * 100:g}% profit target leaves no contribution margin "
            f"at a price of {price:g}",
            "targetProfitPercentage"
        )
    return (fixed_costs + target_profit) / effective_margin


@dataclass(frozen=True)
class BreakEvenResult:
    """
    Solved break-even figures for one mode.

    - break_even_units: Units at which profit is zero
    - units_required: Units needed to hit the mode's target (= break_even_units
      outside profitTarget mode)
    - break_even_price: Price used or solved for
    - required_price: Solved price (findPrice mode only)
    - contribution_margin_ratio: Contribution margin as % of price
    """
    mode: BreakEvenMode
    break_even_units: float
    units_required: float
    break_even_price: Optional[float]
    required_price: Optional[float]
    total_revenue_at_break_even: float
    contribution_margin: float
    contribution_margin_ratio: float
    target_profit_amount: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mode": self.mode.value,
            "breakEvenUnits": self.break_even_units,
            "unitsRequired": self.units_required,
            "breakEvenPrice": self.break_even_price,
            "requiredPrice": self.required_price,
            "totalRevenueAtBreakEven": self.total_revenue_at_break_even,
            "contributionMargin": self.contribution_margin,
            "contributionMarginRatio": self.contribution_margin_ratio,
            "targetProfitAmount": self.target_profit_amount,
        }


def solve_break_even(inputs: BreakEvenInputs) -> BreakEvenResult:
    """
    Answer the break-even question selected by inputs.mode.

    Args:
        inputs: Validated break-even form

    Returns:
        BreakEvenResult

    Raises:
        InvalidInput: price not above variable cost
        ArithmeticDegenerate: percentage target exceeds the contribution margin
    """
    fixed = inputs.fixed_costs
    variable = inputs.variable_cost_per_unit

    if inputs.mode == BreakEvenMode.FIND_PRICE:
        units = inputs.target_units
        price = break_even_price(fixed, variable, units)
        required_price: Optional[float] = price
        target_amount = 0.0
        units_required = units
        break_even_units = units
    else:
        price = inputs.selling_price_per_unit
        required_price = None
        break_even_units = units_for_margin(fixed, price, variable)

        if inputs.mode == BreakEvenMode.PROFIT_TARGET and inputs.target_profit is not None:
            target_amount = inputs.target_profit
            units_required = units_for_margin(fixed, price, variable, target_profit=target_amount)
        elif inputs.mode == BreakEvenMode.PROFIT_TARGET:
            share = inputs.target_profit_percentage / 100
            units_required = units_for_margin(fixed, price, variable, revenue_share=share)
            target_amount = share * price * units_required
        else:
            target_amount = 0.0
            units_required = break_even_units

    contribution_margin = price - variable
    result = BreakEvenResult(
        mode=inputs.mode,
        break_even_units=break_even_units,
        units_required=units_required,
        break_even_price=price,
        required_price=required_price,
        total_revenue_at_break_even=break_even_units * price,
        contribution_margin=contribution_margin,
        contribution_margin_ratio=safe_divide(
            contribution_margin * 100, price,
            "Break-even price is zero; contribution margin ratio is undefined", "sellingPricePerUnit"
        ),
        target_profit_amount=target_amount,
    )

    logger.debug(
        "Break-even (%s): %.2f units at price %.2f, %.2f units required",
        inputs.mode.value, break_even_units, price, units_required
    )
    return result


@dataclass(frozen=True)
class ChartPoint:
    units: int
    revenue: float
    total_cost: float
    profit: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "units": self.units,
            "revenue": self.revenue,
            "totalCost": self.total_cost,
            "profit": self.profit,
        }


def break_even_chart(
    fixed_costs: float,
    variable_cost_per_unit: float,
    selling_price_per_unit: float,
    points: int = 10
) -> List[ChartPoint]:
    """
    Revenue / cost / profit table from 0 to twice the break-even volume.

    Units step by ceil(maxUnits / points); the last point may fall short of
    maxUnits when the step does not divide it.
    """
    fixed_costs = require_non_negative(fixed_costs, "fixedCosts")
    variable_cost_per_unit = require_non_negative(variable_cost_per_unit, "variableCostPerUnit")
    selling_price_per_unit = require_positive(selling_price_per_unit, "sellingPricePerUnit")
    if points < 1:
        raise InvalidInput(f"points must be >= 1, got {points}", "points")

    units_to_break_even = units_for_margin(fixed_costs, selling_price_per_unit, variable_cost_per_unit)
    max_units = math.ceil(units_to_break_even * 2)
    step = max(math.ceil(max_units / points), 1)

    chart = []
    for units in range(0, max_units + 1, step):
        revenue = units * selling_price_per_unit
        total_cost = fixed_costs + units * variable_cost_per_unit
        chart.append(ChartPoint(units, revenue, total_cost, revenue - total_cost))
    return chart
