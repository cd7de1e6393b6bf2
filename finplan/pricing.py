"""
Pricing scenario generator.

Design Principles:
1. Validate the whole form first and report every problem together
2. Scenarios are derived snapshots (never mutated after generation)
3. Generation order is ascending price; rank_by_profit() gives descending profit
4. Demand comes from finplan.demand; break-even prices from finplan.breakeven

A sweep steps price linearly from min to max in count increments. Each
price is rounded to cents before demand is estimated, so the table shows
exactly the prices that were evaluated.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from finplan.breakeven import break_even_price, optimal_price
from finplan.config import get_settings
from finplan.demand import volume_for_market
from finplan.entities import CostStructure, MarketData, PriceRange, ScenarioSweep
from finplan.errors import (
    ArithmeticDegenerate,
    CalculationError,
    InvalidInput,
    InvalidRange,
    ValidationErrors,
    require_non_negative,
    require_numeric_fields,
    require_percentage,
)
from finplan.rounding import round_price

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PricingScenario:
    """One evaluated price point."""
    price: float
    volume: int
    revenue: float
    variable_costs: float
    total_costs: float
    profit: float
    target_profit: float
    profit_margin: float
    meets_target_profit: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "price": self.price,
            "volume": self.volume,
            "revenue": self.revenue,
            "variableCosts": self.variable_costs,
            "totalCosts": self.total_costs,
            "profit": self.profit,
            "targetProfit": self.target_profit,
            "profitMargin": self.profit_margin,
            "meetsTargetProfit": self.meets_target_profit,
        }


@dataclass(frozen=True)
class BreakEvenAnalysis:
    """
    Break-even summary for a pricing calculation.

    - point: Break-even price (fixed costs spread over the whole market)
    - optimal_price: Price earning the target profit percentage
    - optimal_price_range: Bounds for the scenario sweep
    - market_sensitivity: Elasticity used (0 when absent)
    """
    point: float
    optimal_price: float
    optimal_price_range: PriceRange
    market_sensitivity: float

    @property
    def min(self) -> float:
        return self.optimal_price_range.min

    @property
    def max(self) -> float:
        return self.optimal_price_range.max

    def to_dict(self) -> Dict[str, Any]:
        return {
            "point": self.point,
            "optimalPrice": self.optimal_price,
            "optimalPriceRange": self.optimal_price_range.to_dict(),
            "marketSensitivity": self.market_sensitivity,
            "min": self.min,
            "max": self.max,
        }


# =============================================================================
# Scenario generation
# =============================================================================


def _sweep_errors(cost: CostStructure, market: MarketData, price_range: PriceRange, count: Any) -> List[CalculationError]:
    errors: List[CalculationError] = []

    if cost.variable_cost_per_unit <= 0:
        errors.append(InvalidInput("Variable Cost Per Unit must be greater than 0", "variableCostPerUnit"))
    if market.market_size <= 0:
        errors.append(InvalidInput("Market Size must be greater than 0", "marketSize"))
    if market.competitor_price <= 0:
        errors.append(InvalidInput("Competitor Price must be greater than 0", "competitorPrice"))
    if price_range.min <= 0:
        errors.append(InvalidInput("Minimum Price must be greater than 0", "minPrice"))
    if price_range.max <= 0:
        errors.append(InvalidInput("Maximum Price must be greater than 0", "maxPrice"))

    if isinstance(count, bool) or not isinstance(count, int):
        errors.append(InvalidInput(f"Number of Scenarios must be a whole number, got {count!r}", "numScenarios"))
    elif count <= 0:
        errors.append(InvalidInput("Number of Scenarios must be greater than 0", "numScenarios"))
    elif count < 2:
        errors.append(InvalidRange("Number of Scenarios must be at least 2", "numScenarios"))

    if price_range.max <= price_range.min:
        errors.append(InvalidRange("Maximum Price must be greater than Minimum Price", "maxPrice"))

    return errors


def evaluate_price(price: float, cost: CostStructure, market: MarketData) -> PricingScenario:
    """Estimate demand at a price and derive the scenario's figures."""
    volume = volume_for_market(price, market)
    revenue = price * volume
    if revenue == 0:
        raise ArithmeticDegenerate(
            f"Expected volume at price {price:g} is zero; profit margin is undefined", "marketSize"
        )

    variable_costs = volume * cost.variable_cost_per_unit
    total_costs = cost.fixed_costs + variable_costs
    profit = revenue - total_costs
    target_profit = revenue * cost.target_profit_percentage / 100

    return PricingScenario(
        price=price,
        volume=volume,
        revenue=revenue,
        variable_costs=variable_costs,
        total_costs=total_costs,
        profit=profit,
        target_profit=target_profit,
        profit_margin=profit / revenue * 100,
        meets_target_profit=profit >= target_profit,
    )


def generate_scenarios(
    cost: CostStructure,
    market: MarketData,
    price_range: PriceRange,
    count: int
) -> List[PricingScenario]:
    """
    Evaluate count evenly spaced prices from price_range.min to price_range.max.

    Args:
        cost: Cost structure
        market: Market data
        price_range: Sweep bounds (max must exceed min)
        count: Number of price points, at least 2

    Returns:
        Scenarios in ascending price order

    Raises:
        InvalidInput / InvalidRange: a single validation failure
        ValidationErrors: several failures, reported together
    """
    errors = _sweep_errors(cost, market, price_range, count)
    if len(errors) == 1:
        raise errors[0]
    if errors:
        raise ValidationErrors(errors)

    step = (price_range.max - price_range.min) / (count - 1)
    scenarios = [
        evaluate_price(round_price(price_range.min + i * step), cost, market)
        for i in range(count)
    ]

    logger.debug(
        "Generated %d pricing scenarios between %.2f and %.2f",
        count, price_range.min, price_range.max
    )
    return scenarios


def select_optimal(scenarios: Sequence[PricingScenario]) -> PricingScenario:
    """
    Pick the best scenario.

    A scenario meeting its target profit beats one that does not; otherwise
    the higher profit wins. Ties keep the earlier scenario.

    Raises:
        InvalidInput: scenarios is empty
    """
    if not scenarios:
        raise InvalidInput("Cannot select an optimal scenario from an empty list", "scenarios")

    best = scenarios[0]
    for current in scenarios[1:]:
        if current.meets_target_profit and not best.meets_target_profit:
            best = current
        elif best.meets_target_profit and not current.meets_target_profit:
            continue
        elif current.profit > best.profit:
            best = current
    return best


def rank_by_profit(scenarios: Sequence[PricingScenario]) -> List[PricingScenario]:
    """Scenarios in descending profit order (stable for equal profits)."""
    return sorted(scenarios, key=lambda s: s.profit, reverse=True)


# =============================================================================
# Break-even analysis and sweep defaults
# =============================================================================


def _market_break_even(cost: CostStructure, market: MarketData):
    point = break_even_price(cost.fixed_costs, cost.variable_cost_per_unit, market.market_size)
    return point, optimal_price(point, cost.target_profit_percentage)


def break_even_analysis(cost: CostStructure, market: MarketData) -> BreakEvenAnalysis:
    """
    Break-even analysis before any sweep has run.

    The range starts at the price that carries the target margin on top of
    break-even and is capped by both a profit ceiling (1.5x the margin) and a
    market ceiling that shrinks from 2x to 1.1x the competitor price as
    elasticity goes from 0 to 1.

    Raises:
        InvalidTargetMargin: target profit percentage >= 100
    """
    point, optimal = _market_break_even(cost, market)
    margin = cost.target_profit_percentage / 100
    elasticity = market.elasticity_or_default()

    min_price = max(point, point * (1 + margin))
    max_by_profit = round_price(point * (1 + margin * 1.5))
    max_by_market = round_price(market.competitor_price * (1 + 0.9 * (1 - elasticity)))
    max_price = round_price(min(max_by_profit, max_by_market))

    return BreakEvenAnalysis(
        point=point,
        optimal_price=optimal,
        optimal_price_range=PriceRange(min_price, max_price),
        market_sensitivity=elasticity,
    )


def break_even_analysis_from_scenarios(
    cost: CostStructure,
    market: MarketData,
    scenarios: Sequence[PricingScenario]
) -> BreakEvenAnalysis:
    """Break-even analysis whose range is the evaluated sweep (first to last price)."""
    if not scenarios:
        raise InvalidInput("Cannot summarize an empty scenario list", "scenarios")

    point, optimal = _market_break_even(cost, market)
    return BreakEvenAnalysis(
        point=point,
        optimal_price=optimal,
        optimal_price_range=PriceRange(scenarios[0].price, scenarios[-1].price),
        market_sensitivity=market.elasticity_or_default(),
    )


def default_sweep(cost: CostStructure, market: MarketData, count: Optional[int] = None) -> ScenarioSweep:
    """
    Sweep from 80% of break-even (at least 1.00) to 120% of the optimal price.
    """
    if count is None:
        count = get_settings().default_scenario_count
    point, optimal = _market_break_even(cost, market)
    return ScenarioSweep(
        min_price=round_price(max(point * 0.8, 1)),
        max_price=round_price(optimal * 1.2),
        num_scenarios=count,
    )


@dataclass(frozen=True)
class PricingAnalysis:
    """Everything the pricing calculator shows for one input set."""
    analysis: BreakEvenAnalysis
    sweep: ScenarioSweep
    scenarios: List[PricingScenario]
    optimal: PricingScenario

    def to_dict(self) -> Dict[str, Any]:
        return {
            "breakEvenAnalysis": self.analysis.to_dict(),
            "sweep": self.sweep.to_dict(),
            "scenarios": [s.to_dict() for s in self.scenarios],
            "optimalScenario": self.optimal.to_dict(),
        }


def analyze_pricing(cost: CostStructure, market: MarketData, sweep: Optional[ScenarioSweep] = None) -> PricingAnalysis:
    """Run a sweep (default_sweep() when none is given) and summarize it."""
    if sweep is None:
        sweep = default_sweep(cost, market)

    scenarios = generate_scenarios(cost, market, sweep.price_range, sweep.num_scenarios)
    optimal = select_optimal(scenarios)

    logger.info(
        "Pricing analysis: optimal price %.2f (profit %.2f, meets target: %s)",
        optimal.price, optimal.profit, optimal.meets_target_profit
    )
    return PricingAnalysis(
        analysis=break_even_analysis_from_scenarios(cost, market, scenarios),
        sweep=sweep,
        scenarios=scenarios,
        optimal=optimal,
    )


# =============================================================================
# Pricing strategy helpers
# =============================================================================


@dataclass(frozen=True)
class SegmentProfile:
    """Default market size and elasticity for a market segment."""
    segment: str
    market_size: int
    elasticity: float

    def to_dict(self) -> Dict[str, Any]:
        return {"segment": self.segment, "marketSize": self.market_size, "elasticity": self.elasticity}


# Elasticities are on the demand model's [0, 1] scale
SEGMENT_PROFILES = {
    "luxury": (10000, 0.25),
    "premium": (50000, 0.4),
    "mid-range": (100000, 0.6),
    "economy": (200000, 0.75),
    "budget": (300000, 1.0),
}
DEFAULT_SEGMENT_PROFILE = (100000, 0.5)


def segment_profile(segment: str) -> SegmentProfile:
    """Profile for a segment name (case-insensitive); unknown names get the default."""
    key = (segment or "").strip().lower()
    market_size, elasticity = SEGMENT_PROFILES.get(key, DEFAULT_SEGMENT_PROFILE)
    return SegmentProfile(segment=key, market_size=market_size, elasticity=elasticity)


@dataclass(frozen=True)
class PricingStrategy:
    """
    Cost-plus and competitor-based price suggestions for a single product.

    - product_cost: Full cost of one unit
    - competitor_prices: Observed competitor prices (may be empty)
    - target_margin: Desired markup over cost, percent
    - market_segment: luxury / premium / mid-range / economy / budget
    """
    product_cost: float
    competitor_prices: Tuple[float, ...]
    target_margin: float
    market_segment: str = "mid-range"

    # Share of product cost treated as fixed when building a cost structure
    FIXED_COST_SHARE = 0.4

    def __post_init__(self):
        require_numeric_fields(self)
        require_non_negative(self.product_cost, "productCost")
        require_percentage(self.target_margin, "targetMargin")
        for i, price in enumerate(self.competitor_prices):
            require_non_negative(price, f"competitorPrices[{i}]")

    def minimum_viable_price(self) -> float:
        return self.product_cost * (1 + self.target_margin / 100)

    def average_market_price(self) -> float:
        """Mean competitor price; 0 when no competitor prices are known."""
        if not self.competitor_prices:
            return 0.0
        return sum(self.competitor_prices) / len(self.competitor_prices)

    def suggest_price_points(self) -> Dict[str, float]:
        minimum = self.minimum_viable_price()
        average = self.average_market_price()
        highest = max(list(self.competitor_prices) + [0])
        return {
            "costPlus": minimum,
            "marketAverage": average,
            "premium": highest * 1.15,
            "economy": max(minimum, average * 0.85),
            "penetration": max(minimum, average * 0.9),
        }

    def cost_structure(self) -> CostStructure:
        return CostStructure(
            fixed_costs=self.product_cost * self.FIXED_COST_SHARE,
            variable_cost_per_unit=self.product_cost * (1 - self.FIXED_COST_SHARE),
            target_profit_percentage=self.target_margin,
        )

    def market_data(self) -> MarketData:
        profile = segment_profile(self.market_segment)
        return MarketData(
            competitor_price=self.average_market_price(),
            market_size=profile.market_size,
            price_elasticity=profile.elasticity,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "productCost": self.product_cost,
            "competitorPrices": list(self.competitor_prices),
            "targetMargin": self.target_margin,
            "marketSegment": self.market_segment,
            "minimumViablePrice": self.minimum_viable_price(),
            "averageMarketPrice": self.average_market_price(),
            "suggestedPricePoints": self.suggest_price_points(),
        }
