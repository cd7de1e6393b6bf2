"""
Tests for the pricing scenario generator.

Focus areas:
1. Validation reports every problem together before any arithmetic
2. Scenarios step evenly through the range at cent-rounded prices
3. Optimal selection prefers meeting the target, then higher profit
4. Break-even analysis and default sweep follow the closed-form prices
5. Strategy helpers derive cost/market inputs from a segment profile
"""

import pytest

from finplan.entities import CostStructure, MarketData, PriceRange, ScenarioSweep
from finplan.errors import ArithmeticDegenerate, InvalidInput, InvalidRange, ValidationErrors
from finplan.pricing import (
    DEFAULT_SEGMENT_PROFILE,
    PricingScenario,
    PricingStrategy,
    analyze_pricing,
    break_even_analysis,
    default_sweep,
    evaluate_price,
    generate_scenarios,
    rank_by_profit,
    segment_profile,
    select_optimal,
)


@pytest.fixture
def cost():
    return CostStructure(fixed_costs=10000, variable_cost_per_unit=20, target_profit_percentage=20)


@pytest.fixture
def market():
    return MarketData(competitor_price=50, market_size=1000, price_elasticity=0.5)


def make_scenario(price, profit, meets):
    return PricingScenario(
        price=price, volume=100, revenue=price * 100, variable_costs=0, total_costs=0,
        profit=profit, target_profit=0, profit_margin=0, meets_target_profit=meets,
    )


class TestValidation:
    """Test that the generator validates the whole form first."""

    def test_all_problems_reported_together(self):
        cost = CostStructure(10000, 0, 20)
        market = MarketData(0, 0)
        with pytest.raises(ValidationErrors) as excinfo:
            generate_scenarios(cost, market, PriceRange(0, 0), 1)

        fields = [e.field for e in excinfo.value.errors]
        assert fields == ["variableCostPerUnit", "marketSize", "competitorPrice",
                          "minPrice", "maxPrice", "numScenarios", "maxPrice"]

    def test_single_problem_raised_directly(self, cost, market):
        with pytest.raises(InvalidRange, match="Maximum Price must be greater than Minimum Price"):
            generate_scenarios(cost, market, PriceRange(60, 50), 5)

    def test_equal_bounds_rejected(self, cost, market):
        with pytest.raises(InvalidRange):
            generate_scenarios(cost, market, PriceRange(50, 50), 5)

    def test_count_below_two(self, cost, market):
        with pytest.raises(InvalidRange, match="at least 2"):
            generate_scenarios(cost, market, PriceRange(40, 60), 1)

    def test_count_must_be_integer(self, cost, market):
        with pytest.raises(InvalidInput, match="whole number"):
            generate_scenarios(cost, market, PriceRange(40, 60), 2.5)


class TestGeneration:
    """Test the sweep itself."""

    def test_evaluate_price_at_competitor_price(self, cost, market):
        scenario = evaluate_price(50, cost, market)
        assert scenario.volume == 1000
        assert scenario.revenue == 50000
        assert scenario.total_costs == 30000
        assert scenario.profit == 20000
        assert scenario.target_profit == 10000
        assert scenario.profit_margin == pytest.approx(40)
        assert scenario.meets_target_profit

    def test_evaluate_price_above_competitor(self, cost, market):
        assert evaluate_price(60, cost, market).volume == 900

    def test_zero_volume_is_degenerate(self, cost):
        with pytest.raises(ArithmeticDegenerate, match="zero"):
            evaluate_price(50, cost, MarketData(50, 0))

    def test_count_and_order(self, cost, market):
        scenarios = generate_scenarios(cost, market, PriceRange(40, 60), 3)
        assert [s.price for s in scenarios] == [40, 50, 60]

    def test_prices_rounded_to_cents(self, cost, market):
        scenarios = generate_scenarios(cost, market, PriceRange(10, 20), 4)
        assert [s.price for s in scenarios] == [10, 13.33, 16.67, 20]

    def test_deterministic(self, cost, market):
        first = generate_scenarios(cost, market, PriceRange(25, 75), 10)
        second = generate_scenarios(cost, market, PriceRange(25, 75), 10)
        assert first == second


class TestSelection:

    def test_meeting_target_beats_higher_profit(self):
        scenarios = [make_scenario(10, 5000, False), make_scenario(20, 1000, True)]
        assert select_optimal(scenarios).price == 20

    def test_higher_profit_among_qualifying(self):
        scenarios = [make_scenario(10, 1000, True), make_scenario(20, 3000, True), make_scenario(30, 2000, True)]
        assert select_optimal(scenarios).price == 20

    def test_ties_keep_first(self):
        scenarios = [make_scenario(10, 1000, False), make_scenario(20, 1000, False)]
        assert select_optimal(scenarios).price == 10

    def test_empty_list_fails(self):
        with pytest.raises(InvalidInput, match="empty"):
            select_optimal([])

    def test_rank_by_profit(self):
        scenarios = [make_scenario(10, 1000, True), make_scenario(20, 3000, True), make_scenario(30, 2000, False)]
        assert [s.price for s in rank_by_profit(scenarios)] == [20, 30, 10]
        assert [s.price for s in scenarios] == [10, 20, 30]


class TestBreakEvenAnalysis:
    """Test analysis figures and sweep defaults."""

    def test_analysis_figures(self, cost, market):
        analysis = break_even_analysis(cost, market)
        assert analysis.point == pytest.approx(30)
        assert analysis.optimal_price == pytest.approx(37.5)
        assert analysis.min == pytest.approx(36)
        # Profit ceiling 30 * 1.3 = 39 is below the market ceiling 72.50
        assert analysis.max == pytest.approx(39)
        assert analysis.market_sensitivity == 0.5

    def test_absent_elasticity_sensitivity_is_zero(self, cost):
        analysis = break_even_analysis(cost, MarketData(50, 1000))
        assert analysis.market_sensitivity == 0

    def test_default_sweep(self, cost, market):
        sweep = default_sweep(cost, market, count=5)
        assert sweep.min_price == pytest.approx(24)
        assert sweep.max_price == pytest.approx(45)
        assert sweep.num_scenarios == 5

    def test_default_sweep_count_from_settings(self, cost, market, monkeypatch):
        monkeypatch.setenv("FINPLAN_SCENARIO_COUNT", "4")
        assert default_sweep(cost, market).num_scenarios == 4

    def test_analyze_pricing(self, cost, market):
        result = analyze_pricing(cost, market)
        assert len(result.scenarios) == 10
        assert result.optimal.price == pytest.approx(45)
        assert result.analysis.min == result.scenarios[0].price
        assert result.analysis.max == result.scenarios[-1].price

    def test_analyze_pricing_with_sweep(self, cost, market):
        result = analyze_pricing(cost, market, ScenarioSweep(40, 60, 3))
        assert result.optimal in result.scenarios
        assert set(result.to_dict()) == {"breakEvenAnalysis", "sweep", "scenarios", "optimalScenario"}


class TestPricingStrategy:

    def test_price_points(self):
        strategy = PricingStrategy(product_cost=50, competitor_prices=(80, 100, 120), target_margin=30)
        points = strategy.suggest_price_points()
        assert points["costPlus"] == pytest.approx(65)
        assert points["marketAverage"] == pytest.approx(100)
        assert points["premium"] == pytest.approx(138)
        assert points["economy"] == pytest.approx(85)
        assert points["penetration"] == pytest.approx(90)

    def test_no_competitors(self):
        strategy = PricingStrategy(50, (), 30)
        assert strategy.average_market_price() == 0
        assert strategy.suggest_price_points()["economy"] == pytest.approx(65)

    def test_derived_inputs(self):
        strategy = PricingStrategy(50, (80, 100, 120), 30, market_segment="Mid-Range")
        cost = strategy.cost_structure()
        assert cost.fixed_costs == pytest.approx(20)
        assert cost.variable_cost_per_unit == pytest.approx(30)

        market = strategy.market_data()
        assert market.market_size == 100000
        assert market.price_elasticity == 0.6

    def test_segment_lookup(self):
        assert segment_profile(" Luxury ").market_size == 10000
        unknown = segment_profile("artisan")
        assert (unknown.market_size, unknown.elasticity) == DEFAULT_SEGMENT_PROFILE

    def test_invalid_margin(self):
        with pytest.raises(InvalidInput, match="targetMargin"):
            PricingStrategy(50, (80,), 150)
