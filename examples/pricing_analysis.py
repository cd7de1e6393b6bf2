"""
Example: Pricing and Break-Even Analysis

Demonstrates:
1. Break-even and target-margin prices from a cost structure
2. A default price sweep and its optimal scenario
3. Explicit absence of price elasticity
4. Every break-even calculator mode on one cost base
5. Failures returned as results at the calculate() boundary
"""

from finplan.breakeven import break_even_chart, solve_break_even
from finplan.config import configure_logging
from finplan.entities import BreakEvenInputs, BreakEvenMode, CostStructure, MarketData, PriceRange
from finplan.errors import calculate
from finplan.pricing import PricingStrategy, analyze_pricing, break_even_analysis, generate_scenarios, rank_by_profit


def demonstrate_price_sweep():
    """Default sweep around the break-even and optimal prices."""
    print("\n" + "=" * 80)
    print("PRICE SWEEP")
    print("=" * 80)

    cost = CostStructure(fixed_costs=10000, variable_cost_per_unit=20, target_profit_percentage=20)
    market = MarketData(competitor_price=50, market_size=1000, price_elasticity=0.5)

    analysis = break_even_analysis(cost, market)
    print(f"\nBreak-even price: {analysis.point:.2f}")
    print(f"Optimal price (20% margin): {analysis.optimal_price:.2f}")
    print(f"Suggested range: {analysis.min:.2f} - {analysis.max:.2f}")

    result = analyze_pricing(cost, market)
    print(f"\n{'Price':>8} {'Volume':>8} {'Profit':>12} {'Margin':>8}  Target")
    for scenario in result.scenarios:
        print(f"{scenario.price:>8.2f} {scenario.volume:>8d} {scenario.profit:>12.2f} "
              f"{scenario.profit_margin:>7.1f}%  {'yes' if scenario.meets_target_profit else 'no'}")

    print(f"\nOptimal: {result.optimal.price:.2f} (profit {result.optimal.profit:.2f})")


def demonstrate_elasticity_absence():
    """Absent elasticity is insensitive demand, shown side by side."""
    print("\n" + "=" * 80)
    print("ELASTICITY: PRESENT vs ABSENT")
    print("=" * 80)

    cost = CostStructure(10000, 20, 20)
    sweep = PriceRange(40, 80)
    for market in (MarketData(50, 1000, 0.8), MarketData(50, 1000)):
        label = "absent" if not market.has_elasticity else f"{market.price_elasticity:g}"
        ranked = rank_by_profit(generate_scenarios(cost, market, sweep, 5))
        print(f"\nElasticity {label}: best price {ranked[0].price:.2f}, volume {ranked[0].volume}")


def demonstrate_break_even_modes():
    """All four calculator modes share one contribution-margin identity."""
    print("\n" + "=" * 80)
    print("BREAK-EVEN MODES")
    print("=" * 80)

    forms = [
        BreakEvenInputs(5000, 12, 20),
        BreakEvenInputs(5000, 12, mode=BreakEvenMode.FIND_PRICE, target_units=1000),
        BreakEvenInputs(5000, 12, 20, mode=BreakEvenMode.PROFIT_TARGET, target_profit=2000),
        BreakEvenInputs(5000, 12, 20, mode=BreakEvenMode.PROFIT_TARGET, target_profit_percentage=15),
    ]
    for form in forms:
        result = solve_break_even(form)
        print(f"\n{form.mode.value}:")
        print(f"  Break-even units: {result.break_even_units:.1f}")
        print(f"  Units required:   {result.units_required:.1f}")
        print(f"  Price:            {result.break_even_price:.2f}")

    print("\nChart (standard mode):")
    for point in break_even_chart(5000, 12, 20, points=5):
        print(f"  {point.units:>6d} units  profit {point.profit:>10.2f}")


def demonstrate_strategy_and_errors():
    """Competitor-based price points, then a rejected form."""
    print("\n" + "=" * 80)
    print("STRATEGY HELPERS AND ERROR RESULTS")
    print("=" * 80)

    strategy = PricingStrategy(product_cost=35, competitor_prices=(60, 72, 80), target_margin=40,
                               market_segment="premium")
    for name, price in strategy.suggest_price_points().items():
        print(f"  {name:<14} {price:>8.2f}")

    bad = calculate(generate_scenarios, CostStructure(1000, 0, 20), MarketData(0, 0), PriceRange(50, 10), 1)
    print("\nRejected sweep:")
    for error in bad.errors:
        print(f"  [{error['kind']}] {error['field']}: {error['message']}")


if __name__ == "__main__":
    configure_logging("WARNING")

    print("\n" + "=" * 80)
    print("PRICING DEMONSTRATION")
    print("=" * 80)

    demonstrate_price_sweep()
    demonstrate_elasticity_absence()
    demonstrate_break_even_modes()
    demonstrate_strategy_and_errors()
