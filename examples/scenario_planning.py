"""
Example: Scenario Planner

Demonstrates:
1. A default plan (base / optimistic / pessimistic, 60/20/20)
2. Base edits propagating through multipliers (pure edits, no mutation)
3. Probability clamping
4. Manual mode and expected values
5. Saving a plan as JSON
"""

import json

from finplan.scenarios import (
    OPTIMISTIC,
    PESSIMISTIC,
    ScenarioPlan,
    compute_expected,
    set_auto_derive,
    set_base_metric,
    set_metric,
    set_multiplier,
    set_probability,
)


def print_plan(plan):
    for scenario in (plan.base, plan.optimistic, plan.pessimistic):
        m = scenario.metrics
        print(f"  {scenario.name:<12} p={scenario.probability:>5.1f}  revenue={m.revenue:>9.2f}  "
              f"costs={m.costs:>8.2f}  profit={scenario.profit:>9.2f}")
    outcome = compute_expected(plan)
    print(f"  Expected revenue {outcome.expected_revenue:.2f}, expected profit {outcome.expected_profit:.2f}")


def demonstrate_propagation():
    print("\n" + "=" * 80)
    print("AUTO-DERIVED SCENARIOS")
    print("=" * 80)

    plan = ScenarioPlan.default()
    print("\nDefault plan:")
    print_plan(plan)

    grown = set_base_metric(plan, "revenue", 2500)
    grown = set_multiplier(grown, "revenue", OPTIMISTIC, 1.5)
    print("\nBase revenue 2500, optimistic multiplier 1.5:")
    print_plan(grown)

    print(f"\nOriginal plan unchanged: base revenue {plan.base.metrics.revenue:.2f}")
    return grown


def demonstrate_probabilities(plan):
    print("\n" + "=" * 80)
    print("PROBABILITY CLAMPING")
    print("=" * 80)

    clamped = set_probability(plan, OPTIMISTIC, 45)
    print(f"\nRequested optimistic 45 -> stored {clamped.optimistic.probability:g} "
          f"(total {clamped.total_probability:g})")

    freed = set_probability(set_probability(plan, PESSIMISTIC, 5), OPTIMISTIC, 45)
    print(f"After lowering pessimistic to 5: optimistic {freed.optimistic.probability:g}")
    return freed


def demonstrate_manual_mode(plan):
    print("\n" + "=" * 80)
    print("MANUAL MODE")
    print("=" * 80)

    manual = set_auto_derive(plan, False)
    manual = set_metric(manual, PESSIMISTIC, "costs", 900)
    print("\nPessimistic costs set directly to 900:")
    print_plan(manual)

    print("\nSaved plan:")
    print(json.dumps(manual.to_dict()["metrics"], indent=2))


if __name__ == "__main__":
    print("\n" + "=" * 80)
    print("SCENARIO PLANNER DEMONSTRATION")
    print("=" * 80)

    plan = demonstrate_propagation()
    plan = demonstrate_probabilities(plan)
    demonstrate_manual_mode(plan)
