"""
Scenario planner: base / optimistic / pessimistic business cases.

Design Principles:
- A planning session is an immutable ScenarioPlan
- Every edit is a pure function returning a NEW plan (the input is never mutated)
- Invariants hold after every edit, not eventually:
    * probabilities sum to at most 100 (set_probability clamps)
    * in auto-derive mode optimistic/pessimistic adjustable fields always
      equal base value x multiplier (direct edits are rejected)

Propagation rule:
    optimistic.field  = base.field x adjustments[field].optimistic_multiplier
    pessimistic.field = base.field x adjustments[field].pessimistic_multiplier

baselineClients is never propagated (its multiplier is fixed at 1).

Expected values are probability-weighted and NOT normalized: if the three
probabilities sum to less than 100 the expectation is conservative.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from finplan.config import DEFAULT_ADJUSTMENTS, get_settings
from finplan.entities import ScenarioMetrics
from finplan.errors import (
    InvalidInput,
    InvariantViolation,
    require_number,
    require_numeric_fields,
    require_positive,
)

logger = logging.getLogger(__name__)

BASE = "base"
OPTIMISTIC = "optimistic"
PESSIMISTIC = "pessimistic"
SCENARIO_IDS = (BASE, OPTIMISTIC, PESSIMISTIC)

ADJUSTABLE_FIELDS = (
    "revenue", "costs", "marketShare", "customerGrowth", "operatingExpenses", "profitMargin",
)

SCENARIO_LABELS = {
    BASE: ("Base Case", "Expected business performance under normal conditions"),
    OPTIMISTIC: ("Optimistic", "Best-case scenario with favorable market conditions"),
    PESSIMISTIC: ("Pessimistic", "Worst-case scenario with challenging conditions"),
}

# Starting point for a new planning session
DEFAULT_BASE_METRICS = ScenarioMetrics(
    revenue=1000,
    costs=500,
    market_share=10,
    customer_growth=5,
    baseline_clients=100,
    operating_expenses=200,
    profit_margin=30,
)


@dataclass(frozen=True)
class ScenarioAdjustment:
    """Multipliers deriving optimistic / pessimistic values from the base case."""
    optimistic_multiplier: float
    pessimistic_multiplier: float

    def __post_init__(self):
        require_numeric_fields(self)
        require_positive(self.optimistic_multiplier, "optimisticMultiplier")
        require_positive(self.pessimistic_multiplier, "pessimisticMultiplier")

    def multiplier_for(self, scenario_id: str) -> float:
        if scenario_id == OPTIMISTIC:
            return self.optimistic_multiplier
        if scenario_id == PESSIMISTIC:
            return self.pessimistic_multiplier
        return 1.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "optimisticMultiplier": self.optimistic_multiplier,
            "pessimisticMultiplier": self.pessimistic_multiplier,
        }

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "ScenarioAdjustment":
        return ScenarioAdjustment(
            optimistic_multiplier=require_positive(data.get("optimisticMultiplier"), "optimisticMultiplier"),
            pessimistic_multiplier=require_positive(data.get("pessimisticMultiplier"), "pessimisticMultiplier"),
        )


def default_adjustments() -> Dict[str, ScenarioAdjustment]:
    configured = get_settings().default_adjustments
    return {
        name: ScenarioAdjustment(*configured.get(name, DEFAULT_ADJUSTMENTS[name]))
        for name in ADJUSTABLE_FIELDS
    }


@dataclass(frozen=True)
class Scenario:
    """A named business case with its metrics and probability of occurring."""
    id: str
    name: str
    description: str
    metrics: ScenarioMetrics
    probability: float

    def __post_init__(self):
        require_numeric_fields(self)
        if self.id not in SCENARIO_IDS:
            raise InvalidInput(f"Unknown scenario id {self.id!r}", "id")
        probability = require_number(self.probability, "probability")
        if not 0 <= probability <= 100:
            raise InvalidInput(f"probability must be in [0, 100], got {probability}", "probability")

    @property
    def profit(self) -> float:
        return self.metrics.revenue - self.metrics.costs - self.metrics.operating_expenses

    def with_metrics(self, metrics: ScenarioMetrics) -> "Scenario":
        return Scenario(self.id, self.name, self.description, metrics, self.probability)

    def with_probability(self, probability: float) -> "Scenario":
        return Scenario(self.id, self.name, self.description, self.metrics, probability)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "metrics": self.metrics.to_dict(),
            "probability": self.probability,
        }

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "Scenario":
        scenario_id = data.get("id")
        name, description = SCENARIO_LABELS.get(scenario_id, ("", ""))
        return Scenario(
            id=scenario_id,
            name=data.get("name", name),
            description=data.get("description", description),
            metrics=ScenarioMetrics.from_dict(data.get("metrics") or {}),
            probability=require_number(data.get("probability"), "probability"),
        )


@dataclass(frozen=True)
class MetricRange:
    min: float
    max: float

    def to_dict(self) -> Dict[str, Any]:
        return {"min": self.min, "max": self.max}


@dataclass(frozen=True)
class ExpectedOutcome:
    """Probability-weighted summary across the three scenarios."""
    expected_revenue: float
    expected_profit: float
    market_share_range: MetricRange
    customer_growth_range: MetricRange

    def to_dict(self) -> Dict[str, Any]:
        return {
            "expectedRevenue": self.expected_revenue,
            "expectedProfit": self.expected_profit,
            "marketShareRange": self.market_share_range.to_dict(),
            "customerGrowthRange": self.customer_growth_range.to_dict(),
        }


@dataclass(frozen=True)
class ScenarioPlan:
    """
    One planning session.

    Attributes:
        scenarios: scenario id -> Scenario (base, optimistic, pessimistic)
        adjustments: adjustable metric name -> ScenarioAdjustment
        auto_derive: Whether optimistic/pessimistic follow the base case
    """
    scenarios: Dict[str, Scenario]
    adjustments: Dict[str, ScenarioAdjustment]
    auto_derive: bool = True

    def __post_init__(self):
        if set(self.scenarios) != set(SCENARIO_IDS):
            raise InvalidInput(
                f"A plan needs exactly the scenarios {SCENARIO_IDS}, got {sorted(self.scenarios)}",
                "scenarios"
            )
        for scenario_id, scenario in self.scenarios.items():
            if scenario.id != scenario_id:
                raise InvalidInput(f"Scenario stored under {scenario_id!r} has id {scenario.id!r}", "scenarios")
        if set(self.adjustments) != set(ADJUSTABLE_FIELDS):
            raise InvalidInput(
                f"Adjustments must cover exactly {ADJUSTABLE_FIELDS}, got {sorted(self.adjustments)}",
                "adjustments"
            )
        total = self.total_probability
        if total > 100:
            raise InvariantViolation(f"Scenario probabilities sum to {total:g}, above 100", "probability")

    @property
    def base(self) -> Scenario:
        return self.scenarios[BASE]

    @property
    def optimistic(self) -> Scenario:
        return self.scenarios[OPTIMISTIC]

    @property
    def pessimistic(self) -> Scenario:
        return self.scenarios[PESSIMISTIC]

    @property
    def total_probability(self) -> float:
        return sum(s.probability for s in self.scenarios.values())

    @staticmethod
    def default(base_metrics: Optional[ScenarioMetrics] = None) -> "ScenarioPlan":
        """
        New session: default base metrics, default adjustments, auto-derive on,
        probabilities from settings (60 / 20 / 20 unless configured).
        """
        settings = get_settings()
        adjustments = default_adjustments()
        base_metrics = base_metrics or DEFAULT_BASE_METRICS
        probabilities = dict(zip(SCENARIO_IDS, settings.default_probabilities))

        scenarios = {}
        for scenario_id in SCENARIO_IDS:
            name, description = SCENARIO_LABELS[scenario_id]
            scenarios[scenario_id] = Scenario(
                id=scenario_id,
                name=name,
                description=description,
                metrics=_derive_metrics(base_metrics, base_metrics, adjustments, scenario_id),
                probability=probabilities[scenario_id],
            )
        return ScenarioPlan(scenarios=scenarios, adjustments=adjustments, auto_derive=True)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scenarios": {sid: self.scenarios[sid].to_dict() for sid in SCENARIO_IDS},
            "adjustments": {name: self.adjustments[name].to_dict() for name in ADJUSTABLE_FIELDS},
            "autoDerive": self.auto_derive,
            "metrics": compute_expected(self).to_dict(),
        }

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "ScenarioPlan":
        raw_scenarios = data.get("scenarios") or {}
        raw_adjustments = data.get("adjustments") or {}
        return ScenarioPlan(
            scenarios={
                sid: Scenario.from_dict(dict(raw_scenarios.get(sid) or {}, id=sid))
                for sid in SCENARIO_IDS
            },
            # baselineClients may appear in saved sessions; it is not adjustable
            adjustments={
                name: ScenarioAdjustment.from_dict(raw_adjustments[name])
                if name in raw_adjustments else default_adjustments()[name]
                for name in ADJUSTABLE_FIELDS
            },
            auto_derive=bool(data.get("autoDerive", True)),
        )


# =============================================================================
# Edits (pure: each returns a new plan)
# =============================================================================


def _derive_metrics(
    target: ScenarioMetrics,
    base: ScenarioMetrics,
    adjustments: Dict[str, ScenarioAdjustment],
    scenario_id: str
) -> ScenarioMetrics:
    """target with every adjustable field recomputed from base."""
    if scenario_id == BASE:
        return base
    metrics = target
    for name in ADJUSTABLE_FIELDS:
        metrics = metrics.replace(name, base.get(name) * adjustments[name].multiplier_for(scenario_id))
    return metrics


def _rebuild(plan: ScenarioPlan, scenarios=None, adjustments=None, auto_derive=None) -> ScenarioPlan:
    return ScenarioPlan(
        scenarios=scenarios if scenarios is not None else dict(plan.scenarios),
        adjustments=adjustments if adjustments is not None else dict(plan.adjustments),
        auto_derive=plan.auto_derive if auto_derive is None else auto_derive,
    )


def _rederive_all(plan: ScenarioPlan) -> ScenarioPlan:
    scenarios = dict(plan.scenarios)
    for scenario_id in (OPTIMISTIC, PESSIMISTIC):
        scenarios[scenario_id] = scenarios[scenario_id].with_metrics(
            _derive_metrics(scenarios[scenario_id].metrics, plan.base.metrics, plan.adjustments, scenario_id)
        )
    return _rebuild(plan, scenarios=scenarios)


def _require_scenario_id(scenario_id: str) -> str:
    if scenario_id not in SCENARIO_IDS:
        raise InvalidInput(f"Unknown scenario id {scenario_id!r}", "scenarioId")
    return scenario_id


def _require_adjustable(metric: str) -> str:
    if metric not in ADJUSTABLE_FIELDS:
        raise InvalidInput(f"{metric} has no adjustable multiplier", metric)
    return metric


def set_base_metric(plan: ScenarioPlan, metric: str, value: float) -> ScenarioPlan:
    """
    Edit a base-case metric.

    In auto-derive mode an adjustable metric is propagated to the optimistic
    and pessimistic cases with their multipliers.
    """
    value = require_number(value, metric)
    scenarios = dict(plan.scenarios)
    scenarios[BASE] = plan.base.with_metrics(plan.base.metrics.replace(metric, value))

    if plan.auto_derive and metric in ADJUSTABLE_FIELDS:
        adjustment = plan.adjustments[metric]
        for scenario_id in (OPTIMISTIC, PESSIMISTIC):
            scenario = scenarios[scenario_id]
            scenarios[scenario_id] = scenario.with_metrics(
                scenario.metrics.replace(metric, value * adjustment.multiplier_for(scenario_id))
            )

    return _rebuild(plan, scenarios=scenarios)


def set_metric(plan: ScenarioPlan, scenario_id: str, metric: str, value: float) -> ScenarioPlan:
    """
    Edit any scenario's metric directly.

    Raises:
        InvariantViolation: editing optimistic/pessimistic while auto-derive is on
    """
    _require_scenario_id(scenario_id)
    if scenario_id == BASE:
        return set_base_metric(plan, metric, value)
    if plan.auto_derive:
        raise InvariantViolation(
            f"{scenario_id} metrics are derived from the base case; "
            f"edit its multiplier or turn off auto-derive",
            metric
        )

    value = require_number(value, metric)
    scenarios = dict(plan.scenarios)
    scenario = scenarios[scenario_id]
    scenarios[scenario_id] = scenario.with_metrics(scenario.metrics.replace(metric, value))
    return _rebuild(plan, scenarios=scenarios)


def set_multiplier(plan: ScenarioPlan, metric: str, which: str, value: float) -> ScenarioPlan:
    """
    Change one multiplier. In auto-derive mode that scenario's field is
    recomputed from the current base value immediately.
    """
    _require_adjustable(metric)
    if which not in (OPTIMISTIC, PESSIMISTIC):
        raise InvalidInput(f"which must be 'optimistic' or 'pessimistic', got {which!r}", "which")
    value = require_positive(value, f"{which}Multiplier")

    current = plan.adjustments[metric]
    if which == OPTIMISTIC:
        updated = ScenarioAdjustment(value, current.pessimistic_multiplier)
    else:
        updated = ScenarioAdjustment(current.optimistic_multiplier, value)

    adjustments = dict(plan.adjustments)
    adjustments[metric] = updated
    scenarios = dict(plan.scenarios)
    if plan.auto_derive:
        scenario = scenarios[which]
        scenarios[which] = scenario.with_metrics(
            scenario.metrics.replace(metric, plan.base.metrics.get(metric) * value)
        )
    return _rebuild(plan, scenarios=scenarios, adjustments=adjustments)


def _total_with(scenarios: Dict[str, Scenario], scenario_id: str, probability: float) -> float:
    return sum(probability if sid == scenario_id else s.probability for sid, s in scenarios.items())


def set_probability(plan: ScenarioPlan, scenario_id: str, value: float) -> ScenarioPlan:
    """Store a probability clamped to [0, 100 - sum of the other two]."""
    _require_scenario_id(scenario_id)
    value = require_number(value, "probability")
    others = sum(s.probability for sid, s in plan.scenarios.items() if sid != scenario_id)
    clamped = max(0.0, min(value, 100 - others))
    if clamped != value:
        logger.debug("Clamped %s probability from %g to %g", scenario_id, value, clamped)

    scenarios = dict(plan.scenarios)
    # 100 - others can round so the stored total lands one ulp above 100
    while _total_with(scenarios, scenario_id, clamped) > 100:
        clamped = math.nextafter(clamped, 0.0)
    scenarios[scenario_id] = scenarios[scenario_id].with_probability(clamped)
    return _rebuild(plan, scenarios=scenarios)


def set_auto_derive(plan: ScenarioPlan, enabled: bool) -> ScenarioPlan:
    """Toggle auto-derive. Turning it on re-derives both cases from the base."""
    updated = _rebuild(plan, auto_derive=bool(enabled))
    if enabled:
        return _rederive_all(updated)
    return updated


def reset_adjustments(plan: ScenarioPlan) -> ScenarioPlan:
    """Restore default multipliers (re-deriving the cases in auto-derive mode)."""
    updated = _rebuild(plan, adjustments=default_adjustments())
    if updated.auto_derive:
        return _rederive_all(updated)
    return updated


# =============================================================================
# Expected values
# =============================================================================


def compute_expected(plan: ScenarioPlan) -> ExpectedOutcome:
    """
    Probability-weighted revenue and profit plus metric ranges.

    expectedProfit uses revenue - costs - operatingExpenses per scenario.
    """
    scenarios = [plan.scenarios[sid] for sid in SCENARIO_IDS]
    expected_revenue = sum(s.metrics.revenue * s.probability / 100 for s in scenarios)
    expected_profit = sum(s.profit * s.probability / 100 for s in scenarios)
    shares = [s.metrics.market_share for s in scenarios]
    growth = [s.metrics.customer_growth for s in scenarios]

    return ExpectedOutcome(
        expected_revenue=expected_revenue,
        expected_profit=expected_profit,
        market_share_range=MetricRange(min(shares), max(shares)),
        customer_growth_range=MetricRange(min(growth), max(growth)),
    )


def with_expected_metrics(plan: ScenarioPlan) -> ScenarioPlan:
    """Stamp each scenario's own probability-weighted revenue and profit."""
    scenarios = {}
    for scenario_id, scenario in plan.scenarios.items():
        weight = scenario.probability / 100
        metrics = scenario.metrics.replace("expectedRevenue", scenario.metrics.revenue * weight)
        metrics = metrics.replace("expectedProfit", scenario.profit * weight)
        scenarios[scenario_id] = scenario.with_metrics(metrics)
    return _rebuild(plan, scenarios=scenarios)
