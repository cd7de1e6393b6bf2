"""
Input value objects for the financial projection models.

Design principles:
- Inputs are immutable after creation (frozen dataclasses)
- Validation fails loudly at construction time, before any arithmetic
- No implicit zero defaults: a missing required field is InvalidInput
- from_dict() accepts the calculator form records (camelCase keys)
- to_dict() returns plain numbers and strings only

Explicit absence:
- MarketData.price_elasticity may be None. The "absent means insensitive"
  rule lives in MarketData.elasticity_or_default(), nowhere else.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from finplan.errors import (
    InvalidInput,
    require_fraction,
    require_non_negative,
    require_number,
    require_numeric_fields,
    require_percentage,
    require_positive,
)

MONTHS = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)

# Elasticity used when the form leaves it blank
INSENSITIVE_ELASTICITY = 0.0


def _get(data: Mapping[str, Any], key: str) -> Any:
    if not isinstance(data, Mapping):
        raise InvalidInput(f"Expected a record, got {type(data).__name__}")
    if key not in data:
        raise InvalidInput(f"{key} is required", key)
    return data[key]


def _require_whole(value: Any, field_name: str) -> int:
    number = require_non_negative(value, field_name)
    if number != int(number):
        raise InvalidInput(f"{field_name} must be a whole number, got {number}", field_name)
    return int(number)


def _require_growth_rate(value: Any, field_name: str) -> float:
    number = require_number(value, field_name)
    if number <= -1:
        raise InvalidInput(f"{field_name} must be greater than -1 (-100%), got {number}", field_name)
    return number


# =============================================================================
# Pricing and break-even inputs
# =============================================================================


@dataclass(frozen=True)
class CostStructure:
    """
    Cost side of a pricing calculation.

    - fixed_costs: Total fixed costs for the period
    - variable_cost_per_unit: Cost of producing one more unit
    - target_profit_percentage: Desired profit as % of revenue, in [0, 100]
    """
    fixed_costs: float
    variable_cost_per_unit: float
    target_profit_percentage: float

    def __post_init__(self):
        require_numeric_fields(self)
        require_non_negative(self.fixed_costs, "fixedCosts")
        require_non_negative(self.variable_cost_per_unit, "variableCostPerUnit")
        require_percentage(self.target_profit_percentage, "targetProfitPercentage")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fixedCosts": self.fixed_costs,
            "variableCostPerUnit": self.variable_cost_per_unit,
            "targetProfitPercentage": self.target_profit_percentage,
        }

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "CostStructure":
        return CostStructure(
            fixed_costs=require_non_negative(_get(data, "fixedCosts"), "fixedCosts"),
            variable_cost_per_unit=require_non_negative(_get(data, "variableCostPerUnit"), "variableCostPerUnit"),
            target_profit_percentage=require_percentage(_get(data, "targetProfitPercentage"), "targetProfitPercentage"),
        )


@dataclass(frozen=True)
class MarketData:
    """
    Market side of a pricing calculation.

    - competitor_price: Reference price the demand curve is anchored on
    - market_size: Total addressable units at the reference price
    - price_elasticity: Sensitivity in [0, 1], or None when not supplied
    """
    competitor_price: float
    market_size: int
    price_elasticity: Optional[float] = None

    def __post_init__(self):
        require_numeric_fields(self)
        require_non_negative(self.competitor_price, "competitorPrice")
        _require_whole(self.market_size, "marketSize")
        if self.price_elasticity is not None:
            require_fraction(self.price_elasticity, "priceElasticity")

    @property
    def has_elasticity(self) -> bool:
        return self.price_elasticity is not None

    def elasticity_or_default(self) -> float:
        """Absent elasticity means price-insensitive demand."""
        if self.price_elasticity is None:
            return INSENSITIVE_ELASTICITY
        return self.price_elasticity

    def to_dict(self) -> Dict[str, Any]:
        return {
            "competitorPrice": self.competitor_price,
            "marketSize": self.market_size,
            "priceElasticity": self.price_elasticity,
        }

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "MarketData":
        elasticity = data.get("priceElasticity") if isinstance(data, Mapping) else None
        if elasticity == "":
            elasticity = None
        return MarketData(
            competitor_price=require_non_negative(_get(data, "competitorPrice"), "competitorPrice"),
            market_size=_require_whole(_get(data, "marketSize"), "marketSize"),
            price_elasticity=None if elasticity is None else require_fraction(elasticity, "priceElasticity"),
        )


@dataclass(frozen=True)
class PriceRange:
    """Inclusive price bounds. Ordering is checked by the scenario generator."""
    min: float
    max: float

    def __post_init__(self):
        require_numeric_fields(self)
        require_number(self.min, "minPrice")
        require_number(self.max, "maxPrice")

    def to_dict(self) -> Dict[str, Any]:
        return {"min": self.min, "max": self.max}


@dataclass(frozen=True)
class ScenarioSweep:
    """
    Price sweep for scenario generation.

    Values are only type-checked here; the generator validates the range so
    that every problem is reported together.
    """
    min_price: float
    max_price: float
    num_scenarios: int

    def __post_init__(self):
        require_numeric_fields(self)
        require_number(self.min_price, "minPrice")
        require_number(self.max_price, "maxPrice")
        if isinstance(self.num_scenarios, bool) or not isinstance(self.num_scenarios, int):
            raise InvalidInput(
                f"numScenarios must be an integer, got {type(self.num_scenarios).__name__}",
                "numScenarios"
            )

    @property
    def price_range(self) -> PriceRange:
        return PriceRange(self.min_price, self.max_price)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "minPrice": self.min_price,
            "maxPrice": self.max_price,
            "numScenarios": self.num_scenarios,
        }

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "ScenarioSweep":
        count = require_number(_get(data, "numScenarios"), "numScenarios")
        if count != int(count):
            raise InvalidInput(f"numScenarios must be a whole number, got {count}", "numScenarios")
        return ScenarioSweep(
            min_price=require_number(_get(data, "minPrice"), "minPrice"),
            max_price=require_number(_get(data, "maxPrice"), "maxPrice"),
            num_scenarios=int(count),
        )


class BreakEvenMode(Enum):
    """The four break-even questions, all answered by one contribution-margin core."""

    STANDARD = "standard"
    # Given price: how many units to break even?

    FIND_PRICE = "findPrice"
    # Given a target unit volume: what price breaks even?

    FIND_UNITS = "findUnits"
    # Given price: solve unit volume (same arithmetic as STANDARD)

    PROFIT_TARGET = "profitTarget"
    # Given a target profit amount or percentage: how many units?


@dataclass(frozen=True)
class BreakEvenInputs:
    """
    Break-even calculator form.

    Which optional fields are required depends on mode:
    - standard / findUnits: selling_price_per_unit
    - findPrice: target_units
    - profitTarget: selling_price_per_unit and one of target_profit /
      target_profit_percentage
    """
    fixed_costs: float
    variable_cost_per_unit: float
    selling_price_per_unit: Optional[float] = None
    mode: BreakEvenMode = BreakEvenMode.STANDARD
    target_units: Optional[float] = None
    target_profit: Optional[float] = None
    target_profit_percentage: Optional[float] = None

    def __post_init__(self):
        require_numeric_fields(self)
        require_non_negative(self.fixed_costs, "fixedCosts")
        require_non_negative(self.variable_cost_per_unit, "variableCostPerUnit")

        if not isinstance(self.mode, BreakEvenMode):
            raise InvalidInput(f"mode must be BreakEvenMode, got {type(self.mode).__name__}", "mode")

        if self.mode in (BreakEvenMode.STANDARD, BreakEvenMode.FIND_UNITS, BreakEvenMode.PROFIT_TARGET):
            if self.selling_price_per_unit is None:
                raise InvalidInput(
                    f"sellingPricePerUnit is required in {self.mode.value} mode", "sellingPricePerUnit"
                )
            require_positive(self.selling_price_per_unit, "sellingPricePerUnit")

        if self.mode == BreakEvenMode.FIND_PRICE:
            if self.target_units is None:
                raise InvalidInput("targetUnits is required in findPrice mode", "targetUnits")
            require_positive(self.target_units, "targetUnits")

        if self.mode == BreakEvenMode.PROFIT_TARGET:
            if self.target_profit is None and self.target_profit_percentage is None:
                raise InvalidInput(
                    "profitTarget mode requires targetProfit or targetProfitPercentage", "targetProfit"
                )
            if self.target_profit is not None and self.target_profit_percentage is not None:
                raise InvalidInput(
                    "Provide either targetProfit or targetProfitPercentage, not both", "targetProfit"
                )
            if self.target_profit is not None:
                require_non_negative(self.target_profit, "targetProfit")
            if self.target_profit_percentage is not None:
                require_percentage(self.target_profit_percentage, "targetProfitPercentage")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fixedCosts": self.fixed_costs,
            "variableCostPerUnit": self.variable_cost_per_unit,
            "sellingPricePerUnit": self.selling_price_per_unit,
            "mode": self.mode.value,
            "targetUnits": self.target_units,
            "targetProfit": self.target_profit,
            "targetProfitPercentage": self.target_profit_percentage,
        }

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "BreakEvenInputs":
        raw_mode = data.get("mode", BreakEvenMode.STANDARD.value) if isinstance(data, Mapping) else None
        try:
            mode = BreakEvenMode(raw_mode)
        except ValueError:
            raise InvalidInput(f"Unknown break-even mode {raw_mode!r}", "mode")

        def optional(key: str) -> Optional[float]:
            value = data.get(key)
            if value is None or value == "":
                return None
            return require_number(value, key)

        return BreakEvenInputs(
            fixed_costs=require_non_negative(_get(data, "fixedCosts"), "fixedCosts"),
            variable_cost_per_unit=require_non_negative(_get(data, "variableCostPerUnit"), "variableCostPerUnit"),
            selling_price_per_unit=optional("sellingPricePerUnit"),
            mode=mode,
            target_units=optional("targetUnits"),
            target_profit=optional("targetProfit"),
            target_profit_percentage=optional("targetProfitPercentage"),
        )


# =============================================================================
# Subscription and scenario inputs
# =============================================================================


@dataclass(frozen=True)
class SubscriptionMetrics:
    """
    Subscription revenue calculator form.

    Rates are percentages in [0, 100].
    """
    monthly_subscription_price: float
    customer_acquisition_cost: float
    customer_retention_rate: float
    monthly_platform_costs: float
    monthly_per_client_costs: float
    initial_customer_base: int
    monthly_growth_rate: float

    def __post_init__(self):
        require_numeric_fields(self)
        require_non_negative(self.monthly_subscription_price, "monthlySubscriptionPrice")
        require_non_negative(self.customer_acquisition_cost, "customerAcquisitionCost")
        require_percentage(self.customer_retention_rate, "customerRetentionRate")
        require_non_negative(self.monthly_platform_costs, "monthlyPlatformCosts")
        require_non_negative(self.monthly_per_client_costs, "monthlyPerClientCosts")
        _require_whole(self.initial_customer_base, "initialCustomerBase")
        require_percentage(self.monthly_growth_rate, "monthlyGrowthRate")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "monthlySubscriptionPrice": self.monthly_subscription_price,
            "customerAcquisitionCost": self.customer_acquisition_cost,
            "customerRetentionRate": self.customer_retention_rate,
            "monthlyPlatformCosts": self.monthly_platform_costs,
            "monthlyPerClientCosts": self.monthly_per_client_costs,
            "initialCustomerBase": self.initial_customer_base,
            "monthlyGrowthRate": self.monthly_growth_rate,
        }

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "SubscriptionMetrics":
        return SubscriptionMetrics(
            monthly_subscription_price=require_non_negative(
                _get(data, "monthlySubscriptionPrice"), "monthlySubscriptionPrice"),
            customer_acquisition_cost=require_non_negative(
                _get(data, "customerAcquisitionCost"), "customerAcquisitionCost"),
            customer_retention_rate=require_percentage(
                _get(data, "customerRetentionRate"), "customerRetentionRate"),
            monthly_platform_costs=require_non_negative(
                _get(data, "monthlyPlatformCosts"), "monthlyPlatformCosts"),
            monthly_per_client_costs=require_non_negative(
                _get(data, "monthlyPerClientCosts"), "monthlyPerClientCosts"),
            initial_customer_base=_require_whole(_get(data, "initialCustomerBase"), "initialCustomerBase"),
            monthly_growth_rate=require_percentage(_get(data, "monthlyGrowthRate"), "monthlyGrowthRate"),
        )


SCENARIO_METRIC_FIELDS = (
    "revenue", "costs", "marketShare", "customerGrowth", "baselineClients",
    "operatingExpenses", "profitMargin", "expectedRevenue", "expectedProfit",
)

_METRIC_ATTRS = {
    "revenue": "revenue",
    "costs": "costs",
    "marketShare": "market_share",
    "customerGrowth": "customer_growth",
    "baselineClients": "baseline_clients",
    "operatingExpenses": "operating_expenses",
    "profitMargin": "profit_margin",
    "expectedRevenue": "expected_revenue",
    "expectedProfit": "expected_profit",
}


@dataclass(frozen=True)
class ScenarioMetrics:
    """
    Business metrics bundle for one planning scenario.

    Every field is user-settable; expected_revenue / expected_profit may also
    be stamped by the planner. Values may be negative (e.g. shrinking growth).
    """
    revenue: float = 0.0
    costs: float = 0.0
    market_share: float = 0.0
    customer_growth: float = 0.0
    baseline_clients: float = 0.0
    operating_expenses: float = 0.0
    profit_margin: float = 0.0
    expected_revenue: float = 0.0
    expected_profit: float = 0.0

    def __post_init__(self):
        require_numeric_fields(self)
        for name in SCENARIO_METRIC_FIELDS:
            require_number(getattr(self, _METRIC_ATTRS[name]), name)

    def get(self, metric: str) -> float:
        return getattr(self, self.attribute_for(metric))

    def replace(self, metric: str, value: float) -> "ScenarioMetrics":
        """Return a copy with one metric changed (camelCase metric name)."""
        values = {attr: getattr(self, attr) for attr in _METRIC_ATTRS.values()}
        values[self.attribute_for(metric)] = require_number(value, metric)
        return ScenarioMetrics(**values)

    @staticmethod
    def attribute_for(metric: str) -> str:
        if metric not in _METRIC_ATTRS:
            raise InvalidInput(f"Unknown scenario metric {metric!r}", metric)
        return _METRIC_ATTRS[metric]

    def to_dict(self) -> Dict[str, Any]:
        return {name: getattr(self, attr) for name, attr in _METRIC_ATTRS.items()}

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "ScenarioMetrics":
        return ScenarioMetrics(**{
            attr: require_number(_get(data, name), name)
            for name, attr in _METRIC_ATTRS.items()
        })


# =============================================================================
# Cash-flow inputs
# =============================================================================


@dataclass(frozen=True)
class ProductSales:
    """
    A product line.

    seasonality maps calendar month name -> volume multiplier. Months not
    listed use a factor of 1.0; an explicit 0 means no sales that month.
    """
    units_sold: float
    price_per_unit: float
    production_cost_per_unit: float = 0.0
    seasonality: Dict[str, float] = field(default_factory=dict)

    def __post_init__(self):
        require_numeric_fields(self)
        require_non_negative(self.units_sold, "unitsSold")
        require_non_negative(self.price_per_unit, "pricePerUnit")
        require_non_negative(self.production_cost_per_unit, "productionCostPerUnit")
        for month, factor in self.seasonality.items():
            if month not in MONTHS:
                raise InvalidInput(f"Unknown seasonality month {month!r}", "seasonality")
            require_non_negative(factor, f"seasonality.{month}")

    def seasonal_factor(self, month: str) -> float:
        return self.seasonality.get(month, 1.0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "unitsSold": self.units_sold,
            "pricePerUnit": self.price_per_unit,
            "productionCostPerUnit": self.production_cost_per_unit,
            "seasonality": dict(self.seasonality),
        }

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "ProductSales":
        seasonality = data.get("seasonality") or {}
        return ProductSales(
            units_sold=require_non_negative(_get(data, "unitsSold"), "unitsSold"),
            price_per_unit=require_non_negative(_get(data, "pricePerUnit"), "pricePerUnit"),
            production_cost_per_unit=require_non_negative(
                data.get("productionCostPerUnit", 0), "productionCostPerUnit"),
            seasonality={
                month: require_non_negative(factor, f"seasonality.{month}")
                for month, factor in seasonality.items()
            },
        )


@dataclass(frozen=True)
class ServiceIncome:
    service_type: str
    rate_or_price: float
    expected_volume_per_month: float

    def __post_init__(self):
        require_numeric_fields(self)
        require_non_negative(self.rate_or_price, "rateOrPrice")
        require_non_negative(self.expected_volume_per_month, "expectedVolumePerMonth")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "serviceType": self.service_type,
            "rateOrPrice": self.rate_or_price,
            "expectedVolumePerMonth": self.expected_volume_per_month,
        }

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "ServiceIncome":
        return ServiceIncome(
            service_type=str(data.get("serviceType", "")),
            rate_or_price=require_non_negative(_get(data, "rateOrPrice"), "rateOrPrice"),
            expected_volume_per_month=require_non_negative(
                _get(data, "expectedVolumePerMonth"), "expectedVolumePerMonth"),
        )


@dataclass(frozen=True)
class SubscriptionRevenue:
    """A subscription pricing tier. churn_rate is a monthly fraction in [0, 1]."""
    pricing_tier: str
    monthly_fee: float
    subscribers: float
    churn_rate: float

    def __post_init__(self):
        require_numeric_fields(self)
        require_non_negative(self.monthly_fee, "monthlyFee")
        require_non_negative(self.subscribers, "subscribers")
        require_fraction(self.churn_rate, "churnRate")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pricingTier": self.pricing_tier,
            "monthlyFee": self.monthly_fee,
            "subscribers": self.subscribers,
            "churnRate": self.churn_rate,
        }

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "SubscriptionRevenue":
        return SubscriptionRevenue(
            pricing_tier=str(data.get("pricingTier", "")),
            monthly_fee=require_non_negative(_get(data, "monthlyFee"), "monthlyFee"),
            subscribers=require_non_negative(_get(data, "subscribers"), "subscribers"),
            churn_rate=require_fraction(_get(data, "churnRate"), "churnRate"),
        )


@dataclass(frozen=True)
class LicensingRoyalty:
    agreement_name: str
    royalty_rate: float
    expected_volume: float

    def __post_init__(self):
        require_numeric_fields(self)
        require_non_negative(self.royalty_rate, "royaltyRate")
        require_non_negative(self.expected_volume, "expectedVolume")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "agreementName": self.agreement_name,
            "royaltyRate": self.royalty_rate,
            "expectedVolume": self.expected_volume,
        }

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "LicensingRoyalty":
        return LicensingRoyalty(
            agreement_name=str(data.get("agreementName", "")),
            royalty_rate=require_non_negative(_get(data, "royaltyRate"), "royaltyRate"),
            expected_volume=require_non_negative(_get(data, "expectedVolume"), "expectedVolume"),
        )


@dataclass(frozen=True)
class CustomExpense:
    name: str
    amount: float
    description: Optional[str] = None

    def __post_init__(self):
        require_numeric_fields(self)
        require_non_negative(self.amount, "amount")

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "amount": self.amount, "description": self.description}

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "CustomExpense":
        return CustomExpense(
            name=str(data.get("name", "")),
            amount=require_non_negative(_get(data, "amount"), "amount"),
            description=data.get("description"),
        )


class _ExpenseGroup:
    """Shared behaviour for expense categories: named line items plus custom lines."""

    LINE_ITEMS: Tuple[Tuple[str, str], ...] = ()

    def _validate_lines(self):
        for key, attr in self.LINE_ITEMS:
            require_non_negative(getattr(self, attr), key)
        for expense in self.custom:
            if not isinstance(expense, CustomExpense):
                raise InvalidInput(
                    f"custom expenses must be CustomExpense, got {type(expense).__name__}", "custom"
                )

    def total(self) -> float:
        """Sum of the named line items followed by custom lines."""
        total = 0.0
        for _, attr in self.LINE_ITEMS:
            total += getattr(self, attr)
        for expense in self.custom:
            total += expense.amount
        return total

    def to_dict(self) -> Dict[str, Any]:
        record: Dict[str, Any] = {key: getattr(self, attr) for key, attr in self.LINE_ITEMS}
        record["custom"] = [e.to_dict() for e in self.custom]
        return record

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]):
        values = {attr: require_non_negative(_get(data, key), key) for key, attr in cls.LINE_ITEMS}
        values["custom"] = tuple(CustomExpense.from_dict(e) for e in (data.get("custom") or []))
        return cls(**values)


@dataclass(frozen=True)
class FixedExpenses(_ExpenseGroup):
    rent: float
    salaries: float
    insurance: float
    utilities: float
    software_subscriptions: float
    custom: Tuple[CustomExpense, ...] = ()

    LINE_ITEMS = (
        ("rent", "rent"),
        ("salaries", "salaries"),
        ("insurance", "insurance"),
        ("utilities", "utilities"),
        ("softwareSubscriptions", "software_subscriptions"),
    )

    def __post_init__(self):
        require_numeric_fields(self)
        self._validate_lines()


@dataclass(frozen=True)
class VariableExpenses(_ExpenseGroup):
    cogs: float
    marketing: float
    sales_commissions: float
    supplies: float
    custom: Tuple[CustomExpense, ...] = ()

    LINE_ITEMS = (
        ("cogs", "cogs"),
        ("marketing", "marketing"),
        ("salesCommissions", "sales_commissions"),
        ("supplies", "supplies"),
    )

    def __post_init__(self):
        require_numeric_fields(self)
        self._validate_lines()


@dataclass(frozen=True)
class OneTimeExpenses(_ExpenseGroup):
    startup_costs: float
    capital_expenditures: float
    legal_and_licensing: float
    custom: Tuple[CustomExpense, ...] = ()

    LINE_ITEMS = (
        ("startupCosts", "startup_costs"),
        ("capitalExpenditures", "capital_expenditures"),
        ("legalAndLicensing", "legal_and_licensing"),
    )

    def __post_init__(self):
        require_numeric_fields(self)
        self._validate_lines()


@dataclass(frozen=True)
class FinancialObligations(_ExpenseGroup):
    loan_repayments: float
    interest_payments: float
    taxes: float
    custom: Tuple[CustomExpense, ...] = ()

    LINE_ITEMS = (
        ("loanRepayments", "loan_repayments"),
        ("interestPayments", "interest_payments"),
        ("taxes", "taxes"),
    )

    def __post_init__(self):
        require_numeric_fields(self)
        self._validate_lines()


@dataclass(frozen=True)
class OtherRevenue:
    affiliate_income: float = 0.0
    advertising_revenue: float = 0.0
    grants_and_donations: float = 0.0

    def __post_init__(self):
        require_numeric_fields(self)
        require_non_negative(self.affiliate_income, "affiliateIncome")
        require_non_negative(self.advertising_revenue, "advertisingRevenue")
        require_non_negative(self.grants_and_donations, "grantsAndDonations")

    def total(self) -> float:
        return self.affiliate_income + self.advertising_revenue + self.grants_and_donations

    def to_dict(self) -> Dict[str, Any]:
        return {
            "affiliateIncome": self.affiliate_income,
            "advertisingRevenue": self.advertising_revenue,
            "grantsAndDonations": self.grants_and_donations,
        }

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "OtherRevenue":
        return OtherRevenue(
            affiliate_income=require_non_negative(_get(data, "affiliateIncome"), "affiliateIncome"),
            advertising_revenue=require_non_negative(_get(data, "advertisingRevenue"), "advertisingRevenue"),
            grants_and_donations=require_non_negative(_get(data, "grantsAndDonations"), "grantsAndDonations"),
        )


REVENUE_GROWTH_MODELS = ("linear", "exponential", "seasonal")
EXPENSE_GROWTH_MODELS = ("linear", "exponential", "fixed")


@dataclass(frozen=True)
class GrowthParameters:
    """
    Growth assumptions. Growth rates are annual fractions (0.1 = 10%/year)
    and must stay above -1 so the compounding base remains positive.

    The receivable/payable/tax/inventory fields and the growth-model labels
    are carried for the fuller statement; the projection compounds growth
    exponentially regardless of the label.
    """
    revenue_growth_rate: float
    expense_growth_rate: float
    accounts_receivable_days: float
    accounts_payable_days: float
    corporate_tax_rate: float
    revenue_growth_model: str = "exponential"
    expense_growth_model: str = "exponential"
    inventory_turnover_days: Optional[float] = None

    def __post_init__(self):
        require_numeric_fields(self)
        _require_growth_rate(self.revenue_growth_rate, "revenueGrowthRate")
        _require_growth_rate(self.expense_growth_rate, "expenseGrowthRate")
        require_non_negative(self.accounts_receivable_days, "accountsReceivableDays")
        require_non_negative(self.accounts_payable_days, "accountsPayableDays")
        require_non_negative(self.corporate_tax_rate, "corporateTaxRate")
        if self.revenue_growth_model not in REVENUE_GROWTH_MODELS:
            raise InvalidInput(
                f"revenueGrowthModel must be one of {REVENUE_GROWTH_MODELS}, got {self.revenue_growth_model!r}",
                "revenueGrowthModel"
            )
        if self.expense_growth_model not in EXPENSE_GROWTH_MODELS:
            raise InvalidInput(
                f"expenseGrowthModel must be one of {EXPENSE_GROWTH_MODELS}, got {self.expense_growth_model!r}",
                "expenseGrowthModel"
            )
        if self.inventory_turnover_days is not None:
            require_non_negative(self.inventory_turnover_days, "inventoryTurnoverDays")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "revenueGrowthRate": self.revenue_growth_rate,
            "expenseGrowthRate": self.expense_growth_rate,
            "accountsReceivableDays": self.accounts_receivable_days,
            "accountsPayableDays": self.accounts_payable_days,
            "corporateTaxRate": self.corporate_tax_rate,
            "revenueGrowthModel": self.revenue_growth_model,
            "expenseGrowthModel": self.expense_growth_model,
            "inventoryTurnoverDays": self.inventory_turnover_days,
        }

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "GrowthParameters":
        turnover = data.get("inventoryTurnoverDays")
        return GrowthParameters(
            revenue_growth_rate=_require_growth_rate(_get(data, "revenueGrowthRate"), "revenueGrowthRate"),
            expense_growth_rate=_require_growth_rate(_get(data, "expenseGrowthRate"), "expenseGrowthRate"),
            accounts_receivable_days=require_non_negative(
                _get(data, "accountsReceivableDays"), "accountsReceivableDays"),
            accounts_payable_days=require_non_negative(_get(data, "accountsPayableDays"), "accountsPayableDays"),
            corporate_tax_rate=require_non_negative(_get(data, "corporateTaxRate"), "corporateTaxRate"),
            revenue_growth_model=data.get("revenueGrowthModel", "exponential"),
            expense_growth_model=data.get("expenseGrowthModel", "exponential"),
            inventory_turnover_days=None if turnover in (None, "") else require_non_negative(
                turnover, "inventoryTurnoverDays"),
        )


@dataclass(frozen=True)
class CashFlowData:
    """Complete cash-flow analyzer input."""
    product_sales: Tuple[ProductSales, ...]
    service_income: Tuple[ServiceIncome, ...]
    subscription_revenue: Tuple[SubscriptionRevenue, ...]
    licensing_royalties: Tuple[LicensingRoyalty, ...]
    other_revenue: OtherRevenue
    fixed_expenses: FixedExpenses
    variable_expenses: VariableExpenses
    one_time_expenses: OneTimeExpenses
    financial_obligations: FinancialObligations
    growth_parameters: GrowthParameters

    def __post_init__(self):
        require_numeric_fields(self)
        checks = (
            ("productSales", self.product_sales, ProductSales),
            ("serviceIncome", self.service_income, ServiceIncome),
            ("subscriptionRevenue", self.subscription_revenue, SubscriptionRevenue),
            ("licensingRoyalties", self.licensing_royalties, LicensingRoyalty),
        )
        for name, items, item_type in checks:
            if not isinstance(items, tuple):
                raise InvalidInput(f"{name} must be a tuple, got {type(items).__name__}", name)
            for item in items:
                if not isinstance(item, item_type):
                    raise InvalidInput(
                        f"{name} entries must be {item_type.__name__}, got {type(item).__name__}", name
                    )

        singles = (
            ("otherRevenue", self.other_revenue, OtherRevenue),
            ("fixedExpenses", self.fixed_expenses, FixedExpenses),
            ("variableExpenses", self.variable_expenses, VariableExpenses),
            ("oneTimeExpenses", self.one_time_expenses, OneTimeExpenses),
            ("financialObligations", self.financial_obligations, FinancialObligations),
            ("growthParameters", self.growth_parameters, GrowthParameters),
        )
        for name, value, value_type in singles:
            if not isinstance(value, value_type):
                raise InvalidInput(f"{name} must be {value_type.__name__}, got {type(value).__name__}", name)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "productSales": [p.to_dict() for p in self.product_sales],
            "serviceIncome": [s.to_dict() for s in self.service_income],
            "subscriptionRevenue": [s.to_dict() for s in self.subscription_revenue],
            "licensingRoyalties": [l.to_dict() for l in self.licensing_royalties],
            "otherRevenue": self.other_revenue.to_dict(),
            "fixedExpenses": self.fixed_expenses.to_dict(),
            "variableExpenses": self.variable_expenses.to_dict(),
            "oneTimeExpenses": self.one_time_expenses.to_dict(),
            "financialObligations": self.financial_obligations.to_dict(),
            "growthParameters": self.growth_parameters.to_dict(),
        }

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "CashFlowData":
        def items(key: str, loader) -> Tuple:
            value = _get(data, key)
            if not isinstance(value, (list, tuple)):
                raise InvalidInput(f"{key} must be a list", key)
            return tuple(loader(item) for item in value)

        return CashFlowData(
            product_sales=items("productSales", ProductSales.from_dict),
            service_income=items("serviceIncome", ServiceIncome.from_dict),
            subscription_revenue=items("subscriptionRevenue", SubscriptionRevenue.from_dict),
            licensing_royalties=items("licensingRoyalties", LicensingRoyalty.from_dict),
            other_revenue=OtherRevenue.from_dict(_get(data, "otherRevenue")),
            fixed_expenses=FixedExpenses.from_dict(_get(data, "fixedExpenses")),
            variable_expenses=VariableExpenses.from_dict(_get(data, "variableExpenses")),
            one_time_expenses=OneTimeExpenses.from_dict(_get(data, "oneTimeExpenses")),
            financial_obligations=FinancialObligations.from_dict(_get(data, "financialObligations")),
            growth_parameters=GrowthParameters.from_dict(_get(data, "growthParameters")),
        )


# =============================================================================
# Valuation, investment and startup inputs
# =============================================================================


@dataclass(frozen=True)
class ValuationInputs:
    """
    Business valuation form. growth_rate is an annual percentage.
    net_income and cash_flow may be negative (loss-making businesses).
    """
    revenue: float
    net_income: float
    assets: float
    liabilities: float
    cash_flow: float
    growth_rate: float

    def __post_init__(self):
        require_numeric_fields(self)
        require_non_negative(self.revenue, "revenue")
        require_number(self.net_income, "netIncome")
        require_non_negative(self.assets, "assets")
        require_non_negative(self.liabilities, "liabilities")
        require_number(self.cash_flow, "cashFlow")
        _require_growth_rate(self.growth_rate / 100, "growthRate")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "revenue": self.revenue,
            "netIncome": self.net_income,
            "assets": self.assets,
            "liabilities": self.liabilities,
            "cashFlow": self.cash_flow,
            "growthRate": self.growth_rate,
        }

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "ValuationInputs":
        return ValuationInputs(
            revenue=require_non_negative(_get(data, "revenue"), "revenue"),
            net_income=require_number(_get(data, "netIncome"), "netIncome"),
            assets=require_non_negative(_get(data, "assets"), "assets"),
            liabilities=require_non_negative(_get(data, "liabilities"), "liabilities"),
            cash_flow=require_number(_get(data, "cashFlow"), "cashFlow"),
            growth_rate=require_number(_get(data, "growthRate"), "growthRate"),
        )


MAX_PROJECT_LIFESPAN = 20


@dataclass(frozen=True)
class InvestmentInputs:
    """
    Investment appraisal form. Rates are annual percentages; one projected
    cash flow per year of project lifespan (1 to 20 years).
    """
    project_name: str
    initial_investment: float
    projected_cash_flows: Tuple[float, ...]
    discount_rate: float
    alternative_investment_return: float = 0.0

    def __post_init__(self):
        require_numeric_fields(self)
        require_positive(self.initial_investment, "initialInvestment")
        if not isinstance(self.projected_cash_flows, tuple):
            raise InvalidInput("projectedCashFlows must be a tuple", "projectedCashFlows")
        if not 1 <= len(self.projected_cash_flows) <= MAX_PROJECT_LIFESPAN:
            raise InvalidInput(
                f"projectedCashFlows must cover 1 to {MAX_PROJECT_LIFESPAN} years, "
                f"got {len(self.projected_cash_flows)}",
                "projectedCashFlows"
            )
        for i, value in enumerate(self.projected_cash_flows):
            require_number(value, f"projectedCashFlows[{i}]")
        _require_growth_rate(self.discount_rate / 100, "discountRate")
        require_number(self.alternative_investment_return, "alternativeInvestmentReturn")

    @property
    def project_lifespan(self) -> int:
        return len(self.projected_cash_flows)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "projectName": self.project_name,
            "initialInvestment": self.initial_investment,
            "projectedCashFlows": list(self.projected_cash_flows),
            "discountRate": self.discount_rate,
            "projectLifespan": self.project_lifespan,
            "alternativeInvestmentReturn": self.alternative_investment_return,
        }

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "InvestmentInputs":
        flows = _get(data, "projectedCashFlows")
        if not isinstance(flows, (list, tuple)):
            raise InvalidInput("projectedCashFlows must be a list", "projectedCashFlows")
        return InvestmentInputs(
            project_name=str(data.get("projectName", "")),
            initial_investment=require_positive(_get(data, "initialInvestment"), "initialInvestment"),
            projected_cash_flows=tuple(
                require_number(v, f"projectedCashFlows[{i}]") for i, v in enumerate(flows)
            ),
            discount_rate=require_number(_get(data, "discountRate"), "discountRate"),
            alternative_investment_return=require_number(
                data.get("alternativeInvestmentReturn", 0), "alternativeInvestmentReturn"),
        )


class CostCategory(Enum):
    ONE_TIME = "oneTime"
    MONTHLY = "monthly"
    INVENTORY = "inventory"


@dataclass(frozen=True)
class StartupCost:
    name: str
    amount: float
    category: CostCategory
    description: Optional[str] = None

    def __post_init__(self):
        require_numeric_fields(self)
        if not self.name or not self.name.strip():
            raise InvalidInput("Cost name cannot be empty", "name")
        require_positive(self.amount, "amount")
        if not isinstance(self.category, CostCategory):
            raise InvalidInput(f"category must be CostCategory, got {type(self.category).__name__}", "category")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "amount": self.amount,
            "category": self.category.value,
            "description": self.description,
        }

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "StartupCost":
        raw_category = _get(data, "category")
        try:
            category = CostCategory(raw_category)
        except ValueError:
            raise InvalidInput(f"Unknown cost category {raw_category!r}", "category")
        return StartupCost(
            name=str(_get(data, "name")),
            amount=require_positive(_get(data, "amount"), "amount"),
            category=category,
            description=data.get("description"),
        )


def load_list(records: List[Mapping[str, Any]], loader) -> Tuple:
    """Load a list of form records with one entity loader."""
    return tuple(loader(record) for record in records)
