"""
Financial ratio registry.

Each ratio declares the inputs it needs and which of them are denominators.
evaluate_ratio() checks both before applying the formula, so a missing input
is InvalidInput and so is a zero denominator the user entered; a result is
never Infinity or NaN.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Tuple

from finplan.errors import InvalidInput, require_number

logger = logging.getLogger(__name__)

RATIO = "ratio"
PERCENTAGE = "percentage"
CURRENCY = "currency"
TIMES = "times"
FORMAT_KINDS = (RATIO, PERCENTAGE, CURRENCY, TIMES)


@dataclass(frozen=True)
class RatioDefinition:
    """
    One ratio.

    - inputs: Field names the formula reads
    - denominators: Subset of inputs that must be non-zero
    - format_kind: How format_ratio() displays the value
    """
    key: str
    title: str
    category: str
    inputs: Tuple[str, ...]
    denominators: Tuple[str, ...]
    format_kind: str
    formula: Callable[[Mapping[str, float]], float]

    def __post_init__(self):
        if self.format_kind not in FORMAT_KINDS:
            raise ValueError(f"format_kind must be one of {FORMAT_KINDS}, got {self.format_kind!r}")
        missing = set(self.denominators) - set(self.inputs)
        if missing:
            raise ValueError(f"Denominators {sorted(missing)} are not inputs of {self.key}")


@dataclass(frozen=True)
class RatioResult:
    key: str
    title: str
    category: str
    value: float
    formatted: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "title": self.title,
            "category": self.category,
            "value": self.value,
            "formatted": self.formatted,
        }


CATEGORY_TITLES = {
    "liquidity": "Liquidity Ratios",
    "profitability": "Profitability Ratios",
    "efficiency": "Efficiency Ratios",
    "leverage": "Leverage Ratios",
    "cashflow": "Cash Flow Ratios",
    "marketValue": "Market Value Ratios",
    "operating": "Operating Performance Ratios",
}

_DEFINITIONS = (
    # Liquidity
    RatioDefinition(
        "currentRatio", "Current Ratio", "liquidity",
        ("currentAssets", "currentLiabilities"), ("currentLiabilities",), RATIO,
        lambda v: v["currentAssets"] / v["currentLiabilities"]),
    RatioDefinition(
        "quickRatio", "Quick Ratio (Acid-Test)", "liquidity",
        ("currentAssets", "inventory", "currentLiabilities"), ("currentLiabilities",), RATIO,
        lambda v: (v["currentAssets"] - v["inventory"]) / v["currentLiabilities"]),
    RatioDefinition(
        "workingCapital", "Working Capital", "liquidity",
        ("currentAssets", "currentLiabilities"), (), CURRENCY,
        lambda v: v["currentAssets"] - v["currentLiabilities"]),

    # Profitability
    RatioDefinition(
        "grossProfitMargin", "Gross Profit Margin", "profitability",
        ("revenue", "costOfGoodsSold"), ("revenue",), PERCENTAGE,
        lambda v: (v["revenue"] - v["costOfGoodsSold"]) / v["revenue"] * 100),
    RatioDefinition(
        "netProfitMargin", "Net Profit Margin", "profitability",
        ("netIncome", "revenue"), ("revenue",), PERCENTAGE,
        lambda v: v["netIncome"] / v["revenue"] * 100),
    RatioDefinition(
        "returnOnAssets", "Return on Assets (ROA)", "profitability",
        ("netIncome", "totalAssets"), ("totalAssets",), PERCENTAGE,
        lambda v: v["netIncome"] / v["totalAssets"] * 100),
    RatioDefinition(
        "returnOnEquity", "Return on Equity (ROE)", "profitability",
        ("netIncome", "shareholderEquity"), ("shareholderEquity",), PERCENTAGE,
        lambda v: v["netIncome"] / v["shareholderEquity"] * 100),

    # Efficiency
    RatioDefinition(
        "inventoryTurnover", "Inventory Turnover", "efficiency",
        ("costOfGoodsSold", "averageInventory"), ("averageInventory",), TIMES,
        lambda v: v["costOfGoodsSold"] / v["averageInventory"]),
    RatioDefinition(
        "receivablesTurnover", "Accounts Receivable Turnover", "efficiency",
        ("netCreditSales", "averageAccountsReceivable"), ("averageAccountsReceivable",), TIMES,
        lambda v: v["netCreditSales"] / v["averageAccountsReceivable"]),

    # Leverage
    RatioDefinition(
        "debtToEquity", "Debt to Equity", "leverage",
        ("totalDebt", "totalEquity"), ("totalEquity",), PERCENTAGE,
        lambda v: v["totalDebt"] / v["totalEquity"] * 100),
    RatioDefinition(
        "interestCoverage", "Interest Coverage", "leverage",
        ("ebit", "interestExpense"), ("interestExpense",), TIMES,
        lambda v: v["ebit"] / v["interestExpense"]),

    # Cash flow
    RatioDefinition(
        "operatingCashFlowRatio", "Operating Cash Flow Ratio", "cashflow",
        ("operatingCashFlow", "currentLiabilities"), ("currentLiabilities",), RATIO,
        lambda v: v["operatingCashFlow"] / v["currentLiabilities"]),
    RatioDefinition(
        "ebitdaMargin", "EBITDA Margin", "cashflow",
        ("ebitda", "revenue"), ("revenue",), PERCENTAGE,
        lambda v: v["ebitda"] / v["revenue"] * 100),

    # Market value
    RatioDefinition(
        "priceEarnings", "Price-Earnings (P/E)", "marketValue",
        ("marketPrice", "earningsPerShare"), ("earningsPerShare",), RATIO,
        lambda v: v["marketPrice"] / v["earningsPerShare"]),
    RatioDefinition(
        "priceToBook", "Price-to-Book", "marketValue",
        ("marketPrice", "bookValuePerShare"), ("bookValuePerShare",), RATIO,
        lambda v: v["marketPrice"] / v["bookValuePerShare"]),

    # Operating performance
    RatioDefinition(
        "operatingMargin", "Operating Margin", "operating",
        ("operatingIncome", "revenue"), ("revenue",), PERCENTAGE,
        lambda v: v["operatingIncome"] / v["revenue"] * 100),
    RatioDefinition(
        "assetTurnover", "Asset Turnover", "operating",
        ("revenue", "averageAssets"), ("averageAssets",), PERCENTAGE,
        lambda v: v["revenue"] / v["averageAssets"] * 100),
)

RATIOS: Dict[str, RatioDefinition] = {d.key: d for d in _DEFINITIONS}


def ratios_in_category(category: str) -> List[RatioDefinition]:
    if category not in CATEGORY_TITLES:
        raise InvalidInput(f"Unknown ratio category {category!r}", "category")
    return [d for d in _DEFINITIONS if d.category == category]


def format_ratio(kind: str, value: float) -> str:
    """Display a ratio value the way the calculators show it."""
    if kind == PERCENTAGE:
        return f"{value:.2f}%"
    if kind == RATIO:
        return f"{value:.2f}"
    if kind == TIMES:
        return f"{value:.2f}x"
    if kind == CURRENCY:
        sign = "-" if value < 0 else ""
        return f"{sign}${abs(value):,.2f}"
    raise InvalidInput(f"Unknown format kind {kind!r}", "formatKind")


def evaluate_ratio(key: str, values: Mapping[str, Any]) -> RatioResult:
    """
    Compute one ratio from a record of inputs.

    Raises:
        InvalidInput: unknown ratio, a missing / non-numeric input, or a zero denominator
    """
    if key not in RATIOS:
        raise InvalidInput(f"Unknown ratio {key!r}", "ratio")
    definition = RATIOS[key]

    numbers = {name: require_number(values.get(name), name) for name in definition.inputs}
    for name in definition.denominators:
        if numbers[name] == 0:
            raise InvalidInput(f"{name} cannot be zero for {definition.title}", name)

    value = definition.formula(numbers)
    logger.debug("%s = %s", definition.title, value)
    return RatioResult(
        key=key,
        title=definition.title,
        category=definition.category,
        value=value,
        formatted=format_ratio(definition.format_kind, value),
    )
