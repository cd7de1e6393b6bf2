"""
Business valuation by four methods and a suggested range.

- asset-based: assets - liabilities
- market:      revenue x revenue multiple
- earnings:    net income x P/E ratio
- DCF:         cash flow grown at growthRate for N years, discounted at the
               discount rate, plus a Gordon-growth terminal value
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from finplan.config import PlannerSettings, get_settings
from finplan.entities import ValuationInputs
from finplan.errors import ArithmeticDegenerate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValuationRange:
    min: float
    max: float
    average: float

    def to_dict(self) -> Dict[str, Any]:
        return {"min": self.min, "max": self.max, "average": self.average}


@dataclass(frozen=True)
class ValuationResult:
    asset_based: float
    market: float
    earnings: float
    dcf: float

    @property
    def suggested_range(self) -> ValuationRange:
        values = (self.asset_based, self.market, self.earnings, self.dcf)
        return ValuationRange(min(values), max(values), sum(values) / len(values))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valuations": {
                "assetBased": self.asset_based,
                "market": self.market,
                "earnings": self.earnings,
                "dcf": self.dcf,
            },
            "suggestedRange": self.suggested_range.to_dict(),
        }


def discounted_cash_flow_value(
    cash_flow: float,
    growth_rate: float,
    discount_rate: float,
    years: int
) -> float:
    """
    DCF value with a terminal value.

    Args:
        cash_flow: Current annual cash flow
        growth_rate: Annual growth as a fraction (0.05 = 5%)
        discount_rate: Annual discount rate as a fraction
        years: Explicit forecast years

    Raises:
        ArithmeticDegenerate: discount_rate <= growth_rate (terminal value undefined)
    """
    if discount_rate <= growth_rate:
        raise ArithmeticDegenerate(
            f"Discount rate ({discount_rate:.2%}) must exceed growth rate ({growth_rate:.2%}) "
            f"for a terminal value",
            "growthRate"
        )

    value = 0.0
    for year in range(1, years + 1):
        value += cash_flow * (1 + growth_rate) ** year / (1 + discount_rate) ** year

    terminal = cash_flow * (1 + growth_rate) ** (years + 1) / (discount_rate - growth_rate)
    return value + terminal / (1 + discount_rate) ** years


def value_business(inputs: ValuationInputs, settings: Optional[PlannerSettings] = None) -> ValuationResult:
    """Value a business by all four methods."""
    settings = settings or get_settings()

    result = ValuationResult(
        asset_based=inputs.assets - inputs.liabilities,
        market=inputs.revenue * settings.revenue_multiple,
        earnings=inputs.net_income * settings.pe_ratio,
        dcf=discounted_cash_flow_value(
            inputs.cash_flow,
            inputs.growth_rate / 100,
            settings.valuation_discount_rate,
            settings.valuation_years,
        ),
    )
    logger.debug("Valuation range: %s", result.suggested_range)
    return result
