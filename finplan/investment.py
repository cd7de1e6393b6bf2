"""
Investment appraisal: NPV, IRR, payback period and profitability index.

Rates in InvestmentInputs and InvestmentResult are annual percentages.
Cash flows arrive at the end of each year; the initial investment is paid
at time 0.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence

from scipy.optimize import brentq

from finplan.entities import InvestmentInputs
from finplan.errors import ArithmeticDegenerate

logger = logging.getLogger(__name__)

# IRR search bracket (fractions): just above -100% to +1000%
IRR_LOWER_BOUND = -0.9999
IRR_UPPER_BOUND = 10.0


def net_present_value(rate: float, initial_investment: float, cash_flows: Sequence[float]) -> float:
    """NPV at rate (fraction) of year-end cash flows against an upfront investment."""
    if rate <= -1:
        raise ArithmeticDegenerate(f"Discount rate must be above -100%, got {rate:.2%}", "discountRate")
    value = -initial_investment
    for year, flow in enumerate(cash_flows, start=1):
        value += flow / (1 + rate) ** year
    return value


def internal_rate_of_return(initial_investment: float, cash_flows: Sequence[float]) -> Optional[float]:
    """
    Rate (fraction) at which NPV is zero, or None when NPV does not change
    sign inside the search bracket.
    """
    def npv(rate):
        return net_present_value(rate, initial_investment, cash_flows)

    low, high = npv(IRR_LOWER_BOUND), npv(IRR_UPPER_BOUND)
    if low == 0:
        return IRR_LOWER_BOUND
    if high == 0:
        return IRR_UPPER_BOUND
    if (low > 0) == (high > 0):
        return None
    return brentq(npv, IRR_LOWER_BOUND, IRR_UPPER_BOUND, xtol=1e-12, maxiter=500)


def payback_period(initial_investment: float, cash_flows: Sequence[float]) -> Optional[float]:
    """
    Years until cumulative cash flow recovers the investment, interpolating
    within the recovery year. None if it is never recovered.
    """
    remaining = initial_investment
    for year, flow in enumerate(cash_flows, start=1):
        if flow > 0 and flow >= remaining:
            return year - 1 + remaining / flow
        remaining -= flow
    return None


@dataclass(frozen=True)
class InvestmentResult:
    project_name: str
    net_present_value: float
    internal_rate_of_return: Optional[float]
    payback_period: Optional[float]
    profitability_index: float
    total_cash_flow: float
    beats_alternative: bool

    @property
    def is_viable(self) -> bool:
        return self.net_present_value > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "projectName": self.project_name,
            "netPresentValue": self.net_present_value,
            "internalRateOfReturn": self.internal_rate_of_return,
            "paybackPeriod": self.payback_period,
            "profitabilityIndex": self.profitability_index,
            "totalCashFlow": self.total_cash_flow,
            "beatsAlternative": self.beats_alternative,
            "isViable": self.is_viable,
        }


def appraise_investment(inputs: InvestmentInputs) -> InvestmentResult:
    """Appraise a project against its discount rate and an alternative return."""
    flows = inputs.projected_cash_flows
    npv = net_present_value(inputs.discount_rate / 100, inputs.initial_investment, flows)
    irr = internal_rate_of_return(inputs.initial_investment, flows)
    irr_percent = None if irr is None else irr * 100

    result = InvestmentResult(
        project_name=inputs.project_name,
        net_present_value=npv,
        internal_rate_of_return=irr_percent,
        payback_period=payback_period(inputs.initial_investment, flows),
        profitability_index=(npv + inputs.initial_investment) / inputs.initial_investment,
        total_cash_flow=sum(flows),
        beats_alternative=irr_percent is not None and irr_percent > inputs.alternative_investment_return,
    )

    logger.debug(
        "Investment %r: NPV %.2f, IRR %s",
        inputs.project_name, npv, "n/a" if irr_percent is None else f"{irr_percent:.2f}%"
    )
    return result
