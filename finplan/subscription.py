"""
Subscription revenue projector.

Month by month, starting from the initial customer base:

1. potentialNewCustomers = round(customers x growth%)           (acquisition accounting)
2. growthContribution    = round(customers x growth% x retention%)
3. acquisitionCosts      = customerAcquisitionCost x potentialNewCustomers
4. customers            += growthContribution
5. revenue / operating costs / net profit from the updated customer count
6. cumulative revenue and profit accumulate across months

Acquisition cost is charged on potential new customers while the base only
grows by the retained fraction, so low-retention plans pay full acquisition
cost for customers who never count toward revenue. This is kept as-is.

Counts round half up (2.5 -> 3). Money fields keep full precision;
RevenueProjection.rounded() gives the whole-unit table row.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from finplan.config import get_settings
from finplan.entities import SubscriptionMetrics
from finplan.errors import InvalidInput
from finplan.rounding import round_count

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RevenueProjection:
    """One projected month (month is 1-indexed)."""
    month: int
    customers: int
    new_customers: int
    potential_new_customers: int
    monthly_revenue: float
    cumulative_revenue: float
    operating_costs: float
    acquisition_costs: float
    net_profit: float
    cumulative_profit: float

    def rounded(self) -> "RevenueProjection":
        """Whole-unit display row (half-up)."""
        return RevenueProjection(
            month=self.month,
            customers=self.customers,
            new_customers=self.new_customers,
            potential_new_customers=self.potential_new_customers,
            monthly_revenue=round_count(self.monthly_revenue),
            cumulative_revenue=round_count(self.cumulative_revenue),
            operating_costs=round_count(self.operating_costs),
            acquisition_costs=round_count(self.acquisition_costs),
            net_profit=round_count(self.net_profit),
            cumulative_profit=round_count(self.cumulative_profit),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "month": self.month,
            "customers": self.customers,
            "newCustomers": self.new_customers,
            "potentialNewCustomers": self.potential_new_customers,
            "monthlyRevenue": self.monthly_revenue,
            "cumulativeRevenue": self.cumulative_revenue,
            "operatingCosts": self.operating_costs,
            "acquisitionCosts": self.acquisition_costs,
            "netProfit": self.net_profit,
            "cumulativeProfit": self.cumulative_profit,
        }


def project_subscription_revenue(metrics: SubscriptionMetrics, months: Optional[int] = None) -> List[RevenueProjection]:
    """
    Project subscription revenue month by month.

    Args:
        metrics: Validated subscription form
        months: Horizon (default: settings.subscription_months, normally 12)

    Returns:
        One RevenueProjection per month, in month order
    """
    if months is None:
        months = get_settings().subscription_months
    if isinstance(months, bool) or not isinstance(months, int) or months < 1:
        raise InvalidInput(f"months must be a positive integer, got {months!r}", "months")

    growth = metrics.monthly_growth_rate / 100
    retention = metrics.customer_retention_rate / 100

    customers = metrics.initial_customer_base
    cumulative_revenue = 0.0
    cumulative_profit = 0.0
    projections = []

    for month in range(1, months + 1):
        potential_new = round_count(customers * growth)
        growth_contribution = round_count(customers * growth * retention)
        acquisition_costs = metrics.customer_acquisition_cost * potential_new

        customers += growth_contribution

        monthly_revenue = customers * metrics.monthly_subscription_price
        operating_costs = metrics.monthly_platform_costs + customers * metrics.monthly_per_client_costs
        net_profit = monthly_revenue - acquisition_costs - operating_costs

        cumulative_revenue += monthly_revenue
        cumulative_profit += net_profit

        projections.append(RevenueProjection(
            month=month,
            customers=customers,
            new_customers=growth_contribution,
            potential_new_customers=potential_new,
            monthly_revenue=monthly_revenue,
            cumulative_revenue=cumulative_revenue,
            operating_costs=operating_costs,
            acquisition_costs=acquisition_costs,
            net_profit=net_profit,
            cumulative_profit=cumulative_profit,
        ))

    logger.debug(
        "Subscription projection: %d months, %d customers at end, cumulative revenue %.2f",
        months, customers, cumulative_revenue
    )
    return projections


@dataclass(frozen=True)
class SubscriptionSummary:
    final_customers: int
    total_revenue: float
    total_profit: float
    total_acquisition_costs: float
    first_profitable_month: Optional[int]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "finalCustomers": self.final_customers,
            "totalRevenue": self.total_revenue,
            "totalProfit": self.total_profit,
            "totalAcquisitionCosts": self.total_acquisition_costs,
            "firstProfitableMonth": self.first_profitable_month,
        }


def summarize_subscription(projections: Sequence[RevenueProjection]) -> SubscriptionSummary:
    """Headline figures; first_profitable_month is None if no month makes a profit."""
    if not projections:
        raise InvalidInput("Cannot summarize an empty projection", "projections")

    last = projections[-1]
    first_profitable = next((p.month for p in projections if p.net_profit > 0), None)
    return SubscriptionSummary(
        final_customers=last.customers,
        total_revenue=last.cumulative_revenue,
        total_profit=last.cumulative_profit,
        total_acquisition_costs=sum(p.acquisition_costs for p in projections),
        first_profitable_month=first_profitable,
    )
