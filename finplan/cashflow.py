"""
Multi-stream cash-flow projector.

For month index i (0-based; labels group months into years of 12):

    revenueGrowth(i) = (1 + revenueGrowthRate) ** (i / 12)
    expenseGrowth(i) = (1 + expenseGrowthRate) ** (i / 12)

Revenue streams:
- products:       unitsSold x pricePerUnit x seasonality[month] x revenueGrowth
- services:       rate x volume x revenueGrowth
- subscriptions:  monthlyFee x subscribers x (1 - churn) ** i x revenueGrowth
- licensing:      royaltyRate x expectedVolume x revenueGrowth
- other:          (affiliate + advertising + grants) x revenueGrowth

Expenses: (fixed + variable + financial obligations) x expenseGrowth, plus
one-time expenses in month 0 only. Custom lines join their group's total.

Known approximation: subscription churn compounds on the absolute month
index, not per acquisition cohort.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from finplan.config import get_settings
from finplan.entities import MONTHS, CashFlowData
from finplan.errors import ArithmeticDegenerate, InvalidInput

logger = logging.getLogger(__name__)

# Fields of the fuller statement that this projection does not model
PLACEHOLDER_FIELDS = (
    "currentAssets", "currentLiabilities", "inventory", "costOfGoodsSold",
    "totalAssets", "shareholderEquity", "beginningInventory", "endingInventory",
    "beginningReceivables", "endingReceivables", "totalLiabilities", "ebit",
    "interestExpense", "ebitda", "stockPrice", "outstandingShares", "operatingIncome",
)


def month_label(month_index: int) -> str:
    """'January 1' for index 0, 'January 2' for index 12."""
    return f"{MONTHS[month_index % 12]} {month_index // 12 + 1}"


def growth_factor(rate: float, month_index: int) -> float:
    return (1 + rate) ** (month_index / 12)


@dataclass(frozen=True)
class MonthlyBreakdown:
    """Per-stream revenue and per-group expenses for one month."""
    month_index: int
    product_revenue: float
    service_revenue: float
    subscription_revenue: float
    licensing_revenue: float
    other_revenue: float
    fixed_expenses: float
    variable_expenses: float
    financial_obligations: float
    one_time_expenses: float

    @property
    def revenue(self) -> float:
        return (
            self.product_revenue
            + self.service_revenue
            + self.subscription_revenue
            + self.licensing_revenue
            + self.other_revenue
        )

    @property
    def expenses(self) -> float:
        return (
            self.fixed_expenses
            + self.variable_expenses
            + self.financial_obligations
            + self.one_time_expenses
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "monthIndex": self.month_index,
            "month": month_label(self.month_index),
            "productRevenue": self.product_revenue,
            "serviceRevenue": self.service_revenue,
            "subscriptionRevenue": self.subscription_revenue,
            "licensingRevenue": self.licensing_revenue,
            "otherRevenue": self.other_revenue,
            "fixedExpenses": self.fixed_expenses,
            "variableExpenses": self.variable_expenses,
            "financialObligations": self.financial_obligations,
            "oneTimeExpenses": self.one_time_expenses,
            "revenue": self.revenue,
            "expenses": self.expenses,
        }


def monthly_breakdown(data: CashFlowData, month_index: int) -> MonthlyBreakdown:
    """Revenue streams and expense groups for month_index."""
    if isinstance(month_index, bool) or not isinstance(month_index, int) or month_index < 0:
        raise InvalidInput(f"month_index must be a non-negative integer, got {month_index!r}", "monthIndex")

    growth = data.growth_parameters
    revenue_growth = growth_factor(growth.revenue_growth_rate, month_index)
    expense_growth = growth_factor(growth.expense_growth_rate, month_index)
    month = MONTHS[month_index % 12]

    product = sum(
        p.units_sold * p.price_per_unit * p.seasonal_factor(month) * revenue_growth
        for p in data.product_sales
    )
    service = sum(
        s.rate_or_price * s.expected_volume_per_month * revenue_growth
        for s in data.service_income
    )
    subscription = sum(
        s.monthly_fee * s.subscribers * (1 - s.churn_rate) ** month_index * revenue_growth
        for s in data.subscription_revenue
    )
    licensing = sum(
        l.royalty_rate * l.expected_volume * revenue_growth
        for l in data.licensing_royalties
    )

    return MonthlyBreakdown(
        month_index=month_index,
        product_revenue=product,
        service_revenue=service,
        subscription_revenue=subscription,
        licensing_revenue=licensing,
        other_revenue=data.other_revenue.total() * revenue_growth,
        fixed_expenses=data.fixed_expenses.total() * expense_growth,
        variable_expenses=data.variable_expenses.total() * expense_growth,
        financial_obligations=data.financial_obligations.total() * expense_growth,
        one_time_expenses=data.one_time_expenses.total() if month_index == 0 else 0.0,
    )


@dataclass(frozen=True)
class CashFlowProjection:
    """
    One projected month.

    total_expenses mirrors expenses; operating_cash_flow and net_income
    mirror net_cash_flow. Other statement fields are reported as 0.
    """
    month: str
    month_index: int
    revenue: float
    expenses: float
    net_cash_flow: float
    cumulative_cash_flow: float

    @property
    def total_expenses(self) -> float:
        return self.expenses

    @property
    def operating_cash_flow(self) -> float:
        return self.net_cash_flow

    @property
    def net_income(self) -> float:
        return self.net_cash_flow

    def to_dict(self) -> Dict[str, Any]:
        record: Dict[str, Any] = {
            "month": self.month,
            "monthIndex": self.month_index,
            "revenue": self.revenue,
            "expenses": self.expenses,
            "netCashFlow": self.net_cash_flow,
            "cumulativeCashFlow": self.cumulative_cash_flow,
            "totalExpenses": self.total_expenses,
            "operatingCashFlow": self.operating_cash_flow,
            "netIncome": self.net_income,
        }
        for name in PLACEHOLDER_FIELDS:
            record[name] = 0
        return record


def project_cash_flow(data: CashFlowData, months: Optional[int] = None) -> List[CashFlowProjection]:
    """
    Project monthly cash flow.

    Args:
        data: Validated cash-flow form
        months: Horizon (default: settings.cash_flow_months, normally 60)

    Returns:
        One CashFlowProjection per month, in month order
    """
    if months is None:
        months = get_settings().cash_flow_months
    if isinstance(months, bool) or not isinstance(months, int) or months < 1:
        raise InvalidInput(f"months must be a positive integer, got {months!r}", "months")

    projections = []
    cumulative = 0.0
    for i in range(months):
        breakdown = monthly_breakdown(data, i)
        revenue = breakdown.revenue
        expenses = breakdown.expenses
        net = revenue - expenses
        cumulative += net

        projections.append(CashFlowProjection(
            month=month_label(i),
            month_index=i,
            revenue=revenue,
            expenses=expenses,
            net_cash_flow=net,
            cumulative_cash_flow=cumulative,
        ))

    logger.debug("Cash-flow projection: %d months, cumulative %.2f", months, cumulative)
    return projections


@dataclass(frozen=True)
class CashFlowSummary:
    total_revenue: float
    total_expenses: float
    net_cash_flow: float
    average_monthly_revenue: float
    average_monthly_expenses: float
    revenue_to_expense_ratio: float
    cash_flow_margin: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalRevenue": self.total_revenue,
            "totalExpenses": self.total_expenses,
            "netCashFlow": self.net_cash_flow,
            "averageMonthlyRevenue": self.average_monthly_revenue,
            "averageMonthlyExpenses": self.average_monthly_expenses,
            "revenueToExpenseRatio": self.revenue_to_expense_ratio,
            "cashFlowMargin": self.cash_flow_margin,
        }


def summarize_cash_flow(projections: Sequence[CashFlowProjection]) -> CashFlowSummary:
    """
    Summary metrics over a whole projection.

    Raises:
        InvalidInput: empty projection
        ArithmeticDegenerate: total revenue or total expenses is zero
    """
    if not projections:
        raise InvalidInput("Cannot summarize an empty projection", "projections")

    revenue = np.array([p.revenue for p in projections], dtype=float)
    expenses = np.array([p.expenses for p in projections], dtype=float)
    total_revenue = float(np.sum(revenue))
    total_expenses = float(np.sum(expenses))

    if total_expenses == 0:
        raise ArithmeticDegenerate(
            "Total expenses are zero; revenue-to-expense ratio is undefined", "totalExpenses"
        )
    if total_revenue == 0:
        raise ArithmeticDegenerate("Total revenue is zero; cash-flow margin is undefined", "totalRevenue")

    net = total_revenue - total_expenses
    return CashFlowSummary(
        total_revenue=total_revenue,
        total_expenses=total_expenses,
        net_cash_flow=net,
        average_monthly_revenue=float(np.mean(revenue)),
        average_monthly_expenses=float(np.mean(expenses)),
        revenue_to_expense_ratio=total_revenue / total_expenses,
        cash_flow_margin=net / total_revenue * 100,
    )
