"""
Tests for the cash-flow projector.

Focus areas:
1. Month 0 combines every stream and charges one-time expenses once
2. Growth compounds annually (exact at each 12-month boundary)
3. Seasonality and subscription churn apply per month index
4. Cumulative cash flow is the running sum of net cash flow
5. Summary metrics refuse zero totals instead of returning Infinity
"""

import pytest

from finplan.cashflow import (
    PLACEHOLDER_FIELDS,
    CashFlowProjection,
    growth_factor,
    month_label,
    monthly_breakdown,
    project_cash_flow,
    summarize_cash_flow,
)
from finplan.entities import CashFlowData
from finplan.errors import ArithmeticDegenerate, InvalidInput


@pytest.fixture
def data(cash_flow_record):
    return CashFlowData.from_dict(cash_flow_record)


def projection_row(index, revenue, expenses):
    return CashFlowProjection(
        month=month_label(index), month_index=index, revenue=revenue, expenses=expenses,
        net_cash_flow=revenue - expenses, cumulative_cash_flow=0.0,
    )


class TestMonthLabels:

    def test_labels(self):
        assert month_label(0) == "January 1"
        assert month_label(11) == "December 1"
        assert month_label(12) == "January 2"
        assert month_label(59) == "December 5"

    def test_growth_factor(self):
        assert growth_factor(0.1, 0) == 1
        assert growth_factor(0.1, 12) == pytest.approx(1.1)
        assert growth_factor(0.1, 24) == pytest.approx(1.21)


class TestBreakdown:
    """Test per-stream arithmetic."""

    def test_first_month(self, data):
        month = monthly_breakdown(data, 0)
        assert month.product_revenue == 1000
        assert month.service_revenue == 500
        assert month.subscription_revenue == 1000
        assert month.licensing_revenue == 200
        assert month.other_revenue == 150
        assert month.revenue == 2850
        assert month.one_time_expenses == 8000
        assert month.expenses == 11000

    def test_one_time_expenses_only_in_first_month(self, data):
        assert monthly_breakdown(data, 1).one_time_expenses == 0
        assert monthly_breakdown(data, 1).expenses == pytest.approx(3000 * 1.05 ** (1 / 12))

    def test_seasonality_applies_to_its_month(self, data):
        december = monthly_breakdown(data, 11)
        assert december.product_revenue == pytest.approx(2000 * 1.1 ** (11 / 12))

    def test_explicit_zero_seasonality(self, cash_flow_record):
        cash_flow_record["productSales"][0]["seasonality"] = {"January": 0}
        data = CashFlowData.from_dict(cash_flow_record)
        assert monthly_breakdown(data, 0).product_revenue == 0
        assert monthly_breakdown(data, 1).product_revenue > 0

    def test_churn_compounds_on_month_index(self, data):
        month = monthly_breakdown(data, 12)
        assert month.subscription_revenue == pytest.approx(1000 * 0.9 ** 12 * 1.1)

    def test_year_boundary_growth(self, data):
        month = monthly_breakdown(data, 12)
        assert month.service_revenue == pytest.approx(550)
        assert month.fixed_expenses == pytest.approx(1800 * 1.05)

    def test_custom_lines_counted(self, cash_flow_record):
        cash_flow_record["variableExpenses"]["custom"] = [{"name": "Packaging", "amount": 300}]
        data = CashFlowData.from_dict(cash_flow_record)
        assert monthly_breakdown(data, 0).variable_expenses == 1000

    def test_negative_index_rejected(self, data):
        with pytest.raises(InvalidInput, match="month_index"):
            monthly_breakdown(data, -1)


class TestProjection:

    def test_default_horizon(self, data):
        projection = project_cash_flow(data)
        assert len(projection) == 60
        assert projection[-1].month == "December 5"

    def test_first_month_net(self, data):
        first = project_cash_flow(data, months=1)[0]
        assert first.revenue == 2850
        assert first.expenses == 11000
        assert first.net_cash_flow == -8150
        assert first.cumulative_cash_flow == -8150

    def test_cumulative_is_running_sum(self, data):
        running = 0.0
        for row in project_cash_flow(data, months=24):
            running += row.net_cash_flow
            assert row.cumulative_cash_flow == pytest.approx(running)

    def test_mirrored_fields(self, data):
        row = project_cash_flow(data, months=2)[1]
        assert row.total_expenses == row.expenses
        assert row.operating_cash_flow == row.net_cash_flow == row.net_income

    def test_placeholders_are_zero(self, data):
        record = project_cash_flow(data, months=1)[0].to_dict()
        assert all(record[name] == 0 for name in PLACEHOLDER_FIELDS)
        assert record["netIncome"] == -8150

    def test_horizon_from_settings(self, data, monkeypatch):
        monkeypatch.setenv("FINPLAN_CASH_FLOW_MONTHS", "18")
        assert len(project_cash_flow(data)) == 18

    def test_invalid_horizon(self, data):
        with pytest.raises(InvalidInput, match="months"):
            project_cash_flow(data, months=0)

    def test_deterministic(self, data):
        assert project_cash_flow(data) == project_cash_flow(data)


class TestSummary:
    """Test summary metrics."""

    def test_summary(self):
        rows = [projection_row(0, 1000, 500), projection_row(1, 3000, 1500)]
        summary = summarize_cash_flow(rows)
        assert summary.total_revenue == 4000
        assert summary.total_expenses == 2000
        assert summary.net_cash_flow == 2000
        assert summary.average_monthly_revenue == 2000
        assert summary.revenue_to_expense_ratio == 2
        assert summary.cash_flow_margin == 50

    def test_summary_of_projection(self, data):
        projection = project_cash_flow(data, months=12)
        summary = summarize_cash_flow(projection)
        assert summary.net_cash_flow == pytest.approx(projection[-1].cumulative_cash_flow)

    def test_zero_expenses_degenerate(self):
        with pytest.raises(ArithmeticDegenerate, match="Total expenses are zero"):
            summarize_cash_flow([projection_row(0, 100, 0)])

    def test_zero_revenue_degenerate(self):
        with pytest.raises(ArithmeticDegenerate, match="Total revenue is zero"):
            summarize_cash_flow([projection_row(0, 0, 100)])

    def test_empty(self):
        with pytest.raises(InvalidInput):
            summarize_cash_flow([])
