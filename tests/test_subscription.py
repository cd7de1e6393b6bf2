"""
Tests for the subscription revenue projector.

Focus areas:
1. Month-by-month arithmetic, including half-up customer rounding
2. Acquisition cost charged on potential (not retained) new customers
3. Cumulative fields are running sums of the monthly fields
4. Determinism and horizon handling
"""

import pytest

from finplan.entities import SubscriptionMetrics
from finplan.errors import InvalidInput
from finplan.subscription import project_subscription_revenue, summarize_subscription


@pytest.fixture
def metrics():
    return SubscriptionMetrics(
        monthly_subscription_price=50,
        customer_acquisition_cost=100,
        customer_retention_rate=50,
        monthly_platform_costs=1000,
        monthly_per_client_costs=5,
        initial_customer_base=100,
        monthly_growth_rate=10,
    )


class TestProjection:
    """Test the monthly recurrence."""

    def test_first_month(self, metrics):
        first = project_subscription_revenue(metrics)[0]
        assert first.month == 1
        assert first.potential_new_customers == 10
        assert first.new_customers == 5
        assert first.customers == 105
        assert first.monthly_revenue == 5250
        assert first.operating_costs == 1525
        assert first.acquisition_costs == 1000
        assert first.net_profit == 2725

    def test_second_month_rounds_half_up(self, metrics):
        second = project_subscription_revenue(metrics)[1]
        # 105 x 10% = 10.5 -> 11 potential; 105 x 10% x 50% = 5.25 -> 5 retained
        assert second.potential_new_customers == 11
        assert second.new_customers == 5
        assert second.customers == 110
        assert second.acquisition_costs == 1100

    def test_half_customer_rounds_up(self):
        metrics = SubscriptionMetrics(10, 0, 100, 0, 0, 5, 10)
        first = project_subscription_revenue(metrics, months=1)[0]
        assert first.new_customers == 1
        assert first.customers == 6

    def test_acquisition_paid_for_churned_prospects(self, metrics):
        """Low retention still pays acquisition cost on every potential customer."""
        first = project_subscription_revenue(metrics)[0]
        assert first.acquisition_costs == metrics.customer_acquisition_cost * first.potential_new_customers
        assert first.new_customers < first.potential_new_customers

    def test_zero_growth_keeps_base(self):
        metrics = SubscriptionMetrics(20, 50, 90, 100, 2, 40, 0)
        projection = project_subscription_revenue(metrics, months=6)
        assert {p.customers for p in projection} == {40}
        assert {p.acquisition_costs for p in projection} == {0}


class TestCumulative:

    def test_running_sums(self, metrics):
        projection = project_subscription_revenue(metrics, months=24)
        revenue = 0.0
        profit = 0.0
        for row in projection:
            revenue += row.monthly_revenue
            profit += row.net_profit
            assert row.cumulative_revenue == pytest.approx(revenue)
            assert row.cumulative_profit == pytest.approx(profit)

    def test_net_profit_identity(self, metrics):
        for row in project_subscription_revenue(metrics):
            assert row.net_profit == pytest.approx(row.monthly_revenue - row.acquisition_costs - row.operating_costs)

    def test_rounded_row(self):
        metrics = SubscriptionMetrics(9.99, 0, 100, 0.5, 0, 3, 0)
        row = project_subscription_revenue(metrics, months=1)[0].rounded()
        assert row.monthly_revenue == 30
        assert row.operating_costs == 1
        assert isinstance(row.net_profit, int)


class TestHorizon:

    def test_default_twelve_months(self, metrics):
        projection = project_subscription_revenue(metrics)
        assert [p.month for p in projection] == list(range(1, 13))

    def test_horizon_from_settings(self, metrics, monkeypatch):
        monkeypatch.setenv("FINPLAN_SUBSCRIPTION_MONTHS", "3")
        assert len(project_subscription_revenue(metrics)) == 3

    @pytest.mark.parametrize("months", [0, -1, 2.5, True])
    def test_invalid_horizon(self, metrics, months):
        with pytest.raises(InvalidInput, match="months"):
            project_subscription_revenue(metrics, months=months)

    def test_deterministic(self, metrics):
        assert project_subscription_revenue(metrics, 36) == project_subscription_revenue(metrics, 36)


class TestSummary:

    def test_summary(self, metrics):
        projection = project_subscription_revenue(metrics)
        summary = summarize_subscription(projection)
        assert summary.final_customers == projection[-1].customers
        assert summary.total_revenue == projection[-1].cumulative_revenue
        assert summary.first_profitable_month == 1

    def test_never_profitable(self):
        metrics = SubscriptionMetrics(10, 0, 90, 100000, 1, 10, 5)
        summary = summarize_subscription(project_subscription_revenue(metrics))
        assert summary.first_profitable_month is None
        assert summary.total_profit < 0

    def test_empty_projection(self):
        with pytest.raises(InvalidInput):
            summarize_subscription([])
