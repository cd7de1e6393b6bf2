"""
Tests for business valuation.

Focus areas:
1. Each of the four methods and the suggested range
2. DCF reduces to a perpetuity when growth is zero
3. Discount rate not above growth rate is ArithmeticDegenerate
"""

import pytest

from finplan.config import PlannerSettings
from finplan.entities import ValuationInputs
from finplan.errors import ArithmeticDegenerate
from finplan.valuation import discounted_cash_flow_value, value_business


@pytest.fixture
def inputs():
    return ValuationInputs(
        revenue=100000, net_income=20000, assets=50000, liabilities=20000, cash_flow=10000, growth_rate=5,
    )


class TestDiscountedCashFlow:

    @pytest.mark.parametrize("years", [1, 5, 10])
    def test_zero_growth_is_perpetuity(self, years):
        assert discounted_cash_flow_value(100, 0, 0.1, years) == pytest.approx(1000)

    def test_with_growth(self):
        explicit = sum(10000 * 1.05 ** y / 1.1 ** y for y in range(1, 6))
        terminal = 10000 * 1.05 ** 6 / 0.05 / 1.1 ** 5
        assert discounted_cash_flow_value(10000, 0.05, 0.1, 5) == pytest.approx(explicit + terminal)

    @pytest.mark.parametrize("growth", [0.1, 0.2])
    def test_growth_not_below_discount_rate(self, growth):
        with pytest.raises(ArithmeticDegenerate, match="must exceed growth rate"):
            discounted_cash_flow_value(10000, growth, 0.1, 5)


class TestValueBusiness:

    def test_methods(self, inputs):
        result = value_business(inputs)
        assert result.asset_based == 30000
        assert result.market == 200000
        assert result.earnings == 300000
        assert result.dcf == pytest.approx(discounted_cash_flow_value(10000, 0.05, 0.1, 5))

    def test_suggested_range(self, inputs):
        result = value_business(inputs)
        values = [result.asset_based, result.market, result.earnings, result.dcf]
        assert result.suggested_range.min == min(values)
        assert result.suggested_range.max == max(values)
        assert result.suggested_range.average == pytest.approx(sum(values) / 4)

    def test_custom_settings(self, inputs):
        result = value_business(inputs, PlannerSettings(revenue_multiple=3.0, pe_ratio=10.0))
        assert result.market == 300000
        assert result.earnings == 200000

    def test_growth_at_discount_rate_fails(self):
        inputs = ValuationInputs(1000, 100, 500, 100, 100, 10)
        with pytest.raises(ArithmeticDegenerate):
            value_business(inputs)

    def test_to_dict(self, inputs):
        data = value_business(inputs).to_dict()
        assert set(data["valuations"]) == {"assetBased", "market", "earnings", "dcf"}
        assert data["suggestedRange"]["min"] == 30000
