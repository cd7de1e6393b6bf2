"""
Tests for the break-even model.

Focus areas:
1. Closed-form prices: break-even and optimal (target-margin) price
2. InvalidTargetMargin instead of Infinity for targets >= 100%
3. Every calculator mode solves the same contribution-margin identity
4. Chart tables terminate and cross zero profit at break-even
"""

import pytest

from finplan.breakeven import (
    break_even_chart,
    break_even_price,
    optimal_price,
    solve_break_even,
    units_for_margin,
)
from finplan.entities import BreakEvenInputs, BreakEvenMode
from finplan.errors import ArithmeticDegenerate, InvalidInput, InvalidTargetMargin


class TestClosedForm:
    """Test the price formulas."""

    def test_break_even_price(self):
        assert break_even_price(10000, 20, 1000) == pytest.approx(30.0)

    def test_optimal_price(self):
        assert optimal_price(30, 20) == pytest.approx(37.5)

    def test_zero_volume_is_undefined_zero(self):
        assert break_even_price(10000, 20, 0) == 0
        assert break_even_price(10000, 20, -5) == 0

    def test_optimal_price_zero_guards(self):
        assert optimal_price(0, 20) == 0
        assert optimal_price(30, 0) == 0

    @pytest.mark.parametrize("target", [100, 150])
    def test_target_margin_at_or_above_100_fails(self, target):
        with pytest.raises(InvalidTargetMargin) as excinfo:
            optimal_price(30, target)
        assert excinfo.value.field == "targetProfitPercentage"

    def test_target_margin_checked_before_zero_guard(self):
        with pytest.raises(InvalidTargetMargin):
            optimal_price(0, 100)


class TestUnitsForMargin:

    def test_plain_break_even(self):
        assert units_for_margin(1000, 10, 5) == pytest.approx(200)

    def test_price_not_above_variable_cost_fails(self):
        with pytest.raises(InvalidInput, match="greater than variable cost"):
            units_for_margin(1000, 5, 5)

    def test_share_consuming_margin_is_degenerate(self):
        # 60% of a 10.00 price exceeds the 5.00 contribution margin
        with pytest.raises(ArithmeticDegenerate, match="no contribution margin"):
            units_for_margin(1000, 10, 5, revenue_share=0.6)


class TestSolveBreakEven:
    """Test each calculator mode."""

    def test_standard(self):
        result = solve_break_even(BreakEvenInputs(1000, 5, 10))
        assert result.break_even_units == pytest.approx(200)
        assert result.units_required == result.break_even_units
        assert result.total_revenue_at_break_even == pytest.approx(2000)
        assert result.contribution_margin == 5
        assert result.contribution_margin_ratio == pytest.approx(50)
        assert result.required_price is None

    def test_find_units_matches_standard(self):
        standard = solve_break_even(BreakEvenInputs(1000, 5, 10))
        find_units = solve_break_even(BreakEvenInputs(1000, 5, 10, mode=BreakEvenMode.FIND_UNITS))
        assert find_units.break_even_units == standard.break_even_units

    def test_find_price_inverts_standard(self):
        result = solve_break_even(BreakEvenInputs(1000, 5, mode=BreakEvenMode.FIND_PRICE, target_units=200))
        assert result.required_price == pytest.approx(10)

        check = solve_break_even(BreakEvenInputs(1000, 5, result.required_price))
        assert check.break_even_units == pytest.approx(200)

    def test_profit_target_amount(self):
        result = solve_break_even(BreakEvenInputs(
            1000, 5, 10, mode=BreakEvenMode.PROFIT_TARGET, target_profit=500
        ))
        assert result.break_even_units == pytest.approx(200)
        assert result.units_required == pytest.approx(300)
        assert result.target_profit_amount == 500

    def test_profit_target_percentage(self):
        result = solve_break_even(BreakEvenInputs(
            1000, 5, 10, mode=BreakEvenMode.PROFIT_TARGET, target_profit_percentage=20
        ))
        units = result.units_required
        assert units == pytest.approx(1000 / 3)
        # Profit at the required volume is 20% of revenue
        profit = units * 10 - (1000 + units * 5)
        assert profit == pytest.approx(0.2 * units * 10)
        assert result.target_profit_amount == pytest.approx(profit)

    def test_price_below_variable_cost_fails(self):
        with pytest.raises(InvalidInput, match="sellingPricePerUnit|variable cost"):
            solve_break_even(BreakEvenInputs(1000, 12, 10))

    def test_to_dict(self):
        data = solve_break_even(BreakEvenInputs(1000, 5, 10)).to_dict()
        assert data["mode"] == "standard"
        assert data["breakEvenUnits"] == pytest.approx(200)


class TestChart:

    def test_points_span_twice_break_even(self):
        chart = break_even_chart(1000, 5, 10)
        assert [p.units for p in chart] == list(range(0, 401, 40))
        assert chart[0].profit == -1000
        crossing = [p for p in chart if p.units == 200][0]
        assert crossing.profit == 0

    def test_zero_fixed_costs_terminates(self):
        chart = break_even_chart(0, 5, 10)
        assert len(chart) == 1
        assert chart[0].units == 0

    def test_invalid_point_count(self):
        with pytest.raises(InvalidInput, match="points"):
            break_even_chart(1000, 5, 10, points=0)

    def test_to_dict_keys(self):
        assert set(break_even_chart(1000, 5, 10)[1].to_dict()) == {"units", "revenue", "totalCost", "profit"}
