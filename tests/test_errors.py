"""
Tests for the error taxonomy and explicit results.

Focus areas:
1. Every error carries a kind, a field and a message
2. Field coercion rejects missing, boolean and non-finite values
3. calculate() converts only CalculationError into a failure result
4. Aggregated validation errors keep every individual failure
"""

import logging

import pytest

from finplan.errors import (
    ArithmeticDegenerate,
    CalculationError,
    CalculationResult,
    InvalidInput,
    InvalidRange,
    InvalidTargetMargin,
    ValidationErrors,
    calculate,
    require_fraction,
    require_non_negative,
    require_number,
    require_percentage,
    require_positive,
    safe_divide,
)


class TestErrorKinds:
    """Test the error class hierarchy."""

    def test_errors_are_value_errors(self):
        """Hosts catching ValueError still see model failures."""
        assert issubclass(CalculationError, ValueError)
        assert issubclass(InvalidTargetMargin, ArithmeticDegenerate)

    def test_to_dict_shape(self):
        error = InvalidInput("Market Size must be greater than 0", "marketSize")
        assert error.to_dict() == {
            "kind": "invalid_input",
            "field": "marketSize",
            "message": "Market Size must be greater than 0",
        }

    def test_kinds_are_distinct(self):
        kinds = {InvalidInput.kind, InvalidRange.kind, ArithmeticDegenerate.kind, InvalidTargetMargin.kind}
        assert len(kinds) == 4

    def test_validation_errors_join_messages(self):
        aggregate = ValidationErrors([
            InvalidInput("Market Size must be greater than 0", "marketSize"),
            InvalidRange("Maximum Price must be greater than Minimum Price", "maxPrice"),
        ])
        assert aggregate.message == (
            "Market Size must be greater than 0. Maximum Price must be greater than Minimum Price"
        )
        assert aggregate.kind == "invalid_input"
        assert len(aggregate.to_dict()["errors"]) == 2

    def test_validation_errors_requires_errors(self):
        with pytest.raises(ValueError, match="at least one error"):
            ValidationErrors([])


class TestFieldCoercion:
    """Test require_* helpers."""

    def test_accepts_numeric_strings(self):
        assert require_number("12.5", "price") == 12.5

    @pytest.mark.parametrize("value", [None, "", True])
    def test_missing_values_rejected(self, value):
        with pytest.raises(InvalidInput, match="price is required"):
            require_number(value, "price")

    def test_non_numeric_rejected(self):
        with pytest.raises(InvalidInput, match="must be a number"):
            require_number("abc", "price")

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), "-inf"])
    def test_non_finite_rejected(self, value):
        with pytest.raises(InvalidInput, match="must be finite"):
            require_number(value, "price")

    def test_ranges(self):
        assert require_non_negative(0, "x") == 0
        with pytest.raises(InvalidInput, match="must be >= 0"):
            require_non_negative(-1, "x")
        with pytest.raises(InvalidInput, match="greater than 0"):
            require_positive(0, "x")
        with pytest.raises(InvalidInput, match=r"\[0, 100\]"):
            require_percentage(100.5, "x")
        with pytest.raises(InvalidInput, match=r"\[0, 1\]"):
            require_fraction(1.5, "x")

    def test_error_names_field(self):
        with pytest.raises(InvalidInput) as excinfo:
            require_positive(-3, "marketSize")
        assert excinfo.value.field == "marketSize"

    def test_safe_divide(self):
        assert safe_divide(10, 4, "unused") == 2.5
        with pytest.raises(ArithmeticDegenerate, match="cannot be zero"):
            safe_divide(1, 0, "Current liabilities cannot be zero", "currentLiabilities")


class TestCalculate:
    """Test the explicit-result boundary."""

    def test_success(self):
        result = calculate(lambda a, b: a + b, 2, b=3)
        assert result.is_ok
        assert result.value == 5
        assert result.errors == []
        assert result.unwrap() == 5

    def test_failure_is_result_not_exception(self, caplog):
        def model():
            raise InvalidInput("Market Size must be greater than 0", "marketSize")

        with caplog.at_level(logging.WARNING, logger="finplan.errors"):
            result = calculate(model)

        assert not result.is_ok
        assert result.value is None
        assert result.field_errors() == {"marketSize": "Market Size must be greater than 0"}
        assert "rejected input" in caplog.text

    def test_aggregate_failure_lists_each_error(self):
        def model():
            raise ValidationErrors([
                InvalidInput("a", "minPrice"),
                InvalidInput("b", "maxPrice"),
            ])

        result = calculate(model)
        assert [e["field"] for e in result.errors] == ["minPrice", "maxPrice"]

    def test_programming_errors_propagate(self):
        def broken():
            raise KeyError("bug")

        with pytest.raises(KeyError):
            calculate(broken)

    def test_unwrap_failure_keeps_error_type(self):
        result = CalculationResult.failure(InvalidRange("bad range", "maxPrice"))
        with pytest.raises(InvalidRange, match="bad range") as excinfo:
            result.unwrap()
        assert excinfo.value.field == "maxPrice"

    def test_unwrap_keeps_target_margin_subclass(self):
        def model():
            raise InvalidTargetMargin("Target at 100%", "targetProfitPercentage")

        result = calculate(model)
        with pytest.raises(InvalidTargetMargin):
            result.unwrap()

    def test_unwrap_several_errors(self):
        errors = [InvalidInput("a is required", "a"), InvalidRange("b is inverted", "b")]
        with pytest.raises(ValidationErrors) as excinfo:
            CalculationResult.failure(ValidationErrors(errors)).unwrap()
        assert [type(e) for e in excinfo.value.errors] == [InvalidInput, InvalidRange]

    def test_to_dict_serializes_value(self):
        class Value:
            def to_dict(self):
                return {"x": 1}

        assert CalculationResult.success(Value()).to_dict() == {"ok": True, "value": {"x": 1}, "errors": []}
