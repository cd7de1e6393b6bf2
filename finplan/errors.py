"""
Error taxonomy and explicit calculation results.

Design Principles:
1. Validation happens before arithmetic (fail fast at the model boundary)
2. Every failure names the offending field and a human-readable message
3. Models raise; the calculate() boundary converts failures to results
4. No NaN/Infinity ever leaves a model

Error kinds:
- InvalidInput: missing, non-numeric, zero or negative where disallowed
- InvalidRange: inverted or degenerate range (max <= min, too few scenarios)
- InvariantViolation: an edit would break a model invariant
- ArithmeticDegenerate: division by zero or power of a non-positive base
"""

import logging
import math
import numbers
from dataclasses import dataclass, field, fields
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)


class CalculationError(ValueError):
    """
    Base class for every validation failure raised by a model.

    Attributes:
        message: Human-readable explanation
        field: Input field that caused the failure (None = whole input)
        kind: Stable error-kind identifier for hosts
    """

    kind = "calculation_error"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "field": self.field, "message": self.message}


class InvalidInput(CalculationError):
    """A required numeric field is missing, non-numeric, or out of its domain."""

    kind = "invalid_input"


class InvalidRange(CalculationError):
    """A range input is inverted or degenerate."""

    kind = "invalid_range"


class InvariantViolation(CalculationError):
    """An edit would break an invariant of a stateful model."""

    kind = "invariant_violation"


class ArithmeticDegenerate(CalculationError):
    """A formula would divide by zero or otherwise yield Infinity/NaN."""

    kind = "arithmetic_degenerate"


class InvalidTargetMargin(ArithmeticDegenerate):
    """Target profit percentage of 100 or more makes the optimal price undefined."""

    kind = "invalid_target_margin"


class ValidationErrors(CalculationError):
    """
    Several independent validation failures reported together.

    Used where a form shows every problem at once (e.g. scenario generation).
    The kind of the aggregate is the kind of its first error.
    """

    def __init__(self, errors: List[CalculationError]):
        if not errors:
            raise ValueError("ValidationErrors requires at least one error")
        super().__init__(". ".join(e.message for e in errors), errors[0].field)
        self.errors = list(errors)
        self.kind = errors[0].kind

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "field": self.field,
            "message": self.message,
            "errors": [e.to_dict() for e in self.errors],
        }


def require_number(value: Any, field_name: str) -> float:
    """Coerce a record value to float, rejecting missing and non-finite input."""
    if value is None or isinstance(value, bool) or value == "":
        raise InvalidInput(f"{field_name} is required", field_name)
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidInput(f"{field_name} must be a number, got {value!r}", field_name)
    if not math.isfinite(number):
        raise InvalidInput(f"{field_name} must be finite, got {value!r}", field_name)
    return number


def require_non_negative(value: Any, field_name: str) -> float:
    number = require_number(value, field_name)
    if number < 0:
        raise InvalidInput(f"{field_name} must be >= 0, got {number}", field_name)
    return number


def require_positive(value: Any, field_name: str) -> float:
    number = require_number(value, field_name)
    if number <= 0:
        raise InvalidInput(f"{field_name} must be greater than 0, got {number}", field_name)
    return number


def require_percentage(value: Any, field_name: str) -> float:
    number = require_number(value, field_name)
    if not 0 <= number <= 100:
        raise InvalidInput(f"{field_name} must be in [0, 100], got {number}", field_name)
    return number


def require_fraction(value: Any, field_name: str) -> float:
    number = require_number(value, field_name)
    if not 0 <= number <= 1:
        raise InvalidInput(f"{field_name} must be in [0, 1], got {number}", field_name)
    return number


_SCALAR_ANNOTATIONS = (float, int, Optional[float], Optional[int])


def _reject_non_real(value: Any, field_name: str):
    if value is not None and not isinstance(value, numbers.Real):
        raise InvalidInput(f"{field_name} must be a number, got {value!r}", field_name)


def require_numeric_fields(record: Any):
    """
    Reject non-numeric values passed straight to a record constructor.

    from_dict() coerces form strings before construction; the constructor
    itself takes numbers only, so a string never reaches the arithmetic.
    Missing values are left to the require_* checks that follow.
    """
    for f in fields(record):
        value = getattr(record, f.name)
        if f.type in _SCALAR_ANNOTATIONS:
            _reject_non_real(value, f.name)
        elif f.type == Tuple[float, ...] and isinstance(value, tuple):
            for i, item in enumerate(value):
                _reject_non_real(item, f"{f.name}[{i}]")
        elif f.type == Dict[str, float] and isinstance(value, Mapping):
            for key, item in value.items():
                _reject_non_real(item, f"{f.name}.{key}")


def safe_divide(numerator: float, denominator: float, message: str, field_name: Optional[str] = None) -> float:
    """Divide, raising ArithmeticDegenerate instead of producing Infinity/NaN."""
    if denominator == 0:
        raise ArithmeticDegenerate(message, field_name)
    return numerator / denominator


_ERROR_TYPES = {
    error_type.kind: error_type
    for error_type in (
        CalculationError,
        InvalidInput,
        InvalidRange,
        InvariantViolation,
        ArithmeticDegenerate,
        InvalidTargetMargin,
    )
}


def _error_from_dict(data: Dict[str, Any]) -> CalculationError:
    error_type = _ERROR_TYPES.get(data["kind"], CalculationError)
    return error_type(data["message"], data["field"])


@dataclass
class CalculationResult:
    """
    Outcome of running one model against one input record.

    Attributes:
        is_ok: Whether the model produced a value
        value: Model output (None on failure)
        errors: Structured failures, each {kind, field, message}

    Examples:
        CalculationResult.success(projections)

        CalculationResult.failure(
            InvalidInput("Market Size must be greater than 0", "marketSize")
        )
    """
    is_ok: bool
    value: Any = None
    errors: List[Dict[str, Any]] = field(default_factory=list)

    @staticmethod
    def success(value: Any) -> "CalculationResult":
        """Factory for a successful calculation."""
        return CalculationResult(is_ok=True, value=value, errors=[])

    @staticmethod
    def failure(error: CalculationError) -> "CalculationResult":
        """Factory for a rejected calculation."""
        if isinstance(error, ValidationErrors):
            errors = [e.to_dict() for e in error.errors]
        else:
            errors = [error.to_dict()]
        return CalculationResult(is_ok=False, value=None, errors=errors)

    def field_errors(self) -> Dict[str, str]:
        """Map field name -> first message, for per-field form display."""
        messages: Dict[str, str] = {}
        for error in self.errors:
            key = error["field"] or "__all__"
            messages.setdefault(key, error["message"])
        return messages

    def unwrap(self) -> Any:
        """
        Return the value, or re-raise the failure with its original error type.

        Several errors are raised together as ValidationErrors.
        """
        if not self.is_ok:
            errors = [_error_from_dict(e) for e in self.errors]
            if len(errors) == 1:
                raise errors[0]
            raise ValidationErrors(errors)
        return self.value

    def to_dict(self) -> Dict[str, Any]:
        value = self.value
        if hasattr(value, "to_dict"):
            value = value.to_dict()
        elif isinstance(value, list):
            value = [v.to_dict() if hasattr(v, "to_dict") else v for v in value]
        return {"ok": self.is_ok, "value": value, "errors": list(self.errors)}


def calculate(fn: Callable[..., Any], *args, **kwargs) -> CalculationResult:
    """
    Run a model and return an explicit result instead of raising.

    Only CalculationError is converted; programming errors propagate.
    """
    try:
        value = fn(*args, **kwargs)
    except CalculationError as e:
        logger.warning("%s rejected input: %s", getattr(fn, "__name__", fn), e.message)
        return CalculationResult.failure(e)
    return CalculationResult.success(value)
