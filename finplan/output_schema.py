"""
Output envelopes for calculator results.

Design Principles:
- Results are plain structured data (numbers, strings, lists, dicts)
- Every payload carries the inputs that produced it
- Payloads are checked to be JSON-serializable with no NaN/Infinity
- Pure formatting (no calculator logic lives here)

analysis_payload() is the record a narrative-analysis host embeds in its
prompt; to_csv() renders a projection as a delimited table.
"""

import csv
import io
import json
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from finplan.errors import ArithmeticDegenerate, InvalidInput

SCHEMA_VERSION = "1.0"
FINPLAN_VERSION = "0.1.0"

CALCULATORS = (
    "breakEven", "pricingStrategy", "scenarioPlanner", "subscriptionRevenue",
    "cashFlow", "financialRatios", "businessValuation", "investment", "startupCosts",
)


@dataclass
class SeriesStatistics:
    """Summary of one numeric column of a projection."""
    total: float
    mean: float
    min: float
    max: float
    final: float
    count: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_values(values: Sequence[float]) -> "SeriesStatistics":
        """
        Compute statistics over a series.

        Raises:
            InvalidInput: values is empty
        """
        if len(values) == 0:
            raise InvalidInput("Cannot summarize an empty series", "values")
        series = np.asarray(values, dtype=float)
        return SeriesStatistics(
            total=float(np.sum(series)),
            mean=float(np.mean(series)),
            min=float(np.min(series)),
            max=float(np.max(series)),
            final=float(series[-1]),
            count=int(series.size),
        )

    @staticmethod
    def from_records(records: Sequence[Any], field: str) -> "SeriesStatistics":
        """Statistics of one field (camelCase) across result records."""
        rows = [to_plain(r) for r in records]
        missing = [i for i, row in enumerate(rows) if field not in row]
        if missing:
            raise InvalidInput(f"Records {missing} have no field {field!r}", field)
        return SeriesStatistics.from_values([row[field] for row in rows])


def to_plain(value: Any) -> Any:
    """Convert results (to_dict objects, enums, numpy scalars) to plain data."""
    if hasattr(value, "to_dict"):
        return to_plain(value.to_dict())
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {str(k): to_plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_plain(v) for v in value]
    if isinstance(value, np.generic):
        return value.item()
    return value


def analysis_payload(
    calculator: str,
    inputs: Any,
    result: Any,
    summary: Optional[Any] = None
) -> Dict[str, Any]:
    """
    Bundle a calculation for narrative analysis.

    Args:
        calculator: One of CALCULATORS
        inputs: Input entity (or plain record) the result was computed from
        result: Result object, list of result objects, or plain data
        summary: Optional summary object (e.g. CashFlowSummary)

    Returns:
        JSON-serializable dict

    Raises:
        InvalidInput: unknown calculator or unserializable content
        ArithmeticDegenerate: a NaN or Infinity reached the payload
    """
    if calculator not in CALCULATORS:
        raise InvalidInput(f"Unknown calculator {calculator!r}", "calculator")

    payload = {
        "schemaVersion": SCHEMA_VERSION,
        "finplanVersion": FINPLAN_VERSION,
        "calculator": calculator,
        "inputs": to_plain(inputs),
        "result": to_plain(result),
    }
    if summary is not None:
        payload["summary"] = to_plain(summary)

    payload_json(payload)
    return payload


def payload_json(payload: Dict[str, Any], indent: Optional[int] = None) -> str:
    """Serialize a payload strictly (no NaN/Infinity)."""
    try:
        return json.dumps(payload, indent=indent, allow_nan=False)
    except TypeError as e:
        raise InvalidInput(f"Payload is not JSON-serializable: {e}", "result")
    except ValueError as e:
        raise ArithmeticDegenerate(f"Payload contains a non-finite number: {e}", "result")


def to_csv(records: Sequence[Any], columns: Optional[List[str]] = None) -> str:
    """
    Render records as CSV.

    Columns default to the first record's field order. Nested values are
    written as JSON text.
    """
    rows = [to_plain(r) for r in records]
    if columns is None:
        columns = list(rows[0].keys()) if rows else []

    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=columns, extrasaction="ignore", lineterminator="\n")
    writer.writeheader()
    for row in rows:
        writer.writerow({
            key: json.dumps(value) if isinstance(value, (dict, list)) else value
            for key, value in row.items()
        })
    return buffer.getvalue()
