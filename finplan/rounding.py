"""
Display rounding shared by the projection tables.

Python's round() is round-half-to-even; the calculator tables round halves
up (2.5 -> 3, -2.5 -> -2), so counts and money fields use round_half_up().
"""

import math


def round_half_up(value: float, digits: int = 0) -> float:
    """Round halves toward +infinity at the given number of decimals."""
    scale = 10 ** digits
    return math.floor(value * scale + 0.5) / scale


def round_count(value: float) -> int:
    """Half-up rounding to a whole count."""
    return int(math.floor(value + 0.5))


def round_price(value: float) -> float:
    """Half-up rounding to cents."""
    return round_half_up(value, 2)
