"""
Demand/elasticity estimator.

Maps a candidate price to an expected sales volume using a one-sided linear
clamp around a reference (competitor) price:

    priceDiff          = (price - reference) / reference
    maxVolumeReduction = 0.1 + 0.8 * elasticity
    volumeReduction    = clamp(priceDiff * elasticity, 0, maxVolumeReduction)
    volume             = floor(marketSize * (1 - volumeReduction))

Known simplification: this is not a true elasticity model. Pricing below
the reference never increases volume beyond marketSize, and the reduction
is linear until it hits the elasticity-dependent ceiling (10% at
elasticity 0, 90% at elasticity 1).
"""

import logging
import math
from typing import Optional

from finplan.entities import INSENSITIVE_ELASTICITY, MarketData
from finplan.errors import require_fraction, require_number

logger = logging.getLogger(__name__)

BASE_MAX_REDUCTION = 0.1
ELASTIC_MAX_REDUCTION = 0.8


def max_volume_reduction(elasticity: float) -> float:
    """Ceiling on the fraction of volume lost to pricing above the reference."""
    return BASE_MAX_REDUCTION + ELASTIC_MAX_REDUCTION * elasticity


def expected_volume(
    price: float,
    market_size: float,
    reference_price: float,
    elasticity: Optional[float]
) -> int:
    """
    Expected unit volume at a price.

    Args:
        price: Candidate selling price
        market_size: Total addressable units at the reference price
        reference_price: Anchor price (normally the competitor price)
        elasticity: Coefficient in [0, 1], or None when not supplied

    Returns:
        Whole units; 0 when price, market size or reference price is <= 0
    """
    price = require_number(price, "price")
    market_size = require_number(market_size, "marketSize")
    reference_price = require_number(reference_price, "referencePrice")

    if elasticity is None:
        # Absent elasticity: price-insensitive demand (only the 10% ceiling applies)
        elasticity = INSENSITIVE_ELASTICITY
    else:
        elasticity = require_fraction(elasticity, "priceElasticity")

    if price <= 0 or market_size <= 0 or reference_price <= 0:
        return 0

    price_diff = (price - reference_price) / reference_price
    reduction = min(max(price_diff * elasticity, 0.0), max_volume_reduction(elasticity))
    return int(math.floor(market_size * (1 - reduction)))


def volume_for_market(price: float, market: MarketData) -> int:
    """expected_volume() anchored on a MarketData record."""
    return expected_volume(
        price,
        market.market_size,
        market.competitor_price,
        market.elasticity_or_default()
    )
