"""
Planner configuration.

Settings come from FINPLAN_* environment variables. An optional env file
(FINPLAN_ENV_PATH, default ".env") is loaded first with python-dotenv;
variables already present in the environment win.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Tuple

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Ratios between the default base / optimistic / pessimistic cases
DEFAULT_ADJUSTMENTS: Dict[str, Tuple[float, float]] = {
    "revenue": (1.2, 0.8),
    "costs": (1.0, 1.0),
    "marketShare": (1.5, 0.5),
    "customerGrowth": (2.0, 0.4),
    "operatingExpenses": (1.0, 1.0),
    "profitMargin": (1.4, 0.4),
}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


@dataclass
class PlannerSettings:
    """Tunable constants shared by the calculators."""
    environment: str = "production"
    log_level: str = "INFO"

    # Projection horizons (months)
    subscription_months: int = 12
    cash_flow_months: int = 60

    # Pricing sweep
    default_scenario_count: int = 10

    # Scenario planner default probabilities (base, optimistic, pessimistic)
    default_probabilities: Tuple[float, float, float] = (60.0, 20.0, 20.0)
    default_adjustments: Dict[str, Tuple[float, float]] = field(
        default_factory=lambda: dict(DEFAULT_ADJUSTMENTS)
    )

    # Business valuation
    revenue_multiple: float = 2.0
    pe_ratio: float = 15.0
    valuation_discount_rate: float = 0.10
    valuation_years: int = 5

    # Startup costs
    cash_reserve_months: int = 6

    def __post_init__(self):
        if self.subscription_months < 1:
            raise ValueError(f"subscription_months must be >= 1, got {self.subscription_months}")
        if self.cash_flow_months < 1:
            raise ValueError(f"cash_flow_months must be >= 1, got {self.cash_flow_months}")
        if self.default_scenario_count < 2:
            raise ValueError(f"default_scenario_count must be >= 2, got {self.default_scenario_count}")
        if sum(self.default_probabilities) > 100:
            raise ValueError("default_probabilities must not sum to more than 100")
        if self.valuation_years < 1:
            raise ValueError(f"valuation_years must be >= 1, got {self.valuation_years}")

    @staticmethod
    def from_env() -> "PlannerSettings":
        """Build settings from the process environment."""
        return PlannerSettings(
            environment=os.getenv("FINPLAN_ENV", "production"),
            log_level=os.getenv("FINPLAN_LOG_LEVEL", "INFO").upper(),
            subscription_months=_env_int("FINPLAN_SUBSCRIPTION_MONTHS", 12),
            cash_flow_months=_env_int("FINPLAN_CASH_FLOW_MONTHS", 60),
            default_scenario_count=_env_int("FINPLAN_SCENARIO_COUNT", 10),
            revenue_multiple=_env_float("FINPLAN_REVENUE_MULTIPLE", 2.0),
            pe_ratio=_env_float("FINPLAN_PE_RATIO", 15.0),
            valuation_discount_rate=_env_float("FINPLAN_DISCOUNT_RATE", 0.10),
            valuation_years=_env_int("FINPLAN_VALUATION_YEARS", 5),
            cash_reserve_months=_env_int("FINPLAN_CASH_RESERVE_MONTHS", 6),
        )


_settings: Optional[PlannerSettings] = None


def load_env_file(env_path: Optional[str] = None) -> bool:
    """Load an env file if it exists. Returns whether a file was loaded."""
    path = Path(env_path or os.getenv("FINPLAN_ENV_PATH", ".env"))
    if not path.exists():
        return False
    load_dotenv(path, override=False)
    logger.debug("Loaded environment from %s", path)
    return True


def get_settings() -> PlannerSettings:
    """Return the process-wide settings, loading them on first use."""
    global _settings
    if _settings is None:
        load_env_file()
        _settings = PlannerSettings.from_env()
    return _settings


def reload_settings(env_path: Optional[str] = None) -> PlannerSettings:
    """Discard cached settings and rebuild them from the environment."""
    global _settings
    load_env_file(env_path)
    _settings = PlannerSettings.from_env()
    return _settings


def configure_logging(level: Optional[str] = None):
    """Configure root logging for scripts and hosts embedding the planner."""
    logging.basicConfig(
        level=getattr(logging, (level or get_settings().log_level).upper(), logging.INFO),
        format=LOG_FORMAT
    )
