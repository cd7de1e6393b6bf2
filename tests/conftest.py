"""Shared fixtures: a complete cash-flow form and cached-settings isolation."""

import pytest

from finplan import config


@pytest.fixture(autouse=True)
def reset_settings(monkeypatch, tmp_path):
    """Every test starts from settings rebuilt from its own environment, with no env file."""
    monkeypatch.setenv("FINPLAN_ENV_PATH", str(tmp_path / "missing.env"))
    config._settings = None
    yield
    config._settings = None


@pytest.fixture
def cash_flow_record():
    """
    A small business with one line per revenue stream.

    Month 0 (January, no growth yet):
        revenue  = 1000 + 500 + 1000 + 200 + 150 = 2850
        expenses = 1800 + 700 + 500 + 8000 (one-time) = 11000
    """
    return {
        "productSales": [
            {"unitsSold": 100, "pricePerUnit": 10, "productionCostPerUnit": 4,
             "seasonality": {"December": 2.0}},
        ],
        "serviceIncome": [
            {"serviceType": "Consulting", "rateOrPrice": 50, "expectedVolumePerMonth": 10},
        ],
        "subscriptionRevenue": [
            {"pricingTier": "Pro", "monthlyFee": 20, "subscribers": 50, "churnRate": 0.1},
        ],
        "licensingRoyalties": [
            {"agreementName": "Glaze recipe", "royaltyRate": 2, "expectedVolume": 100},
        ],
        "otherRevenue": {"affiliateIncome": 100, "advertisingRevenue": 50, "grantsAndDonations": 0},
        "fixedExpenses": {
            "rent": 1000, "salaries": 500, "insurance": 100, "utilities": 50, "softwareSubscriptions": 50,
            "custom": [{"name": "Cleaning", "amount": 100}],
        },
        "variableExpenses": {
            "cogs": 400, "marketing": 200, "salesCommissions": 50, "supplies": 50, "custom": [],
        },
        "oneTimeExpenses": {
            "startupCosts": 5000, "capitalExpenditures": 2000, "legalAndLicensing": 500,
            "custom": [{"name": "Signage", "amount": 500, "description": "Street sign"}],
        },
        "financialObligations": {
            "loanRepayments": 300, "interestPayments": 50, "taxes": 150, "custom": [],
        },
        "growthParameters": {
            "revenueGrowthRate": 0.1,
            "expenseGrowthRate": 0.05,
            "accountsReceivableDays": 30,
            "accountsPayableDays": 45,
            "corporateTaxRate": 0.25,
            "revenueGrowthModel": "exponential",
            "expenseGrowthModel": "exponential",
        },
    }
