"""
Example: Subscription and Cash-Flow Projections

Demonstrates:
1. A 12-month subscription projection with its whole-unit table
2. A 60-month multi-stream cash-flow projection and summary
3. Series statistics and the narrative-analysis payload
4. CSV export
"""

from finplan.cashflow import project_cash_flow, summarize_cash_flow
from finplan.entities import CashFlowData, SubscriptionMetrics
from finplan.output_schema import SeriesStatistics, analysis_payload, payload_json, to_csv
from finplan.subscription import project_subscription_revenue, summarize_subscription

CASH_FLOW_FORM = {
    "productSales": [
        {"unitsSold": 300, "pricePerUnit": 25, "productionCostPerUnit": 9,
         "seasonality": {"November": 1.4, "December": 1.8, "January": 0.7}},
    ],
    "serviceIncome": [
        {"serviceType": "Workshops", "rateOrPrice": 60, "expectedVolumePerMonth": 40},
    ],
    "subscriptionRevenue": [
        {"pricingTier": "Club", "monthlyFee": 15, "subscribers": 120, "churnRate": 0.03},
    ],
    "licensingRoyalties": [],
    "otherRevenue": {"affiliateIncome": 50, "advertisingRevenue": 0, "grantsAndDonations": 0},
    "fixedExpenses": {
        "rent": 2200, "salaries": 4000, "insurance": 150, "utilities": 300, "softwareSubscriptions": 80,
    },
    "variableExpenses": {"cogs": 2700, "marketing": 400, "salesCommissions": 0, "supplies": 350},
    "oneTimeExpenses": {"startupCosts": 6000, "capitalExpenditures": 9000, "legalAndLicensing": 700},
    "financialObligations": {"loanRepayments": 450, "interestPayments": 90, "taxes": 300},
    "growthParameters": {"revenueGrowthRate": 0.12, "expenseGrowthRate": 0.04},
}


def demonstrate_subscription():
    print("\n" + "=" * 80)
    print("SUBSCRIPTION PROJECTION")
    print("=" * 80)

    metrics = SubscriptionMetrics.from_dict({
        "monthlySubscriptionPrice": 29,
        "customerAcquisitionCost": 80,
        "customerRetentionRate": 85,
        "monthlyPlatformCosts": 1500,
        "monthlyPerClientCosts": 4,
        "initialCustomerBase": 150,
        "monthlyGrowthRate": 12,
    })
    projection = project_subscription_revenue(metrics)

    print(f"\n{'Month':>5} {'Customers':>10} {'Revenue':>10} {'Profit':>10} {'Cumulative':>12}")
    for row in projection:
        shown = row.rounded()
        print(f"{shown.month:>5} {shown.customers:>10} {shown.monthly_revenue:>10} "
              f"{shown.net_profit:>10} {shown.cumulative_profit:>12}")

    summary = summarize_subscription(projection)
    print(f"\nFirst profitable month: {summary.first_profitable_month}")
    print(f"Acquisition spend: {summary.total_acquisition_costs:.2f}")


def demonstrate_cash_flow():
    print("\n" + "=" * 80)
    print("CASH-FLOW PROJECTION")
    print("=" * 80)

    data = CashFlowData.from_dict(CASH_FLOW_FORM)
    projection = project_cash_flow(data)
    summary = summarize_cash_flow(projection)

    for row in projection[:3] + projection[-2:]:
        print(f"  {row.month:<12} net {row.net_cash_flow:>10.2f}  cumulative {row.cumulative_cash_flow:>12.2f}")

    print(f"\nRevenue/expense ratio: {summary.revenue_to_expense_ratio:.2f}")
    print(f"Cash-flow margin: {summary.cash_flow_margin:.1f}%")

    stats = SeriesStatistics.from_records(projection, "netCashFlow")
    print(f"Net cash flow: mean {stats.mean:.2f}, worst month {stats.min:.2f}, best month {stats.max:.2f}")

    payload = analysis_payload("cashFlow", data, projection, summary)
    print(f"\nAnalysis payload: {len(payload_json(payload))} characters of JSON")

    csv_text = to_csv(projection[:3], columns=["month", "revenue", "expenses", "netCashFlow"])
    print("\nCSV preview:")
    print(csv_text)


if __name__ == "__main__":
    print("\n" + "=" * 80)
    print("PROJECTION DEMONSTRATION")
    print("=" * 80)

    demonstrate_subscription()
    demonstrate_cash_flow()
