"""
Queries package.

Read-only views over loaded data: filter/sort pipelines, dashboard
summaries and analytics aggregations.
"""

from financas.queries.analytics import (
    CardLimitUsage,
    CategoryBreakdown,
    MonthlySpend,
    NamedAmount,
    annual_spend,
    available_years,
    card_usage,
    category_breakdown,
    credit_limit_usage,
    monthly_trend,
    subscription_cost_by_category,
)
from financas.queries.filters import (
    DebtFilter,
    InstallmentFilter,
    SortDirection,
    SubscriptionFilter,
    filter_debts,
    filter_installments,
    filter_months,
    filter_subscriptions,
)
from financas.queries.summaries import (
    InstallmentSummary,
    MonthTotals,
    SubscriptionSummary,
    all_paid,
    installment_summary,
    month_totals,
    subscription_summary,
    upcoming_debts,
    upcoming_installments,
    upcoming_subscriptions,
)

__all__ = [
    # Filters
    "DebtFilter",
    "InstallmentFilter",
    "SortDirection",
    "SubscriptionFilter",
    "filter_debts",
    "filter_installments",
    "filter_months",
    "filter_subscriptions",
    # Summaries
    "InstallmentSummary",
    "MonthTotals",
    "SubscriptionSummary",
    "all_paid",
    "installment_summary",
    "month_totals",
    "subscription_summary",
    "upcoming_debts",
    "upcoming_installments",
    "upcoming_subscriptions",
    # Analytics
    "CardLimitUsage",
    "CategoryBreakdown",
    "MonthlySpend",
    "NamedAmount",
    "annual_spend",
    "available_years",
    "card_usage",
    "category_breakdown",
    "credit_limit_usage",
    "monthly_trend",
    "subscription_cost_by_category",
]
