"""
Analytics

Aggregations behind the analytics charts. Everything is computed from
already-loaded models; nothing here reads storage.

Debts are attributed to a year through their MonthKey, not their due
date, so a debt filed under "Dezembro de 2025" counts for 2025 even if
it falls due in January.
"""

from collections import defaultdict
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from pydantic import BaseModel

from financas.models import (
    Card,
    Debt,
    DebtCategory,
    Subscription,
    SubscriptionStatus,
)
from financas.utils.calendar import MONTH_NAMES, format_month_key, parse_month_key


UNCATEGORISED = "Outros"
UNKNOWN_CARD = "Desconhecido"


class NamedAmount(BaseModel):
    """One bar or slice of a chart."""
    name: str
    value: Decimal


class MonthlySpend(BaseModel):
    month: str
    month_key: str
    total: Decimal
    paid: Decimal
    pending: Decimal


class CategoryBreakdown(BaseModel):
    total_spent: Decimal
    categories: list[NamedAmount]


class CardLimitUsage(BaseModel):
    name: str
    limit: Decimal
    used: Decimal


def _year_of(month_key: str) -> Optional[int]:
    parsed = parse_month_key(month_key)
    return parsed[1] if parsed else None


def _ranked(totals: dict[str, Decimal]) -> list[NamedAmount]:
    """Largest first; ties keep first-seen order."""
    return sorted(
        (NamedAmount(name=name, value=value) for name, value in totals.items()),
        key=lambda item: item.value,
        reverse=True,
    )


def available_years(month_keys: Iterable[str]) -> list[int]:
    """Years that have at least one known month, newest first."""
    years = {year for key in month_keys if (year := _year_of(key)) is not None}
    return sorted(years, reverse=True)


def annual_spend(debts: Sequence[Debt], year: int) -> list[MonthlySpend]:
    """Twelve entries, January to December, with paid and still-pending amounts."""
    spend = []
    for month_index, month_name in enumerate(MONTH_NAMES):
        month_key = format_month_key(month_index, year)
        month_debts = [d for d in debts if d.month_key == month_key]
        total = sum((d.amount for d in month_debts), Decimal("0"))
        paid = sum(
            (d.amount for d in month_debts if d.is_paid),
            Decimal("0"),
        )
        spend.append(MonthlySpend(
            month=month_name[:3],
            month_key=month_key,
            total=total,
            paid=paid,
            pending=total - paid,
        ))
    return spend


def monthly_trend(debts: Sequence[Debt], year: int) -> list[NamedAmount]:
    """Total debt amount per month of the year, January first."""
    return [
        NamedAmount(name=entry.month, value=entry.total)
        for entry in annual_spend(debts, year)
    ]


def category_breakdown(debts: Sequence[Debt], year: int) -> CategoryBreakdown:
    """Debt amounts of a year by category; uncategorised debts count as Outros."""
    totals: dict[str, Decimal] = defaultdict(Decimal)
    for debt in debts:
        if _year_of(debt.month_key) != year:
            continue
        category = debt.category.value if debt.category else UNCATEGORISED
        totals[category] += debt.amount

    return CategoryBreakdown(
        total_spent=sum(totals.values(), Decimal("0")),
        categories=_ranked(totals),
    )


def subscription_cost_by_category(subscriptions: Sequence[Subscription]) -> list[NamedAmount]:
    """Annual cost of active subscriptions per category."""
    totals: dict[str, Decimal] = defaultdict(Decimal)
    for subscription in subscriptions:
        if subscription.status != SubscriptionStatus.ACTIVE:
            continue
        totals[subscription.category.value] += subscription.annual_cost
    return _ranked(totals)


def card_usage(debts: Sequence[Debt], cards: Sequence[Card], year: int) -> list[NamedAmount]:
    """
    Credit-card debts of a year, summed per card.

    Only debts in the "Cartão de Crédito" category that name a card are
    counted. A card id with no matching card is reported as Desconhecido.
    """
    names = {card.id: card.name for card in cards if card.id}
    totals: dict[str, Decimal] = defaultdict(Decimal)
    for debt in debts:
        if _year_of(debt.month_key) != year:
            continue
        if debt.category != DebtCategory.CREDIT_CARD or not debt.card_id:
            continue
        totals[debt.card_id] += debt.amount

    # One entry per card id, so two unknown cards stay two bars
    return sorted(
        (
            NamedAmount(name=names.get(card_id, UNKNOWN_CARD), value=total)
            for card_id, total in totals.items()
        ),
        key=lambda item: item.value,
        reverse=True,
    )


def credit_limit_usage(cards: Sequence[Card]) -> list[CardLimitUsage]:
    """Limit and used amount of every active credit card that has a limit."""
    return [
        CardLimitUsage(
            name=card.name,
            limit=card.limit,
            used=card.used_amount or Decimal("0"),
        )
        for card in cards
        if card.is_active_credit and card.limit is not None and card.limit > 0
    ]
