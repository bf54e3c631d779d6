"""
Dashboard Summaries

Totals and "coming up" lists shown on the overview screens. Every
"today" passed in here is expected to come from the fixed civil zone
(`today_in_fixed_zone`), and every window is inclusive of both ends.
"""

from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Sequence

from pydantic import BaseModel

from financas.models import (
    Debt,
    DebtStatus,
    Installment,
    InstallmentStatus,
    Subscription,
    SubscriptionStatus,
)
from financas.models.installment import CENTS


class MonthTotals(BaseModel):
    total: Decimal = Decimal("0")
    paid: Decimal = Decimal("0")
    pending: Decimal = Decimal("0")


class InstallmentSummary(BaseModel):
    active_count: int = 0
    remaining_amount: Decimal = Decimal("0")
    next_due: Optional[Installment] = None


class SubscriptionSummary(BaseModel):
    monthly_cost: Decimal = Decimal("0")
    due_soon_count: int = 0
    due_soon_amount: Decimal = Decimal("0")


def _in_window(value: Optional[date], today: date, days: int) -> bool:
    return value is not None and today <= value <= today + timedelta(days=days)


# =============================================================================
# DEBTS
# =============================================================================

def month_totals(debts: Sequence[Debt]) -> MonthTotals:
    """Total, paid and pending amounts of one month's debts."""
    total = sum((d.amount for d in debts), Decimal("0"))
    paid = sum((d.amount for d in debts if d.is_paid), Decimal("0"))
    return MonthTotals(total=total, paid=paid, pending=total - paid)


def all_paid(debts: Sequence[Debt]) -> bool:
    """A month counts as settled when it has debts and none is pending."""
    return bool(debts) and all(d.is_paid for d in debts)


def upcoming_debts(
    debts: Sequence[Debt],
    today: date,
    window_days: int = 30,
    limit: int = 5,
) -> list[Debt]:
    """Pending debts due between today and today + window_days, soonest first."""
    upcoming = [
        d for d in debts
        if d.status == DebtStatus.PENDING and _in_window(d.due_date, today, window_days)
    ]
    upcoming.sort(key=lambda d: d.due_date)
    return upcoming[:limit]


# =============================================================================
# INSTALLMENTS
# =============================================================================

def installment_summary(installments: Sequence[Installment], today: date) -> InstallmentSummary:
    """
    Ativo and Atrasado installments: how many, how much is left to pay,
    and which one is due next (from today on).
    """
    active = [
        i for i in installments
        if i.status in (InstallmentStatus.ACTIVE, InstallmentStatus.OVERDUE)
    ]
    remaining = sum((i.remaining_amount for i in active), Decimal("0"))

    upcoming = sorted(
        (i for i in active if i.next_due_date is not None and i.next_due_date >= today),
        key=lambda i: i.next_due_date,
    )
    return InstallmentSummary(
        active_count=len(active),
        remaining_amount=remaining,
        next_due=upcoming[0] if upcoming else None,
    )


def upcoming_installments(
    installments: Sequence[Installment],
    today: date,
    window_days: int = 30,
    limit: int = 5,
) -> list[Installment]:
    upcoming = [
        i for i in installments
        if i.status not in (InstallmentStatus.COMPLETED, InstallmentStatus.CANCELLED)
        and _in_window(i.next_due_date, today, window_days)
    ]
    upcoming.sort(key=lambda i: i.next_due_date)
    return upcoming[:limit]


# =============================================================================
# SUBSCRIPTIONS
# =============================================================================

def subscription_summary(
    subscriptions: Sequence[Subscription],
    today: date,
    due_soon_days: int = 7,
) -> SubscriptionSummary:
    """Monthly-equivalent cost of active subscriptions and what bills soon."""
    active = [s for s in subscriptions if s.status == SubscriptionStatus.ACTIVE]
    monthly = sum((s.monthly_cost for s in active), Decimal("0"))
    due_soon = [s for s in active if _in_window(s.next_billing_date, today, due_soon_days)]

    return SubscriptionSummary(
        monthly_cost=monthly.quantize(CENTS, rounding=ROUND_HALF_UP),
        due_soon_count=len(due_soon),
        due_soon_amount=sum((s.amount for s in due_soon), Decimal("0")),
    )


def upcoming_subscriptions(
    subscriptions: Sequence[Subscription],
    today: date,
    window_days: int = 30,
    limit: int = 5,
) -> list[Subscription]:
    upcoming = [
        s for s in subscriptions
        if s.status == SubscriptionStatus.ACTIVE
        and _in_window(s.next_billing_date, today, window_days)
    ]
    upcoming.sort(key=lambda s: s.next_billing_date)
    return upcoming[:limit]
