"""
Filter / Sort Pipelines

Pure list transformations behind the debt, installment and subscription
screens: search by name, filter by category and status, then a stable
sort. Inputs are never modified.

A filter value of None means "all".
"""

from datetime import date
from enum import Enum
from typing import Any, Callable, Literal, Optional, Sequence, TypeVar

from pydantic import BaseModel

from financas.models import (
    Debt,
    DebtCategory,
    DebtStatus,
    Installment,
    InstallmentCategory,
    InstallmentStatus,
    Subscription,
    SubscriptionCategory,
    SubscriptionStatus,
)
from financas.utils.calendar import current_month_key, parse_month_key


T = TypeVar("T")


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"

    @property
    def toggled(self) -> "SortDirection":
        return SortDirection.DESC if self is SortDirection.ASC else SortDirection.ASC


DEBT_STATUS_ORDER = {
    DebtStatus.PENDING: 0,
    DebtStatus.PAID: 1,
}

INSTALLMENT_STATUS_ORDER = {
    InstallmentStatus.OVERDUE: 0,
    InstallmentStatus.ACTIVE: 1,
    InstallmentStatus.COMPLETED: 2,
    InstallmentStatus.CANCELLED: 3,
}


class DebtFilter(BaseModel):
    search: str = ""
    category: Optional[DebtCategory] = None
    status: Optional[DebtStatus] = None
    sort_key: Literal["name", "amount", "due_date", "status"] = "due_date"
    direction: SortDirection = SortDirection.ASC


class InstallmentFilter(BaseModel):
    search: str = ""
    category: Optional[InstallmentCategory] = None
    status: Optional[InstallmentStatus] = None
    sort_key: Literal["name", "total_amount", "next_due_date", "status"] = "next_due_date"
    direction: SortDirection = SortDirection.ASC


class SubscriptionFilter(BaseModel):
    search: str = ""
    category: Optional[SubscriptionCategory] = None
    status: Optional[SubscriptionStatus] = None
    sort_key: Literal["name", "amount", "next_billing_date"] = "next_billing_date"
    direction: SortDirection = SortDirection.ASC


def _date_or_min(value: Optional[date]) -> date:
    # Missing dates sort before every real one
    return value or date.min


def _apply(
    items: Sequence[T],
    search: str,
    category: Any,
    status: Any,
    sort_key: Callable[[T], Any],
    direction: SortDirection,
) -> list[T]:
    result = list(items)
    if search:
        needle = search.lower()
        result = [item for item in result if needle in item.name.lower()]
    if category is not None:
        result = [item for item in result if item.category == category]
    if status is not None:
        result = [item for item in result if item.status == status]
    return sorted(result, key=sort_key, reverse=direction == SortDirection.DESC)


def filter_debts(debts: Sequence[Debt], options: Optional[DebtFilter] = None) -> list[Debt]:
    options = options or DebtFilter()
    keys = {
        "name": lambda d: d.name.lower(),
        "amount": lambda d: d.amount,
        "due_date": lambda d: _date_or_min(d.due_date),
        "status": lambda d: DEBT_STATUS_ORDER[d.status],
    }
    return _apply(
        debts, options.search, options.category, options.status,
        keys[options.sort_key], options.direction,
    )


def filter_installments(
    installments: Sequence[Installment],
    options: Optional[InstallmentFilter] = None,
) -> list[Installment]:
    options = options or InstallmentFilter()
    keys = {
        "name": lambda i: i.name.lower(),
        "total_amount": lambda i: i.total_amount,
        "next_due_date": lambda i: _date_or_min(i.next_due_date),
        "status": lambda i: INSTALLMENT_STATUS_ORDER[i.status],
    }
    return _apply(
        installments, options.search, options.category, options.status,
        keys[options.sort_key], options.direction,
    )


def filter_subscriptions(
    subscriptions: Sequence[Subscription],
    options: Optional[SubscriptionFilter] = None,
) -> list[Subscription]:
    options = options or SubscriptionFilter()
    keys = {
        "name": lambda s: s.name.lower(),
        "amount": lambda s: s.amount,
        "next_billing_date": lambda s: s.next_billing_date,
    }
    return _apply(
        subscriptions, options.search, options.category, options.status,
        keys[options.sort_key], options.direction,
    )


MonthFilterMode = Literal["next12", "current_year", "all"]


def filter_months(
    month_keys: Sequence[str],
    mode: MonthFilterMode = "next12",
    current_month: Optional[str] = None,
) -> list[str]:
    """
    Months offered by the month selector.

    next12:       the current month and the 11 known months after it; the
                  first 12 known months when the current month is unknown
    current_year: known months of the current year
    all:          every known month
    """
    current_month = current_month or current_month_key()

    if mode == "all":
        return list(month_keys)

    if mode == "current_year":
        parsed_current = parse_month_key(current_month)
        year = parsed_current[1] if parsed_current else None
        return [
            key for key in month_keys
            if (parsed := parse_month_key(key)) is not None and parsed[1] == year
        ]

    if current_month in month_keys:
        start = list(month_keys).index(current_month)
        return list(month_keys[start:start + 12])
    return list(month_keys[:12])
