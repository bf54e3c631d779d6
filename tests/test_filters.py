"""Tests for the filter / sort pipelines."""

from datetime import date
from decimal import Decimal

from financas.models import (
    BillingCycle,
    Debt,
    DebtCategory,
    DebtStatus,
    Installment,
    InstallmentStatus,
    Subscription,
    SubscriptionCategory,
    SubscriptionStatus,
)
from financas.queries import (
    DebtFilter,
    InstallmentFilter,
    SortDirection,
    SubscriptionFilter,
    filter_debts,
    filter_installments,
    filter_months,
    filter_subscriptions,
)


def debt(debt_id, name, amount, day, status=DebtStatus.PENDING, category=None) -> Debt:
    return Debt(
        id=debt_id,
        month_key="Março de 2026",
        name=name,
        amount=Decimal(amount),
        due_date=date(2026, 3, day) if day else None,
        status=status,
        category=category,
    )


DEBTS = [
    debt("1", "Aluguel", "1500.00", 10, category=DebtCategory.HOUSING),
    debt("2", "internet", "99.90", 5, status=DebtStatus.PAID),
    debt("3", "Cartão Nubank", "850.00", 15, category=DebtCategory.CREDIT_CARD),
    debt("4", "Academia", "99.90", None),
]


class TestDebtFilters:
    """Search, filter and sort of debts."""

    def test_default_sorts_by_due_date_missing_first(self):
        assert [d.id for d in filter_debts(DEBTS)] == ["4", "2", "1", "3"]

    def test_search_is_case_insensitive(self):
        result = filter_debts(DEBTS, DebtFilter(search="INTER"))
        assert [d.id for d in result] == ["2"]

    def test_filter_by_category_and_status(self):
        result = filter_debts(DEBTS, DebtFilter(category=DebtCategory.HOUSING))
        assert [d.id for d in result] == ["1"]
        result = filter_debts(DEBTS, DebtFilter(status=DebtStatus.PAID))
        assert [d.id for d in result] == ["2"]

    def test_sort_by_amount_is_stable(self):
        """Equal amounts keep their input order, in both directions."""
        asc = filter_debts(DEBTS, DebtFilter(sort_key="amount"))
        assert [d.id for d in asc] == ["2", "4", "3", "1"]
        desc = filter_debts(DEBTS, DebtFilter(sort_key="amount", direction=SortDirection.DESC))
        assert [d.id for d in desc] == ["1", "3", "2", "4"]

    def test_sort_by_name(self):
        result = filter_debts(DEBTS, DebtFilter(sort_key="name"))
        assert [d.name for d in result] == ["Academia", "Aluguel", "Cartão Nubank", "internet"]

    def test_sort_by_status_pending_first(self):
        result = filter_debts(DEBTS, DebtFilter(sort_key="status"))
        assert result[-1].id == "2"

    def test_input_not_modified(self):
        original = list(DEBTS)
        filter_debts(DEBTS, DebtFilter(sort_key="amount", direction=SortDirection.DESC))
        assert DEBTS == original

    def test_direction_toggle(self):
        assert SortDirection.ASC.toggled == SortDirection.DESC
        assert SortDirection.DESC.toggled == SortDirection.ASC


class TestInstallmentAndSubscriptionFilters:

    def test_installments_by_status_order(self):
        def inst(inst_id, status):
            return Installment(
                id=inst_id,
                name=f"Compra {inst_id}",
                total_amount=Decimal("100.00"),
                installment_amount=Decimal("50.00"),
                total_installments=2,
                first_due_date=date(2026, 1, 1),
                status=status,
            )
        items = [
            inst("a", InstallmentStatus.COMPLETED),
            inst("b", InstallmentStatus.ACTIVE),
            inst("c", InstallmentStatus.OVERDUE),
        ]
        result = filter_installments(items, InstallmentFilter(sort_key="status"))
        assert [i.id for i in result] == ["c", "b", "a"]

    def test_subscriptions_by_category(self):
        def sub(name, category, billing):
            return Subscription(
                id=name,
                name=name,
                amount=Decimal("30.00"),
                category=category,
                billing_cycle=BillingCycle.MONTHLY,
                status=SubscriptionStatus.ACTIVE,
                next_billing_date=billing,
                start_date=date(2025, 1, 1),
            )
        items = [
            sub("Netflix", SubscriptionCategory.STREAMING, date(2026, 3, 20)),
            sub("Smart Fit", SubscriptionCategory.GYM, date(2026, 3, 5)),
            sub("Spotify", SubscriptionCategory.STREAMING, date(2026, 3, 1)),
        ]
        result = filter_subscriptions(items, SubscriptionFilter(category=SubscriptionCategory.STREAMING))
        assert [s.name for s in result] == ["Spotify", "Netflix"]


class TestMonthFilter:
    """Month selector modes."""

    MONTHS = [
        "Novembro de 2025", "Dezembro de 2025",
        *[f"{name} de 2026" for name in (
            "Janeiro", "Fevereiro", "Março", "Abril", "Maio", "Junho",
            "Julho", "Agosto", "Setembro", "Outubro", "Novembro", "Dezembro",
        )],
        "Janeiro de 2027", "Fevereiro de 2027", "Março de 2027",
    ]

    def test_next12_starts_at_current_month(self):
        result = filter_months(self.MONTHS, "next12", current_month="Março de 2026")
        assert result[0] == "Março de 2026"
        assert len(result) == 12
        assert result[-1] == "Fevereiro de 2027"

    def test_next12_unknown_current_month(self):
        result = filter_months(self.MONTHS, "next12", current_month="Março de 2030")
        assert result == self.MONTHS[:12]

    def test_current_year(self):
        result = filter_months(self.MONTHS, "current_year", current_month="Março de 2026")
        assert len(result) == 12
        assert all(key.endswith("2026") for key in result)

    def test_all(self):
        assert filter_months(self.MONTHS, "all", current_month="Março de 2026") == self.MONTHS
