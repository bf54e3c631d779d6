"""
Tests for Finanças

Test strategy:
1. Unit tests for individual components (models, engines, validators)
2. Manager tests against the in-memory record store
3. No real backend calls in tests (use mocks)
"""

import pytest
from datetime import date
from decimal import Decimal

from pydantic import TypeAdapter

from financas.models import (
    BillingCycle,
    Card,
    CardStatus,
    CardType,
    ChainAnchor,
    ChainLink,
    ChainMember,
    Debt,
    DebtStatus,
    DebtTemplate,
    Installment,
    InstallmentDraft,
    Notice,
    NoticeBuilder,
    NoticeSeverity,
    NoticeType,
    Recurrence,
    RecurrenceType,
    Standalone,
    Subscription,
    split_amount,
)


def make_debt(**overrides) -> Debt:
    data = {
        "id": "d1",
        "month_key": "Março de 2026",
        "name": "Aluguel",
        "amount": Decimal("1500.00"),
    }
    data.update(overrides)
    return Debt(**data)


class TestDebtModels:
    """Tests for debt-related Pydantic models."""

    def test_debt_defaults(self):
        """A new debt row is pending, standalone and non-recurring."""
        debt = make_debt()
        assert debt.status == DebtStatus.PENDING
        assert debt.is_recurrent is False
        assert debt.recurrence.type == RecurrenceType.NONE
        assert debt.paid_date is None

    def test_debt_strips_whitespace(self):
        """Test that whitespace is stripped from the debt name."""
        debt = make_debt(name="  Aluguel  ")
        assert debt.name == "Aluguel"

    def test_debt_rejects_non_positive_amount(self):
        """Test that zero and negative amounts are rejected."""
        with pytest.raises(ValueError):
            make_debt(amount=Decimal("0"))
        with pytest.raises(ValueError):
            make_debt(amount=Decimal("-10.00"))

    def test_status_toggles_both_ways(self):
        assert DebtStatus.PENDING.toggled == DebtStatus.PAID
        assert DebtStatus.PAID.toggled == DebtStatus.PENDING

    def test_link_standalone(self):
        """No original_id means the row is not in a chain."""
        assert isinstance(make_debt().link, Standalone)

    def test_link_anchor(self):
        """The anchor points at itself."""
        link = make_debt(id="a", original_id="a", is_recurrent=True).link
        assert isinstance(link, ChainAnchor)
        assert link.anchor_id == "a"

    def test_link_member(self):
        """A member points at the anchor."""
        link = make_debt(id="b", original_id="a", is_recurrent=True).link
        assert isinstance(link, ChainMember)
        assert link.anchor_id == "a"

    def test_anchor_id_falls_back_to_own_id(self):
        assert make_debt(id="x").anchor_id == "x"
        assert make_debt(id="y", original_id="x").anchor_id == "x"

    def test_offers_chain_delete_only_for_linked_recurring_rows(self):
        assert make_debt(id="a", original_id="a", is_recurrent=True).offers_chain_delete
        assert not make_debt(id="a", is_recurrent=True).offers_chain_delete
        assert not make_debt(id="a", original_id="a", is_recurrent=False).offers_chain_delete

    def test_is_paid(self):
        assert make_debt(status=DebtStatus.PAID).is_paid
        assert not make_debt().is_paid

    def test_chain_link_parses_by_kind(self):
        adapter = TypeAdapter(ChainLink)
        assert adapter.validate_python({"kind": "member", "anchor_id": "a"}) == ChainMember(anchor_id="a")
        assert isinstance(adapter.validate_python({"kind": "standalone"}), Standalone)

    def test_template_due_day_bounds(self):
        """Due day must be within 1..31."""
        with pytest.raises(ValueError):
            DebtTemplate(name="X", amount=Decimal("10.00"), due_day=0)
        with pytest.raises(ValueError):
            DebtTemplate(name="X", amount=Decimal("10.00"), due_day=32)

    def test_recurrence_is_recurring(self):
        assert not Recurrence().is_recurring
        assert Recurrence(type=RecurrenceType.FIXED).is_recurring
        assert Recurrence(type=RecurrenceType.RANGED).is_recurring


class TestInstallmentModels:
    """Tests for installment models."""

    def test_split_amount_rounds_half_up(self):
        assert split_amount(Decimal("100.00"), 3) == Decimal("33.33")
        assert split_amount(Decimal("100.00"), 8) == Decimal("12.50")
        assert split_amount(Decimal("0.05"), 2) == Decimal("0.03")

    def test_draft_installment_amount(self):
        draft = InstallmentDraft(
            name="Notebook",
            total_amount=Decimal("3000.00"),
            total_installments=10,
            first_due_date=date(2026, 1, 15),
        )
        assert draft.installment_amount == Decimal("300.00")

    def test_paid_cannot_exceed_total(self):
        """Test paid installments cannot exceed the total."""
        with pytest.raises(ValueError, match="Paid installments cannot exceed total installments"):
            Installment(
                id="i1",
                name="Notebook",
                total_amount=Decimal("3000.00"),
                installment_amount=Decimal("300.00"),
                total_installments=10,
                paid_installments=11,
                first_due_date=date(2026, 1, 15),
            )

    def test_remaining_amount(self):
        inst = Installment(
            id="i1",
            name="Notebook",
            total_amount=Decimal("3000.00"),
            installment_amount=Decimal("300.00"),
            total_installments=10,
            paid_installments=4,
            first_due_date=date(2026, 1, 15),
        )
        assert inst.remaining_installments == 6
        assert inst.remaining_amount == Decimal("1800.00")


class TestRecordModels:
    """Tests for subscriptions and cards."""

    def test_billing_cycle_months(self):
        assert BillingCycle.MONTHLY.months == 1
        assert BillingCycle.QUARTERLY.months == 3
        assert BillingCycle.SEMIANNUAL.months == 6
        assert BillingCycle.ANNUAL.months == 12

    def test_subscription_costs(self):
        sub = Subscription(
            name="Anuidade",
            amount=Decimal("120.00"),
            billing_cycle=BillingCycle.ANNUAL,
            next_billing_date=date(2026, 5, 1),
            start_date=date(2025, 5, 1),
        )
        assert sub.monthly_cost == Decimal("10")
        assert sub.annual_cost == Decimal("120.00")

    def test_card_is_active_credit(self):
        assert Card(name="Nubank").is_active_credit
        assert not Card(name="VR", type=CardType.MEAL).is_active_credit
        assert not Card(name="Velho", status=CardStatus.BLOCKED).is_active_credit

    def test_card_last_four_max_length(self):
        with pytest.raises(ValueError):
            Card(name="Nubank", last_four_digits="12345")


class TestNoticeModels:
    """Tests for notice models."""

    def test_notice_to_log_dict(self):
        """Test conversion to a structured log dict."""
        notice = Notice(
            notice_type=NoticeType.DEBT_CREATED,
            severity=NoticeSeverity.SUCCESS,
            entity_type="debt",
            entity_id="d1",
            title="Dívida adicionada",
        )
        log_dict = notice.to_log_dict()
        assert log_dict["notice_type"] == "debt_created"
        assert log_dict["severity"] == "success"
        assert log_dict["entity_id"] == "d1"
        assert "notice_id" in log_dict

    def test_builder_debt_created_single_and_chain(self):
        single = NoticeBuilder.debt_created("d1", "Aluguel", 1)
        chain = NoticeBuilder.debt_created("d1", "Aluguel", 3)
        assert single.notice_type == NoticeType.DEBT_CREATED
        assert chain.notice_type == NoticeType.DEBT_CHAIN_CREATED
        assert chain.details["month_count"] == 3

    def test_builder_validation_failed(self):
        notice = NoticeBuilder.validation_failed("debt", ["O valor deve ser maior que zero."])
        assert notice.severity == NoticeSeverity.ERROR
        assert notice.title == "Formulário Inválido"
        assert notice.details["errors"] == ["O valor deve ser maior que zero."]

    def test_builder_persistence_failed(self):
        notice = NoticeBuilder.persistence_failed("debt", "update", "boom", entity_id="d1")
        assert notice.notice_type == NoticeType.PERSISTENCE_FAILED
        assert notice.error_message == "boom"
        assert notice.details["operation"] == "update"
