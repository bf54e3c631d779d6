"""Tests for recurring debt expansion."""

import pytest
from datetime import date
from decimal import Decimal

from financas.debts import NoTargetMonthsError, RecurrenceEngine, resolve_target_months
from financas.models import (
    ChainAnchor,
    ChainMember,
    DebtTemplate,
    NoticeType,
    Recurrence,
    RecurrenceType,
)
from financas.services.storage import Collection, StorageError
from financas.services.storage.mapping import record_to_debt


MONTHS = ["Janeiro de 2026", "Fevereiro de 2026", "Março de 2026", "Abril de 2026"]


def template(recurrence_type=RecurrenceType.NONE, start=None, end=None, **overrides) -> DebtTemplate:
    data = {
        "name": "Aluguel",
        "amount": Decimal("1500.00"),
        "due_day": 10,
        "recurrence": Recurrence(type=recurrence_type, start_month=start, end_month=end),
    }
    data.update(overrides)
    return DebtTemplate(**data)


class TestResolveTargetMonths:
    """Which months a template expands into."""

    def test_none_targets_current_month(self):
        assert resolve_target_months(Recurrence(), MONTHS, "Março de 2026") == ["Março de 2026"]

    def test_fixed_targets_every_known_month(self):
        recurrence = Recurrence(type=RecurrenceType.FIXED)
        assert resolve_target_months(recurrence, MONTHS, "Março de 2026") == MONTHS

    def test_ranged_is_inclusive(self):
        recurrence = Recurrence(
            type=RecurrenceType.RANGED,
            start_month="Fevereiro de 2026",
            end_month="Março de 2026",
        )
        assert resolve_target_months(recurrence, MONTHS, "Janeiro de 2026") == [
            "Fevereiro de 2026",
            "Março de 2026",
        ]

    def test_ranged_single_month(self):
        recurrence = Recurrence(
            type=RecurrenceType.RANGED,
            start_month="Abril de 2026",
            end_month="Abril de 2026",
        )
        assert resolve_target_months(recurrence, MONTHS, "Janeiro de 2026") == ["Abril de 2026"]

    @pytest.mark.parametrize("start,end", [
        ("Abril de 2026", "Janeiro de 2026"),
        ("Maio de 2026", "Junho de 2026"),
        (None, "Março de 2026"),
        ("Janeiro de 2026", None),
    ])
    def test_ranged_without_valid_bounds_is_empty(self, start, end):
        recurrence = Recurrence(type=RecurrenceType.RANGED, start_month=start, end_month=end)
        assert resolve_target_months(recurrence, MONTHS, "Janeiro de 2026") == []


class TestRecurrenceEngine:
    """Writing anchors and chains."""

    async def test_single_month_debt(self, store, notices):
        engine = RecurrenceEngine(store, notices)
        creation = await engine.create(template(), MONTHS, "Março de 2026")

        assert creation.complete
        assert creation.written == 1
        [row] = store.snapshot(Collection.DEBTS)
        assert row["month_key"] == "Março de 2026"
        assert row["due_date"] == "2026-03-10"
        assert row["status"] == "Pendente"
        assert row["is_recurrent"] is False
        assert row["original_id"] is None
        assert notices.pending[-1].notice_type == NoticeType.DEBT_CREATED

    async def test_ranged_chain_links_to_anchor(self, store, notices):
        """Ranged Fevereiro..Abril writes three rows linked to the first."""
        engine = RecurrenceEngine(store, notices)
        creation = await engine.create(
            template(RecurrenceType.RANGED, "Fevereiro de 2026", "Abril de 2026"),
            MONTHS,
            "Janeiro de 2026",
        )

        assert creation.complete
        rows = store.snapshot(Collection.DEBTS)
        assert [r["month_key"] for r in rows] == [
            "Fevereiro de 2026",
            "Março de 2026",
            "Abril de 2026",
        ]
        anchor_id = rows[0]["id"]
        assert all(r["original_id"] == anchor_id for r in rows)
        assert all(r["is_recurrent"] is True for r in rows)
        assert [r["due_date"] for r in rows] == ["2026-02-10", "2026-03-10", "2026-04-10"]

        debts = [record_to_debt(r) for r in rows]
        assert isinstance(debts[0].link, ChainAnchor)
        assert all(isinstance(d.link, ChainMember) for d in debts[1:])

        notice = notices.pending[-1]
        assert notice.notice_type == NoticeType.DEBT_CHAIN_CREATED
        assert notice.details["month_count"] == 3

    async def test_fixed_chain_covers_known_months_only(self, store, notices):
        engine = RecurrenceEngine(store, notices)
        creation = await engine.create(template(RecurrenceType.FIXED), MONTHS, "Março de 2026")

        assert creation.written == len(MONTHS)
        assert [d.month_key for d in creation.debts] == MONTHS

    async def test_fixed_chain_with_single_known_month(self, store, notices):
        """A one-month fixed chain is still an anchor linked to itself."""
        engine = RecurrenceEngine(store, notices)
        creation = await engine.create(
            template(RecurrenceType.FIXED), ["Março de 2026"], "Março de 2026"
        )

        assert creation.complete
        assert isinstance(creation.anchor.link, ChainAnchor)

    async def test_no_target_months_writes_nothing(self, store, notices):
        """Start after end: nothing is written and the user is told."""
        engine = RecurrenceEngine(store, notices)
        with pytest.raises(NoTargetMonthsError):
            await engine.create(
                template(RecurrenceType.RANGED, "Abril de 2026", "Janeiro de 2026"),
                MONTHS,
                "Janeiro de 2026",
            )

        assert store.snapshot(Collection.DEBTS) == []
        assert notices.pending[-1].notice_type == NoticeType.NO_TARGET_MONTHS

    async def test_anchor_failure_raises(self, flaky_store, notices):
        store = flaky_store(insert={1})
        engine = RecurrenceEngine(store, notices)

        with pytest.raises(StorageError):
            await engine.create(template(RecurrenceType.FIXED), MONTHS, "Janeiro de 2026")

        assert store.snapshot(Collection.DEBTS) == []
        assert notices.pending[-1].notice_type == NoticeType.PERSISTENCE_FAILED

    async def test_member_failure_reports_incomplete_chain(self, flaky_store, notices):
        """The anchor stays behind and the outcome says so."""
        store = flaky_store(insert={2})
        engine = RecurrenceEngine(store, notices)

        creation = await engine.create(template(RecurrenceType.FIXED), MONTHS, "Janeiro de 2026")

        assert not creation.complete
        assert creation.written == 1
        assert creation.expected == 4
        assert creation.error_message == "insert failed"
        assert len(store.snapshot(Collection.DEBTS)) == 1

        notice = notices.pending[-1]
        assert notice.notice_type == NoticeType.DEBT_CHAIN_INCOMPLETE
        assert notice.details == {"written": 1, "expected": 4, "rolled_back": False}

    async def test_member_failure_with_rollback(self, flaky_store, notices):
        store = flaky_store(insert={2})
        engine = RecurrenceEngine(store, notices, rollback_partial_chains=True)

        with pytest.raises(StorageError):
            await engine.create(template(RecurrenceType.FIXED), MONTHS, "Janeiro de 2026")

        assert store.snapshot(Collection.DEBTS) == []
        assert notices.pending[-1].details["rolled_back"] is True

    async def test_failed_rollback_leaves_anchor(self, flaky_store, notices):
        store = flaky_store(insert={2}, delete={1})
        engine = RecurrenceEngine(store, notices, rollback_partial_chains=True)

        with pytest.raises(StorageError, match="insert failed"):
            await engine.create(template(RecurrenceType.FIXED), MONTHS, "Janeiro de 2026")

        assert len(store.snapshot(Collection.DEBTS)) == 1
        assert notices.pending[-1].details["rolled_back"] is False

    async def test_link_failure_reports_incomplete_chain(self, flaky_store, notices):
        """Linking the anchor to itself can fail too."""
        store = flaky_store(update={1})
        engine = RecurrenceEngine(store, notices)

        creation = await engine.create(template(RecurrenceType.FIXED), MONTHS, "Janeiro de 2026")

        assert not creation.complete
        assert creation.written == 1

    async def test_due_day_rolls_over_short_month(self, store, notices):
        engine = RecurrenceEngine(store, notices)
        creation = await engine.create(
            template(due_day=31), ["Fevereiro de 2026"], "Fevereiro de 2026"
        )
        assert creation.anchor.due_date == date(2026, 3, 3)


class TestChainProperties:
    """Chain integrity over every known-month prefix."""

    async def test_scenario_fixed_over_three_months(self, store, notices):
        engine = RecurrenceEngine(store, notices)
        await engine.create(
            template(RecurrenceType.FIXED, due_day=15),
            ["Janeiro de 2026", "Fevereiro de 2026", "Março de 2026"],
            "Janeiro de 2026",
        )

        rows = store.snapshot(Collection.DEBTS)
        assert [r["due_date"] for r in rows] == ["2026-01-15", "2026-02-15", "2026-03-15"]
        assert rows[1]["original_id"] == rows[0]["id"]
        assert rows[2]["original_id"] == rows[0]["id"]

    @pytest.mark.parametrize("count", [1, 2, 4])
    async def test_exactly_one_self_linked_row(self, store, notices, count):
        engine = RecurrenceEngine(store, notices)
        await engine.create(template(RecurrenceType.FIXED), MONTHS[:count], "Janeiro de 2026")

        rows = store.snapshot(Collection.DEBTS)
        anchors = [r for r in rows if r["original_id"] == r["id"]]
        assert len(anchors) == 1
        assert all(r["original_id"] == anchors[0]["id"] for r in rows)
