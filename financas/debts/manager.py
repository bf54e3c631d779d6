"""
Debt Lifecycle Manager

Owns the loaded debts and months and runs every debt mutation against
the record store.

Every mutation except the status toggle is followed by a full reload of
months and debts; there is no finer-grained cache. The status toggle is
applied locally first and reverted if the store rejects it.
"""

from datetime import datetime
from typing import Awaitable, Iterable, Optional, TypeVar

import structlog

from financas.debts.recurrence import ChainCreation, RecurrenceEngine
from financas.models import Debt, DebtStatus, DebtTemplate, DebtUpdate, NoticeBuilder
from financas.notices import NoticeLogger
from financas.services.storage import Collection, RecordMatcher, RecordStore, StorageError
from financas.services.storage.mapping import (
    debt_update_to_changes,
    map_records,
    month_to_record,
    record_to_debt,
    record_to_month,
)
from financas.state import DebtSnapshot, OptimisticUpdate
from financas.utils.calendar import (
    month_sort_key,
    parse_month_key,
    sort_month_keys,
    today_in_fixed_zone,
)


logger = structlog.get_logger(__name__)

T = TypeVar("T")


class DebtManager:
    """
    Debt and month lifecycle.

    Usage:
        manager = DebtManager(store, notices)
        await manager.load()
        await manager.create(template, current_month="Março de 2026")
        await manager.toggle_status(debt_id)
    """

    def __init__(
        self,
        store: RecordStore,
        notices: NoticeLogger,
        engine: Optional[RecurrenceEngine] = None,
        rollback_partial_chains: bool = False,
    ):
        self._store = store
        self._notices = notices
        self._engine = engine or RecurrenceEngine(
            store, notices, rollback_partial_chains=rollback_partial_chains
        )
        self._snapshot = DebtSnapshot()

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def snapshot(self) -> DebtSnapshot:
        return self._snapshot

    def _replace_snapshot(self, snapshot: DebtSnapshot) -> None:
        self._snapshot = snapshot

    @property
    def known_months(self) -> list[str]:
        """Known MonthKeys in chronological order."""
        return list(self._snapshot.months)

    def by_month(self) -> dict[str, list[Debt]]:
        return self._snapshot.by_month()

    def month_is_settled(self, month_key: str) -> bool:
        return self._snapshot.month_is_settled(month_key)

    async def load(self) -> DebtSnapshot:
        """Reload months and debts from the store and rebuild the snapshot."""
        try:
            month_records = await self._store.select(Collection.MONTHS, order_by="created_at")
            debt_records = await self._store.select(Collection.DEBTS, order_by="created_at")
        except StorageError as e:
            logger.error("debts_load_failed", error=str(e))
            self._notices.load_failed("debt", e)
            raise

        month_keys = []
        for month in map_records(month_records, record_to_month, "month"):
            if parse_month_key(month.month_key) is None:
                logger.warning("month_key_skipped", month_key=month.month_key)
                continue
            if month.month_key not in month_keys:
                month_keys.append(month.month_key)

        self._snapshot = DebtSnapshot(
            months=sort_month_keys(month_keys),
            debts=map_records(debt_records, record_to_debt, "debt"),
        )
        logger.debug(
            "debts_loaded",
            months=len(self._snapshot.months),
            debts=len(self._snapshot.debts),
        )
        return self._snapshot

    async def _write(
        self,
        operation: str,
        write: Awaitable[T],
        entity_type: str = "debt",
        entity_id: Optional[str] = None,
    ) -> T:
        """Await a store write; failures are logged, announced and re-raised."""
        try:
            return await write
        except StorageError as e:
            logger.error(
                "debt_write_failed",
                operation=operation,
                entity_type=entity_type,
                entity_id=entity_id,
                error=str(e),
            )
            self._notices.persistence_failed(entity_type, operation, e, entity_id)
            raise

    # -------------------------------------------------------------------------
    # Debts
    # -------------------------------------------------------------------------

    async def create(self, template: DebtTemplate, current_month: str) -> ChainCreation:
        """
        Expand a template over its target months and persist it.

        Raises:
            NoTargetMonthsError: If the recurrence selects no month
            StorageError: If nothing could be written
        """
        creation = await self._engine.create(template, self.known_months, current_month)
        await self.load()
        return creation

    async def update(self, update: DebtUpdate) -> None:
        """Edit a single row. Other rows of its chain are left alone."""
        await self._write(
            "update",
            self._store.update(Collection.DEBTS, update.id, debt_update_to_changes(update)),
            entity_id=update.id,
        )
        logger.info("debt_updated", debt_id=update.id, month_key=update.month_key)
        self._notices.publish(NoticeBuilder.debt_updated(update.id, update.name))
        await self.load()

    async def delete(self, debt: Debt, delete_all_months: bool = False) -> None:
        """
        Delete one row, or the whole chain it belongs to.

        The chain is every row whose id is the anchor id or whose
        original_id is the anchor id.
        """
        whole_chain = delete_all_months and debt.is_recurrent
        if whole_chain:
            anchor_id = debt.anchor_id
            matcher = RecordMatcher.any_of(("id", anchor_id), ("original_id", anchor_id))
        else:
            matcher = RecordMatcher.by_id(debt.id)

        await self._write(
            "delete",
            self._store.delete(Collection.DEBTS, matcher),
            entity_id=debt.id,
        )
        logger.info(
            "debt_deleted",
            debt_id=debt.id,
            anchor_id=debt.anchor_id,
            whole_chain=whole_chain,
        )
        self._notices.publish(NoticeBuilder.debt_deleted(debt.id, debt.name, whole_chain))
        await self.load()

    async def toggle_status(
        self,
        debt_id: str,
        now: Optional[datetime] = None,
    ) -> Optional[Debt]:
        """
        Flip a row between Pendente and Pago.

        Pago stamps paid_date with today's date in the fixed zone;
        Pendente clears it. Local state changes first; if the store write
        fails the whole snapshot is restored and the error re-raised.

        Returns:
            The updated debt, or None if the id is not loaded
        """
        current = self._snapshot.find(debt_id)
        if current is None:
            logger.warning("debt_toggle_unknown_id", debt_id=debt_id)
            return None

        new_status = current.status.toggled
        paid_date = today_in_fixed_zone(now) if new_status == DebtStatus.PAID else None

        def apply(snapshot: DebtSnapshot) -> DebtSnapshot:
            snapshot.debts = [
                d.model_copy(update={"status": new_status, "paid_date": paid_date})
                if d.id == debt_id else d
                for d in snapshot.debts
            ]
            return snapshot

        async def commit() -> None:
            await self._store.update(Collection.DEBTS, debt_id, {
                "status": new_status.value,
                "paid_date": paid_date.isoformat() if paid_date else None,
            })

        update = OptimisticUpdate(read=lambda: self._snapshot, write=self._replace_snapshot)
        try:
            applied = await update.run(apply=apply, commit=commit)
        except StorageError as e:
            logger.error("debt_status_toggle_failed", debt_id=debt_id, error=str(e))
            self._notices.publish(NoticeBuilder.debt_status_reverted(debt_id, str(e)))
            raise

        logger.info("debt_status_toggled", debt_id=debt_id, status=new_status.value)
        self._notices.publish(
            NoticeBuilder.debt_status_toggled(debt_id, current.name, new_status.value)
        )
        return applied.find(debt_id)

    # -------------------------------------------------------------------------
    # Months
    # -------------------------------------------------------------------------

    async def add_months(self, month_keys: Iterable[str]) -> list[str]:
        """
        Create the given months, skipping the ones already known.

        Returns:
            The MonthKeys actually created, in chronological order

        Raises:
            InvalidMonthKeyError: If any key is malformed (nothing is written)
        """
        requested = []
        for key in month_keys:
            month_sort_key(key)
            if key not in requested:
                requested.append(key)

        known = set(self._snapshot.months)
        new_months = sort_month_keys(k for k in requested if k not in known)
        if not new_months:
            logger.info("months_already_known", requested=requested)
            self._notices.publish(NoticeBuilder.no_new_months())
            return []

        await self._write(
            "add_months",
            self._store.insert(Collection.MONTHS, [month_to_record(k) for k in new_months]),
            entity_type="month",
        )
        logger.info("months_added", month_keys=new_months)
        self._notices.publish(NoticeBuilder.months_added(new_months))
        await self.load()
        return new_months

    async def delete_month(self, month_key: str) -> None:
        """Delete a month and every debt that lives in it."""
        await self._write(
            "delete_month",
            self._store.delete(Collection.DEBTS, RecordMatcher.where("month_key", month_key)),
            entity_type="month",
            entity_id=month_key,
        )
        await self._write(
            "delete_month",
            self._store.delete(Collection.MONTHS, RecordMatcher.where("month_key", month_key)),
            entity_type="month",
            entity_id=month_key,
        )
        logger.info("month_deleted", month_key=month_key)
        self._notices.publish(NoticeBuilder.month_deleted(month_key))
        await self.load()

    async def clear_all(self) -> None:
        """Delete every debt and every month."""
        await self._write(
            "clear",
            self._store.delete(Collection.DEBTS, RecordMatcher.everything()),
        )
        await self._write(
            "clear",
            self._store.delete(Collection.MONTHS, RecordMatcher.everything()),
            entity_type="month",
        )
        self._snapshot = DebtSnapshot()
        logger.info("debts_cleared")
        self._notices.publish(NoticeBuilder.data_cleared("debt"))
