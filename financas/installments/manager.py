"""
Installment Manager

Loads installments through the status projection and persists every
change of the paid count together with the fields derived from it.
"""

from datetime import date
from typing import Optional

import structlog

from financas.installments.status import (
    InstallmentCancelledError,
    derive_status,
    mark_through_installment,
    next_due_date,
    project_installment,
    with_paid_count,
)
from financas.models import (
    Installment,
    InstallmentDraft,
    InstallmentStatus,
    NoticeBuilder,
)
from financas.notices import NoticeLogger
from financas.services.storage import (
    Collection,
    NotFoundError,
    RecordMatcher,
    RecordStore,
    StorageError,
)
from financas.services.storage.mapping import (
    draft_to_record,
    map_records,
    record_to_installment,
)
from financas.utils.calendar import today_in_fixed_zone


logger = structlog.get_logger(__name__)


def _derived_fields(installment: Installment) -> dict:
    return {
        "paid_installments": installment.paid_installments,
        "next_due_date": installment.next_due_date.isoformat() if installment.next_due_date else None,
        "status": installment.status.value,
    }


class InstallmentManager:
    """
    Installment lifecycle.

    Usage:
        manager = InstallmentManager(store, notices)
        await manager.load()
        await manager.mark_through(installment_id, 3)
    """

    def __init__(self, store: RecordStore, notices: NoticeLogger):
        self._store = store
        self._notices = notices
        self._installments: list[Installment] = []

    @property
    def installments(self) -> list[Installment]:
        return list(self._installments)

    def find(self, installment_id: str) -> Optional[Installment]:
        for installment in self._installments:
            if installment.id == installment_id:
                return installment
        return None

    def _replace(self, updated: Installment) -> None:
        self._installments = [
            updated if inst.id == updated.id else inst for inst in self._installments
        ]

    def _persistence_failed(self, operation: str, error: StorageError, installment_id: Optional[str]) -> None:
        logger.error(
            "installment_write_failed",
            operation=operation,
            installment_id=installment_id,
            error=str(error),
        )
        self._notices.persistence_failed("installment", operation, error, installment_id)

    async def load(self, today: Optional[date] = None) -> list[Installment]:
        """Reload installments, recomputing next due date and status."""
        today = today or today_in_fixed_zone()
        try:
            records = await self._store.select(Collection.INSTALLMENTS, order_by="created_at")
        except StorageError as e:
            logger.error("installments_load_failed", error=str(e))
            self._notices.load_failed("installment", e)
            raise

        self._installments = [
            project_installment(inst, today)
            for inst in map_records(records, record_to_installment, "installment")
        ]
        logger.debug("installments_loaded", count=len(self._installments))
        return self.installments

    async def save(
        self,
        draft: InstallmentDraft,
        installment_id: Optional[str] = None,
        today: Optional[date] = None,
    ) -> None:
        """
        Create an installment, or edit the one with `installment_id`.

        A new installment starts with nothing paid. An edit keeps the
        per-installment amount computed at creation and the paid count
        (clamped to the new total); next due date and status are derived
        again from the edited fields.
        """
        today = today or today_in_fixed_zone()
        record = draft_to_record(draft)

        if installment_id is None:
            first_due = next_due_date(draft.first_due_date, 0)
            record.update({
                "installment_amount": str(draft.installment_amount),
                "paid_installments": 0,
                "next_due_date": first_due.isoformat(),
                "status": derive_status(draft.total_installments, 0, first_due, today).value,
            })
            try:
                [stored] = await self._store.insert(Collection.INSTALLMENTS, record)
            except StorageError as e:
                self._persistence_failed("create", e, None)
                raise
            installment_id = str(stored["id"])
            created = True
        else:
            existing = self.find(installment_id)
            if existing is None:
                raise NotFoundError(f"installment not loaded: {installment_id}")

            edited = Installment(
                id=installment_id,
                installment_amount=existing.installment_amount,
                status=existing.status,
                paid_installments=min(existing.paid_installments, draft.total_installments),
                **draft.model_dump(),
            )
            edited = with_paid_count(edited, edited.paid_installments, today)
            record.update({"installment_amount": str(edited.installment_amount)})
            record.update(_derived_fields(edited))
            try:
                await self._store.update(Collection.INSTALLMENTS, installment_id, record)
            except StorageError as e:
                self._persistence_failed("update", e, installment_id)
                raise
            created = False

        logger.info("installment_saved", installment_id=installment_id, created=created)
        self._notices.publish(NoticeBuilder.installment_saved(installment_id, draft.name, created))
        await self.load(today)

    async def delete(self, installment_id: str) -> None:
        try:
            await self._store.delete(Collection.INSTALLMENTS, RecordMatcher.by_id(installment_id))
        except StorageError as e:
            self._persistence_failed("delete", e, installment_id)
            raise

        self._installments = [i for i in self._installments if i.id != installment_id]
        logger.info("installment_deleted", installment_id=installment_id)
        self._notices.publish(NoticeBuilder.record_deleted("installment", installment_id))

    async def mark_through(
        self,
        installment_id: str,
        clicked: int,
        today: Optional[date] = None,
    ) -> Optional[Installment]:
        """
        Handle a click on installment marker `clicked` (1-based).

        Paid count, next due date and status are written in one update.

        Returns:
            The updated installment, or None if the id is not loaded

        Raises:
            InstallmentCancelledError: If the installment is cancelled
        """
        current = self.find(installment_id)
        if current is None:
            logger.warning("installment_unknown_id", installment_id=installment_id)
            return None

        try:
            updated = mark_through_installment(current, clicked, today or today_in_fixed_zone())
        except InstallmentCancelledError:
            logger.warning("installment_cancelled_mark_rejected", installment_id=installment_id)
            raise

        try:
            await self._store.update(
                Collection.INSTALLMENTS, installment_id, _derived_fields(updated)
            )
        except StorageError as e:
            self._persistence_failed("mark_paid", e, installment_id)
            raise

        self._replace(updated)
        logger.info(
            "installment_payment_marked",
            installment_id=installment_id,
            paid=updated.paid_installments,
            status=updated.status.value,
        )
        self._notices.publish(NoticeBuilder.installment_payment_marked(
            installment_id,
            updated.paid_installments,
            updated.total_installments,
            updated.status.value,
        ))
        return updated

    async def cancel(self, installment_id: str) -> Optional[Installment]:
        """Mark an installment as cancelled. Nothing derives it back."""
        current = self.find(installment_id)
        if current is None:
            logger.warning("installment_unknown_id", installment_id=installment_id)
            return None

        try:
            await self._store.update(
                Collection.INSTALLMENTS,
                installment_id,
                {"status": InstallmentStatus.CANCELLED.value},
            )
        except StorageError as e:
            self._persistence_failed("cancel", e, installment_id)
            raise

        updated = current.model_copy(update={"status": InstallmentStatus.CANCELLED})
        self._replace(updated)
        logger.info("installment_cancelled", installment_id=installment_id)
        self._notices.publish(NoticeBuilder.installment_cancelled(installment_id, current.name))
        return updated

    async def clear_all(self) -> None:
        try:
            await self._store.delete(Collection.INSTALLMENTS, RecordMatcher.everything())
        except StorageError as e:
            self._persistence_failed("clear", e, None)
            raise

        self._installments = []
        logger.info("installments_cleared")
        self._notices.publish(NoticeBuilder.data_cleared("installment"))
