"""
Debt Recurrence Engine

Expands one debt template into one row per target month.

Flow:
1. Resolve the target months (none / fixed / ranged)
2. Write the first month's row (the anchor)
3. Recurring only: link the anchor to itself, then bulk-write the
   remaining months pointing at the anchor

CRITICAL: Steps 2 and 3 are separate writes and the store has no
transactions. A failure in step 3 leaves an incomplete chain behind.
The engine reports that instead of crashing, and can optionally delete
what it already wrote (`rollback_partial_chains`).
"""

from typing import Optional, Sequence

import structlog
from pydantic import BaseModel, Field

from financas.models import Debt, DebtTemplate, NoticeBuilder, Recurrence, RecurrenceType
from financas.notices import NoticeLogger
from financas.services.storage import Collection, RecordMatcher, RecordStore, StorageError
from financas.services.storage.mapping import record_to_debt, template_to_record


logger = structlog.get_logger(__name__)


class NoTargetMonthsError(Exception):
    """A recurrence resolved to no months; nothing was written."""

    def __init__(self, recurrence: Recurrence):
        self.recurrence = recurrence
        super().__init__("no months selected")


def resolve_target_months(
    recurrence: Recurrence,
    known_months: Sequence[str],
    current_month: str,
) -> list[str]:
    """
    Ordered months a template expands into.

    - none:   the month being viewed
    - fixed:  every month known right now (later months are not included)
    - ranged: known months from start to end inclusive, by position in
              `known_months`. A bound that is not a known month, or a start
              after the end, gives an empty list.
    """
    if recurrence.type == RecurrenceType.NONE:
        return [current_month]

    if recurrence.type == RecurrenceType.FIXED:
        return list(known_months)

    if not recurrence.start_month or not recurrence.end_month:
        return []
    if recurrence.start_month not in known_months or recurrence.end_month not in known_months:
        return []

    start = known_months.index(recurrence.start_month)
    end = known_months.index(recurrence.end_month)
    if start > end:
        return []
    return list(known_months[start:end + 1])


class ChainCreation(BaseModel):
    """Outcome of expanding one template."""

    anchor: Debt
    members: list[Debt] = Field(default_factory=list)
    expected: int = Field(..., ge=1, description="Rows the template should produce")
    error_message: Optional[str] = None

    @property
    def debts(self) -> list[Debt]:
        return [self.anchor, *self.members]

    @property
    def written(self) -> int:
        return 1 + len(self.members)

    @property
    def complete(self) -> bool:
        return self.error_message is None and self.written == self.expected


class RecurrenceEngine:
    """
    Writes the rows for a submitted debt template.

    Usage:
        engine = RecurrenceEngine(store, notices)
        creation = await engine.create(template, known_months, "Março de 2026")
    """

    def __init__(
        self,
        store: RecordStore,
        notices: NoticeLogger,
        rollback_partial_chains: bool = False,
    ):
        self._store = store
        self._notices = notices
        self._rollback_partial_chains = rollback_partial_chains

    async def create(
        self,
        template: DebtTemplate,
        known_months: Sequence[str],
        current_month: str,
    ) -> ChainCreation:
        """
        Expand and persist a template.

        Raises:
            NoTargetMonthsError: If the recurrence selects no month
            StorageError: If the anchor cannot be written, or the chain
                          could not be completed and was rolled back
        """
        targets = resolve_target_months(template.recurrence, known_months, current_month)
        if not targets:
            logger.warning(
                "debt_no_target_months",
                name=template.name,
                recurrence=template.recurrence.type.value,
                start_month=template.recurrence.start_month,
                end_month=template.recurrence.end_month,
            )
            self._notices.publish(NoticeBuilder.no_target_months(template.name))
            raise NoTargetMonthsError(template.recurrence)

        try:
            [anchor_record] = await self._store.insert(
                Collection.DEBTS, template_to_record(template, targets[0])
            )
        except StorageError as e:
            logger.error("debt_anchor_insert_failed", name=template.name, error=str(e))
            self._notices.persistence_failed("debt", "create", e)
            raise

        anchor_id = str(anchor_record["id"])

        if not template.recurrence.is_recurring:
            creation = ChainCreation(anchor=record_to_debt(anchor_record), expected=1)
            logger.info("debt_created", debt_id=anchor_id, month_key=targets[0])
            self._notices.publish(NoticeBuilder.debt_created(anchor_id, template.name, 1))
            return creation

        member_records = []
        try:
            await self._store.update(Collection.DEBTS, anchor_id, {"original_id": anchor_id})
            anchor_record["original_id"] = anchor_id

            remaining = [
                template_to_record(template, month_key, original_id=anchor_id)
                for month_key in targets[1:]
            ]
            if remaining:
                member_records = await self._store.insert(Collection.DEBTS, remaining)
        except StorageError as e:
            return await self._chain_incomplete(
                template, anchor_record, member_records, len(targets), e
            )

        creation = ChainCreation(
            anchor=record_to_debt(anchor_record),
            members=[record_to_debt(r) for r in member_records],
            expected=len(targets),
        )
        logger.info(
            "debt_chain_created",
            anchor_id=anchor_id,
            month_count=creation.written,
            recurrence=template.recurrence.type.value,
        )
        self._notices.publish(
            NoticeBuilder.debt_created(anchor_id, template.name, creation.written)
        )
        return creation

    async def _chain_incomplete(
        self,
        template: DebtTemplate,
        anchor_record: dict,
        member_records: list[dict],
        expected: int,
        error: StorageError,
    ) -> ChainCreation:
        anchor_id = str(anchor_record["id"])
        written = 1 + len(member_records)
        logger.error(
            "debt_chain_incomplete",
            anchor_id=anchor_id,
            written=written,
            expected=expected,
            error=str(error),
        )

        if not self._rollback_partial_chains:
            self._notices.publish(NoticeBuilder.debt_chain_incomplete(
                anchor_id=anchor_id,
                name=template.name,
                written=written,
                expected=expected,
                error_message=str(error),
                rolled_back=False,
            ))
            return ChainCreation(
                anchor=record_to_debt(anchor_record),
                members=[record_to_debt(r) for r in member_records],
                expected=expected,
                error_message=str(error),
            )

        try:
            await self._store.delete(
                Collection.DEBTS,
                RecordMatcher.any_of(("id", anchor_id), ("original_id", anchor_id)),
            )
        except StorageError as rollback_error:
            logger.error(
                "debt_chain_rollback_failed",
                anchor_id=anchor_id,
                error=str(rollback_error),
            )
            self._notices.publish(NoticeBuilder.debt_chain_incomplete(
                anchor_id=anchor_id,
                name=template.name,
                written=written,
                expected=expected,
                error_message=str(error),
                rolled_back=False,
            ))
            raise error from rollback_error

        logger.info("debt_chain_rolled_back", anchor_id=anchor_id, removed=written)
        self._notices.publish(NoticeBuilder.debt_chain_incomplete(
            anchor_id=anchor_id,
            name=template.name,
            written=written,
            expected=expected,
            error_message=str(error),
            rolled_back=True,
        ))
        raise error
