"""
In-Memory Record Store

Keeps every collection as an insertion-ordered list of dicts. Used by the
test-suite and for running the core without any backend configured.

Records handed out are copies, so callers can never mutate stored state
behind the store's back.
"""

import copy
from datetime import datetime, timezone
from typing import Optional, Sequence, Union
from uuid import uuid4

from financas.services.storage.interface import (
    Collection,
    NotFoundError,
    Record,
    RecordMatcher,
    RecordStore,
)


class InMemoryRecordStore(RecordStore):
    """Dict-backed implementation of the record store."""

    def __init__(self, seed: Optional[dict[Collection, list[Record]]] = None):
        self._collections: dict[Collection, list[Record]] = {
            collection: [] for collection in Collection
        }
        if seed:
            for collection, records in seed.items():
                for record in records:
                    self._collections[Collection(collection)].append(
                        self._stamp(record)
                    )

    def _stamp(self, record: Record) -> Record:
        stored = copy.deepcopy(record)
        stored.setdefault("id", str(uuid4()))
        stored.setdefault("created_at", datetime.now(timezone.utc).isoformat())
        return stored

    def snapshot(self, collection: Collection) -> list[Record]:
        """Copy of everything stored in a collection (for inspection)."""
        return copy.deepcopy(self._collections[collection])

    async def select(
        self,
        collection: Collection,
        matcher: Optional[RecordMatcher] = None,
        order_by: Optional[str] = None,
    ) -> list[Record]:
        records = [
            copy.deepcopy(record)
            for record in self._collections[collection]
            if matcher is None or matcher.matches(record)
        ]
        if order_by:
            # None sorts first, like NULLS FIRST on an ascending order
            records.sort(key=lambda r: (r.get(order_by) is not None, r.get(order_by) or ""))
        return records

    async def insert(
        self,
        collection: Collection,
        records: Union[Record, Sequence[Record]],
    ) -> list[Record]:
        batch = [records] if isinstance(records, dict) else list(records)
        stored = [self._stamp(record) for record in batch]
        self._collections[collection].extend(stored)
        return copy.deepcopy(stored)

    async def update(
        self,
        collection: Collection,
        record_id: str,
        changes: Record,
    ) -> None:
        for record in self._collections[collection]:
            if record.get("id") == record_id:
                record.update(copy.deepcopy(changes))
                return
        raise NotFoundError(f"{collection.value} record not found: {record_id}")

    async def delete(
        self,
        collection: Collection,
        matcher: RecordMatcher,
    ) -> None:
        self._collections[collection] = [
            record for record in self._collections[collection]
            if not matcher.matches(record)
        ]
