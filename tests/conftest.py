"""
Shared fixtures.

Every manager test runs against the in-memory record store. Failures are
injected with FlakyRecordStore, which raises StorageError on chosen calls.
"""

from typing import Optional, Sequence, Union

import pytest

from financas.config import AppSettings
from financas.notices import NoticeLogger
from financas.services.storage import (
    Collection,
    InMemoryRecordStore,
    Record,
    RecordMatcher,
    StorageError,
)


class FlakyRecordStore(InMemoryRecordStore):
    """
    In-memory store that fails on demand.

    `fail_on` maps an operation name ("select", "insert", "update",
    "delete") to the 1-based call numbers that should fail.
    """

    def __init__(self, fail_on: Optional[dict[str, set[int]]] = None, **kwargs):
        super().__init__(**kwargs)
        self.fail_on = fail_on or {}
        self.calls: dict[str, int] = {}

    def _maybe_fail(self, operation: str) -> None:
        self.calls[operation] = self.calls.get(operation, 0) + 1
        if self.calls[operation] in self.fail_on.get(operation, set()):
            raise StorageError(f"{operation} failed")

    async def select(self, collection: Collection, matcher: Optional[RecordMatcher] = None,
                     order_by: Optional[str] = None) -> list[Record]:
        self._maybe_fail("select")
        return await super().select(collection, matcher, order_by)

    async def insert(self, collection: Collection,
                     records: Union[Record, Sequence[Record]]) -> list[Record]:
        self._maybe_fail("insert")
        return await super().insert(collection, records)

    async def update(self, collection: Collection, record_id: str, changes: Record) -> None:
        self._maybe_fail("update")
        await super().update(collection, record_id, changes)

    async def delete(self, collection: Collection, matcher: RecordMatcher) -> None:
        self._maybe_fail("delete")
        await super().delete(collection, matcher)


@pytest.fixture
def store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
def notices() -> NoticeLogger:
    return NoticeLogger()


@pytest.fixture
def app_settings() -> AppSettings:
    return AppSettings(storage_backend="memory", timezone="America/Sao_Paulo")


@pytest.fixture
def flaky_store():
    """Factory: flaky_store(insert={2}) fails the second insert."""
    def make(**fail_on: set[int]) -> FlakyRecordStore:
        return FlakyRecordStore(fail_on=fail_on)
    return make
