"""
Abstract Record Store Interface

DESIGN DECISION: The core talks to a generic record store with four
operations per collection. This allows us to:
1. Use Supabase (the production backend) or Google Sheets
2. Use in-memory storage for testing
3. Keep business logic decoupled from storage implementation

Records at this boundary are plain dicts with snake_case field names.
Converting them to and from models is the job of `mapping.py`.

The interface is intentionally simple - we're not building a full ORM.
There are no transactions: a multi-row write can half-succeed, and the
callers are written with that in mind.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Mapping, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict


Record = dict[str, Any]


class Collection(str, Enum):
    """Record collections known to the core."""
    DEBTS = "debts"
    MONTHS = "months"
    INSTALLMENTS = "installments"
    SUBSCRIPTIONS = "subscriptions"
    CARDS = "cards"


class FieldCondition(BaseModel):
    """`field == value`"""
    model_config = ConfigDict(frozen=True)

    field: str
    value: Any

    def matches(self, record: Mapping[str, Any]) -> bool:
        return record.get(self.field) == self.value


class RecordMatcher(BaseModel):
    """
    Selects records for reads and deletes.

    Conditions are joined with OR. `match_all` selects every record and
    is only used to clear a whole collection.

    Usage:
        RecordMatcher.by_id(debt_id)
        RecordMatcher.where("month_key", "Março de 2026")
        RecordMatcher.any_of(("id", anchor_id), ("original_id", anchor_id))
    """
    model_config = ConfigDict(frozen=True)

    conditions: tuple[FieldCondition, ...] = ()
    match_all: bool = False

    @classmethod
    def by_id(cls, record_id: str) -> "RecordMatcher":
        return cls.where("id", record_id)

    @classmethod
    def where(cls, field: str, value: Any) -> "RecordMatcher":
        return cls(conditions=(FieldCondition(field=field, value=value),))

    @classmethod
    def any_of(cls, *pairs: tuple[str, Any]) -> "RecordMatcher":
        if not pairs:
            raise ValueError("any_of needs at least one condition")
        return cls(conditions=tuple(
            FieldCondition(field=field, value=value) for field, value in pairs
        ))

    @classmethod
    def everything(cls) -> "RecordMatcher":
        return cls(match_all=True)

    def matches(self, record: Mapping[str, Any]) -> bool:
        if self.match_all:
            return True
        return any(condition.matches(record) for condition in self.conditions)


class RecordStore(ABC):
    """
    Abstract interface for record storage operations.

    Any storage implementation (Supabase, Google Sheets, memory)
    must implement these methods.
    """

    @abstractmethod
    async def select(
        self,
        collection: Collection,
        matcher: Optional[RecordMatcher] = None,
        order_by: Optional[str] = None,
    ) -> list[Record]:
        """
        List records of a collection.

        Args:
            collection: Collection to read
            matcher: Optional filter; None returns every record
            order_by: Optional field to sort ascending by

        Returns:
            Matching records

        Raises:
            StorageError: If the read fails
        """
        pass

    @abstractmethod
    async def insert(
        self,
        collection: Collection,
        records: Union[Record, Sequence[Record]],
    ) -> list[Record]:
        """
        Insert one record or a batch of records.

        Args:
            collection: Target collection
            records: A single record or a sequence of records

        Returns:
            The stored records, each with its generated `id`

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def update(
        self,
        collection: Collection,
        record_id: str,
        changes: Record,
    ) -> None:
        """
        Apply a partial update to one record.

        Raises:
            NotFoundError: If no record has this id
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def delete(
        self,
        collection: Collection,
        matcher: RecordMatcher,
    ) -> None:
        """
        Delete every record selected by the matcher.

        Raises:
            StorageError: If the delete fails
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
