"""Services package."""

from financas.services.storage import (
    Collection,
    ConnectionError,
    GoogleSheetsRecordStore,
    InMemoryRecordStore,
    NotFoundError,
    RecordMatcher,
    RecordStore,
    StorageError,
    SupabaseRecordStore,
)

__all__ = [
    # Storage services
    "Collection",
    "ConnectionError",
    "GoogleSheetsRecordStore",
    "InMemoryRecordStore",
    "NotFoundError",
    "RecordMatcher",
    "RecordStore",
    "StorageError",
    "SupabaseRecordStore",
]
