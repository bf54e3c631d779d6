"""
Storage Services Package

Provides the abstract record store and its implementations.
Supabase is the production backend; Google Sheets and an in-memory store
are interchangeable with it.
"""

from financas.services.storage.interface import (
    Collection,
    ConnectionError,
    FieldCondition,
    NotFoundError,
    Record,
    RecordMatcher,
    RecordStore,
    StorageError,
)
from financas.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsRecordStore,
)
from financas.services.storage.memory import InMemoryRecordStore
from financas.services.storage.supabase_store import SupabaseRecordStore

__all__ = [
    # Interface
    "Collection",
    "FieldCondition",
    "Record",
    "RecordMatcher",
    "RecordStore",
    # Exceptions
    "ConnectionError",
    "NotFoundError",
    "StorageError",
    # Implementations
    "GoogleSheetsClient",
    "GoogleSheetsRecordStore",
    "InMemoryRecordStore",
    "SupabaseRecordStore",
]
