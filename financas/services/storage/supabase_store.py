"""
Supabase Record Store

The production backend: one PostgREST table per collection. Ids and
`created_at` are generated by the database.

Matchers translate to PostgREST filters:
- a single condition      -> .eq(field, value)
- several conditions (OR) -> .or_("a.eq.x,b.eq.y")
- match-all               -> .neq on a value no row holds (the nil
                             UUID id, or a placeholder month_key for
                             months), since PostgREST refuses an
                             unfiltered delete
"""

from typing import Optional, Sequence, Union

import structlog
from supabase import Client, create_client
from tenacity import retry, stop_after_attempt, wait_exponential

from financas.config import get_settings
from financas.services.storage.interface import (
    Collection,
    ConnectionError,
    NotFoundError,
    Record,
    RecordMatcher,
    RecordStore,
    StorageError,
)


logger = structlog.get_logger(__name__)

NIL_UUID = "00000000-0000-0000-0000-000000000000"

# Column and impossible value used to match every row of a collection
MATCH_ALL_FILTERS = {
    Collection.MONTHS: ("month_key", "non-existent-key"),
}
DEFAULT_MATCH_ALL = ("id", NIL_UUID)


class SupabaseRecordStore(RecordStore):
    """Supabase implementation of the record store."""

    def __init__(self, client: Optional[Client] = None):
        self._client = client

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> Client:
        """Create the Supabase client on first use."""
        if self._client is None:
            try:
                settings = get_settings().supabase
                self._client = create_client(settings.url, settings.key)
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Supabase: {e}")
        return self._client

    def _table(self, collection: Collection):
        return self.connect().table(collection.value)

    @staticmethod
    def _apply(query, collection: Collection, matcher: RecordMatcher):
        if matcher.match_all:
            field, value = MATCH_ALL_FILTERS.get(collection, DEFAULT_MATCH_ALL)
            return query.neq(field, value)
        if len(matcher.conditions) == 1:
            condition = matcher.conditions[0]
            return query.eq(condition.field, condition.value)
        return query.or_(
            ",".join(f"{c.field}.eq.{c.value}" for c in matcher.conditions)
        )

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def select(
        self,
        collection: Collection,
        matcher: Optional[RecordMatcher] = None,
        order_by: Optional[str] = None,
    ) -> list[Record]:
        try:
            query = self._table(collection).select("*")
            if matcher is not None:
                query = self._apply(query, collection, matcher)
            if order_by:
                query = query.order(order_by)
            response = query.execute()
        except ConnectionError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to list {collection.value}: {e}")
        return list(response.data or [])

    async def insert(
        self,
        collection: Collection,
        records: Union[Record, Sequence[Record]],
    ) -> list[Record]:
        batch = [records] if isinstance(records, dict) else list(records)
        try:
            response = self._table(collection).insert(batch).execute()
        except ConnectionError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to insert into {collection.value}: {e}")

        if len(response.data or []) != len(batch):
            raise StorageError(
                f"Insert into {collection.value} returned "
                f"{len(response.data or [])} of {len(batch)} records"
            )
        logger.debug("supabase_rows_inserted", collection=collection.value, count=len(batch))
        return list(response.data)

    async def update(
        self,
        collection: Collection,
        record_id: str,
        changes: Record,
    ) -> None:
        try:
            response = (
                self._table(collection)
                .update(changes)
                .eq("id", record_id)
                .execute()
            )
        except ConnectionError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to update {collection.value}: {e}")

        if not response.data:
            raise NotFoundError(f"{collection.value} record not found: {record_id}")

    async def delete(
        self,
        collection: Collection,
        matcher: RecordMatcher,
    ) -> None:
        try:
            self._apply(self._table(collection).delete(), collection, matcher).execute()
        except ConnectionError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to delete from {collection.value}: {e}")
