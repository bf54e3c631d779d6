"""
Subscription and Card Managers

Flat records with no derived state: load, save (insert or update),
delete and clear. Local state is patched after each successful write
instead of reloading the collection.
"""

from typing import Callable, Generic, Optional, TypeVar

import structlog
from pydantic import BaseModel

from financas.models import Card, NoticeBuilder, Subscription
from financas.notices import NoticeLogger
from financas.services.storage import Collection, Record, RecordMatcher, RecordStore, StorageError
from financas.services.storage.mapping import (
    card_to_record,
    map_records,
    record_to_card,
    record_to_subscription,
    subscription_to_record,
)


logger = structlog.get_logger(__name__)

M = TypeVar("M", bound=BaseModel)


class RecordManager(Generic[M]):
    """Load / save / delete / clear for one flat collection."""

    collection: Collection
    entity_type: str
    to_record: Callable[[M], Record]
    from_record: Callable[[Record], M]

    def __init__(self, store: RecordStore, notices: NoticeLogger):
        self._store = store
        self._notices = notices
        self._items: list[M] = []

    @property
    def items(self) -> list[M]:
        return list(self._items)

    def find(self, item_id: str) -> Optional[M]:
        for item in self._items:
            if item.id == item_id:
                return item
        return None

    def _failed(self, operation: str, error: StorageError, item_id: Optional[str] = None) -> None:
        logger.error(
            "record_write_failed",
            entity_type=self.entity_type,
            operation=operation,
            record_id=item_id,
            error=str(error),
        )
        self._notices.persistence_failed(self.entity_type, operation, error, item_id)

    async def load(self) -> list[M]:
        """Reload the collection in creation order."""
        try:
            records = await self._store.select(self.collection, order_by="created_at")
        except StorageError as e:
            logger.error("records_load_failed", entity_type=self.entity_type, error=str(e))
            self._notices.load_failed(self.entity_type, e)
            raise

        self._items = map_records(records, type(self).from_record, self.entity_type)
        return self.items

    async def save(self, item: M) -> M:
        """Insert the item when it has no id, otherwise update it."""
        record = type(self).to_record(item)

        if item.id is None:
            try:
                [stored] = await self._store.insert(self.collection, record)
            except StorageError as e:
                self._failed("create", e)
                raise
            saved = item.model_copy(update={"id": str(stored["id"])})
            self._items.append(saved)
        else:
            try:
                await self._store.update(self.collection, item.id, record)
            except StorageError as e:
                self._failed("update", e, item.id)
                raise
            saved = item
            self._items = [saved if i.id == saved.id else i for i in self._items]

        logger.info("record_saved", entity_type=self.entity_type, record_id=saved.id)
        self._notices.publish(NoticeBuilder.record_saved(self.entity_type, saved.id, saved.name))
        return saved

    async def delete(self, item_id: str) -> None:
        try:
            await self._store.delete(self.collection, RecordMatcher.by_id(item_id))
        except StorageError as e:
            self._failed("delete", e, item_id)
            raise

        self._items = [i for i in self._items if i.id != item_id]
        logger.info("record_deleted", entity_type=self.entity_type, record_id=item_id)
        self._notices.publish(NoticeBuilder.record_deleted(self.entity_type, item_id))

    async def clear_all(self) -> None:
        try:
            await self._store.delete(self.collection, RecordMatcher.everything())
        except StorageError as e:
            self._failed("clear", e)
            raise

        self._items = []
        logger.info("records_cleared", entity_type=self.entity_type)
        self._notices.publish(NoticeBuilder.data_cleared(self.entity_type))


class SubscriptionManager(RecordManager[Subscription]):
    collection = Collection.SUBSCRIPTIONS
    entity_type = "subscription"
    to_record = staticmethod(subscription_to_record)
    from_record = staticmethod(record_to_subscription)

    @property
    def subscriptions(self) -> list[Subscription]:
        return self.items


class CardManager(RecordManager[Card]):
    collection = Collection.CARDS
    entity_type = "card"
    to_record = staticmethod(card_to_record)
    from_record = staticmethod(record_to_card)

    @property
    def cards(self) -> list[Card]:
        return self.items

    def card_names(self) -> dict[str, str]:
        """Card id -> nickname, for labelling debts paid by card."""
        return {card.id: card.name for card in self._items if card.id}
