"""Subscriptions and payment cards."""

from financas.catalog.manager import CardManager, RecordManager, SubscriptionManager

__all__ = [
    "CardManager",
    "RecordManager",
    "SubscriptionManager",
]
