"""Pluggable mail and queue stores.

Responsibilities:
- Store capability contracts
- Built-in in-memory defaults
- Registries mapping type names to store factories
"""

from .base import MailStore, QueueStore
from .registry import StoreRegistry, StoreSlot, mail_store_registry, queue_store_registry
from .simple import SimpleMailStore, SimpleQueueStore

__all__ = [
    "MailStore",
    "QueueStore",
    "SimpleMailStore",
    "SimpleQueueStore",
    "StoreRegistry",
    "StoreSlot",
    "mail_store_registry",
    "queue_store_registry",
]
