# hkpstore/storage/__init__.py

from .provider import CollectionHandle, StorageProvider
from .providers.memory_provider import InMemoryStorage
from .indexes import IndexSpec, KEY_INDEXES, ensure_indexes
from .notify import NotificationBus
from .keystore import KeyStorage
from hkpstore.constants import DEFAULT_COLLECTION_NAME, DEFAULT_DB_NAME, DEFAULT_MONGO_URI, KEY_CHANGE_TOPIC
import os


def load_storage_provider(config: dict | None = None) -> StorageProvider:
    """
    Factory resolver for selecting the runtime document store.

        - mongo (default)
        - memory
    """
    config = config or {}
    provider = config.get("provider") or os.getenv("HKPSTORE_STORAGE_PROVIDER", "mongo")
    db_name = config.get("db_name") or os.getenv("HKPSTORE_DB_NAME", DEFAULT_DB_NAME)
    collection = config.get("collection") or os.getenv("HKPSTORE_COLLECTION", DEFAULT_COLLECTION_NAME)

    if provider == "memory":
        return InMemoryStorage(db_name=db_name, collection=collection)

    if provider == "mongo":
        from .providers.mongo_provider import MongoStorage

        uri = config.get("mongo_uri") or os.getenv("HKPSTORE_MONGO_URI", DEFAULT_MONGO_URI)
        return MongoStorage(uri=uri, db_name=db_name, collection=collection)

    raise ValueError(f"Unknown storage provider: {provider}")


def open_storage(config: dict | None = None, codec=None, transport=None) -> KeyStorage:
    """
    Build a ready ``KeyStorage``; indexes are ensured before it is returned.

    With ``forward_changes`` (or HKPSTORE_FORWARD_CHANGES=1) every key change
    is republished on ``transport``, defaulting to ``transport_factory()``.
    Topic: ``change_topic`` / HKPSTORE_CHANGE_TOPIC.
    """
    config = config or {}
    if codec is None:
        from hkpstore.codec import default_codec

        codec = default_codec()
    store = KeyStorage(load_storage_provider(config), codec)

    forward = config.get("forward_changes")
    if forward is None:
        forward = os.getenv("HKPSTORE_FORWARD_CHANGES", "0") == "1"
    if forward:
        from hkpstore.transport import KeyChangeForwarder, transport_factory

        topic = config.get("change_topic") or os.getenv("HKPSTORE_CHANGE_TOPIC", KEY_CHANGE_TOPIC)
        store.subscribe(KeyChangeForwarder(transport or transport_factory(), topic=topic))
    return store


__all__ = [
    "CollectionHandle",
    "StorageProvider",
    "InMemoryStorage",
    "IndexSpec",
    "KEY_INDEXES",
    "ensure_indexes",
    "NotificationBus",
    "KeyStorage",
    "load_storage_provider",
    "open_storage",
]
