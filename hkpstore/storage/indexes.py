# hkpstore/storage/indexes.py
from __future__ import annotations
from dataclasses import dataclass
from typing import List

from hkpstore.errors import BackendError, StorageError
from hkpstore.logger import get_logger
from hkpstore.storage.provider import StorageProvider

log = get_logger("hkpstore.storage.indexes")


@dataclass(frozen=True)
class IndexSpec:
    field: str
    unique: bool = False
    background: bool = False


KEY_INDEXES: List[IndexSpec] = [
    IndexSpec("fingerprint", unique=True),
    IndexSpec("digest", unique=True),
    IndexSpec("modified_at"),
    # built in the background so it doesn't block traffic on large collections
    IndexSpec("keywords", background=True),
]


def ensure_indexes(provider: StorageProvider, indexes: List[IndexSpec] = KEY_INDEXES) -> None:
    """Ensure every index the key store queries rely on. Idempotent."""
    with provider.session() as c:
        for index in indexes:
            try:
                c.ensure_index(index.field, unique=index.unique, background=index.background)
            except StorageError as e:
                # duplicates under a new unique index fail startup, not the write path
                raise BackendError(e.message, op="ensure_index", key=index.field) from e
            log.info(f"[INDEX] ensured field={index.field} unique={index.unique}")
