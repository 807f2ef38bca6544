# hkpstore/storage/provider.py
"""
Document store boundary.

A provider hands out one ``CollectionHandle`` per operation through the
``session()`` context manager; the handle is bound to a fixed database and
collection and must not be used after the block exits.

Filters are MongoDB-style dicts restricted to equality, ``$in``, ``$gt``,
``$regex`` and ``$or``. Array-valued fields match by membership.
"""

from __future__ import annotations
from contextlib import AbstractContextManager
from typing import Any, Dict, Iterator, Optional, Tuple

Doc = Dict[str, Any]


class CollectionHandle:
    # Interface
    def ensure_index(self, field: str, unique: bool = False, background: bool = False) -> None: ...
    def find(self, filter: Doc, limit: int = 0) -> Iterator[Doc]: ...
    def insert(self, doc: Doc) -> None: ...
    def find_and_modify(self, filter: Doc, update: Doc) -> Tuple[int, Optional[Doc]]: ...


class StorageProvider:
    # Interface
    name: str = "base"

    def session(self) -> AbstractContextManager[CollectionHandle]: ...
    def close(self) -> None: ...
