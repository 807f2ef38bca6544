"""
hkpstore
========
Searchable OpenPGP key-record store for HKP keyservers.

Provides:
- Record shaping and keyword extraction for stored keys
- Fingerprint / digest / keyword / mtime lookups over a document store
- Optimistic-concurrency updates keyed on the content digest
- In-process key-change notifications, optionally forwarded to a mesh transport
"""

from hkpstore.errors import (
    StorageError,
    BackendError,
    DecodeError,
    ConflictError,
    UniquenessViolation,
)
from hkpstore.models import Pubkey, KeyRecord, Keyring, KeyChange, KeyAdded, KeyReplaced

__all__ = [
    "StorageError",
    "BackendError",
    "DecodeError",
    "ConflictError",
    "UniquenessViolation",
    "Pubkey",
    "KeyRecord",
    "Keyring",
    "KeyChange",
    "KeyAdded",
    "KeyReplaced",
]
