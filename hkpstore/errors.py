from __future__ import annotations
from typing import Optional


class StorageError(Exception):
    """Base class for key store failures.

    ``op`` names the failing key store operation and ``key`` the fingerprint
    or digest it was working on, when known.
    """

    def __init__(self, message: str, op: Optional[str] = None, key: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.op = op
        self.key = key

    def with_context(self, op: str, key: Optional[str] = None) -> "StorageError":
        return type(self)(self.message, op=self.op or op, key=self.key or key)

    def __str__(self) -> str:
        prefix = ""
        if self.op:
            prefix = f"{self.op}: "
        if self.key:
            prefix = f"{prefix}[{self.key}] "
        return prefix + self.message


class BackendError(StorageError):
    """Document store failure (connectivity, index build, query execution)."""


class UniquenessViolation(StorageError):
    """Insert or update collided with an existing fingerprint or digest."""


class ConflictError(StorageError):
    """Update precondition digest no longer matches any record."""


class DecodeError(StorageError):
    """Stored packets are malformed, ambiguous or keyed to another fingerprint."""
