# hkpstore/models.py
from __future__ import annotations
from dataclasses import dataclass, asdict, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Union


@dataclass
class Pubkey:
    """
    Domain representation of an OpenPGP public key as seen by the store.

    ``fingerprint`` is the reversed, lowercase hex fingerprint and ``digest``
    the lowercase hex MD5 of the serialized key. ``material`` carries the
    codec-native key object and is opaque to the store.
    """
    fingerprint: str
    digest: str
    user_ids: List[Union[str, bytes]] = field(default_factory=list)
    material: Any = None


@dataclass
class KeyRecord:
    """Persisted shape of a key, one document per fingerprint."""
    fingerprint: str
    digest: str
    packets: bytes
    created_at: int
    modified_at: int
    keywords: List[str] = field(default_factory=list)

    def to_doc(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_doc(cls, doc: Dict[str, Any]) -> "KeyRecord":
        return cls(
            fingerprint=doc["fingerprint"],
            digest=doc["digest"],
            packets=bytes(doc["packets"]),
            created_at=int(doc["created_at"]),
            modified_at=int(doc["modified_at"]),
            keywords=list(doc.get("keywords") or []),
        )


@dataclass
class Keyring:
    pubkey: Pubkey
    created_at: datetime
    modified_at: datetime


@dataclass
class KeyChange:
    """Base for ephemeral key change notifications."""
    fingerprint: Optional[str] = None

    kind = "changed"

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["kind"] = self.kind
        return d


@dataclass
class KeyAdded(KeyChange):
    digest: str = ""

    kind = "added"


@dataclass
class KeyReplaced(KeyChange):
    old_digest: str = ""
    new_digest: str = ""

    kind = "replaced"
