"""
hkpstore.storage.keystore
-------------------------
Query and mutation layer between an HKP frontend and a document store.

Records are keyed by reversed fingerprint and carry an MD5 content digest
that doubles as the optimistic-concurrency token: ``update`` only writes if
the caller presents the digest currently on record.

Every public method opens its own provider session and releases it before
returning. Nothing is retried here; backend errors propagate with the
failing operation and key attached.
"""

from __future__ import annotations
import re
from contextlib import contextmanager
from typing import Callable, Iterable, List, Optional, Union
from datetime import datetime

from hkpstore.codec import KeyCodec
from hkpstore.constants import MAX_FINGERPRINT_LEN, RESULT_LIMIT
from hkpstore.errors import ConflictError, StorageError
from hkpstore.logger import get_logger
from hkpstore.models import KeyAdded, KeyRecord, KeyReplaced, Keyring, Pubkey
from hkpstore.records import from_record, keywords, to_record
from hkpstore.storage.indexes import ensure_indexes
from hkpstore.storage.notify import Listener, NotificationBus
from hkpstore.storage.provider import StorageProvider
from hkpstore.utils import from_unix, lowered, now_unix, to_unix

log = get_logger("hkpstore.storage.keystore")


@contextmanager
def _op(name: str, key: Optional[str] = None):
    try:
        yield
    except StorageError as e:
        raise e.with_context(name, key) from e


class KeyStorage:
    def __init__(
        self,
        provider: StorageProvider,
        codec: KeyCodec,
        bus: Optional[NotificationBus] = None,
        clock: Callable[[], int] = now_unix,
    ):
        self.provider = provider
        self.codec = codec
        self.bus = bus or NotificationBus()
        self.clock = clock
        with _op("create_indexes"):
            ensure_indexes(provider)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def _fingerprints(self, filter: dict, limit: int = 0) -> List[str]:
        with self.provider.session() as c:
            return [doc["fingerprint"] for doc in c.find(filter, limit=limit)]

    def match_md5(self, digests: Iterable[str]) -> List[str]:
        digests = lowered(digests)
        with _op("match_md5"):
            return self._fingerprints({"digest": {"$in": digests}})

    def resolve(self, keyids: Iterable[str]) -> List[str]:
        """
        Expand key IDs to full reversed fingerprints.

        IDs shorter than a v4 fingerprint are treated as prefixes and matched
        against storage. Full-length IDs are returned as given without an
        existence check. v3 short and long key IDs won't match.
        """
        result = []
        prefixes = []
        for keyid in lowered(keyids):
            if len(keyid) < MAX_FINGERPRINT_LEN:
                prefixes.append(keyid)
            else:
                result.append(keyid)

        if prefixes:
            filter = {"$or": [{"fingerprint": {"$regex": "^" + re.escape(p)}} for p in prefixes]}
            with _op("resolve", ",".join(prefixes)):
                result.extend(self._fingerprints(filter))
        return result

    def match_keyword(self, words: Iterable[str]) -> List[str]:
        words = lowered(words)
        with _op("match_keyword"):
            return self._fingerprints({"keywords": {"$in": words}}, limit=RESULT_LIMIT)

    def modified_since(self, since: Union[int, datetime]) -> List[str]:
        with _op("modified_since"):
            return self._fingerprints({"modified_at": {"$gt": to_unix(since)}}, limit=RESULT_LIMIT)

    def _fetch_records(self, fingerprints: Iterable[str]) -> List[KeyRecord]:
        filter = {"fingerprint": {"$in": lowered(fingerprints)}}
        with self.provider.session() as c:
            return [KeyRecord.from_doc(doc) for doc in c.find(filter, limit=RESULT_LIMIT)]

    def fetch_keys(self, fingerprints: Iterable[str]) -> List[Pubkey]:
        with _op("fetch_keys"):
            records = self._fetch_records(fingerprints)
            return [from_record(rec.packets, rec.fingerprint, self.codec) for rec in records]

    def fetch_keyrings(self, fingerprints: Iterable[str]) -> List[Keyring]:
        with _op("fetch_keyrings"):
            records = self._fetch_records(fingerprints)
            return [
                Keyring(
                    pubkey=from_record(rec.packets, rec.fingerprint, self.codec),
                    created_at=from_unix(rec.created_at),
                    modified_at=from_unix(rec.modified_at),
                )
                for rec in records
            ]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def insert(self, keys: Iterable[Pubkey]) -> None:
        """
        Insert new keys, notifying ``KeyAdded`` after each one.

        Not atomic across the batch: a collision stops at the failing key and
        leaves the keys before it stored and notified.
        """
        with self.provider.session() as c:
            for key in keys:
                with _op("insert", key.fingerprint):
                    rec = to_record(key, self.codec, self.clock())
                    c.insert(rec.to_doc())
                log.info(f"[INSERT] fingerprint={key.fingerprint} digest={key.digest}")
                self.notify(KeyAdded(fingerprint=key.fingerprint, digest=key.digest))

    def update(self, key: Pubkey, last_digest: str) -> str:
        """
        Replace the stored content of ``key`` if its digest is still ``last_digest``.

        Returns the new digest. Raises ``ConflictError`` without writing when
        the record has moved on (or never had that digest).
        """
        with _op("update", key.fingerprint):
            packets = self.codec.serialize(key)
            changes = {"$set": {
                "modified_at": self.clock(),
                "keywords": keywords(key),
                "packets": packets,
                "digest": key.digest,
            }}
            with self.provider.session() as c:
                matched, _ = c.find_and_modify(
                    {"digest": last_digest, "fingerprint": key.fingerprint}, changes
                )
            if matched == 0:
                log.warning(f"[UPDATE] stale digest fingerprint={key.fingerprint} last={last_digest}")
                raise ConflictError(
                    f"failed to update digest={key.digest!r}, didn't match last digest={last_digest!r}"
                )

        log.info(f"[UPDATE] fingerprint={key.fingerprint} {last_digest} -> {key.digest}")
        self.notify(KeyReplaced(fingerprint=key.fingerprint, old_digest=last_digest, new_digest=key.digest))
        return key.digest

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------
    def subscribe(self, listener: Listener) -> None:
        self.bus.subscribe(listener)

    def notify(self, change) -> None:
        self.bus.notify(change)

    def close(self) -> None:
        self.provider.close()
