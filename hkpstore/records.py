"""
hkpstore.records
----------------
Maps keys to the persisted record shape and back.

Keywords are a pure function of the key's user IDs and are recomputed from
scratch on every write. Decoding is a consistency check against corrupt or
mis-keyed documents: a record must hold exactly one key, and that key must
carry the record's own fingerprint.
"""

from __future__ import annotations
import re
from typing import List, Union

from hkpstore.codec import KeyCodec
from hkpstore.errors import DecodeError
from hkpstore.models import KeyRecord, Pubkey

# anything that is not a letter or digit separates tokens
_TOKEN_SEP = re.compile(r"[\W_]+")


def _as_text(uid: Union[str, bytes]) -> str:
    if isinstance(uid, bytes):
        # invalid sequences become U+FFFD, which splits like punctuation
        return uid.decode("utf-8", errors="replace")
    return uid


def keywords(key: Pubkey) -> List[str]:
    """Searchable tokens extracted from the key's user ID strings."""
    tokens = set()
    for uid in key.user_ids:
        for field in _TOKEN_SEP.split(_as_text(uid)):
            if field:
                tokens.add(field.lower())
    return sorted(tokens)


def to_record(key: Pubkey, codec: KeyCodec, now: int) -> KeyRecord:
    return KeyRecord(
        fingerprint=key.fingerprint,
        digest=key.digest,
        packets=codec.serialize(key),
        created_at=now,
        modified_at=now,
        keywords=keywords(key),
    )


def from_record(packets: bytes, fingerprint: str, codec: KeyCodec) -> Pubkey:
    result = None
    parsed = codec.parse(packets)
    try:
        for read in parsed:
            if isinstance(read, Exception):
                raise DecodeError(f"malformed key material: {read}", key=fingerprint) from read
            if result is not None:
                raise DecodeError(
                    f"multiple keys in keyring: {result.fingerprint}, {read.fingerprint}",
                    key=fingerprint,
                )
            if read.fingerprint != fingerprint:
                raise DecodeError(
                    f"fingerprint mismatch: expected={fingerprint!r} got={read.fingerprint!r}",
                    key=fingerprint,
                )
            result = read
    finally:
        close = getattr(parsed, "close", None)
        if close is not None:
            close()

    if result is None:
        raise DecodeError("no key found in stored packets", key=fingerprint)
    return result
