"""
hkpstore.codec.pgp
------------------
OpenPGP codec backed by PGPy (pure Python, on top of ``cryptography``).
"""

from __future__ import annotations
from typing import Iterator, List, Union

import pgpy

from hkpstore.models import Pubkey
from hkpstore.utils import md5_hex


def rfingerprint(pgp_key: "pgpy.PGPKey") -> str:
    """Reversed lowercase hex fingerprint, the store's primary identity."""
    return str(pgp_key.fingerprint).replace(" ", "").lower()[::-1]


def user_id_strings(pgp_key: "pgpy.PGPKey") -> List[str]:
    result = []
    for uid in pgp_key.userids:
        if not uid.is_uid:
            continue
        parts = [uid.name, uid.comment, uid.email]
        result.append(" ".join(p for p in parts if p))
    return result


def load_key(pgp_key: "pgpy.PGPKey") -> Pubkey:
    return Pubkey(
        fingerprint=rfingerprint(pgp_key),
        digest=md5_hex(bytes(pgp_key)),
        user_ids=user_id_strings(pgp_key),
        material=pgp_key,
    )


class PGPyCodec:
    def serialize(self, key: Pubkey) -> bytes:
        if key.material is None:
            raise ValueError(f"key {key.fingerprint} carries no OpenPGP material")
        return bytes(key.material)

    def parse(self, data: bytes) -> Iterator[Union[Pubkey, Exception]]:
        try:
            first, loaded = pgpy.PGPKey.from_blob(bytes(data))
        except Exception as e:
            yield e
            return

        yield load_key(first)
        seen = {first.fingerprint}
        for other in loaded.values():
            if not other.is_primary or other.fingerprint in seen:
                continue
            seen.add(other.fingerprint)
            yield load_key(other)
