# hkpstore/codec/__init__.py
"""
Key codec boundary.

The store never looks inside OpenPGP packets itself; it serializes and
parses keys through a ``KeyCodec``. The default implementation is
``hkpstore.codec.pgp.PGPyCodec``, imported lazily so the store can run
with any other codec.
"""

from __future__ import annotations
from typing import Iterator, Protocol, Union, runtime_checkable

from hkpstore.models import Pubkey


@runtime_checkable
class KeyCodec(Protocol):
    def serialize(self, key: Pubkey) -> bytes: ...

    def parse(self, data: bytes) -> Iterator[Union[Pubkey, Exception]]:
        """Lazily yield every key in ``data``, or the error that stopped decoding."""
        ...


def default_codec() -> KeyCodec:
    from hkpstore.codec.pgp import PGPyCodec

    return PGPyCodec()


__all__ = ["KeyCodec", "default_codec"]
