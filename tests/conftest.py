import json

import pytest

from hkpstore.models import Pubkey
from hkpstore.storage import InMemoryStorage, KeyStorage
from hkpstore.utils import md5_hex

FP_ALICE = "c9a0b1f2" + "0" * 32
FP_ALICE2 = "c9a0b1f2" + "f" * 32
FP_BOB = "d4e5f607" + "1" * 32
FP_CAROL = "77" + "2" * 38


class JsonCodec:
    """Line-delimited JSON stand-in for OpenPGP packets."""

    def serialize(self, key):
        body = {"fingerprint": key.fingerprint, "user_ids": key.user_ids, "body": key.material}
        return json.dumps(body, sort_keys=True).encode("utf-8") + b"\n"

    def parse(self, data):
        for line in data.splitlines():
            if not line.strip():
                continue
            try:
                body = json.loads(line)
            except ValueError as e:
                yield e
                return
            yield Pubkey(
                fingerprint=body["fingerprint"],
                digest=md5_hex(line + b"\n"),
                user_ids=body["user_ids"],
                material=body["body"],
            )


class Clock:
    def __init__(self, now=1_700_000_000):
        self.now = now

    def __call__(self):
        return self.now

    def tick(self, seconds=1):
        self.now += seconds
        return self.now


def make_key(fingerprint, *user_ids, body="v1"):
    key = Pubkey(fingerprint=fingerprint, digest="", user_ids=list(user_ids), material=body)
    key.digest = md5_hex(JsonCodec().serialize(key))
    return key


@pytest.fixture
def codec():
    return JsonCodec()


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def provider():
    return InMemoryStorage()


@pytest.fixture
def store(provider, codec, clock):
    return KeyStorage(provider, codec, clock=clock)


@pytest.fixture
def events(store):
    received = []
    store.subscribe(received.append)
    return received
