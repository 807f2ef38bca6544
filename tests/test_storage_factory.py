import pytest

from hkpstore.storage import InMemoryStorage, KeyStorage, load_storage_provider, open_storage
from conftest import FP_ALICE, make_key


def test_memory_provider_from_config():
    provider = load_storage_provider({"provider": "memory", "db_name": "ks", "collection": "pub"})
    assert isinstance(provider, InMemoryStorage)
    assert provider.db_name == "ks"
    assert provider.collection_name == "pub"


def test_provider_from_env(monkeypatch):
    monkeypatch.setenv("HKPSTORE_STORAGE_PROVIDER", "memory")
    monkeypatch.setenv("HKPSTORE_COLLECTION", "pubkeys")
    provider = load_storage_provider()
    assert isinstance(provider, InMemoryStorage)
    assert provider.db_name == "hkp"
    assert provider.collection_name == "pubkeys"


def test_mongo_provider_default(monkeypatch):
    pytest.importorskip("pymongo")
    from hkpstore.storage.providers.mongo_provider import MongoStorage

    monkeypatch.delenv("HKPSTORE_STORAGE_PROVIDER", raising=False)
    # MongoClient connects lazily, so nothing is contacted here
    provider = load_storage_provider({"mongo_uri": "mongodb://db.invalid:27017"})
    assert isinstance(provider, MongoStorage)
    assert provider.db_name == "hkp"
    assert provider.collection_name == "keys"
    provider.close()


def test_unknown_provider():
    with pytest.raises(ValueError, match="Unknown storage provider"):
        load_storage_provider({"provider": "cassandra"})


def test_open_storage_with_codec(codec):
    store = open_storage({"provider": "memory"}, codec=codec)
    assert isinstance(store, KeyStorage)
    key = make_key(FP_ALICE, "Alice")
    store.insert([key])
    assert store.match_md5([key.digest]) == [FP_ALICE]
    store.close()


def test_open_storage_forwards_changes_when_enabled(codec):
    from hkpstore.transport import LocalAdapter

    transport = LocalAdapter()
    received = []
    transport.subscribe("hkp.test.changes", received.append)

    store = open_storage(
        {"provider": "memory", "forward_changes": True, "change_topic": "hkp.test.changes"},
        codec=codec,
        transport=transport,
    )
    key = make_key(FP_ALICE, "Alice")
    store.insert([key])

    assert received == [{"kind": "added", "fingerprint": FP_ALICE, "digest": key.digest}]


def test_open_storage_forwarding_from_env(monkeypatch, codec):
    monkeypatch.setenv("HKPSTORE_FORWARD_CHANGES", "1")
    monkeypatch.delenv("HKPSTORE_CHANGE_TRANSPORT", raising=False)
    monkeypatch.delenv("HKPSTORE_CHANGE_TOPIC", raising=False)

    store = open_storage({"provider": "memory"}, codec=codec)
    assert len(store.bus) == 1


def test_open_storage_does_not_forward_by_default(monkeypatch, codec):
    monkeypatch.delenv("HKPSTORE_FORWARD_CHANGES", raising=False)
    store = open_storage({"provider": "memory"}, codec=codec)
    assert len(store.bus) == 0
