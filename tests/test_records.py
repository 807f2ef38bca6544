import pytest

from hkpstore.errors import DecodeError
from hkpstore.models import Pubkey
from hkpstore.records import from_record, keywords, to_record
from conftest import FP_ALICE, FP_BOB, make_key


def test_keywords_split_on_punctuation_and_lowercase():
    key = make_key(FP_ALICE, "Alice <Alice@Example.com>")
    assert keywords(key) == ["alice", "com", "example"]


def test_keywords_dedupe_across_user_ids():
    key = make_key(FP_ALICE, "Alice <alice@example.com>", "alice (work) <alice@corp.example.com>")
    assert keywords(key) == ["alice", "com", "corp", "example", "work"]


def test_keywords_invalid_encoding_and_underscore_split():
    # raw bytes never reach the JSON test codec; keywords only reads user_ids
    key = Pubkey(fingerprint=FP_ALICE, digest="", user_ids=[b"Bob\xffSmith <bob_smith@ex.org>"])
    assert keywords(key) == ["bob", "ex", "org", "smith"]


def test_keywords_keep_non_ascii_letters_and_digits():
    key = make_key(FP_ALICE, "Jürgen Müller 2024")
    assert keywords(key) == ["2024", "jürgen", "müller"]


def test_keywords_same_identity_same_set():
    a = make_key(FP_ALICE, "Alice <alice@example.com>")
    b = make_key(FP_BOB, "Alice <alice@example.com>", body="other")
    assert keywords(a) == keywords(b)


def test_keywords_empty_without_user_ids():
    assert keywords(make_key(FP_ALICE)) == []


def test_to_record_shapes_document(codec):
    key = make_key(FP_ALICE, "Alice <alice@example.com>")
    rec = to_record(key, codec, 1234)
    assert rec.fingerprint == FP_ALICE
    assert rec.digest == key.digest
    assert rec.created_at == rec.modified_at == 1234
    assert rec.packets == codec.serialize(key)
    assert "example" in rec.keywords


def test_from_record_roundtrip(codec):
    key = make_key(FP_ALICE, "Alice")
    got = from_record(codec.serialize(key), FP_ALICE, codec)
    assert got.fingerprint == FP_ALICE
    assert got.digest == key.digest


def test_from_record_rejects_fingerprint_mismatch(codec):
    packets = codec.serialize(make_key(FP_BOB))
    with pytest.raises(DecodeError, match="mismatch"):
        from_record(packets, FP_ALICE, codec)


def test_from_record_rejects_multiple_keys(codec):
    packets = codec.serialize(make_key(FP_ALICE)) + codec.serialize(make_key(FP_ALICE, body="v2"))
    with pytest.raises(DecodeError, match="multiple keys"):
        from_record(packets, FP_ALICE, codec)


def test_from_record_rejects_empty_and_malformed(codec):
    with pytest.raises(DecodeError, match="no key"):
        from_record(b"", FP_ALICE, codec)
    with pytest.raises(DecodeError, match="malformed"):
        from_record(b"{not json\n", FP_ALICE, codec)
