import sqlite3

import pytest

from key2port.db import KeyStore
from key2port.spa import SPA_ID_LEN
from key2port.strutil import strnhash

PUBLIC_KEY = bytes(range(32))
OTHER_KEY = bytes(range(32, 64))


@pytest.fixture
def store():
    ks = KeyStore(":memory:")
    yield ks
    ks.close()


def test_insert_and_select_key(store):
    key_id = store.insert_key("alice", PUBLIC_KEY)
    assert key_id == strnhash("alice", SPA_ID_LEN)
    assert store.select_key(key_id) == PUBLIC_KEY


def test_select_unknown_key_returns_none(store):
    store.insert_key("alice", PUBLIC_KEY)
    assert store.select_key(strnhash("bob", SPA_ID_LEN)) is None


def test_keys_are_separate_per_name(store):
    alice = store.insert_key("alice", PUBLIC_KEY)
    bob = store.insert_key("bob", OTHER_KEY)
    assert store.select_key(alice) == PUBLIC_KEY
    assert store.select_key(bob) == OTHER_KEY


def test_duplicate_name_is_rejected(store):
    store.insert_key("alice", PUBLIC_KEY)
    with pytest.raises(sqlite3.IntegrityError):
        store.insert_key("alice", OTHER_KEY)


def test_wrong_key_length_is_rejected(store):
    with pytest.raises(ValueError):
        store.insert_key("alice", b"short")


def test_truncate_keys(store):
    key_id = store.insert_key("alice", PUBLIC_KEY)
    store.truncate_keys()
    assert store.select_key(key_id) is None
    store.insert_key("alice", OTHER_KEY)
    assert store.select_key(key_id) == OTHER_KEY


def test_nonce_tracking(store):
    nonce = b"\x07" * 16
    assert store.nonce_seen(nonce) is False
    store.insert_seen(nonce, 1000)
    assert store.nonce_seen(nonce) is True
    assert store.nonce_seen(b"\x08" * 16) is False


def test_duplicate_nonce_is_rejected(store):
    nonce = b"\x01" * 16
    store.insert_seen(nonce, 1)
    with pytest.raises(sqlite3.IntegrityError):
        store.insert_seen(nonce, 2)


def test_data_persists_across_reopen(tmp_path):
    path = tmp_path / "k2p.db"
    with KeyStore(path) as first:
        key_id = first.insert_key("alice", PUBLIC_KEY)
        first.insert_seen(b"\x02" * 16, 5)
    with KeyStore(path) as second:
        assert second.select_key(key_id) == PUBLIC_KEY
        assert second.nonce_seen(b"\x02" * 16) is True