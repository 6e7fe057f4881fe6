import os
import struct
from ipaddress import IPv4Address

import pytest
from nacl.signing import SigningKey

from key2port.config import Config
from key2port.db import KeyStore
from key2port.server import Authorization, format_auth_line, process_frame
from key2port.spa import SPA_ID_LEN, SPA_PAYLOAD_LEN, SpaHeader, SpaPayload, build_packet
from key2port.strutil import strnhash

NOW = 1_700_000_000
SOURCE_IP = "192.0.2.10"


def _spa(signing_key, name="alice", timestamp=NOW, port=22, ttl=60, nonce=None):
    header = SpaHeader(
        client_id=strnhash(name, SPA_ID_LEN),
        timestamp=timestamp,
        nonce=nonce if nonce is not None else os.urandom(16),
        payload_len=SPA_PAYLOAD_LEN,
    )
    return build_packet(header, SpaPayload(ttl=ttl, port=port).pack(), signing_key)


def _frame(spa_packet, src=SOURCE_IP, ether_type=0x0800):
    eth = b"\x02" * 6 + b"\x04" * 6 + struct.pack(">H", ether_type)
    ip = struct.pack(
        ">BBHHHBBH4s4s",
        0x45,
        0,
        20 + 8 + len(spa_packet),
        0,
        0,
        64,
        17,
        0,
        IPv4Address(src).packed,
        IPv4Address("192.0.2.1").packed,
    )
    udp = struct.pack(">HHHH", 40000, 5000, 8 + len(spa_packet), 0)
    return eth + ip + udp + spa_packet


@pytest.fixture
def signing_key():
    return SigningKey.generate()


@pytest.fixture
def store(signing_key):
    ks = KeyStore(":memory:")
    ks.insert_key("alice", bytes(signing_key.verify_key))
    yield ks
    ks.close()


@pytest.fixture
def config():
    return Config(replay_window=30)


def test_valid_frame_is_authorized(signing_key, store, config):
    frame = _frame(_spa(signing_key))
    result = process_frame(frame, store, config, now=NOW)
    assert result == Authorization(ip=SOURCE_IP, port=22, ttl=60)


def test_replayed_frame_is_rejected(signing_key, store, config):
    frame = _frame(_spa(signing_key))
    assert process_frame(frame, store, config, now=NOW) is not None
    assert process_frame(frame, store, config, now=NOW) is None


def test_nonce_is_recorded(signing_key, store, config):
    nonce = b"\x09" * 16
    process_frame(_frame(_spa(signing_key, nonce=nonce)), store, config, now=NOW)
    assert store.nonce_seen(nonce) is True


def test_wrong_signer_is_rejected(store, config):
    frame = _frame(_spa(SigningKey.generate()))
    assert process_frame(frame, store, config, now=NOW) is None


def test_unknown_client_is_rejected(signing_key, store, config):
    frame = _frame(_spa(signing_key, name="mallory"))
    assert process_frame(frame, store, config, now=NOW) is None


def test_timestamp_outside_window_is_rejected(signing_key, store, config):
    old = _frame(_spa(signing_key, timestamp=NOW - 31))
    future = _frame(_spa(signing_key, timestamp=NOW + 31))
    assert process_frame(old, store, config, now=NOW) is None
    assert process_frame(future, store, config, now=NOW) is None


def test_timestamp_at_window_edge_is_accepted(signing_key, store, config):
    frame = _frame(_spa(signing_key, timestamp=NOW - 30, port=443, ttl=5))
    assert process_frame(frame, store, config, now=NOW) == Authorization(SOURCE_IP, 443, 5)


def test_non_ipv4_frame_is_ignored(signing_key, store, config):
    frame = _frame(_spa(signing_key), ether_type=0x86DD)
    assert process_frame(frame, store, config, now=NOW) is None


def test_tampered_payload_is_rejected(signing_key, store, config):
    frame = bytearray(_frame(_spa(signing_key)))
    frame[14 + 20 + 8 + 40] ^= 0xFF
    assert process_frame(bytes(frame), store, config, now=NOW) is None


def test_format_auth_line():
    line = format_auth_line(Authorization(ip=SOURCE_IP, port=22, ttl=60), NOW)
    assert line == f"[{NOW}] status=SUCCESS allow={SOURCE_IP}:22 ttl=60"