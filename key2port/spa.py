"""Single-packet authorization (SPA) wire format: headers, payloads and signatures."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Union

from nacl.exceptions import BadSignatureError
from nacl.signing import SigningKey, VerifyKey

SPA_MAGIC = 0x53504100
SPA_VERSION = 1
SPA_NONCE_LEN = 16
SPA_ID_LEN = 8
SPA_HDR_LEN = 40
SPA_SIG_LEN = 64
SPA_PAYLOAD_MAX = 512

# magic, version, flags, id, timestamp, nonce, payload_len (network order)
_HEADER = struct.Struct(">IHH8sI16sI")
# ttl, port: the payload travels in the sender's native (little-endian) layout
_PAYLOAD = struct.Struct("<IH")
SPA_PAYLOAD_LEN = _PAYLOAD.size

SigningKeyLike = Union[SigningKey, bytes]
VerifyKeyLike = Union[VerifyKey, bytes]


class SpaError(ValueError):
    """Raised when an SPA packet cannot be built, parsed or verified."""


@dataclass(frozen=True)
class SpaHeader:
    """The fixed-size header that starts every SPA packet."""

    client_id: bytes
    timestamp: int
    nonce: bytes
    payload_len: int = 0
    flags: int = 0
    magic: int = SPA_MAGIC
    version: int = SPA_VERSION

    def serialize(self) -> bytes:
        """Return the header as its 40 wire bytes."""
        if len(self.client_id) != SPA_ID_LEN:
            raise SpaError(f"client id must be {SPA_ID_LEN} bytes")
        if len(self.nonce) != SPA_NONCE_LEN:
            raise SpaError(f"nonce must be {SPA_NONCE_LEN} bytes")
        try:
            return _HEADER.pack(
                self.magic,
                self.version,
                self.flags,
                bytes(self.client_id),
                self.timestamp,
                bytes(self.nonce),
                self.payload_len,
            )
        except struct.error as exc:
            raise SpaError(f"header field out of range: {exc}") from exc


@dataclass(frozen=True)
class SpaPayload:
    """Request for a port to be opened for a number of seconds."""

    ttl: int
    port: int

    def pack(self) -> bytes:
        """Return the payload as its wire bytes."""
        try:
            return _PAYLOAD.pack(self.ttl, self.port)
        except struct.error as exc:
            raise SpaError(f"payload field out of range: {exc}") from exc


def parse_header(data: bytes) -> SpaHeader:
    """Decode the header at the start of ``data``."""
    if len(data) < SPA_HDR_LEN:
        raise SpaError("packet shorter than SPA header")
    magic, version, flags, client_id, timestamp, nonce, payload_len = _HEADER.unpack_from(data)
    return SpaHeader(
        client_id=client_id,
        timestamp=timestamp,
        nonce=nonce,
        payload_len=payload_len,
        flags=flags,
        magic=magic,
        version=version,
    )


def unpack_payload(data: bytes) -> SpaPayload:
    """Decode a payload from the start of ``data``."""
    if len(data) < SPA_PAYLOAD_LEN:
        raise SpaError("payload too short")
    ttl, port = _PAYLOAD.unpack_from(data)
    return SpaPayload(ttl=ttl, port=port)


def _as_signing_key(key: SigningKeyLike) -> SigningKey:
    if isinstance(key, SigningKey):
        return key
    raw = bytes(key)
    if len(raw) == 32:
        return SigningKey(raw)
    if len(raw) == 64:
        # seed followed by public key
        return SigningKey(raw[:32])
    raise SpaError("signing key must be a 32-byte seed or a 64-byte secret key")


def _as_verify_key(key: VerifyKeyLike) -> VerifyKey:
    if isinstance(key, VerifyKey):
        return key
    raw = bytes(key)
    if len(raw) != 32:
        raise SpaError("public key must be 32 bytes")
    return VerifyKey(raw)


def build_packet(header: SpaHeader, payload: bytes, signing_key: SigningKeyLike) -> bytes:
    """Serialize header and payload and append an Ed25519 signature over both."""
    if isinstance(payload, SpaPayload):
        payload = payload.pack()
    payload = bytes(payload)
    if len(payload) < header.payload_len:
        raise SpaError("payload shorter than header payload_len")
    signed = header.serialize() + payload[: header.payload_len]
    signature = _as_signing_key(signing_key).sign(signed).signature
    return signed + signature


def verify_packet(data: bytes, public_key: VerifyKeyLike, header: SpaHeader) -> bytes:
    """Check a packet against its parsed header and signature; return the payload."""
    if len(data) < SPA_HDR_LEN + SPA_SIG_LEN:
        raise SpaError("packet too short")
    if header.magic != SPA_MAGIC:
        raise SpaError("bad magic")
    if header.version != SPA_VERSION:
        raise SpaError("unsupported version")
    if header.payload_len > SPA_PAYLOAD_MAX:
        raise SpaError("payload too large")
    signed_len = SPA_HDR_LEN + header.payload_len
    if len(data) < signed_len + SPA_SIG_LEN:
        raise SpaError("packet truncated")
    signed = bytes(data[:signed_len])
    signature = bytes(data[signed_len : signed_len + SPA_SIG_LEN])
    try:
        _as_verify_key(public_key).verify(signed, signature)
    except BadSignatureError as exc:
        raise SpaError("bad signature") from exc
    return signed[SPA_HDR_LEN:]