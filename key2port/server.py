"""Processing of captured frames into port authorizations."""

from __future__ import annotations

import logging
import sqlite3
import time
from dataclasses import dataclass
from typing import Optional

from .config import Config
from .db import KeyStore
from .packet_parser import PacketParseError, parse_headers
from .spa import SPA_HDR_LEN, SpaError, parse_header, unpack_payload, verify_packet

_U32 = 0xFFFFFFFF

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Authorization:
    """A verified request to open ``port`` to ``ip`` for ``ttl`` seconds."""

    ip: str
    port: int
    ttl: int


def process_frame(
    frame: bytes, store: KeyStore, config: Config, now: Optional[float] = None
) -> Optional[Authorization]:
    """Check one captured frame; return the authorization it grants, or None."""
    try:
        headers = parse_headers(frame)
    except PacketParseError:
        return None

    spa = bytes(frame[headers.payload_offset :])
    try:
        header = parse_header(spa)
    except SpaError:
        return None

    public_key = store.select_key(header.client_id)
    if public_key is None:
        return None

    try:
        verify_packet(spa, public_key, header)
    except SpaError:
        return None

    now_ts = int(time.time() if now is None else now) & _U32
    window = config.replay_window
    lower = (now_ts - window) & _U32
    upper = (now_ts + window) & _U32
    if header.timestamp < lower or header.timestamp > upper:
        return None

    if store.nonce_seen(header.nonce):
        return None

    try:
        store.insert_seen(header.nonce, header.timestamp)
    except sqlite3.Error:
        logger.error("failed to insert seen")
        return None

    try:
        payload = unpack_payload(spa[SPA_HDR_LEN:])
    except SpaError:
        return None

    return Authorization(ip=str(headers.ip.src), port=payload.port, ttl=payload.ttl)


def format_auth_line(authorization: Authorization, now: int) -> str:
    """Return the auth-log line recorded for a granted authorization."""
    return (
        f"[{now}] status=SUCCESS "
        f"allow={authorization.ip}:{authorization.port} ttl={authorization.ttl}"
    )