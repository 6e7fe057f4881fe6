"""Client that sends a signed SPA packet asking a server to open a port."""

from __future__ import annotations

import getopt
import os
import random
import re
import socket
import sys
import time
from typing import List, Optional, Sequence, Tuple

from .spa import (
    SPA_ID_LEN,
    SPA_NONCE_LEN,
    SPA_PAYLOAD_LEN,
    SigningKeyLike,
    SpaHeader,
    SpaPayload,
    build_packet,
)
from .strutil import read_limited, strnhash

MIN_PORT = 1025
MAX_PORT = 65535
DEFAULT_PORT = 4444
DEFAULT_TTL = 120
KEY_PATH = "key"
VERSION = "Key2Port v0.1"

_TARGET = re.compile(r"([^@]{1,254})@\s*(\S+)")
_ATOI = re.compile(r"\s*([+-]?\d+)", re.ASCII)

USAGE = (
    "Usage: user@target [OPTIONS]\n"
    "Options:\n"
    "  -h, --help         Show this help message and exit\n"
    "  -v, --version      Show version info and exit\n"
    "  -p, --port         Port\n"
    "  --ttl              Time To Live"
)


def parse_target(target: str) -> Tuple[str, str]:
    """Split ``user@host`` into its user name and host."""
    match = _TARGET.match(target)
    if match is None:
        raise ValueError(f"target must look like user@host: {target!r}")
    return match.group(1), match.group(2)[:254]


def random_port() -> int:
    """Pick a random unprivileged destination port."""
    return random.randint(MIN_PORT, MAX_PORT)


def create_packet(
    port: int,
    ttl: int,
    client_id: bytes,
    flags: int,
    signing_key: SigningKeyLike,
    now: Optional[float] = None,
) -> bytes:
    """Build a signed SPA packet requesting ``port`` for ``ttl`` seconds."""
    timestamp = int(time.time() if now is None else now) & 0xFFFFFFFF
    header = SpaHeader(
        client_id=client_id,
        timestamp=timestamp,
        nonce=os.urandom(SPA_NONCE_LEN),
        payload_len=SPA_PAYLOAD_LEN,
        flags=flags,
    )
    return build_packet(header, SpaPayload(ttl=ttl, port=port).pack(), signing_key)


def send_udp_packet(host: str, packet: bytes, port: Optional[int] = None) -> int:
    """Send ``packet`` to an IPv4 ``host`` over UDP; return the destination port."""
    try:
        address = socket.inet_ntoa(socket.inet_aton(host))
    except OSError as exc:
        raise ValueError(f"invalid IPv4 address: {host!r}") from exc
    if port is None:
        port = random_port()
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        sock.connect((address, port))
        sock.send(packet)
    finally:
        sock.close()
    return port


def _atoi(text: str) -> int:
    match = _ATOI.match(text)
    return int(match.group(1)) if match else 0


def _load_signing_key(path: str) -> bytes:
    """Read an Ed25519 secret: a 32-byte seed or a 64-byte secret key."""
    with open(path, "rb") as handle:
        raw = read_limited(handle, 4096)
    if len(raw) not in (32, 64):
        raise ValueError("failed to parse key")
    return raw


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the client command line; return the process exit status."""
    args: List[str] = list(sys.argv[1:] if argv is None else argv)
    if not args:
        print(USAGE)
        return 0

    port = DEFAULT_PORT
    ttl = DEFAULT_TTL
    try:
        options, positional = getopt.gnu_getopt(
            args, "hvp:t:", ["help", "version", "p=", "ttl="]
        )
    except getopt.GetoptError as exc:
        print(exc, file=sys.stderr)
        print(USAGE)
        return 1

    for option, value in options:
        if option in ("-h", "--help"):
            print(USAGE)
            return 0
        if option in ("-v", "--version"):
            print(VERSION)
            return 0
        if option in ("-p", "--p"):
            port = _atoi(value) & 0xFFFF
        elif option in ("-t", "--ttl"):
            ttl = _atoi(value) & 0xFFFFFFFF

    if not positional:
        print(USAGE)
        return 1

    try:
        name, host = parse_target(positional[0])
    except ValueError:
        print(USAGE)
        return 1

    client_id = strnhash(name, SPA_ID_LEN)

    try:
        signing_key = _load_signing_key(KEY_PATH)
    except (OSError, ValueError) as exc:
        print(f"parse_pem_sk: {exc}", file=sys.stderr)
        return 1

    packet = create_packet(port, ttl, client_id, 0, signing_key)

    try:
        send_udp_packet(host, packet)
    except (OSError, ValueError) as exc:
        print(exc, file=sys.stderr)
        print("failed to send udp packet", file=sys.stderr)
        return 1
    return 0