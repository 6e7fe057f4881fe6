"""Small string and byte helpers."""

from __future__ import annotations

import hashlib
from typing import IO, AnyStr, Union

_GENERICHASH_BYTES = 32
_C_WHITESPACE = " \t\n\v\f\r"


def strnhash(text: Union[str, bytes], n: int) -> bytes:
    """Return the first ``n`` bytes of the 32-byte BLAKE2b hash of ``text``."""
    data = text.encode("utf-8") if isinstance(text, str) else bytes(text)
    if not data:
        raise ValueError("cannot hash an empty string")
    if not 0 <= n <= _GENERICHASH_BYTES:
        raise ValueError(f"n must be between 0 and {_GENERICHASH_BYTES}")
    return hashlib.blake2b(data, digest_size=_GENERICHASH_BYTES).digest()[:n]


def trim_ends(text: str) -> str:
    """Strip ASCII whitespace from both ends of ``text``."""
    return text.strip(_C_WHITESPACE)


def hexdump(data: bytes) -> str:
    """Render bytes as lowercase hex pairs, each followed by a space."""
    return "".join(f"{byte:02x} " for byte in data)


def read_limited(stream: IO[AnyStr], length: int) -> AnyStr:
    """Read at most ``length - 1`` characters or bytes from ``stream``."""
    if length < 2:
        raise ValueError("length must be at least 2")
    remaining = length - 1
    chunks = []
    while remaining > 0:
        chunk = stream.read(remaining)
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    if not chunks:
        return stream.read(0)
    return chunks[0][:0].join(chunks)