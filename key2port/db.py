"""SQLite store of client public keys and of nonces already seen."""

from __future__ import annotations

import sqlite3
from os import PathLike
from typing import Optional, Union

from .spa import SPA_ID_LEN, SPA_NONCE_LEN
from .strutil import strnhash

PUBLIC_KEY_LEN = 32

_SCHEMA = """
CREATE TABLE IF NOT EXISTS seen (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    nonce BLOB NOT NULL,
    timestamp INTEGER NOT NULL
);
CREATE UNIQUE INDEX IF NOT EXISTS ix_seen_nonce ON seen(nonce);
CREATE TABLE IF NOT EXISTS keys (
    id BLOB PRIMARY KEY,
    name TEXT,
    key BLOB
);
"""


class KeyStore:
    """Public keys indexed by client id, plus the replay-protection nonce table."""

    def __init__(self, path: Union[str, PathLike]) -> None:
        self._conn = sqlite3.connect(path, isolation_level=None)
        try:
            self._conn.executescript(_SCHEMA)
        except sqlite3.Error:
            self._conn.close()
            raise

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()

    def __enter__(self) -> "KeyStore":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def truncate_keys(self) -> None:
        """Remove every stored public key."""
        self._conn.execute("DELETE FROM keys;")

    def insert_key(self, name: str, public_key: bytes) -> bytes:
        """Store ``public_key`` under the id derived from ``name``; return that id."""
        public_key = bytes(public_key)
        if len(public_key) != PUBLIC_KEY_LEN:
            raise ValueError(f"public key must be {PUBLIC_KEY_LEN} bytes")
        key_id = strnhash(name, SPA_ID_LEN)
        self._conn.execute(
            "INSERT INTO keys (id, name, key) VALUES (?, ?, ?);",
            (key_id, name, public_key),
        )
        return key_id

    def select_key(self, key_id: bytes) -> Optional[bytes]:
        """Return the public key stored for ``key_id``, or None when there is none."""
        row = self._conn.execute(
            "SELECT key FROM keys WHERE id = ?;", (bytes(key_id),)
        ).fetchone()
        if row is None:
            return None
        blob = row[0]
        if not isinstance(blob, bytes) or len(blob) != PUBLIC_KEY_LEN:
            return None
        return blob

    def nonce_seen(self, nonce: bytes) -> bool:
        """Tell whether ``nonce`` has already been recorded."""
        row = self._conn.execute(
            "SELECT 1 FROM seen WHERE nonce = ? LIMIT 1", (bytes(nonce),)
        ).fetchone()
        return row is not None

    def insert_seen(self, nonce: bytes, timestamp: int) -> None:
        """Record ``nonce``; raises sqlite3.IntegrityError if it was already seen."""
        nonce = bytes(nonce)
        if len(nonce) != SPA_NONCE_LEN:
            raise ValueError(f"nonce must be {SPA_NONCE_LEN} bytes")
        self._conn.execute(
            "INSERT INTO seen (nonce, timestamp) VALUES (?, ?);", (nonce, int(timestamp))
        )