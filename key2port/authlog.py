"""Authorization and error logs, mirrored to the console."""

from __future__ import annotations

import sys
from typing import Optional, TextIO


class AuthLogs:
    """Append-only auth and error log files, each echoed to stdout or stderr."""

    def __init__(self, auth_path: Optional[str], error_path: Optional[str]) -> None:
        self._auth: Optional[TextIO] = None
        self._error: Optional[TextIO] = None
        if auth_path is not None:
            self._auth = open(auth_path, "a", encoding="utf-8")
        if error_path is not None:
            try:
                self._error = open(error_path, "a", encoding="utf-8")
            except OSError:
                self.close()
                raise

    @staticmethod
    def _write(stream: Optional[TextIO], message: str) -> None:
        if stream is None:
            return
        stream.write(message)
        stream.write("\n")
        stream.flush()

    def auth(self, message: str) -> None:
        """Record a successful authorization."""
        self._write(self._auth, message)
        self._write(sys.stdout, message)

    def error(self, message: str) -> None:
        """Record an error."""
        self._write(self._error, message)
        self._write(sys.stderr, message)

    def close(self) -> None:
        """Close any open log files."""
        for stream in (self._auth, self._error):
            if stream is not None:
                stream.close()
        self._auth = None
        self._error = None

    def __enter__(self) -> "AuthLogs":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()