"""Server configuration file."""

from __future__ import annotations

import re
from dataclasses import dataclass
from os import PathLike
from typing import Union

from .strutil import trim_ends

_PATH_WIDTH = 4095


@dataclass
class Config:
    """Settings read from the server configuration file."""

    interface: str = ""
    sqlite_db: str = ""
    keys: str = ""
    log_auth: str = ""
    log_error: str = ""
    replay_window: int = 0
    ttl: int = 0
    min_capture_port: int = 0
    max_capture_port: int = 0


# (field, maximum width) for string settings
_STRING_KEYS = (
    ("interface", 31),
    ("sqlite_db", _PATH_WIDTH),
    ("keys", _PATH_WIDTH),
    ("log_auth", _PATH_WIDTH),
    ("log_error", _PATH_WIDTH),
)
# (field, modulus of the stored unsigned value) for integer settings
_INT_KEYS = (
    ("replay_window", 2**32),
    ("ttl", 2**32),
    ("min_capture_port", 2**16),
    ("max_capture_port", 2**16),
)

_STRING_PATTERNS = [
    (name, width, re.compile(rf"{name}\s*=\s*(\S+)", re.ASCII)) for name, width in _STRING_KEYS
]
_INT_PATTERNS = [
    (name, modulus, re.compile(rf"{name}\s*=\s*([+-]?\d+)", re.ASCII)) for name, modulus in _INT_KEYS
]


def _apply_line(config: Config, line: str) -> None:
    for name, width, pattern in _STRING_PATTERNS:
        match = pattern.match(line)
        if match:
            setattr(config, name, trim_ends(match.group(1)[:width]))
            return
    for name, modulus, pattern in _INT_PATTERNS:
        match = pattern.match(line)
        if match:
            setattr(config, name, int(match.group(1)) % modulus)
            return


def parse_config(text: str) -> Config:
    """Build a configuration from ``key = value`` lines; unknown lines are ignored."""
    config = Config()
    for line in text.splitlines():
        _apply_line(config, line)
    return config


def load_config(path: Union[str, PathLike]) -> Config:
    """Read and parse the configuration file at ``path``."""
    with open(path, "r", encoding="utf-8") as handle:
        return parse_config(handle.read())