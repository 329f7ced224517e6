from __future__ import annotations

import hashlib
import logging
import os
from dataclasses import dataclass
from typing import Callable

from chaindigest.core.sha256 import sha256_hex

HASH_BACKENDS = ("builtin", "hashlib")


@dataclass(frozen=True, slots=True)
class Settings:
    """Runtime settings.

    Environment:
      - CHAINDIGEST_LOG_LEVEL (default WARNING)
      - CHAINDIGEST_HASH_BACKEND: builtin | hashlib (default builtin)
      - CHAINDIGEST_MAX_ITEMS: 0 means unlimited

    """

    log_level: str = "WARNING"
    hash_backend: str = "builtin"
    max_items: int = 0


def _env_int(name: str, default: int) -> int:
    """Read an integer environment variable, falling back on bad values."""

    raw = os.environ.get(name, "").strip()
    if not raw:
        return int(default)
    try:
        return int(raw)
    except ValueError:
        return int(default)


def load_settings() -> Settings:
    """Read settings from the environment."""

    backend = os.environ.get("CHAINDIGEST_HASH_BACKEND", "builtin").strip().lower()
    if backend not in HASH_BACKENDS:
        backend = "builtin"

    level = (os.environ.get("CHAINDIGEST_LOG_LEVEL") or "WARNING").strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        level = "WARNING"

    return Settings(
        log_level=level,
        hash_backend=backend,
        max_items=max(0, _env_int("CHAINDIGEST_MAX_ITEMS", 0)),
    )


def _hashlib_hex(data: str) -> str:
    return hashlib.sha256(data.encode("utf-8")).hexdigest()


def resolve_hasher(backend: str) -> Callable[[str], str]:
    """Return a ``str -> hex digest`` function for a backend name."""

    if backend == "hashlib":
        return _hashlib_hex
    return sha256_hex
