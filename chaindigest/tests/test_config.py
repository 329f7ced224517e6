import pytest

from chaindigest.config import load_settings, resolve_hasher
from chaindigest.core.sha256 import sha256_hex


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("CHAINDIGEST_LOG_LEVEL", "CHAINDIGEST_HASH_BACKEND", "CHAINDIGEST_MAX_ITEMS"):
        monkeypatch.delenv(name, raising=False)
    s = load_settings()
    assert s.log_level == "WARNING"
    assert s.hash_backend == "builtin"
    assert s.max_items == 0


def test_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CHAINDIGEST_LOG_LEVEL", "debug")
    monkeypatch.setenv("CHAINDIGEST_HASH_BACKEND", "HASHLIB")
    monkeypatch.setenv("CHAINDIGEST_MAX_ITEMS", "10")
    s = load_settings()
    assert s.log_level == "DEBUG"
    assert s.hash_backend == "hashlib"
    assert s.max_items == 10


def test_bad_values_fall_back(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CHAINDIGEST_LOG_LEVEL", "chatty")
    monkeypatch.setenv("CHAINDIGEST_HASH_BACKEND", "md5")
    monkeypatch.setenv("CHAINDIGEST_MAX_ITEMS", "lots")
    s = load_settings()
    assert s.log_level == "WARNING"
    assert s.hash_backend == "builtin"
    assert s.max_items == 0


def test_resolve_hasher_backends_agree() -> None:
    assert resolve_hasher("builtin") is sha256_hex
    assert resolve_hasher("hashlib")("abc") == sha256_hex("abc")
