from __future__ import annotations

import base64
import binascii
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Union

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey, Ed25519PublicKey

from chaindigest.core.errors import KeyFormatError
from chaindigest.merkle.tree import MerkleTree

log = logging.getLogger("chaindigest.commitment")

_ROOT_SCHEMA = {"name": "chaindigest.root_commitment", "version": "1.0"}


@dataclass(frozen=True)
class KeyPairPaths:
    """Generated key locations."""

    private_key_path: str
    public_key_path: str


def _canonical_json_bytes(obj: Mapping[str, Any]) -> bytes:
    """Compact, key-sorted UTF-8 JSON; the exact bytes a root signature covers."""

    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False).encode(
        "utf-8"
    )


def generate_ed25519_keypair(out_dir: str, *, prefix: str = "chaindigest_ed25519") -> KeyPairPaths:
    """Write a fresh Ed25519 keypair as ``<prefix>_private.pem`` / ``<prefix>_public.pem``.

    The private key is stored unencrypted (PKCS8).
    """

    out = Path(out_dir)
    out.mkdir(parents=True, exist_ok=True)

    signer = Ed25519PrivateKey.generate()
    pem = serialization.Encoding.PEM
    files = {
        out / f"{prefix}_private.pem": signer.private_bytes(
            pem, serialization.PrivateFormat.PKCS8, serialization.NoEncryption()
        ),
        out / f"{prefix}_public.pem": signer.public_key().public_bytes(
            pem, serialization.PublicFormat.SubjectPublicKeyInfo
        ),
    }
    for path, blob in files.items():
        path.write_bytes(blob)

    priv_path, pub_path = (str(p) for p in files)
    log.info("keypair_generated", extra={"public_key_path": pub_path})
    return KeyPairPaths(private_key_path=priv_path, public_key_path=pub_path)


def _load_pem(path: str, loader: Callable[[bytes], Any], expected: type, label: str) -> Any:
    """Read a PEM file and insist on one key class.

    Raises:
        KeyFormatError: if the file is not a PEM key or holds another key type.
        OSError: if the file cannot be read.
    """

    try:
        key = loader(Path(path).read_bytes())
    except (ValueError, UnsupportedAlgorithm) as e:
        raise KeyFormatError(f"{path}: not a PEM {label}: {e}") from e
    if not isinstance(key, expected):
        raise KeyFormatError(f"{path}: not an Ed25519 {label}")
    return key


def load_private_key_pem(path: str) -> Ed25519PrivateKey:
    return _load_pem(
        path,
        lambda data: serialization.load_pem_private_key(data, password=None),
        Ed25519PrivateKey,
        "private key",
    )


def load_public_key_pem(path: str) -> Ed25519PublicKey:
    return _load_pem(path, serialization.load_pem_public_key, Ed25519PublicKey, "public key")


def root_payload(tree_or_root: Union[MerkleTree, str], *, leaf_count: Optional[int] = None) -> dict:
    """Build the payload that gets signed for a root commitment."""

    if isinstance(tree_or_root, MerkleTree):
        root = tree_or_root.root_hash
        leaf_count = tree_or_root.leaf_count
    else:
        root = str(tree_or_root)

    return {
        "schema": dict(_ROOT_SCHEMA),
        "algorithm": "sha256-merkle",
        "root": root,
        "leaf_count": leaf_count,
    }


def sign_root(private_key_path: str, payload: Mapping[str, Any]) -> str:
    """Create a detached Ed25519 signature over a canonical root payload.

    Returns base64 signature.
    """

    priv = load_private_key_pem(private_key_path)
    sig = priv.sign(_canonical_json_bytes(payload))
    log.info("root_signed", extra={"root": payload.get("root")})
    return base64.b64encode(sig).decode("ascii")


def verify_root_signature(
    public_key: Ed25519PublicKey, payload: Mapping[str, Any], signature_b64: str
) -> bool:
    """Verify a detached Ed25519 signature."""

    try:
        sig = base64.b64decode(signature_b64.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError):
        return False

    try:
        public_key.verify(sig, _canonical_json_bytes(payload))
        return True
    except InvalidSignature:
        return False


def signing_metadata(*, signer_id: Optional[str]) -> Mapping[str, Any]:
    """Standard signing metadata."""

    return {
        "schema": dict(_ROOT_SCHEMA),
        "algorithm": "Ed25519",
        "signed_at": datetime.now(timezone.utc).isoformat(),
        "signer_id": signer_id,
    }
