"""Cipher provider contract.

Encryption sits outside the digest core. This module only fixes the
interface the rest of a system can rely on, and ships one thin pass-through
to ``cryptography`` so the contract has a concrete, tested implementation.
"""

from __future__ import annotations

import base64
from typing import Any, Protocol, Tuple

from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey


class CipherProvider(Protocol):
    def encrypt(self, plaintext: bytes, key: Any) -> bytes: ...

    def decrypt(self, ciphertext: bytes, key: Any) -> bytes: ...


_OAEP = padding.OAEP(
    mgf=padding.MGF1(algorithm=hashes.SHA256()),
    algorithm=hashes.SHA256(),
    label=None,
)


class RsaOaepCipher:
    """RSA-OAEP (SHA-256). Encrypt with the public key, decrypt with the private key.

    Plaintext is limited to ``key_size/8 - 66`` bytes (190 for RSA-2048).
    """

    def __init__(self, key_size: int = 2048) -> None:
        self.key_size = key_size

    def generate_keypair(self) -> Tuple[RSAPrivateKey, RSAPublicKey]:
        priv = rsa.generate_private_key(public_exponent=65537, key_size=self.key_size)
        return priv, priv.public_key()

    def encrypt(self, plaintext: bytes, key: RSAPublicKey) -> bytes:
        return key.encrypt(plaintext, _OAEP)

    def decrypt(self, ciphertext: bytes, key: RSAPrivateKey) -> bytes:
        return key.decrypt(ciphertext, _OAEP)

    def encrypt_text(self, text: str, key: RSAPublicKey) -> str:
        """Encrypt UTF-8 text, returning base64."""

        return base64.b64encode(self.encrypt(text.encode("utf-8"), key)).decode("ascii")

    def decrypt_text(self, ciphertext_b64: str, key: RSAPrivateKey) -> str:
        return self.decrypt(base64.b64decode(ciphertext_b64), key).decode("utf-8")


def public_key_base64(key: RSAPublicKey) -> str:
    """DER SubjectPublicKeyInfo, base64-encoded."""

    der = key.public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return base64.b64encode(der).decode("ascii")


def load_public_key_base64(data: str) -> RSAPublicKey:
    key = serialization.load_der_public_key(base64.b64decode(data))
    if not isinstance(key, RSAPublicKey):
        raise TypeError("not an RSA public key")
    return key
