from chaindigest.commitment.cipher import (
    CipherProvider,
    RsaOaepCipher,
    load_public_key_base64,
    public_key_base64,
)


def _round_trip(provider: CipherProvider, plaintext: bytes, enc_key, dec_key) -> bytes:
    return provider.decrypt(provider.encrypt(plaintext, enc_key), dec_key)


def test_rsa_oaep_round_trip() -> None:
    cipher = RsaOaepCipher()
    priv, pub = cipher.generate_keypair()
    assert _round_trip(cipher, b"block header", pub, priv) == b"block header"


def test_text_helpers_and_key_export() -> None:
    cipher = RsaOaepCipher()
    priv, pub = cipher.generate_keypair()
    pub2 = load_public_key_base64(public_key_base64(pub))
    ct = cipher.encrypt_text("你好, merkle", pub2)
    assert ct != "你好, merkle"
    assert cipher.decrypt_text(ct, priv) == "你好, merkle"
