"""Pure-Python SHA-256 (FIPS 180-4).

Every call to :func:`sha256` allocates its own hash state, message schedule
and working variables. Only ``H0`` and ``K`` are shared, and both are tuples.

Boundary: the length field is a 64-bit bit count, so inputs longer than
``2**61 - 1`` bytes cannot be represented. That is far beyond any in-memory
buffer and is not checked.
"""

from __future__ import annotations

import struct
from typing import List, Sequence, Tuple, Union

from .errors import InvalidInput

BytesLike = Union[bytes, bytearray, memoryview]

DIGEST_SIZE = 32
BLOCK_SIZE = 64
WORD_SIZE = 4

_MASK = 0xFFFFFFFF

# First 32 bits of the fractional parts of the square roots of the first 8 primes.
H0: Tuple[int, ...] = (
    0x6A09E667, 0xBB67AE85, 0x3C6EF372, 0xA54FF53A,
    0x510E527F, 0x9B05688C, 0x1F83D9AB, 0x5BE0CD19,
)

# First 32 bits of the fractional parts of the cube roots of the first 64 primes.
K: Tuple[int, ...] = (
    0x428A2F98, 0x71374491, 0xB5C0FBCF, 0xE9B5DBA5,
    0x3956C25B, 0x59F111F1, 0x923F82A4, 0xAB1C5ED5,
    0xD807AA98, 0x12835B01, 0x243185BE, 0x550C7DC3,
    0x72BE5D74, 0x80DEB1FE, 0x9BDC06A7, 0xC19BF174,
    0xE49B69C1, 0xEFBE4786, 0x0FC19DC6, 0x240CA1CC,
    0x2DE92C6F, 0x4A7484AA, 0x5CB0A9DC, 0x76F988DA,
    0x983E5152, 0xA831C66D, 0xB00327C8, 0xBF597FC7,
    0xC6E00BF3, 0xD5A79147, 0x06CA6351, 0x14292967,
    0x27B70A85, 0x2E1B2138, 0x4D2C6DFC, 0x53380D13,
    0x650A7354, 0x766A0ABB, 0x81C2C92E, 0x92722C85,
    0xA2BFE8A1, 0xA81A664B, 0xC24B8B70, 0xC76C51A3,
    0xD192E819, 0xD6990624, 0xF40E3585, 0x106AA070,
    0x19A4C116, 0x1E376C08, 0x2748774C, 0x34B0BCB5,
    0x391C0CB3, 0x4ED8AA4A, 0x5B9CCA4F, 0x682E6FF3,
    0x748F82EE, 0x78A5636F, 0x84C87814, 0x8CC70208,
    0x90BEFFFA, 0xA4506CEB, 0xBEF9A3F7, 0xC67178F2,
)


def rotr(x: int, n: int) -> int:
    """Circular right rotation of a 32-bit word."""

    return ((x >> n) | (x << (32 - n))) & _MASK


def ch(x: int, y: int, z: int) -> int:
    return (x & y) | (~x & z)


def maj(x: int, y: int, z: int) -> int:
    return (x & y) | (x & z) | (y & z)


def big_sigma0(x: int) -> int:
    return rotr(x, 2) ^ rotr(x, 13) ^ rotr(x, 22)


def big_sigma1(x: int) -> int:
    return rotr(x, 6) ^ rotr(x, 11) ^ rotr(x, 25)


def small_sigma0(x: int) -> int:
    return rotr(x, 7) ^ rotr(x, 18) ^ (x >> 3)


def small_sigma1(x: int) -> int:
    return rotr(x, 17) ^ rotr(x, 19) ^ (x >> 10)


def pad(message: BytesLike) -> bytes:
    """Pad a message to a multiple of 64 bytes.

    Layout: message || 0x80 || zero bytes || 64-bit big-endian bit length.
    The zero run is the shortest that makes the total a multiple of 64, so the
    result is always strictly longer than the input. Lengths are counted in
    bytes, whatever the item size of a memoryview.
    """

    data = bytes(message)
    length = len(data)
    zeros = (BLOCK_SIZE - (length + 1 + 8) % BLOCK_SIZE) % BLOCK_SIZE
    return data + b"\x80" + b"\x00" * zeros + struct.pack(">Q", length * 8)


def to_words(buf: BytesLike) -> List[int]:
    """Reinterpret a buffer as big-endian 32-bit words.

    Raises:
        InvalidInput: if the buffer length is not a multiple of 4.
    """

    data = bytes(buf)
    if len(data) % WORD_SIZE != 0:
        raise InvalidInput(f"buffer length {len(data)} is not a multiple of {WORD_SIZE}")
    return list(struct.unpack(f">{len(data) // WORD_SIZE}I", data))


def from_words(words: Sequence[int]) -> bytes:
    """Serialize 32-bit words big-endian."""

    return struct.pack(f">{len(words)}I", *words)


def _compress(state: List[int], block: Sequence[int]) -> None:
    """Fold one 16-word block into ``state`` in place."""

    w = list(block)
    for t in range(16, 64):
        w.append((small_sigma1(w[t - 2]) + w[t - 7] + small_sigma0(w[t - 15]) + w[t - 16]) & _MASK)

    a, b, c, d, e, f, g, h = state
    for t in range(64):
        t1 = (h + big_sigma1(e) + ch(e, f, g) + K[t] + w[t]) & _MASK
        t2 = (big_sigma0(a) + maj(a, b, c)) & _MASK
        h, g, f, e, d, c, b, a = g, f, e, (d + t1) & _MASK, c, b, a, (t1 + t2) & _MASK

    for i, v in enumerate((a, b, c, d, e, f, g, h)):
        state[i] = (state[i] + v) & _MASK


def sha256(message: BytesLike) -> bytes:
    """Return the 32-byte SHA-256 digest of ``message``."""

    if not isinstance(message, (bytes, bytearray, memoryview)):
        raise InvalidInput(f"expected bytes-like input, got {type(message).__name__}")
    message = bytes(message)

    words = to_words(pad(message))
    state = list(H0)
    for i in range(0, len(words), 16):
        _compress(state, words[i : i + 16])
    return from_words(state)


def hex_digest(data: BytesLike) -> str:
    """Lowercase hex encoding."""

    return bytes(data).hex()


def sha256_hex(message: Union[BytesLike, str]) -> str:
    """Hex SHA-256 of bytes, or of a string encoded as UTF-8."""

    if isinstance(message, str):
        message = message.encode("utf-8")
    return hex_digest(sha256(message))
