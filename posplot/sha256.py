"""Pure SHA-256 hashing with one-shot, incremental and file helpers."""

from __future__ import annotations

import os
import struct
from typing import Union

BytesLike = Union[bytes, bytearray, memoryview, str]

DIGEST_SIZE = 32
BLOCK_SIZE = 64
FILE_BUFFER_SIZE = 1024 * 1024

_MASK32 = 0xFFFFFFFF

_ROUND_CONSTANTS = (
    0x428A2F98, 0x71374491, 0xB5C0FBCF, 0xE9B5DBA5, 0x3956C25B, 0x59F111F1,
    0x923F82A4, 0xAB1C5ED5, 0xD807AA98, 0x12835B01, 0x243185BE, 0x550C7DC3,
    0x72BE5D74, 0x80DEB1FE, 0x9BDC06A7, 0xC19BF174, 0xE49B69C1, 0xEFBE4786,
    0x0FC19DC6, 0x240CA1CC, 0x2DE92C6F, 0x4A7484AA, 0x5CB0A9DC, 0x76F988DA,
    0x983E5152, 0xA831C66D, 0xB00327C8, 0xBF597FC7, 0xC6E00BF3, 0xD5A79147,
    0x06CA6351, 0x14292967, 0x27B70A85, 0x2E1B2138, 0x4D2C6DFC, 0x53380D13,
    0x650A7354, 0x766A0ABB, 0x81C2C92E, 0x92722C85, 0xA2BFE8A1, 0xA81A664B,
    0xC24B8B70, 0xC76C51A3, 0xD192E819, 0xD6990624, 0xF40E3585, 0x106AA070,
    0x19A4C116, 0x1E376C08, 0x2748774C, 0x34B0BCB5, 0x391C0CB3, 0x4ED8AA4A,
    0x5B9CCA4F, 0x682E6FF3, 0x748F82EE, 0x78A5636F, 0x84C87814, 0x8CC70208,
    0x90BEFFFA, 0xA4506CEB, 0xBEF9A3F7, 0xC67178F2,
)

_INITIAL_DIGEST = (
    0x6A09E667, 0xBB67AE85, 0x3C6EF372, 0xA54FF53A,
    0x510E527F, 0x9B05688C, 0x1F83D9AB, 0x5BE0CD19,
)


def _rotr(x: int, n: int) -> int:
    return ((x >> n) | (x << (32 - n))) & _MASK32


def _compress(state: list[int], block: bytes) -> list[int]:
    w = list(struct.unpack(">16I", block))
    for i in range(16, 64):
        s0 = _rotr(w[i - 15], 7) ^ _rotr(w[i - 15], 18) ^ (w[i - 15] >> 3)
        s1 = _rotr(w[i - 2], 17) ^ _rotr(w[i - 2], 19) ^ (w[i - 2] >> 10)
        w.append((s1 + w[i - 7] + s0 + w[i - 16]) & _MASK32)

    a, b, c, d, e, f, g, h = state
    for k, wi in zip(_ROUND_CONSTANTS, w):
        big_s1 = _rotr(e, 6) ^ _rotr(e, 11) ^ _rotr(e, 25)
        choose = (e & f) ^ (~e & g)
        temp1 = (h + big_s1 + choose + k + wi) & _MASK32
        big_s0 = _rotr(a, 2) ^ _rotr(a, 13) ^ _rotr(a, 22)
        majority = (a & b) ^ (a & c) ^ (b & c)
        temp2 = (big_s0 + majority) & _MASK32
        h, g, f, e, d, c, b, a = g, f, e, (d + temp1) & _MASK32, c, b, a, (temp1 + temp2) & _MASK32

    return [(x + y) & _MASK32 for x, y in zip(state, (a, b, c, d, e, f, g, h))]


def _as_bytes(data: BytesLike) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8")
    return bytes(data)


class Sha256:
    """Incremental SHA-256 hasher."""

    def __init__(self, data: BytesLike = b"") -> None:
        self.reset()
        if data:
            self.update(data)

    def reset(self) -> None:
        """Return the hasher to its initial, empty state."""
        self._state = list(_INITIAL_DIGEST)
        self._buffer = bytearray()
        self._length = 0

    def update(self, data: BytesLike) -> None:
        """Feed more bytes into the hash."""
        chunk = _as_bytes(data)
        self._length += len(chunk)
        self._buffer.extend(chunk)
        full = len(self._buffer) - len(self._buffer) % BLOCK_SIZE
        for start in range(0, full, BLOCK_SIZE):
            self._state = _compress(self._state, bytes(self._buffer[start:start + BLOCK_SIZE]))
        del self._buffer[:full]

    def digest(self) -> bytes:
        """The 32-byte digest of everything fed so far; the hasher is not changed."""
        tail = bytes(self._buffer) + b"\x80"
        tail += bytes((56 - len(tail)) % BLOCK_SIZE)
        tail += ((self._length * 8) & ((1 << 64) - 1)).to_bytes(8, "big")
        state = list(self._state)
        for start in range(0, len(tail), BLOCK_SIZE):
            state = _compress(state, tail[start:start + BLOCK_SIZE])
        return b"".join(word.to_bytes(4, "big") for word in state)

    def hexdigest(self) -> str:
        """The digest as lower-case hexadecimal."""
        return bytes_to_hex_string(self.digest())


def bytes_to_hex_string(data: BytesLike) -> str:
    """Lower-case hexadecimal form of the bytes, two digits per byte."""
    return _as_bytes(data).hex()


def hash256(data: BytesLike) -> bytes:
    """SHA-256 digest of the data."""
    return Sha256(data).digest()


def hash256_hex_string(data: BytesLike) -> str:
    """SHA-256 digest of the data as lower-case hexadecimal."""
    return Sha256(data).hexdigest()


def hash256_file(path: Union[str, os.PathLike]) -> bytes:
    """SHA-256 digest of a file's contents, read in buffered chunks."""
    hasher = Sha256()
    with open(path, "rb") as handle:
        while chunk := handle.read(FILE_BUFFER_SIZE):
            hasher.update(chunk)
    return hasher.digest()