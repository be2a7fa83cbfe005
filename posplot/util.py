"""Byte, bit and integer helpers shared by the plotting code."""

from __future__ import annotations

import math
import os
import time

_U64_MASK = (1 << 64) - 1


class Timer:
    """Measures wall-clock and CPU time since creation."""

    def __init__(self) -> None:
        self._wall_start = time.monotonic()
        self._cpu_start = time.process_time()

    @staticmethod
    def get_now() -> str:
        """Return the current local time in ctime form, ending with a newline."""
        return time.ctime() + "\n"

    def print_elapsed(self, name: str) -> None:
        """Print the elapsed wall time and the CPU usage ratio."""
        wall_ms = int((time.monotonic() - self._wall_start) * 1000)
        cpu_ms = (time.process_time() - self._cpu_start) * 1000.0
        cpu_ratio = int(10000 * (cpu_ms / wall_ms)) / 100.0 if wall_ms else 0.0
        print(
            f"{name} {wall_ms / 1000.0} seconds. CPU ({cpu_ratio}%) {Timer.get_now()}",
            end="",
        )


def cdiv(a: int, b: int) -> int:
    """Integer division rounding up."""
    return (a + b - 1) // b


def mod(i: int, n: int) -> int:
    """Remainder of i by n, always in the range [0, n)."""
    return (i % n + n) % n


def byte_align(num_bits: int) -> int:
    """Round a bit count up to a multiple of eight."""
    return num_bits + (8 - num_bits % 8) % 8


def hex_str(data: bytes) -> str:
    """Lower-case hexadecimal form of the bytes."""
    return bytes(data).hex()


def int_to_two_bytes(value: int) -> bytes:
    """Big-endian 16-bit encoding."""
    return (value & 0xFFFF).to_bytes(2, "big")


def int_to_two_bytes_le(value: int) -> bytes:
    """Little-endian 16-bit encoding."""
    return (value & 0xFFFF).to_bytes(2, "little")


def two_bytes_to_int(data: bytes) -> int:
    """Decode a big-endian 16-bit integer from the first two bytes."""
    return int.from_bytes(bytes(data[:2]), "big")


def int_to_eight_bytes(value: int) -> bytes:
    """Big-endian 64-bit encoding."""
    return (value & _U64_MASK).to_bytes(8, "big")


def eight_bytes_to_int(data: bytes) -> int:
    """Decode a big-endian 64-bit integer from the first eight bytes."""
    return int.from_bytes(bytes(data[:8]), "big")


def int_to_16_bytes(value: int) -> bytes:
    """Big-endian 128-bit encoding."""
    return (value & ((1 << 128) - 1)).to_bytes(16, "big")


def get_size_bits(value: int) -> int:
    """Number of bits needed to represent the value."""
    return value.bit_length()


def _window(data: bytes, start: int, length: int) -> bytes:
    chunk = bytes(data[start:start + length])
    return chunk + bytes(length - len(chunk))


def slice_int64_from_bytes(data: bytes, start_bit: int, num_bits: int) -> int:
    """Read num_bits starting at start_bit from a 64-bit big-endian window.

    When the slice runs past the 64-bit window, bits beyond it read as zero;
    use slice_int64_from_bytes_full for an exact slice.
    """
    offset = 0
    if start_bit + num_bits > 64:
        offset = start_bit // 8
        start_bit %= 8
    tmp = eight_bytes_to_int(_window(data, offset, 8))
    tmp = (tmp << start_bit) & _U64_MASK
    return tmp >> (64 - num_bits)


def _exact_slice(data: bytes, start_bit: int, num_bits: int) -> int:
    if num_bits <= 0:
        return 0
    first = start_bit // 8
    last_bit = start_bit + num_bits
    length = (last_bit + 7) // 8 - first
    value = int.from_bytes(_window(data, first, length), "big")
    trailing = length * 8 - (last_bit - first * 8)
    return (value >> trailing) & ((1 << num_bits) - 1)


def slice_int64_from_bytes_full(data: bytes, start_bit: int, num_bits: int) -> int:
    """Read exactly num_bits (at most 64) starting at start_bit."""
    return _exact_slice(data, start_bit, num_bits)


def slice_int128_from_bytes(data: bytes, start_bit: int, num_bits: int) -> int:
    """Read exactly num_bits (at most 128) starting at start_bit."""
    return _exact_slice(data, start_bit, num_bits)


def get_random_bytes(num_bytes: int) -> bytes:
    """Return num_bytes random bytes."""
    return os.urandom(num_bytes)


def extract_num(data: bytes, len_bytes: int, begin_bits: int, take_bits: int) -> int:
    """Read take_bits from begin_bits, clipped to the end of a len_bytes entry."""
    if (begin_bits + take_bits) // 8 > len_bytes - 1:
        take_bits = len_bytes * 8 - begin_bits
    return slice_int64_from_bytes(data, begin_bits, take_bits)


def round_size(size: int) -> int:
    """Memory entries needed by the in-memory uniform sort for size entries."""
    size *= 2
    result = 1
    while result < size:
        result *= 2
    return result + 50


def mem_cmp_bits(left: bytes, right: bytes, length: int, bits_begin: int) -> int:
    """Compare two byte strings like memcmp, ignoring bits before bits_begin."""
    start_byte = bits_begin // 8
    mask = (1 << (8 - bits_begin % 8)) - 1
    left_first = left[start_byte] & mask
    right_first = right[start_byte] & mask
    if left_first != right_first:
        return left_first - right_first
    for a, b in zip(left[start_byte + 1:length], right[start_byte + 1:length]):
        if a != b:
            return a - b
    return 0


def round_pow2(a: float) -> float:
    """Truncate a float to the nearest power of two towards zero."""
    frac, exp = math.frexp(a)
    if frac > 0.0:
        frac = 0.5
    elif frac < 0.0:
        frac = -0.5
    return math.ldexp(frac, exp)


def pop_count(n: int) -> int:
    """Number of set bits in the 64-bit value."""
    return (n & _U64_MASK).bit_count()