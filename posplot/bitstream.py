"""Bit streams written forward and read backward, as used by entropy coders.

Bits added to a :class:`BitWriter` are read back by a :class:`BitReader` in
reverse order: the last field written is the first one read.
"""

from __future__ import annotations

from enum import IntEnum

CONTAINER_BYTES = 8
CONTAINER_BITS = CONTAINER_BYTES * 8
MAX_ADD_BITS = 31

_CONTAINER_MASK = (1 << CONTAINER_BITS) - 1
_REG_MASK = CONTAINER_BITS - 1


class BitStreamError(ValueError):
    """Raised when a bit stream cannot be written or read."""


class DStreamStatus(IntEnum):
    """State of a reader after a reload."""

    UNFINISHED = 0
    END_OF_BUFFER = 1
    COMPLETED = 2
    OVERFLOW = 3


def highbit32(value: int) -> int:
    """Index of the highest set bit of a non-zero 32-bit value."""
    if not 0 < value <= 0xFFFFFFFF:
        raise ValueError("highbit32 needs a non-zero 32-bit value")
    return value.bit_length() - 1


class BitWriter:
    """Accumulates bit fields into a fixed-capacity byte buffer."""

    def __init__(self, capacity: int) -> None:
        if capacity <= CONTAINER_BYTES:
            raise BitStreamError("destination size too small")
        self._buffer = bytearray(capacity)
        self._container = 0
        self._bit_pos = 0
        self._ptr = 0
        self._end_ptr = capacity - CONTAINER_BYTES

    def _check_room(self, nb_bits: int) -> None:
        if nb_bits + self._bit_pos >= CONTAINER_BITS:
            raise ValueError("bit container overflow; flush before adding more bits")

    def add_bits(self, value: int, nb_bits: int) -> None:
        """Add the low nb_bits (at most 31) of value to the register."""
        if not 0 <= nb_bits <= MAX_ADD_BITS:
            raise ValueError(f"nb_bits must be between 0 and {MAX_ADD_BITS}")
        self._check_room(nb_bits)
        self._container |= (value & ((1 << nb_bits) - 1)) << self._bit_pos
        self._bit_pos += nb_bits

    def add_bits_fast(self, value: int, nb_bits: int) -> None:
        """Add value, which must have no bits set above nb_bits."""
        if value < 0 or value >> nb_bits:
            raise ValueError("value has bits set above nb_bits")
        self._check_room(nb_bits)
        self._container |= value << self._bit_pos
        self._bit_pos += nb_bits

    def flush_bits(self) -> None:
        """Move the whole bytes of the register into the buffer.

        Writing past the capacity is not signalled here; close() reports it.
        """
        nb_bytes = self._bit_pos >> 3
        self._buffer[self._ptr:self._ptr + CONTAINER_BYTES] = (
            self._container & _CONTAINER_MASK
        ).to_bytes(CONTAINER_BYTES, "little")
        self._ptr = min(self._ptr + nb_bytes, self._end_ptr)
        self._bit_pos &= 7
        self._container >>= nb_bytes * 8

    def close(self) -> bytes:
        """Add the end mark, flush, and return the stream's bytes."""
        self.add_bits_fast(1, 1)
        self.flush_bits()
        if self._ptr >= self._end_ptr:
            raise BitStreamError("stream does not fit in the destination buffer")
        size = self._ptr + (1 if self._bit_pos > 0 else 0)
        return bytes(self._buffer[:size])


class BitReader:
    """Reads bit fields from the end of a stream towards its start."""

    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)
        size = len(self._data)
        if size < 1:
            raise BitStreamError("source size wrong")
        last_byte = self._data[-1]
        if last_byte == 0:
            raise BitStreamError("end mark not present")
        if size >= CONTAINER_BYTES:
            self._ptr = size - CONTAINER_BYTES
            self._container = self._read_container(self._ptr)
            self._bits_consumed = 8 - highbit32(last_byte)
        else:
            self._ptr = 0
            self._container = int.from_bytes(self._data, "little")
            self._bits_consumed = 8 - highbit32(last_byte)
            self._bits_consumed += (CONTAINER_BYTES - size) * 8

    def _read_container(self, ptr: int) -> int:
        return int.from_bytes(self._data[ptr:ptr + CONTAINER_BYTES], "little")

    @property
    def bits_consumed(self) -> int:
        """Bits of the current register already read."""
        return self._bits_consumed

    def look_bits(self, nb_bits: int) -> int:
        """Return the next nb_bits without consuming them."""
        shifted = (self._container << (self._bits_consumed & _REG_MASK)) & _CONTAINER_MASK
        return (shifted >> 1) >> ((_REG_MASK - nb_bits) & _REG_MASK)

    def skip_bits(self, nb_bits: int) -> None:
        """Consume nb_bits without reading them."""
        self._bits_consumed += nb_bits

    def read_bits(self, nb_bits: int) -> int:
        """Consume and return the next nb_bits."""
        value = self.look_bits(nb_bits)
        self.skip_bits(nb_bits)
        return value

    def reload(self) -> DStreamStatus:
        """Refill the register from the buffer, never reading before its start."""
        if self._bits_consumed > CONTAINER_BITS:
            return DStreamStatus.OVERFLOW

        if self._ptr >= CONTAINER_BYTES:
            self._ptr -= self._bits_consumed >> 3
            self._bits_consumed &= 7
            self._container = self._read_container(self._ptr)
            return DStreamStatus.UNFINISHED

        if self._ptr == 0:
            if self._bits_consumed < CONTAINER_BITS:
                return DStreamStatus.END_OF_BUFFER
            return DStreamStatus.COMPLETED

        nb_bytes = self._bits_consumed >> 3
        result = DStreamStatus.UNFINISHED
        if self._ptr - nb_bytes < 0:
            nb_bytes = self._ptr
            result = DStreamStatus.END_OF_BUFFER
        self._ptr -= nb_bytes
        self._bits_consumed -= nb_bytes * 8
        self._container = self._read_container(self._ptr)
        return result

    def end_of_stream(self) -> bool:
        """Whether every bit of the stream has been consumed exactly."""
        return self._ptr == 0 and self._bits_consumed == CONTAINER_BITS