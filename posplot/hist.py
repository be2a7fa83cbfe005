"""Byte histograms, as used to build entropy-coding tables."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Union

BytesLike = Union[bytes, bytearray, memoryview]

MAX_SYMBOL = 255
FAST_THRESHOLD = 1500


class HistogramError(ValueError):
    """Raised when the data holds symbols beyond the allowed maximum."""


@dataclass(frozen=True)
class Histogram:
    """Symbol counts of a byte string.

    ``counts`` has one entry per symbol from 0 to ``max_symbol_value``, the
    largest symbol actually present (0 for empty input). ``largest_count`` is
    the frequency of the most common symbol; it equals the input length when
    only one symbol occurs.
    """

    counts: list[int]
    max_symbol_value: int
    largest_count: int


def _tally(data: bytes) -> list[int]:
    table = [0] * (MAX_SYMBOL + 1)
    for symbol, occurrences in Counter(data).items():
        table[symbol] = occurrences
    return table


def _trimmed(table: list[int], max_symbol_value: int) -> Histogram:
    while max_symbol_value > 0 and not table[max_symbol_value]:
        max_symbol_value -= 1
    counts = table[:max_symbol_value + 1]
    return Histogram(counts, max_symbol_value, max(counts, default=0))


def count_simple(data: BytesLike, max_symbol_value: int = MAX_SYMBOL) -> Histogram:
    """Count every byte; each must be at most max_symbol_value."""
    raw = bytes(data)
    if not raw:
        return Histogram([0], 0, 0)
    table = _tally(raw)
    highest = max(raw)
    if highest > max_symbol_value:
        raise HistogramError(
            f"symbol {highest} exceeds max_symbol_value {max_symbol_value}"
        )
    return _trimmed(table, min(max_symbol_value, MAX_SYMBOL))


def _count_checked(raw: bytes, max_symbol_value: int, check_max: bool) -> Histogram:
    if not raw:
        return Histogram([0], 0, 0)
    if not max_symbol_value:
        max_symbol_value = MAX_SYMBOL
    table = _tally(raw)
    if check_max and any(table[max_symbol_value + 1:]):
        raise HistogramError("max_symbol_value too small")
    return _trimmed(table, min(max_symbol_value, MAX_SYMBOL))


def count_fast(data: BytesLike, max_symbol_value: int = MAX_SYMBOL) -> Histogram:
    """Count bytes, trusting they do not exceed max_symbol_value.

    Short inputs are counted exactly; on long inputs symbols beyond the
    maximum are left out of the counts.
    """
    raw = bytes(data)
    if len(raw) < FAST_THRESHOLD:
        return count_simple(raw, max_symbol_value)
    return _count_checked(raw, max_symbol_value, check_max=False)


def count(data: BytesLike, max_symbol_value: int = MAX_SYMBOL) -> Histogram:
    """Count bytes, raising HistogramError if one exceeds max_symbol_value.

    A max_symbol_value of 0 means the default maximum of 255.
    """
    raw = bytes(data)
    if max_symbol_value < MAX_SYMBOL:
        return _count_checked(raw, max_symbol_value, check_max=True)
    return count_fast(raw, MAX_SYMBOL)