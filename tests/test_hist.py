import pytest

from posplot.hist import (
    Histogram,
    HistogramError,
    count,
    count_fast,
    count_simple,
)


def test_count_simple_basic():
    h = count_simple(b"aab", 255)
    assert h.max_symbol_value == ord("b")
    assert h.counts[ord("a")] == 2
    assert h.counts[ord("b")] == 1
    assert h.largest_count == 2
    assert len(h.counts) == ord("b") + 1


def test_count_simple_empty():
    h = count_simple(b"", 255)
    assert h == Histogram([0], 0, 0)


def test_count_simple_rejects_large_symbol():
    with pytest.raises(HistogramError):
        count_simple(bytes([1, 2, 9]), 5)


def test_single_symbol_largest_equals_length():
    data = bytes([7]) * 40
    h = count(data)
    assert h.largest_count == len(data)
    assert h.max_symbol_value == 7


def test_count_sum_matches_length():
    data = bytes(range(256)) * 3 + b"xyz"
    h = count(data)
    assert sum(h.counts) == len(data)
    assert h.max_symbol_value == 255


def test_count_checks_max():
    with pytest.raises(HistogramError):
        count(bytes([0, 3, 10]) * 600, 4)


def test_count_zero_max_means_default():
    data = bytes([0, 3, 200])
    h = count(data, 0)
    assert h.max_symbol_value == 200
    assert sum(h.counts) == 3


def test_count_with_small_max_accepts_valid_data():
    data = bytes([0, 1, 2, 2, 3])
    h = count(data, 10)
    assert h.counts == [1, 1, 2, 1]
    assert h.max_symbol_value == 3


def test_count_fast_large_matches_simple():
    data = bytes((i * 37) % 100 for i in range(5000))
    fast = count_fast(data, 255)
    simple = count_simple(data, 255)
    assert fast == simple
    assert sum(fast.counts) == len(data)


def test_count_fast_large_drops_symbols_beyond_max():
    data = bytes([1, 2, 200]) * 600
    h = count_fast(data, 10)
    assert h.max_symbol_value == 2
    assert sum(h.counts) == 1200


def test_count_fast_small_rejects_large_symbol():
    with pytest.raises(HistogramError):
        count_fast(bytes([1, 200]), 10)


def test_trailing_zero_symbols_trimmed():
    h = count(bytes([0, 0, 1]), 100)
    assert h.max_symbol_value == 1
    assert h.counts == [2, 1]


def test_count_empty():
    h = count(b"", 50)
    assert h.max_symbol_value == 0
    assert h.largest_count == 0