import pytest

from posplot import util


def test_timer_get_now_ends_with_newline():
    now = util.Timer.get_now()
    assert now.endswith("\n")
    assert len(now.strip()) > 10


def test_timer_print_elapsed(capsys):
    timer = util.Timer()
    timer.print_elapsed("Phase done:")
    out = capsys.readouterr().out
    assert out.startswith("Phase done: ")
    assert "seconds. CPU (" in out


@pytest.mark.parametrize("a,b", [(0, 3), (1, 3), (9, 3), (10, 3), (1023, 64), (1024, 64)])
def test_cdiv_bounds(a, b):
    q = util.cdiv(a, b)
    assert q * b >= a
    assert (q - 1) * b < a


@pytest.mark.parametrize("i,n", [(-1, 5), (7, 5), (0, 3), (-12, 4)])
def test_mod_range(i, n):
    r = util.mod(i, n)
    assert 0 <= r < n
    assert (i - r) % n == 0


@pytest.mark.parametrize("bits", [0, 1, 7, 8, 9, 33, 64])
def test_byte_align(bits):
    aligned = util.byte_align(bits)
    assert aligned % 8 == 0
    assert bits <= aligned < bits + 8


def test_hex_str():
    assert util.hex_str(b"\x00\xff\x10") == "00ff10"


def test_two_bytes_round_trip():
    assert util.int_to_two_bytes(0x1234) == b"\x12\x34"
    assert util.int_to_two_bytes_le(0x1234) == b"\x34\x12"
    assert util.two_bytes_to_int(util.int_to_two_bytes(0xBEEF)) == 0xBEEF


def test_eight_bytes_round_trip():
    value = 0x0123456789ABCDEF
    encoded = util.int_to_eight_bytes(value)
    assert encoded == bytes.fromhex("0123456789abcdef")
    assert util.eight_bytes_to_int(encoded) == value


def test_16_bytes_round_trip():
    value = (0x0123456789ABCDEF << 64) | 0xFEDCBA9876543210
    encoded = util.int_to_16_bytes(value)
    assert len(encoded) == 16
    assert util.slice_int128_from_bytes(encoded, 0, 128) == value


@pytest.mark.parametrize("value", [1, 2, 255, 256, 1 << 70, (1 << 100) - 3])
def test_get_size_bits(value):
    s = util.get_size_bits(value)
    assert 2 ** (s - 1) <= value < 2 ** s


def test_get_size_bits_zero():
    assert util.get_size_bits(0) == 0


def test_slice_int64_simple():
    data = bytes([0x12, 0x34, 0x56, 0x78, 0x9A, 0xBC, 0xDE, 0xF0])
    assert util.slice_int64_from_bytes(data, 0, 8) == 0x12
    assert util.slice_int64_from_bytes(data, 8, 16) == 0x3456
    assert util.slice_int64_from_bytes(data, 0, 64) == 0x123456789ABCDEF0


def test_slice_int64_across_window():
    buf = util.int_to_16_bytes(0xAB << (128 - 60 - 8))
    assert util.slice_int64_from_bytes(buf, 60, 8) == 0xAB


def test_slice_full_and_128_round_trip():
    high = (1 << 100) - 12345
    low = 0x5A5A5A5
    buf = util.int_to_16_bytes((high << 28) | low)
    assert util.slice_int128_from_bytes(buf, 0, 100) == high
    assert util.slice_int128_from_bytes(buf, 100, 28) == low
    assert util.slice_int64_from_bytes_full(buf, 100, 28) == low


def test_slice_full_long_unaligned():
    value = 0xFEDCBA9876543210
    buf = util.int_to_16_bytes(value << 61)
    assert util.slice_int64_from_bytes_full(buf, 3, 64) == value


def test_get_random_bytes_length():
    assert len(util.get_random_bytes(37)) == 37


def test_extract_num_clips_to_entry():
    data = b"\x00\x00\x00\x7f"
    assert util.extract_num(data, 4, 24, 16) == 0x7F


def test_extract_num_inside_entry():
    data = b"\xab\xcd\x00\x00"
    assert util.extract_num(data, 4, 0, 8) == 0xAB


@pytest.mark.parametrize("n", [1, 2, 3, 100, 1000, 4097])
def test_round_size_invariant(n):
    r = util.round_size(n) - 50
    assert r & (r - 1) == 0
    assert 2 * n <= r < 4 * n


def test_mem_cmp_bits():
    a = bytes([0xF1, 0x02, 0x03])
    b = bytes([0x01, 0x02, 0x03])
    assert util.mem_cmp_bits(a, b, 3, 4) == 0
    assert util.mem_cmp_bits(a, b, 3, 0) > 0
    c = bytes([0x01, 0x02, 0x05])
    assert util.mem_cmp_bits(b, c, 3, 4) < 0
    assert util.mem_cmp_bits(c, b, 3, 4) > 0


@pytest.mark.parametrize("a", [5.0, 8.0, 0.3, 1000.5])
def test_round_pow2_positive(a):
    r = util.round_pow2(a)
    assert r <= a < 2 * r
    mantissa, _ = __import_frexp(r)
    assert mantissa == 0.5


def __import_frexp(x):
    import math

    return math.frexp(x)


def test_round_pow2_negative_and_zero():
    assert util.round_pow2(-5.0) == -4.0
    assert util.round_pow2(0.0) == 0.0


@pytest.mark.parametrize("k", [0, 1, 5, 33, 64])
def test_pop_count(k):
    assert util.pop_count((1 << k) - 1) == k