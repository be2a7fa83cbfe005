# posplot

Pure-Python building blocks for writing proof-of-space plot files. It has no
dependencies outside the standard library.

## Install

```
pip install .
```

For the tests:

```
pip install ".[test]"
pytest
```

## Modules

### `posplot.util`

Integer packing and bit slicing on byte strings.

- `int_to_two_bytes`, `int_to_two_bytes_le`, `two_bytes_to_int`,
  `int_to_eight_bytes`, `eight_bytes_to_int`, `int_to_16_bytes`: fixed-width
  big-endian (and one little-endian) encodings.
- `slice_int64_from_bytes(data, start_bit, num_bits)`: reads bits from a
  64-bit big-endian window; bits past that window read as zero.
  `slice_int64_from_bytes_full` and `slice_int128_from_bytes` read the exact
  slice.
- `extract_num`: like `slice_int64_from_bytes`, clipped to the end of an entry.
- `cdiv`, `mod`, `byte_align`, `round_size`, `round_pow2`, `get_size_bits`,
  `pop_count`, `hex_str`, `get_random_bytes`, `mem_cmp_bits`.
- `Timer`: `print_elapsed(name)` prints wall time and CPU usage since the timer
  was made; `Timer.get_now()` returns the current time in `ctime` form.

```python
from posplot.util import byte_align, slice_int64_from_bytes

byte_align(13)                                      # 16
slice_int64_from_bytes(b"\xf0" + bytes(7), 0, 4)    # 15
```

### `posplot.encoding`

Maps an unordered pair of positions to one "line point" and back, and builds
the normalized symbol counts (summing to 2**14) for delta encoding.

```python
from posplot.encoding import square_to_line_point, line_point_to_square

point = square_to_line_point(5, 3)    # 13
line_point_to_square(point)           # (5, 3)
```

`line_point_to_square` always returns the larger position first.
`create_normalized_count(r)` reports symbols whose count would be 1 as `-1`.

### `posplot.sha256`

A SHA-256 implementation: the incremental `Sha256` class (`update`, `digest`,
`hexdigest`, `reset`) and the helpers `hash256`, `hash256_hex_string`,
`hash256_file` and `bytes_to_hex_string`. Strings are hashed as UTF-8.

```python
from posplot.sha256 import hash256_hex_string

hash256_hex_string(b"abc")
# 'ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad'
```

### `posplot.disk_util`

- `is_rotational(directory)` / `should_lock(directory)`: whether the directory
  sits on spinning media, found through `/sys/dev/block`. On macOS and Windows,
  and whenever the device cannot be determined, the answer is `False`.
- `DirectoryLock`: an exclusive `flock` on a directory, taken on creation
  (unless `lock=False`) and usable as a context manager. While another process
  holds it, acquiring retries every 10 seconds. Where `fcntl` is not available
  no lock is taken and `lock()` returns `False`.
- `lock_directory` / `unlock_directory`: the same at the descriptor level.

```python
from posplot.disk_util import DirectoryLock

with DirectoryLock("/tmp/plots") as lock:
    print(lock.locked)
```

### `posplot.bitstream`

`BitWriter` packs bit fields into a buffer of fixed capacity; `BitReader`
reads them back starting from the last field written. Both raise
`BitStreamError` for a buffer that is too small, a stream that does not fit, or
a stream without its end mark. `BitReader.reload()` returns a `DStreamStatus`.

```python
from posplot.bitstream import BitReader, BitWriter

writer = BitWriter(16)
writer.add_bits(5, 3)
writer.add_bits(1, 1)
writer.flush_bits()
data = writer.close()

reader = BitReader(data)
reader.read_bits(1)   # 1
reader.read_bits(3)   # 5
```

### `posplot.hist`

Byte histograms returned as a frozen `Histogram(counts, max_symbol_value,
largest_count)`; `counts` stops at the largest symbol present.
`count(data, max_symbol_value)` raises `HistogramError` when a byte exceeds
the maximum; `count_fast` and `count_simple` are the unchecked and simple
variants.

```python
from posplot.hist import count

h = count(b"aab")
h.max_symbol_value   # 98
h.largest_count      # 2
```

### `posplot.sort_manager`

`SortManager` spreads fixed-size entries into buckets by `log_num_buckets`
bits starting at `begin_bits`, caches them in memory up to `memory_size`
split across the buckets, and spills them to one temporary file per bucket in
`tmp_dirname`. Reading by byte position sorts each bucket in turn, so the
entries come back as one sorted stream. `trigger_new_bucket` keeps the tail of
the current bucket readable after moving on to the next. Errors are
`InvalidValueError`, `InvalidStateError` and `InsufficientMemoryError`.
Sorting prints one line per bucket. `close()` (or leaving the `with` block)
deletes the bucket files.

```python
import tempfile
from posplot.sort_manager import SortManager

with tempfile.TemporaryDirectory() as tmp:
    with SortManager(1 << 16, 4, 2, 4, tmp, "demo", 0, 1000) as manager:
        for value in (0x90000000, 0x10000002, 0x10000001):
            manager.add_to_cache(value.to_bytes(4, "big"))
        manager.flush_cache()
        first = manager.read_entry(0)   # b"\x10\x00\x00\x01"
```

## What it does not do

This package holds parts, not a plotter: it has no command-line program and
does not compute tables, write plot files or produce proofs. `posplot.encoding`
supplies the symbol distribution for delta encoding but no entropy coder that
uses it, and `posplot.sort_manager` sorts every bucket with Python's built-in
sort in memory.