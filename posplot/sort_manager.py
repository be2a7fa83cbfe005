"""Bucketed external sort of fixed-size binary entries.

Entries are spread into buckets by a group of their bits, cached in memory and
spilled to one temporary file per bucket. Buckets are then sorted one at a time
and exposed as a single sorted byte stream addressed by byte position.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Union

from posplot.util import extract_num, round_size

BytesLike = Union[bytes, bytearray, memoryview]

# Matching parameters that size the look-back buffer kept between buckets.
BC = 15113
EXTRA_BITS = 6

_GIB = 1024.0 * 1024.0 * 1024.0


class InvalidValueError(ValueError):
    """Raised when an argument or request is out of range."""


class InvalidStateError(RuntimeError):
    """Raised when the manager is used in a state that does not allow it."""


class InsufficientMemoryError(MemoryError):
    """Raised when a bucket is too large to be sorted in the given memory."""


class SortManager:
    """Collects entries into on-disk buckets and reads them back sorted."""

    def __init__(
        self,
        memory_size: int,
        num_buckets: int,
        log_num_buckets: int,
        entry_size: int,
        tmp_dirname: Union[str, os.PathLike],
        filename: str,
        begin_bits: int,
        stripe_size: int,
    ) -> None:
        self._memory_size = memory_size
        self._num_buckets = num_buckets
        self._size_per_bucket = memory_size // num_buckets
        self._log_num_buckets = log_num_buckets
        self._entry_size = entry_size
        self._begin_bits = begin_bits
        self._done = False

        self._prev_bucket_buf_size = int(
            2 * (stripe_size + 10 * (BC / 2.0**EXTRA_BITS)) * entry_size
        )
        self._prev_bucket_buf = bytearray(self._prev_bucket_buf_size)
        self._prev_bucket_position_start = 0

        self._caches = [bytearray() for _ in range(num_buckets)]
        self._bucket_write_pointers = [0] * num_buckets
        self._bucket_paths: list[Path] = []
        for bucket_i in range(num_buckets):
            path = Path(tmp_dirname) / f"{filename}.sort_bucket_{bucket_i:03d}.tmp"
            path.unlink(missing_ok=True)
            self._bucket_paths.append(path)

        self._sorted = b""
        self._final_position_start = 0
        self._final_position_end = 0
        self._next_bucket_to_sort = 0

    @property
    def bucket_paths(self) -> list[Path]:
        """Paths of the per-bucket temporary files."""
        return list(self._bucket_paths)

    def add_to_cache(self, entry: BytesLike) -> None:
        """Add one entry of entry_size bytes to its bucket."""
        if self._done:
            raise InvalidValueError("Already finished.")
        data = bytes(entry)
        if len(data) < self._entry_size:
            raise InvalidValueError(
                f"Entry has {len(data)} bytes, expected {self._entry_size}"
            )
        data = data[: self._entry_size]
        bucket_index = extract_num(
            data, self._entry_size, self._begin_bits, self._log_num_buckets
        )
        cache = self._caches[bucket_index]
        if len(cache) + self._entry_size > self._size_per_bucket:
            self._flush_table(bucket_index)
            cache = self._caches[bucket_index]
        cache.extend(data)

    def read_entry(self, position: int, quicksort: int = 0) -> bytes:
        """Return the entry that starts at a byte position of the sorted output."""
        if position < self._final_position_start:
            if position < self._prev_bucket_position_start:
                raise InvalidStateError("Invalid prev bucket start")
            offset = position - self._prev_bucket_position_start
            return self._padded(self._prev_bucket_buf, offset)

        while position >= self._final_position_end:
            self._sort_bucket(quicksort)
        if not self._final_position_end > position:
            raise InvalidValueError("Position too large")
        if not self._final_position_start <= position:
            raise InvalidValueError("Position too small")
        return self._padded(self._sorted, position - self._final_position_start)

    def close_to_new_bucket(self, position: int) -> bool:
        """Whether a read at position is near enough to the next bucket to switch."""
        more_buckets = self._next_bucket_to_sort < self._num_buckets
        if not position <= self._final_position_end:
            return more_buckets
        return (
            position + self._prev_bucket_buf_size // 2 >= self._final_position_end
            and more_buckets
        )

    def trigger_new_bucket(self, position: int, quicksort: bool = False) -> None:
        """Keep the tail of the current bucket from position on, then sort the next one."""
        if not position <= self._final_position_end:
            raise InvalidValueError("Triggering bucket too late")
        if not position >= self._final_position_start:
            raise InvalidValueError("Triggering bucket too early")

        start = position - self._final_position_start
        tail = self._sorted[start : self._final_position_end - self._final_position_start]
        self._prev_bucket_buf = bytearray(self._prev_bucket_buf_size)
        self._prev_bucket_buf[: len(tail)] = tail
        self._sort_bucket(int(quicksort))
        self._prev_bucket_position_start = position

    def change_memory(self, new_memory_size: int) -> None:
        """Flush every cache and start over with a different memory budget."""
        self.flush_cache()
        self._memory_size = new_memory_size
        self._size_per_bucket = new_memory_size // self._num_buckets
        self._sorted = b""
        self._final_position_start = 0
        self._final_position_end = 0
        self._next_bucket_to_sort = 0

    def flush_cache(self) -> None:
        """Write every bucket's cached entries to its file."""
        for bucket_i in range(self._num_buckets):
            self._flush_table(bucket_i)

    def close(self) -> None:
        """Delete the bucket files and drop all buffered data."""
        for path in self._bucket_paths:
            path.unlink(missing_ok=True)
        self._caches = [bytearray() for _ in range(self._num_buckets)]
        self._sorted = b""

    def __enter__(self) -> "SortManager":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _padded(self, buffer: BytesLike, offset: int) -> bytes:
        chunk = bytes(buffer[offset : offset + self._entry_size])
        return chunk + bytes(self._entry_size - len(chunk))

    def _flush_table(self, bucket_i: int) -> None:
        cache = self._caches[bucket_i]
        if cache:
            with open(self._bucket_paths[bucket_i], "ab") as handle:
                handle.write(cache)
            self._bucket_write_pointers[bucket_i] += len(cache)
        self._caches[bucket_i] = bytearray()

    def _sort_key(self, entry: bytes) -> bytes:
        start = self._begin_bits // 8
        mask = (1 << (8 - self._begin_bits % 8)) - 1
        return bytes([entry[start] & mask]) + entry[start + 1 :]

    def _sort_bucket(self, quicksort: int) -> None:
        self._done = True
        if self._next_bucket_to_sort >= self._num_buckets:
            raise InvalidValueError("Trying to sort bucket which does not exist.")
        bucket_i = self._next_bucket_to_sort
        es = self._entry_size
        written = self._bucket_write_pointers[bucket_i]
        bucket_entries = written // es
        entries_fit_in_memory = self._memory_size // es
        entry_len_memory = es - self._begin_bits // 8

        have_ram = es * entries_fit_in_memory / _GIB
        qs_ram = es * bucket_entries / _GIB
        u_ram = round_size(bucket_entries) * entry_len_memory / _GIB

        if bucket_entries > entries_fit_in_memory:
            raise InsufficientMemoryError(
                "Not enough memory for sort in memory. Need to sort "
                f"{written / _GIB:.6f}GiB"
            )
        last_bucket = (
            bucket_i == self._num_buckets - 1
            or self._bucket_write_pointers[bucket_i + 1] == 0
        )
        force_quicksort = quicksort == 1 or (quicksort == 2 and last_bucket)
        if (
            not force_quicksort
            and round_size(bucket_entries) * entry_len_memory <= self._memory_size
        ):
            print(
                f"\tBucket {bucket_i} uniform sort. Ram: {have_ram:.3f}GiB, "
                f"u_sort min: {u_ram:.3f}GiB, qs min: {qs_ram:.3f}GiB."
            )
        else:
            print(
                f"\tBucket {bucket_i} QS. Ram: {have_ram:.3f}GiB, "
                f"u_sort min: {u_ram:.3f}GiB, qs min: {qs_ram:.3f}GiB. "
                f"force_qs: {int(force_quicksort)}"
            )

        path = self._bucket_paths[bucket_i]
        data = path.read_bytes()[: bucket_entries * es] if written else b""
        entries = [data[i : i + es] for i in range(0, len(data), es)]
        entries.sort(key=self._sort_key)
        self._sorted = b"".join(entries)
        path.unlink(missing_ok=True)

        self._final_position_start = self._final_position_end
        self._final_position_end += written
        self._next_bucket_to_sort += 1