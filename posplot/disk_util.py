"""Disk media detection and exclusive directory locks."""

from __future__ import annotations

import os
import sys
import time
from pathlib import Path
from typing import Optional

try:
    import fcntl
except ImportError:  # not available on Windows
    fcntl = None

BUSY_RETRY_SECONDS = 10
ERROR_RETRY_SECONDS = 60

_NO_DEVICE_INFO = sys.platform == "darwin" or sys.platform.startswith("win")


def _err(message: str) -> None:
    print(message, file=sys.stderr)


def device_path(dev_id: int) -> Optional[Path]:
    """Resolve the sysfs path of the block device with the given id, or None."""
    link = f"/sys/dev/block/{os.major(dev_id)}:{os.minor(dev_id)}"
    try:
        return Path(os.path.realpath(link, strict=True))
    except OSError as exc:
        _err(f"Unable to find full device path: {exc.strerror or exc}")
        return None


def is_rotational(directory: str) -> bool:
    """Whether the directory lives on rotational (spinning) media."""
    if _NO_DEVICE_INFO:
        return False
    try:
        st = os.stat(directory)
    except OSError as exc:
        _err(f"Unable to find device name for dir {directory}: {exc.strerror or exc}")
        return False

    dev_path = device_path(st.st_dev)
    if dev_path is None:
        return False

    while True:
        filename = dev_path / "queue" / "rotational"
        if filename.exists():
            break
        if dev_path.parent == dev_path:
            _err("Unable to determine device media type")
            return False
        dev_path = dev_path.parent

    try:
        with open(filename, encoding="ascii", errors="replace") as handle:
            line = handle.readline()
    except OSError as exc:
        _err(f"Unable to open {filename} for reading: {exc.strerror or exc}")
        return False
    return line.startswith("1")


def should_lock(directory: str) -> bool:
    """Whether writers to the directory should take a directory lock."""
    return is_rotational(directory)


def lock_directory(dirname: str) -> Optional[int]:
    """Take an exclusive lock on a directory, waiting as long as needed.

    Returns the locked descriptor, or None when the directory cannot be opened
    or locking is not supported on this platform.
    """
    if fcntl is None:
        return None
    try:
        fd = os.open(dirname, os.O_RDONLY | getattr(os, "O_NOCTTY", 0))
    except OSError as exc:
        _err(f"Unable to open directory for locking: {dirname}. Error: {exc.strerror or exc}")
        return None
    while True:
        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
            return fd
        except BlockingIOError:
            time.sleep(BUSY_RETRY_SECONDS)
        except OSError as exc:
            _err(
                "Unable to lock directory (retrying in 1 minute): "
                f". Error: {exc.strerror or exc}"
            )
            time.sleep(ERROR_RETRY_SECONDS)


def unlock_directory(fd: int, dirname: str) -> bool:
    """Release and close a descriptor returned by lock_directory."""
    if fcntl is None:
        return False
    try:
        fcntl.flock(fd, fcntl.LOCK_UN)
    except OSError as exc:
        _err(f"Failed to unlock the directory: {dirname}. Error: {exc.strerror or exc}")
        return False
    try:
        os.close(fd)
    except OSError as exc:
        _err(
            f"Failed to close the directory during unlocking: {dirname}. "
            f"Error: {exc.strerror or exc}"
        )
        return False
    return True


class DirectoryLock:
    """An exclusive lock on a directory, usable as a context manager."""

    def __init__(self, dirname: str, lock: bool = True) -> None:
        self._dirname = dirname
        self._fd: Optional[int] = None
        if lock:
            self.lock()

    @property
    def locked(self) -> bool:
        """Whether the lock is currently held."""
        return self._fd is not None

    def lock(self) -> bool:
        """Acquire the lock if not already held; return whether it is held."""
        if self._fd is None:
            print(f"Acquiring directory lock: {self._dirname}")
            start = time.monotonic()
            self._fd = lock_directory(self._dirname)
            took = int(time.monotonic() - start)
            print(f"Lock acquired (took {took} sec)")
        return self._fd is not None

    def unlock(self) -> bool:
        """Release the lock; return False if it was not held or release failed."""
        if self._fd is None:
            return False
        print(f"Releasing directory lock: {self._dirname}")
        if not unlock_directory(self._fd, self._dirname):
            return False
        self._fd = None
        return True

    def __enter__(self) -> "DirectoryLock":
        self.lock()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.unlock()