import fcntl
import os

import pytest

from posplot.disk_util import (
    DirectoryLock,
    device_path,
    is_rotational,
    lock_directory,
    should_lock,
    unlock_directory,
)


def _can_lock(path):
    fd = os.open(path, os.O_RDONLY)
    try:
        fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
    except BlockingIOError:
        return False
    else:
        fcntl.flock(fd, fcntl.LOCK_UN)
        return True
    finally:
        os.close(fd)


def test_lock_and_unlock_directory(tmp_path):
    fd = lock_directory(str(tmp_path))
    assert isinstance(fd, int) and fd >= 0
    assert _can_lock(tmp_path) is False
    assert unlock_directory(fd, str(tmp_path)) is True
    assert _can_lock(tmp_path) is True


def test_lock_missing_directory_returns_none(tmp_path):
    assert lock_directory(str(tmp_path / "missing")) is None


def test_unlock_closed_descriptor_fails(tmp_path):
    fd = os.open(tmp_path, os.O_RDONLY)
    os.close(fd)
    assert unlock_directory(fd, str(tmp_path)) is False


def test_directory_lock_holds_and_releases(tmp_path):
    lock = DirectoryLock(str(tmp_path))
    assert lock.locked is True
    assert _can_lock(tmp_path) is False
    assert lock.unlock() is True
    assert lock.locked is False
    assert _can_lock(tmp_path) is True


def test_directory_lock_second_unlock_fails(tmp_path):
    lock = DirectoryLock(str(tmp_path))
    assert lock.unlock() is True
    assert lock.unlock() is False


def test_directory_lock_deferred(tmp_path):
    lock = DirectoryLock(str(tmp_path), lock=False)
    assert lock.locked is False
    assert _can_lock(tmp_path) is True
    assert lock.lock() is True
    assert lock.lock() is True
    assert lock.unlock() is True


def test_directory_lock_context_manager(tmp_path):
    with DirectoryLock(str(tmp_path), lock=False) as lock:
        assert lock.locked is True
        assert _can_lock(tmp_path) is False
    assert lock.locked is False
    assert _can_lock(tmp_path) is True


def test_directory_lock_released_on_error(tmp_path):
    with pytest.raises(RuntimeError):
        with DirectoryLock(str(tmp_path)):
            raise RuntimeError("boom")
    assert _can_lock(tmp_path) is True


def test_lock_missing_directory_not_held(tmp_path):
    lock = DirectoryLock(str(tmp_path / "missing"))
    assert lock.locked is False
    assert lock.unlock() is False


def test_is_rotational_missing_directory(tmp_path):
    assert is_rotational(str(tmp_path / "missing")) is False


def test_should_lock_follows_is_rotational(tmp_path):
    assert should_lock(str(tmp_path)) == is_rotational(str(tmp_path))


def test_device_path_unknown_device():
    assert device_path(os.makedev(4095, 1048575)) is None