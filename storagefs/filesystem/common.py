"""Data structures used by multiple file system components."""

from __future__ import annotations

import collections
from contextlib import contextmanager
from dataclasses import dataclass
import os
import stat
import threading
import time
from typing import Any, Dict, Iterator

import storagefs.constants as constants

# Moment that timestamps of all entries are set to, since the backend has none.
_MOUNT_TIME_NS = time.time_ns()


@dataclass
class Attributes:
    """Container of file system attributes (a subset of os.stat_result)."""

    st_mode: int
    st_ino: int
    st_nlink: int
    st_size: int = 0
    st_uid: int = 0
    st_gid: int = 0
    st_atime_ns: int = _MOUNT_TIME_NS
    st_mtime_ns: int = _MOUNT_TIME_NS
    st_ctime_ns: int = _MOUNT_TIME_NS

    @staticmethod
    def for_directory() -> Attributes:
        """Attributes of a read-only directory."""
        return Attributes(
            st_mode=stat.S_IFDIR | 0o555,
            st_ino=constants.DIRECTORY_INODE,
            st_nlink=2,
            st_uid=os.getuid(),
            st_gid=os.getgid(),
        )

    @staticmethod
    def for_file(size: int) -> Attributes:
        """Attributes of a read-only regular file with the given size."""
        return Attributes(
            st_mode=stat.S_IFREG | 0o444,
            st_ino=constants.FILE_INODE,
            st_nlink=1,
            st_size=size,
            st_uid=os.getuid(),
            st_gid=os.getgid(),
        )


@dataclass(frozen=True)
class DirectoryEntry:
    """Entry within a directory as returned by enumeration (name and file type)."""

    name: str
    mode: int

    @property
    def is_dir(self) -> bool:
        """Return whether the entry is a directory."""
        return stat.S_ISDIR(self.mode)


class LockIndex:
    """
    Collection of mutexes to lock critical sections by arbitrary values.

    Its use case is to lock critical sections based on unpredictable input values, like
    presigned URLs. Locks are automatically garbage collected when no longer in use (no
    threads in the critical section and none waiting to enter).
    """

    def __init__(self) -> None:
        """Instantiate a LockIndex."""
        self._global_lock = threading.Lock()

        self._locks: Dict[Any, threading.Lock] = collections.defaultdict(threading.Lock)
        self._lock_users: Dict[Any, int] = collections.defaultdict(int)

    @contextmanager
    def lock(self, key: Any) -> Iterator[None]:
        """Lock a critical section based on the specified key."""
        # Retrieve lock and increment user count
        with self._global_lock:
            self._lock_users[key] += 1
            lock = self._locks[key]

        try:
            with lock:
                yield
        finally:
            # Decrement user count and delete lock if there are none left
            with self._global_lock:
                self._lock_users[key] -= 1

                if self._lock_users[key] == 0:
                    del self._lock_users[key]
                    del self._locks[key]

    @property
    def lock_count(self) -> int:
        """Return the number of locks currently in use."""
        with self._global_lock:
            return len(self._locks)
