"""Module that implements the in-memory caches of a file system session."""

from __future__ import annotations

import collections
import threading
import time
from typing import Callable, Dict, Optional, OrderedDict, Tuple

from storagefs.backend import DirectoryListing, RemoteObjectFetcher
from storagefs.filesystem.common import LockIndex
from storagefs.logger import log, summarize


class ContentCache:
    """
    Cache of downloaded object contents keyed by presigned URL.

    Every file is downloaded in its entirety upon the first read of any part of it and
    all subsequent reads are served from memory. Contents are never revalidated: once a
    URL has been fetched, reads observe the same bytes for as long as the entry stays in
    the cache.

    The cache can be bounded by the number of entries and by their total size. When
    either limit is exceeded the least recently used entries are dropped. A limit of 0
    (the default) disables that limit, in which case nothing is ever evicted. The most
    recently stored object is always retained, even if it is larger than the size limit
    by itself, so that reading it in chunks downloads it only once.

    Concurrent misses for the same URL are collapsed into a single download. Failed
    downloads are not cached, so the next read simply tries again.
    """

    def __init__(
        self, fetcher: RemoteObjectFetcher, max_entries: int = 0, max_size: int = 0
    ):
        """Instantiate an empty cache that downloads through the given fetcher."""
        self._fetcher = fetcher
        self._max_entries = max_entries
        self._max_size = max_size

        self._entries: OrderedDict[str, bytes] = collections.OrderedDict()
        self._size = 0

        self._lock = threading.Lock()
        self._fetch_locks = LockIndex()

    def get_or_fetch(self, url: str) -> bytes:
        """Return the cached contents for a URL, downloading them if necessary."""
        with self._fetch_locks.lock(url):
            data = self.get(url)

            if data is None:
                data = self._fetcher.fetch(url)
                self.put(url, data)

            return data

    def get(self, url: str) -> Optional[bytes]:
        """Return the cached contents for a URL without downloading anything."""
        with self._lock:
            data = self._entries.get(url)

            if data is not None:
                self._entries.move_to_end(url)

            return data

    def put(self, url: str, data: bytes) -> None:
        """Store the contents for a URL and evict entries to stay within limits."""
        with self._lock:
            previous = self._entries.pop(url, None)
            if previous is not None:
                self._size -= len(previous)

            self._entries[url] = data
            self._size += len(data)

            self._evict()

    def clear(self) -> None:
        """Drop all cached contents."""
        with self._lock:
            self._entries.clear()
            self._size = 0

    def count(self) -> int:
        """Return the number of cached entries."""
        with self._lock:
            return len(self._entries)

    def size(self) -> int:
        """Return the total number of bytes of contents being cached."""
        with self._lock:
            return self._size

    def __contains__(self, url: object) -> bool:
        with self._lock:
            return url in self._entries

    def _evict(self) -> None:
        """Drop least recently used entries until the cache is below its limits."""
        while len(self._entries) > 1 and (
            (self._max_entries and len(self._entries) > self._max_entries)
            or (self._max_size and self._size > self._max_size)
        ):
            url, data = self._entries.popitem(last=False)
            self._size -= len(data)

            log.debug(f"evicted {summarize(url, 80)} from content cache")


class ListingCache:
    """
    Time-bounded cache of directory listings keyed by path.

    Listings are served from the cache for at most ttl seconds after they were
    retrieved, so changes on the backend become visible after that window. A ttl of 0
    (the default) disables caching altogether and every call goes to the backend.
    Failed listings are never cached.
    """

    def __init__(self, ttl: float = 0, clock: Callable[[], float] = time.monotonic):
        """Instantiate an empty listing cache with the given staleness window."""
        self._ttl = ttl
        self._clock = clock

        self._entries: Dict[str, Tuple[float, DirectoryListing]] = {}
        self._lock = threading.Lock()

    @property
    def enabled(self) -> bool:
        """Return whether listings are cached at all."""
        return self._ttl > 0

    def get_or_list(
        self, path: str, list_fn: Callable[[str], DirectoryListing]
    ) -> DirectoryListing:
        """Return a fresh cached listing for the path or retrieve it with list_fn."""
        if not self.enabled:
            return list_fn(path)

        now = self._clock()

        with self._lock:
            entry = self._entries.get(path)

            if entry is not None and now - entry[0] < self._ttl:
                return entry[1]

        listing = list_fn(path)

        with self._lock:
            self._entries[path] = (now, listing)

        return listing

    def invalidate(self, path: Optional[str] = None) -> None:
        """Drop the cached listing for a path, or all cached listings."""
        with self._lock:
            if path is None:
                self._entries.clear()
            else:
                self._entries.pop(path, None)

    def count(self) -> int:
        """Return the number of cached listings (including stale ones)."""
        with self._lock:
            return len(self._entries)
