"""Module with the session object that ties the backend services and caches together."""

from __future__ import annotations

from typing import Optional

import requests

from storagefs.backend import (
    DirectoryListing,
    RemoteDirectoryService,
    RemoteObjectFetcher,
)
from storagefs.config import Config
from storagefs.filesystem.cache import ContentCache, ListingCache
from storagefs.filesystem.nodes import DirectoryNode


class StorageSession:
    """
    State shared by all nodes of a mounted file system.

    Nodes themselves are immutable and only know their path or file entry. Everything
    that is mutable (the caches) or configurable (account key, failure policy) lives
    here, so that a session can be created and torn down independently of the mount.
    """

    def __init__(
        self,
        directory_service: RemoteDirectoryService,
        fetcher: RemoteObjectFetcher,
        key: str,
        contents: Optional[ContentCache] = None,
        listings: Optional[ListingCache] = None,
        degrade_on_list_failure: bool = True,
        range_reads: bool = False,
        http_session: Optional[requests.Session] = None,
    ):
        """Instantiate a session around the given backend services."""
        self.directory_service = directory_service
        self.fetcher = fetcher
        self.key = key

        self.contents = contents if contents is not None else ContentCache(fetcher)
        self.listings = listings if listings is not None else ListingCache()

        self.degrade_on_list_failure = degrade_on_list_failure
        self.range_reads = range_reads

        self._http_session = http_session

    @staticmethod
    def create(config: Config, token: str) -> StorageSession:
        """Create a session with a shared HTTP session from the configuration."""
        http_session = requests.Session()

        directory_service = RemoteDirectoryService(
            config.backend.url,
            token,
            timeout=config.backend.timeout,
            session=http_session,
        )
        fetcher = RemoteObjectFetcher(
            timeout=config.backend.timeout, session=http_session
        )

        return StorageSession(
            directory_service,
            fetcher,
            config.backend.key,
            contents=ContentCache(
                fetcher,
                max_entries=config.cache.max_entries,
                max_size=config.cache.max_size,
            ),
            listings=ListingCache(config.cache.listing_ttl),
            degrade_on_list_failure=config.filesystem.degrade_on_list_failure,
            range_reads=config.backend.range_reads,
            http_session=http_session,
        )

    @property
    def root(self) -> DirectoryNode:
        """Return the node of the root directory."""
        return DirectoryNode(self, "/")

    def list(self, path: str) -> DirectoryListing:
        """List the contents of a directory, possibly from the listing cache."""
        return self.listings.get_or_list(
            path, lambda p: self.directory_service.list(self.key, p)
        )

    def read_range(self, url: str, offset: int, size: int) -> bytes:
        """
        Read a byte range of an object, downloading only that range if possible.

        Ranges are served from the content cache if the object has been fully
        downloaded before. Otherwise only the requested range is requested from the
        backend. If the backend ignores the range and returns the whole object then it
        is cached like any other full download.
        """
        data = self.contents.get(url)

        if data is None:
            data, partial = self.fetcher.fetch_range(url, offset, size)

            if partial:
                return data

            self.contents.put(url, data)

        if offset >= len(data):
            return b""

        return data[offset : offset + size]

    def close(self) -> None:
        """Release the HTTP connections held by the session."""
        if self._http_session is not None:
            self._http_session.close()
