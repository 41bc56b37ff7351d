"""Module that wraps the HTTP endpoints of the storage backend."""

from typing import Optional, Tuple

import requests

from storagefs.backend.models import DirectoryListing
from storagefs.errors import (
    BackendFetchError,
    BackendListError,
    DecodeError,
    TransportError,
)
from storagefs.logger import log, summarize


class RemoteDirectoryService:
    """
    Client for the directory listing endpoint of the storage backend.

    Listings are requested by account key and logical path. Requests are authenticated
    with a bearer token and are never retried, so a single failure is immediately
    reported to the caller.
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        """Instantiate a listing client for the backend at the given base URL."""
        self._url = base_url.rstrip("/") + "/storage/list"
        self._token = token
        self._timeout = timeout
        self._session = session or requests.Session()

    def list(self, key: str, path: str) -> DirectoryListing:
        """List the folders and files directly within the specified path."""
        log.debug(f"listing {path} for {key}")

        try:
            response = self._session.get(
                self._url,
                params={"key": key, "path": path},
                headers={"Authorization": f"Bearer {self._token}"},
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            raise TransportError(f"failed to list folder {path}: {e}") from e

        if response.status_code != 200:
            raise BackendListError(response.status_code, response.text)

        try:
            body = response.json()
        except ValueError as e:
            raise DecodeError(
                f"invalid listing for {path}: {summarize(response.text)}"
            ) from e

        return DirectoryListing.from_json(body)


class RemoteObjectFetcher:
    """
    Downloader for objects behind presigned URLs.

    Presigned URLs already carry their own authorization, so no additional headers are
    sent along with the request.
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        """Instantiate a downloader with an optional request timeout."""
        self._timeout = timeout
        self._session = session or requests.Session()

    def fetch(self, url: str) -> bytes:
        """Download the entire object at the given URL."""
        log.debug(f"fetching {summarize(url, 80)}")

        response = self._get(url)

        if response.status_code != 200:
            raise BackendFetchError(response.status_code, response.text)

        return response.content

    def fetch_range(self, url: str, offset: int, size: int) -> Tuple[bytes, bool]:
        """
        Download a byte range of the object at the given URL.

        Returns the data along with a flag that is set if the data is only the requested
        range. Backends that don't support range requests respond with the entire
        object, in which case the flag is not set.
        """
        if size <= 0:
            return b"", True

        log.debug(f"fetching {offset}+{size} of {summarize(url, 80)}")

        response = self._get(
            url, headers={"Range": f"bytes={offset}-{offset + size - 1}"}
        )

        if response.status_code == 206:
            return response.content, True
        elif response.status_code == 200:
            return response.content, False
        elif response.status_code == 416:
            # Range starts beyond the end of the object
            return b"", True
        else:
            raise BackendFetchError(response.status_code, response.text)

    def _get(self, url: str, headers: Optional[dict] = None) -> requests.Response:
        try:
            return self._session.get(url, headers=headers, timeout=self._timeout)
        except requests.RequestException as e:
            raise TransportError(f"failed to get file: {e}") from e
