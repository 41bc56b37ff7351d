"""
Errors raised while talking to the storage backend.

Every backend error derives from StorageError and carries the errno that the file
system reports for it. The FUSE layer is the only place where these are translated into
OSError, which keeps the backend and the node tree independent of the kernel protocol.

NotFound is the exception to this rule: it is the protocol's own "no such entry" signal
and is therefore a FileNotFoundError from the start.
"""

import errno
import os
from typing import Optional


class StorageError(Exception):
    """Base class for failures to retrieve data from the storage backend."""

    errno = errno.EIO


class TransportError(StorageError):
    """The backend could not be reached (DNS, refused connection, timeout, ...)."""


class DecodeError(StorageError):
    """The backend responded with success, but the body could not be parsed."""


class BackendError(StorageError):
    """The backend was reached, but responded with a non-success status."""

    def __init__(self, message: str, status: int, body: str):
        """Instantiate with the HTTP status and raw response body for diagnostics."""
        super().__init__(f"{message}: {status} | {body}")

        self.status = status
        self.body = body

    @property  # type: ignore
    def errno(self) -> int:
        """Map the HTTP status onto the closest matching errno."""
        if self.status == 404:
            return errno.ENOENT
        elif self.status in (401, 403):
            return errno.EACCES
        else:
            return errno.EIO


class BackendListError(BackendError):
    """Listing a directory failed with a non-success status."""

    def __init__(self, status: int, body: str):
        super().__init__("failed to list folder", status, body)


class BackendFetchError(BackendError):
    """Downloading an object from its presigned URL failed with a non-success status."""

    def __init__(self, status: int, body: str):
        super().__init__("failed to get file", status, body)


class NotFound(FileNotFoundError):
    """A directory has no entry with the requested name."""

    def __init__(self, name: Optional[str] = None):
        super().__init__(errno.ENOENT, os.strerror(errno.ENOENT), name)
