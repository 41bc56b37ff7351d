"""
Module with the node types that make up the mounted directory tree.

The tree is never held in memory. A DirectoryNode is nothing more than a path and every
lookup or enumeration lists that path on the backend again, so two nodes with the same
path are interchangeable. A FileNode wraps the file entry of the listing that produced
it, including its presigned URL.

Only directories can be looked into and enumerated, and only files can be read. Both
variants report their attributes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import posixpath
import stat
from typing import List, TYPE_CHECKING, Union

from storagefs.backend import File
from storagefs.errors import NotFound, StorageError
from storagefs.filesystem.common import Attributes, DirectoryEntry
from storagefs.logger import log

if TYPE_CHECKING:
    from storagefs.filesystem.session import StorageSession


@dataclass(frozen=True)
class DirectoryNode:
    """Directory at a logical path on the backend."""

    session: StorageSession = field(compare=False, repr=False)
    path: str = "/"

    def attributes(self) -> Attributes:
        """Report a read-only directory."""
        return Attributes.for_directory()

    def lookup(self, name: str) -> Node:
        """
        Find the child with the specified name.

        Files take priority over folders with the same name. Failures to list the
        directory are propagated as-is.
        """
        log.debug(f"looking up {name} in {self.path}")

        listing = self.session.list(self.path)

        for file in listing.files:
            if file.name == name:
                return FileNode(self.session, file)

        for folder in listing.folders:
            if folder.name == name:
                return DirectoryNode(self.session, posixpath.join(self.path, name))

        raise NotFound(name)

    def enumerate(self) -> List[DirectoryEntry]:
        """
        List the children of this directory, folders first, in backend order.

        If the listing fails then the directory is presented as empty, unless the
        session is configured to not degrade on listing failures.
        """
        try:
            listing = self.session.list(self.path)
        except StorageError as e:
            if not self.session.degrade_on_list_failure:
                raise

            log.warning(f"failed to list {self.path}, presenting it as empty: {e}")
            return []

        return [DirectoryEntry(f.name, stat.S_IFDIR) for f in listing.folders] + [
            DirectoryEntry(f.name, stat.S_IFREG) for f in listing.files
        ]


@dataclass(frozen=True)
class FileNode:
    """File on the backend, identified by the listing entry it was found in."""

    session: StorageSession = field(compare=False, repr=False)
    file: File

    @property
    def name(self) -> str:
        """Return the name of the file within its directory."""
        return self.file.name

    def attributes(self) -> Attributes:
        """Report the size declared by the backend, not the downloaded size."""
        return Attributes.for_file(self.file.size)

    def read(self, offset: int, size: int) -> bytes:
        """
        Read up to size bytes starting at offset.

        The entire file is downloaded and cached upon the first read, unless the
        session has range reads enabled. Reading at or beyond the end of the contents
        returns an empty result.
        """
        if self.session.range_reads:
            return self.session.read_range(self.file.presigned_url, offset, size)

        data = self.session.contents.get_or_fetch(self.file.presigned_url)

        if offset >= len(data):
            return b""

        return data[offset : offset + size]


Node = Union[DirectoryNode, FileNode]
