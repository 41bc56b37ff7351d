"""Module that contains the FUSE file system that serves the storage backend."""

from contextlib import contextmanager
import errno
import itertools
import os
from typing import Callable, Dict, Iterator, List, Optional

import fasteners

from storagefs.errors import StorageError
from storagefs.filesystem.fuse import Operations
from storagefs.filesystem.nodes import DirectoryNode, FileNode, Node
from storagefs.filesystem.session import StorageSession
from storagefs.logger import log


def _os_error(code: int) -> OSError:
    return OSError(code, os.strerror(code))


@contextmanager
def _translate_errors() -> Iterator[None]:
    """Turn backend errors into OSError with the errno that FUSE should report."""
    try:
        yield
    except StorageError as e:
        log.debug(f"backend error: {e}")
        raise _os_error(e.errno) from e


class StorageFileSystem(Operations):
    """
    Class that implements a read-only FUSE file system on top of a storage session.

    FUSE addresses entries by path, so every path is resolved by walking the node tree
    from the root and looking up one component at a time. Opened files get a handle
    that remembers the resolved FileNode, which means that reads don't need to resolve
    the path again and keep using the presigned URL that the file was opened with.
    """

    def __init__(
        self, session: StorageSession, mount_callback: Optional[Callable] = None
    ):
        """Instantiate file system on top of a storage session."""
        self._session = session
        self._mount_callback = mount_callback

        self._handles: Dict[int, FileNode] = {}
        self._handles_lock = fasteners.ReaderWriterLock()
        self._handle_ids = itertools.count(1)

    def init(self) -> None:
        """File system has been successfully mounted by FUSE."""
        log.info("file system mounted")

        if self._mount_callback is not None:
            self._mount_callback()

    def destroy(self) -> None:
        """File system has been unmounted. The session is closed by its owner."""
        log.info("file system unmounted")

    #
    # Metadata access
    #

    def getattr(self, path: str, fh: Optional[int]) -> dict:
        node: Node

        if fh:
            node = self._get_handle(fh)
        else:
            node = self.resolve(path)

        return node.attributes().__dict__

    def readdir(self, path: str) -> List[str]:
        node = self.resolve(path)

        if not isinstance(node, DirectoryNode):
            raise _os_error(errno.ENOTDIR)

        with _translate_errors():
            entries = node.enumerate()

        return [".", ".."] + [entry.name for entry in entries]

    #
    # File operations
    #

    def open(self, path: str, flags: int) -> int:
        if flags & os.O_ACCMODE != os.O_RDONLY:
            raise _os_error(errno.EROFS)

        node = self.resolve(path)

        if not isinstance(node, FileNode):
            raise _os_error(errno.EISDIR)

        with self._handles_lock.write_lock():
            fh = next(self._handle_ids)
            self._handles[fh] = node

        return fh

    def read(self, path: str, fh: int, offset: int, size: int) -> bytes:
        node = self._get_handle(fh)

        with _translate_errors():
            return node.read(offset, size)

    def release(self, path: str, fh: int) -> None:
        with self._handles_lock.write_lock():
            self._handles.pop(fh, None)

    #
    # Miscellaneous
    #

    def statfs(self, path: str) -> dict:
        return {
            "f_bsize": 4096,
            "f_frsize": 4096,
            "f_namemax": 255,
            "f_flag": os.ST_RDONLY,
        }

    def resolve(self, path: str) -> Node:
        """Find the node at an absolute path by looking up each of its components."""
        node: Node = self._session.root

        with _translate_errors():
            for name in path.split("/"):
                if not name:
                    continue

                if not isinstance(node, DirectoryNode):
                    raise _os_error(errno.ENOTDIR)

                node = node.lookup(name)

        return node

    def _get_handle(self, fh: int) -> FileNode:
        with self._handles_lock.read_lock():
            try:
                return self._handles[fh]
            except KeyError:
                raise _os_error(errno.EBADF)

    @property
    def handle_count(self) -> int:
        """Return the number of files that are currently open."""
        with self._handles_lock.read_lock():
            return len(self._handles)
