"""
Modules that present the storage backend as a read-only file system.

The storage backend and a file system have rather different ideas of what a directory
is. The backend answers one question: "which folders and files are directly inside this
path?", with every file carrying a presigned URL for its contents. A file system on the
other hand has to answer getattr(), readdir(), open() and read() calls for arbitrary
paths, from multiple threads at once.

The mapping between the two is done by a tree of nodes that is never stored:

* A DirectoryNode is just a path. Looking up a name or enumerating its children lists
that path on the backend.
* A FileNode is just the listing entry of a file. Reading from it downloads the entire
file once and serves all reads from the content cache afterwards.

All state that does need to be kept, like the content cache, lives in a StorageSession.
StorageFileSystem then resolves FUSE paths into nodes by looking up each component from
the root and translates backend errors into the errno values that FUSE expects.
"""

from .filesystem import StorageFileSystem
from .nodes import DirectoryNode, FileNode, Node
from .session import StorageSession

__all__ = [
    "DirectoryNode",
    "FileNode",
    "Node",
    "StorageFileSystem",
    "StorageSession",
]
