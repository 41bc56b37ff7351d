"""
Modules that talk to the storage backend.

The backend exposes two kinds of endpoints. A listing endpoint returns the folders and
files directly within a logical path, where every file comes with a presigned URL. That
presigned URL is the second kind of endpoint: a plain GET on it returns the contents of
the file.

Neither service keeps any state of its own apart from the HTTP session, so they can be
used from any number of threads at the same time.
"""

from .models import DirectoryListing, File, Folder
from .service import RemoteDirectoryService, RemoteObjectFetcher

__all__ = [
    "DirectoryListing",
    "File",
    "Folder",
    "RemoteDirectoryService",
    "RemoteObjectFetcher",
]
