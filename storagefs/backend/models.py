"""Data structures describing the contents of a storage backend directory."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List

from storagefs.errors import DecodeError


@dataclass(frozen=True)
class Folder:
    """Child directory of a listed directory."""

    name: str

    @staticmethod
    def from_json(obj: Any) -> Folder:
        """Parse a folder object from a listing response."""
        if not isinstance(obj, dict) or not isinstance(obj.get("name"), str):
            raise DecodeError(f"malformed folder entry: {obj!r}")

        return Folder(name=obj["name"])


@dataclass(frozen=True)
class File:
    """
    Child file of a listed directory.

    The presigned URL is issued by the backend and grants time-limited access to the
    contents of the file without further authentication. The size is the one reported
    by the backend and is not checked against the size of the downloaded contents.
    """

    name: str
    presigned_url: str
    size: int

    @staticmethod
    def from_json(obj: Any) -> File:
        """Parse a file object from a listing response."""
        if not isinstance(obj, dict):
            raise DecodeError(f"malformed file entry: {obj!r}")

        name = obj.get("name")
        presigned_url = obj.get("presignedUrl")
        size = obj.get("size", 0)

        # bool is a subclass of int, but never a valid size
        if (
            not isinstance(name, str)
            or not isinstance(presigned_url, str)
            or not isinstance(size, int)
            or isinstance(size, bool)
            or size < 0
        ):
            raise DecodeError(f"malformed file entry: {obj!r}")

        return File(name=name, presigned_url=presigned_url, size=size)


@dataclass(frozen=True)
class DirectoryListing:
    """Immediate children of a directory, in the order returned by the backend."""

    folders: List[Folder] = field(default_factory=list)
    files: List[File] = field(default_factory=list)

    @staticmethod
    def from_json(obj: Any) -> DirectoryListing:
        """
        Parse the body of a listing response.

        Unknown fields are ignored and missing (or null) folders and files are treated
        as empty lists.
        """
        if not isinstance(obj, dict):
            raise DecodeError(f"expected listing object, got {type(obj).__name__}")

        folders = obj.get("folders") or []
        files = obj.get("files") or []

        if not isinstance(folders, list) or not isinstance(files, list):
            raise DecodeError("folders and files must be lists")

        return DirectoryListing(
            folders=[Folder.from_json(f) for f in folders],
            files=[File.from_json(f) for f in files],
        )
