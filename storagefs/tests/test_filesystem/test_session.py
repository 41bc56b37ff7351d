from unittest import mock

import pytest

from storagefs.backend.models import DirectoryListing, File
from storagefs.config import Config
from storagefs.errors import TransportError
from storagefs.filesystem.cache import ContentCache, ListingCache
from storagefs.filesystem.nodes import DirectoryNode, FileNode
from storagefs.filesystem.session import StorageSession


def create_session(**kwargs) -> StorageSession:
    return StorageSession(mock.Mock(), mock.Mock(), "mine", **kwargs)


def test_root():
    session = create_session()

    assert session.root == DirectoryNode(session, "/")
    assert session.root.path == "/"


def test_list_uses_key():
    session = create_session()
    session.directory_service.list.return_value = DirectoryListing()

    session.list("/docs")

    session.directory_service.list.assert_called_with("mine", "/docs")


def test_list_with_listing_cache():
    session = create_session(listings=ListingCache(ttl=60))
    session.directory_service.list.return_value = DirectoryListing()

    session.list("/")
    session.list("/")

    assert session.directory_service.list.call_count == 1


def test_read_range_partial_not_cached():
    session = create_session()
    session.fetcher.fetch_range.return_value = (b"ell", True)

    assert session.read_range("https://x/r", 1, 3) == b"ell"
    assert "https://x/r" not in session.contents


def test_read_range_unsupported_cached():
    session = create_session()
    session.fetcher.fetch_range.return_value = (b"hello", False)

    assert session.read_range("https://x/r", 1, 3) == b"ell"
    assert session.read_range("https://x/r", 3, 10) == b"lo"
    assert session.read_range("https://x/r", 5, 10) == b""

    assert session.fetcher.fetch_range.call_count == 1
    assert session.contents.get("https://x/r") == b"hello"


def test_read_range_from_cache():
    session = create_session()
    session.contents.put("https://x/r", b"hello")

    assert session.read_range("https://x/r", 0, 2) == b"he"
    assert not session.fetcher.fetch_range.called


def test_read_range_failure():
    session = create_session()
    session.fetcher.fetch_range.side_effect = TransportError("down")

    with pytest.raises(TransportError):
        session.read_range("https://x/r", 0, 2)


def test_create_from_config():
    config = Config()
    config.backend.url = "http://backend"
    config.backend.key = "theirs"
    config.backend.range_reads = True
    config.cache.listing_ttl = 30
    config.filesystem.degrade_on_list_failure = False

    session = StorageSession.create(config, "token")

    assert session.key == "theirs"
    assert session.range_reads
    assert not session.degrade_on_list_failure
    assert session.listings.enabled
    assert isinstance(session.contents, ContentCache)

    session.close()


def test_default_config_fetches_once():
    session = StorageSession.create(Config(), "token")

    with mock.patch.object(
        session.fetcher, "fetch", side_effect=lambda url: url.encode()
    ) as fetch:
        for url in ["a", "b", "c", "a"]:
            session.contents.get_or_fetch(url)

    assert [c[0][0] for c in fetch.call_args_list] == ["a", "b", "c"]

    session.close()


def test_chunked_read_of_object_larger_than_cache():
    config = Config()
    config.cache.max_size = 10

    session = StorageSession.create(config, "token")
    node = FileNode(session, File("big.bin", "https://x/big", 11))

    with mock.patch.object(
        session.fetcher, "fetch", return_value=b"0123456789a"
    ) as fetch:
        chunks = [node.read(offset, 4) for offset in range(0, 12, 4)]

    assert b"".join(chunks) == b"0123456789a"
    assert fetch.call_count == 1

    session.close()


def test_close():
    http_session = mock.Mock()

    session = create_session(http_session=http_session)
    session.close()

    assert http_session.close.called
