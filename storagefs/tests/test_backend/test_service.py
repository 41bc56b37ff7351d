import json
from unittest import mock

import pytest
import requests

from storagefs.backend.models import DirectoryListing, File, Folder
from storagefs.backend.service import RemoteDirectoryService, RemoteObjectFetcher
from storagefs.errors import (
    BackendFetchError,
    BackendListError,
    DecodeError,
    TransportError,
)


def make_response(status_code: int, content: bytes = b"") -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    response._content = content
    response.encoding = "utf-8"
    return response


def make_listing_response(listing: dict) -> requests.Response:
    return make_response(200, json.dumps(listing).encode())


def create_service(session) -> RemoteDirectoryService:
    return RemoteDirectoryService("https://storage.example", "token", session=session)


def test_list_request():
    session = mock.Mock()
    session.get.return_value = make_listing_response({"folders": [], "files": []})

    service = RemoteDirectoryService(
        "https://storage.example/", "token", timeout=5, session=session
    )
    service.list("mine", "/docs")

    session.get.assert_called_with(
        "https://storage.example/storage/list",
        params={"key": "mine", "path": "/docs"},
        headers={"Authorization": "Bearer token"},
        timeout=5,
    )


def test_list_success():
    session = mock.Mock()
    session.get.return_value = make_listing_response(
        {
            "folders": [{"name": "docs"}],
            "files": [{"name": "readme.txt", "presignedUrl": "https://x/r", "size": 5}],
        }
    )

    service = create_service(session)

    assert service.list("mine", "/") == DirectoryListing(
        folders=[Folder("docs")], files=[File("readme.txt", "https://x/r", 5)]
    )


def test_list_status_error():
    session = mock.Mock()
    session.get.return_value = make_response(500, b"server error")

    service = create_service(session)

    with pytest.raises(BackendListError) as e:
        service.list("mine", "/")

    assert e.value.status == 500
    assert e.value.body == "server error"


def test_list_transport_error():
    session = mock.Mock()
    session.get.side_effect = requests.ConnectionError("connection refused")

    service = create_service(session)

    with pytest.raises(TransportError):
        service.list("mine", "/")


def test_list_timeout():
    session = mock.Mock()
    session.get.side_effect = requests.Timeout()

    service = create_service(session)

    with pytest.raises(TransportError):
        service.list("mine", "/")


def test_list_decode_error():
    session = mock.Mock()
    session.get.return_value = make_response(200, b"<html>not json</html>")

    service = create_service(session)

    with pytest.raises(DecodeError):
        service.list("mine", "/")


def test_list_unexpected_json():
    session = mock.Mock()
    session.get.return_value = make_response(200, b"[1, 2, 3]")

    service = create_service(session)

    with pytest.raises(DecodeError):
        service.list("mine", "/")


def test_list_not_retried():
    session = mock.Mock()
    session.get.return_value = make_response(503, b"unavailable")

    service = create_service(session)

    with pytest.raises(BackendListError):
        service.list("mine", "/")

    assert session.get.call_count == 1


def test_fetch():
    session = mock.Mock()
    session.get.return_value = make_response(200, b"hello")

    fetcher = RemoteObjectFetcher(timeout=5, session=session)

    assert fetcher.fetch("https://x/r?sig=abc") == b"hello"
    session.get.assert_called_with("https://x/r?sig=abc", headers=None, timeout=5)


def test_fetch_status_error():
    session = mock.Mock()
    session.get.return_value = make_response(403, b"expired")

    fetcher = RemoteObjectFetcher(session=session)

    with pytest.raises(BackendFetchError) as e:
        fetcher.fetch("https://x/r")

    assert e.value.status == 403
    assert e.value.body == "expired"


def test_fetch_transport_error():
    session = mock.Mock()
    session.get.side_effect = requests.ConnectionError()

    fetcher = RemoteObjectFetcher(session=session)

    with pytest.raises(TransportError):
        fetcher.fetch("https://x/r")


def test_fetch_range_partial():
    session = mock.Mock()
    session.get.return_value = make_response(206, b"ell")

    fetcher = RemoteObjectFetcher(session=session)

    assert fetcher.fetch_range("https://x/r", 1, 3) == (b"ell", True)
    session.get.assert_called_with(
        "https://x/r", headers={"Range": "bytes=1-3"}, timeout=None
    )


def test_fetch_range_unsupported():
    session = mock.Mock()
    session.get.return_value = make_response(200, b"hello")

    fetcher = RemoteObjectFetcher(session=session)

    assert fetcher.fetch_range("https://x/r", 1, 3) == (b"hello", False)


def test_fetch_range_beyond_end():
    session = mock.Mock()
    session.get.return_value = make_response(416, b"")

    fetcher = RemoteObjectFetcher(session=session)

    assert fetcher.fetch_range("https://x/r", 10, 3) == (b"", True)


def test_fetch_range_empty():
    session = mock.Mock()

    fetcher = RemoteObjectFetcher(session=session)

    assert fetcher.fetch_range("https://x/r", 0, 0) == (b"", True)
    assert not session.get.called


def test_fetch_range_status_error():
    session = mock.Mock()
    session.get.return_value = make_response(500, b"oops")

    fetcher = RemoteObjectFetcher(session=session)

    with pytest.raises(BackendFetchError):
        fetcher.fetch_range("https://x/r", 0, 3)
