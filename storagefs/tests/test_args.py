import pytest

from storagefs.args import Arguments


def test_no_args():
    with pytest.raises(SystemExit):
        Arguments.parse([])


def test_basic_usage():
    args = Arguments.parse(["/mnt/storage"])

    assert args.mountpoint == "/mnt/storage"
    assert args.config == "~/.storagefs/config"

    assert args.url is None
    assert args.key is None
    assert args.timeout is None
    assert args.allow_other is None
    assert not args.debug


def test_overrides():
    args = Arguments.parse(
        ["--url=http://localhost", "--key=theirs", "--timeout=1.5", "/mnt"]
    )

    assert args.url == "http://localhost"
    assert args.key == "theirs"
    assert args.timeout == 1.5


def test_allow_other():
    args = Arguments.parse(["--no-allow-other", "/mnt"])
    assert args.allow_other is False


def test_timeout():
    with pytest.raises(SystemExit):
        Arguments.parse(["--timeout=0", "/mnt"])

    with pytest.raises(SystemExit):
        Arguments.parse(["--timeout=abc", "/mnt"])


def test_debug():
    args = Arguments.parse(["--debug", "/mnt"])
    assert args.debug
