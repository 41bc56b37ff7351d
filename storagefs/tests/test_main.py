from unittest import mock
import logging
import signal

import pytest

from storagefs.__main__ import main
import storagefs.constants as constants
from storagefs.logger import log


def test_no_args():
    with pytest.raises(SystemExit):
        main([])


def test_debug_flag_set():
    with mock.patch("storagefs.mount.Mount"):
        with pytest.raises(SystemExit):
            main(["--debug", "/mnt"])

        assert log.getEffectiveLevel() == logging.DEBUG


def test_debug_flag_not_set():
    with mock.patch("storagefs.mount.Mount"):
        with pytest.raises(SystemExit):
            main(["/mnt"])

        assert log.getEffectiveLevel() == logging.INFO


def test_exit_code_of_mount():
    with mock.patch("storagefs.mount.Mount") as mock_mount:
        mock_mount().run.return_value = 3

        with pytest.raises(SystemExit) as e:
            main(["/mnt"])

    assert e.value.code == 3


def test_interrupted():
    with mock.patch("storagefs.mount.Mount") as mock_mount:
        mock_mount().run.side_effect = KeyboardInterrupt()

        with pytest.raises(SystemExit) as e:
            main(["/mnt"])

    assert e.value.code == 128 + signal.SIGINT


def test_mount_failure(caplog):
    with mock.patch("storagefs.mount.Mount") as mock_mount:
        mock_mount().run.side_effect = Exception("foo")

        with pytest.raises(SystemExit) as e:
            main(["/mnt"])

    assert e.value.code == constants.STORAGEFS_ERROR_CODE
    assert "failed to mount file system: foo" in caplog.text
