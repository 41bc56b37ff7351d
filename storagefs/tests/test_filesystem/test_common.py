import os
import stat
import threading

from storagefs.filesystem.common import Attributes, DirectoryEntry, LockIndex


def test_directory_attributes():
    attr = Attributes.for_directory()

    assert stat.S_ISDIR(attr.st_mode)
    assert stat.S_IMODE(attr.st_mode) == 0o555
    assert attr.st_ino == 1
    assert attr.st_uid == os.getuid()


def test_file_attributes():
    attr = Attributes.for_file(1234)

    assert stat.S_ISREG(attr.st_mode)
    assert stat.S_IMODE(attr.st_mode) == 0o444
    assert attr.st_ino == 2
    assert attr.st_size == 1234


def test_attributes_as_stat_dict():
    attr = Attributes.for_file(5).__dict__

    assert attr["st_size"] == 5
    assert all(key.startswith("st_") for key in attr)


def test_directory_entry():
    assert DirectoryEntry("docs", stat.S_IFDIR).is_dir
    assert not DirectoryEntry("readme.txt", stat.S_IFREG).is_dir


def test_lock_index():
    index = LockIndex()

    with index.lock("a"):
        with index.lock("b"):
            with index.lock("c"):
                assert index.lock_count == 3

        assert index.lock_count == 1

    assert index.lock_count == 0


def test_lock_index_exclusive():
    index = LockIndex()
    entered = threading.Event()
    release = threading.Event()

    def hold():
        with index.lock("a"):
            entered.set()
            release.wait()

    t = threading.Thread(target=hold)
    t.start()
    entered.wait()

    acquired = []

    def wait_for_lock():
        with index.lock("a"):
            acquired.append(True)

    waiter = threading.Thread(target=wait_for_lock)
    waiter.start()
    waiter.join(0.1)

    assert not acquired
    assert index.lock_count == 1

    release.set()
    t.join()
    waiter.join()

    assert acquired
    assert index.lock_count == 0


def test_lock_index_released_on_error():
    index = LockIndex()

    try:
        with index.lock("a"):
            raise ValueError()
    except ValueError:
        pass

    assert index.lock_count == 0
