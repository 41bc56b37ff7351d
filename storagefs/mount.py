"""Module that sets up a session and mounts the file system."""

import contextlib
import os
import subprocess

from storagefs.args import Arguments
from storagefs.config import Config
import storagefs.constants as constants
from storagefs.filesystem import StorageFileSystem, StorageSession
from storagefs.filesystem.fuse import FUSE, FuseConfig
from storagefs.logger import log


class Mount:
    """Class that encapsulates mounting and serving the file system."""

    def __init__(self, args: Arguments):
        """Initialize the mount based on the command-line arguments."""
        self._args = args

    def run(self) -> int:
        """Mount the file system and serve it until it is unmounted."""
        config = self.load_config()
        token = self._read_token(config.backend.token_variable)

        mount_path = os.path.abspath(self._args.mountpoint)

        with contextlib.closing(StorageSession.create(config, token)) as session:
            fs = StorageFileSystem(session)

            fuse_config = FuseConfig(
                subtype=constants.FILESYSTEM_SUBTYPE,
                allow_other=config.filesystem.allow_other,
            )

            self._unmount_stale(mount_path)

            log.info(
                f"mounting {config.backend.url} ({config.backend.key}) at {mount_path}"
            )

            return FUSE(fs, fuse_config).mount(constants.FILESYSTEM_NAME, mount_path)

    def load_config(self) -> Config:
        """Load the config file and apply overrides from the command-line."""
        config = Config.load(os.path.expanduser(self._args.config))

        if self._args.url is not None:
            config.backend.url = self._args.url.rstrip("/")

        if self._args.key is not None:
            config.backend.key = self._args.key

        if self._args.timeout is not None:
            config.backend.timeout = self._args.timeout

        if self._args.allow_other is not None:
            config.filesystem.allow_other = self._args.allow_other

        return config

    @staticmethod
    def _read_token(variable: str) -> str:
        """Read the account token from the environment."""
        token = os.environ.get(variable, "")

        if not token:
            log.warning(f"{variable} is not set, requests will not be authenticated")

        return token

    @staticmethod
    def _unmount_stale(mount_path: str) -> None:
        """Unmount a file system left behind at the mount path by a previous run."""
        with contextlib.suppress(OSError):
            subprocess.call(
                ["fusermount3", "-u", "-q", mount_path],
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
