"""Module defining the command-line arguments and providing a parser for them."""

from __future__ import annotations

import argparse
from typing import List, Optional

from storagefs.constants import VERSION


class Arguments(argparse.Namespace):
    """Parsed command-line arguments."""

    mountpoint: str

    config: str

    url: Optional[str]
    key: Optional[str]
    timeout: Optional[float]
    allow_other: Optional[bool]

    debug: bool

    @classmethod
    def parse(cls, args: Optional[List[str]] = None) -> Arguments:
        """
        Parse command-line arguments from the given list of strings.

        Defaults to sys.argv if none are specified.
        """
        return cls._get_parser().parse_args(args, namespace=cls())

    @classmethod
    def _get_parser(cls) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            description="Mount a remote object store as a read-only file system.",
            usage="storagefs [option...] mountpoint",
        )

        parser.add_argument(
            "--version",
            action="version",
            version=f"%(prog)s {VERSION}",
            help="show the program version",
        )

        # Primary arguments
        parser.add_argument("mountpoint", type=str, help="directory to mount at")

        # Path to (optional) config file
        parser.add_argument(
            "--config",
            type=str,
            help="path to config file (default is ~/.storagefs/config)",
            default="~/.storagefs/config",
        )

        # Overrides for the backend section of the config file
        parser.add_argument("--url", type=str, help="base URL of the storage backend")
        parser.add_argument("--key", type=str, help="account key to list files for")
        parser.add_argument(
            "--timeout",
            type=cls._parse_timeout,
            help="timeout for backend requests in seconds",
        )

        # Restrict access to the mounting user
        parser.add_argument(
            "--no-allow-other",
            action="store_false",
            help="only allow the mounting user to access the file system",
            dest="allow_other",
            default=None,
        )

        # Enable debug output for development
        parser.add_argument(
            "--debug", action="store_true", help="enable debug information"
        )

        return parser

    @staticmethod
    def _parse_timeout(arg: str) -> float:
        try:
            val = float(arg)
            assert val > 0
            return val
        except (ValueError, AssertionError):
            raise argparse.ArgumentTypeError("expected number > 0")
