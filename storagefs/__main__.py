"""
Module implementing the command-line interface of storagefs.

storagefs mounts the storage backend at the given mount point and serves it in the
foreground until the file system is unmounted (e.g. with fusermount3 -u) or the process
is interrupted.
"""

import logging
import signal
import sys
from typing import List, NoReturn, Optional

import storagefs.constants as constants
from storagefs.logger import log
import storagefs.mount as mount
from .args import Arguments


def main(arguments: Optional[List[str]] = None) -> NoReturn:
    """
    Mount the storage backend with the given arguments.

    Defaults to parsing command-line arguments from sys.argv if none are specified.
    """
    # Parse command-line arguments.
    args = Arguments.parse(arguments)

    # Configure debug logging.
    if args.debug:
        log.setLevel(logging.DEBUG)
    else:
        log.setLevel(logging.INFO)

    try:
        exit_code = mount.Mount(args).run()
    except KeyboardInterrupt:
        exit_code = 128 + signal.SIGINT
    except Exception as e:
        log.error(f"failed to mount file system: {e}")
        exit_code = constants.STORAGEFS_ERROR_CODE

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
