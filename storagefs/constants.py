"""Module defining various global constants."""

# storagefs version
VERSION = "1.0.0"

# Special exit code for when storagefs itself fails.
STORAGEFS_ERROR_CODE = 254

# Name and subtype of the FUSE file system, as shown by mount(8).
FILESYSTEM_NAME = "omsstorage"
FILESYSTEM_SUBTYPE = "omsstoragefs"

# Storage backend defaults
DEFAULT_BACKEND_URL = "https://storage.omelhorsite.pt"
DEFAULT_ACCOUNT_KEY = "mine"
DEFAULT_TOKEN_VARIABLE = "ACCOUNT_TOKEN"

# Inode numbers reported for every directory and every file respectively. The kernel
# assigns its own inode numbers unless use_ino is set, so these only need to be stable.
DIRECTORY_INODE = 1
FILE_INODE = 2
