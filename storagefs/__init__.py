"""Mount a remote HTTP object store as a read-only FUSE file system."""
