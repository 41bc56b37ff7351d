"""Module for configuration variables with defaults that are overridable by a file."""

from __future__ import annotations

from configparser import ConfigParser, SectionProxy
from dataclasses import dataclass, field

import storagefs.constants as constants
from storagefs.logger import log


@dataclass
class BackendConfig:
    """Configuration variables related to the storage backend."""

    url: str = constants.DEFAULT_BACKEND_URL
    key: str = constants.DEFAULT_ACCOUNT_KEY
    token_variable: str = constants.DEFAULT_TOKEN_VARIABLE

    timeout: float = 30.0  # seconds
    range_reads: bool = False

    @staticmethod
    def load(section: SectionProxy) -> BackendConfig:
        """Load overridden variables from a section within a config file."""
        config = BackendConfig()

        config.url = section.get("url", fallback=config.url).rstrip("/")
        config.key = section.get("key", fallback=config.key)
        config.token_variable = section.get(
            "token_variable", fallback=config.token_variable
        )

        config.timeout = section.getfloat("timeout", fallback=config.timeout)
        config.range_reads = section.getboolean(
            "range_reads", fallback=config.range_reads
        )

        return config


@dataclass
class CacheConfig:
    """
    Configuration variables related to caching.

    A limit of 0 disables that limit. A listing TTL of 0 disables listing caching.
    """

    max_entries: int = 0
    max_size: int = 0  # bytes

    listing_ttl: float = 0.0  # seconds

    @staticmethod
    def load(section: SectionProxy) -> CacheConfig:
        """Load overridden variables from a section within a config file."""
        config = CacheConfig()

        config.max_entries = section.getint("max_entries", fallback=config.max_entries)
        config.max_size = section.getint("max_size", fallback=config.max_size)

        config.listing_ttl = section.getfloat(
            "listing_ttl", fallback=config.listing_ttl
        )

        return config


@dataclass
class FilesystemConfig:
    """Configuration variables related to the mounted file system."""

    # Directory listings that fail are shown as empty instead of returning an error.
    degrade_on_list_failure: bool = True

    allow_other: bool = True

    @staticmethod
    def load(section: SectionProxy) -> FilesystemConfig:
        """Load overridden variables from a section within a config file."""
        config = FilesystemConfig()

        config.degrade_on_list_failure = section.getboolean(
            "degrade_on_list_failure", fallback=config.degrade_on_list_failure
        )
        config.allow_other = section.getboolean(
            "allow_other", fallback=config.allow_other
        )

        return config


@dataclass
class Config:
    """Configuration variables."""

    backend: BackendConfig = field(default_factory=BackendConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    filesystem: FilesystemConfig = field(default_factory=FilesystemConfig)

    @staticmethod
    def load(filename: str) -> Config:
        """Load overridden configuration variables from a config file."""
        parser = ConfigParser()

        config = Config()

        try:
            with open(filename, "r") as f:
                parser.read_string(f.read(), filename)

            if "backend" in parser:
                config.backend = BackendConfig.load(parser["backend"])

            if "cache" in parser:
                config.cache = CacheConfig.load(parser["cache"])

            if "filesystem" in parser:
                config.filesystem = FilesystemConfig.load(parser["filesystem"])
        except FileNotFoundError:
            log.info(f"no config file at {filename}")
        except Exception as e:
            # An unreadable config file is not considered a fatal error since we can
            # fall back to defaults.
            log.error(f"failed to read config file {filename}: {e}")
        else:
            log.info(f"loaded config: {config}")

        return config
