"""
Core functionality for the reproto launcher.

This package contains the cache, update and platform modules that the CLI
builds on.
"""

from .cache import (
    CacheManager,
    CachePaths,
    artifact_filename,
    artifact_url,
)

from .config import (
    LauncherConfig,
    load_config,
)

from .directory import (
    get_cache_dir,
    get_binary_dir,
    ensure_cache_structure,
)

from .locking import (
    LockManager,
)

from .oracle import (
    ReleaseOracle,
)

from .platform import (
    PlatformInfo,
    resolve,
    get_supported_platforms,
)

from .store import (
    ReleaseStore,
)

from .exceptions import (
    LauncherError,
    ConfigError,
    DirectoryCreationError,
    UnsupportedPlatformError,
    StoreError,
    StoreReadError,
    StoreWriteError,
    NetworkError,
    ProtocolError,
    DownloadError,
    ExtractionError,
    UnsupportedArchiveFormat,
    InsecureArchiveError,
    CacheLockError,
    CacheLockTimeout,
    BinaryMissingError,
    SpawnError,
)

__all__ = [
    # Cache
    "CacheManager",
    "CachePaths",
    "artifact_filename",
    "artifact_url",
    # Config
    "LauncherConfig",
    "load_config",
    # Directory
    "get_cache_dir",
    "get_binary_dir",
    "ensure_cache_structure",
    # Locking
    "LockManager",
    # Oracle
    "ReleaseOracle",
    # Platform
    "PlatformInfo",
    "resolve",
    "get_supported_platforms",
    # Store
    "ReleaseStore",
    # Exceptions
    "LauncherError",
    "ConfigError",
    "DirectoryCreationError",
    "UnsupportedPlatformError",
    "StoreError",
    "StoreReadError",
    "StoreWriteError",
    "NetworkError",
    "ProtocolError",
    "DownloadError",
    "ExtractionError",
    "UnsupportedArchiveFormat",
    "InsecureArchiveError",
    "CacheLockError",
    "CacheLockTimeout",
    "BinaryMissingError",
    "SpawnError",
]
