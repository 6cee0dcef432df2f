"""
Centralized exception hierarchy for the reproto launcher.

Every failure that can stop the launcher before the reproto binary is spawned
derives from LauncherError, so the CLI can report it uniformly and exit with
a nonzero status.
"""

from pathlib import Path
from typing import Union


# ============================================================================
# Base Exceptions
# ============================================================================


class LauncherError(Exception):
    """Base exception for all launcher errors."""

    pass


class ConfigError(LauncherError):
    """Configuration parsing or validation error."""

    pass


class DirectoryCreationError(LauncherError):
    """Raised when the cache directory structure cannot be created."""

    pass


# ============================================================================
# Platform Exceptions
# ============================================================================


class UnsupportedPlatformError(LauncherError):
    """Raised when the operating system or CPU architecture has no release artifact."""

    def __init__(self, kind: str, value: str):
        self.kind = kind
        self.value = value
        super().__init__(f"Unsupported {kind}: {value}")


# ============================================================================
# Release Metadata Store Exceptions
# ============================================================================


class StoreError(LauncherError):
    """Base exception for release metadata store errors."""

    pass


class StoreReadError(StoreError):
    """Raised when the release marker cannot be read."""

    pass


class StoreWriteError(StoreError):
    """Raised when the release marker cannot be written."""

    pass


# ============================================================================
# Network Exceptions
# ============================================================================


class NetworkError(LauncherError):
    """Raised on transport failure or timeout while querying the release index."""

    pass


class ProtocolError(LauncherError):
    """Raised when the release index returns data of an unexpected shape."""

    pass


class DownloadError(LauncherError):
    """Raised when an artifact download fails."""

    pass


# ============================================================================
# Archive Exceptions
# ============================================================================


class ExtractionError(LauncherError):
    """Failed to extract an archive."""

    pass


class UnsupportedArchiveFormat(ExtractionError):
    """Archive format is not supported."""

    pass


class InsecureArchiveError(ExtractionError):
    """Archive contains insecure paths (directory traversal attempt)."""

    pass


# ============================================================================
# Cache and Execution Exceptions
# ============================================================================


class CacheLockError(LauncherError):
    """Raised when the cache lock file cannot be created or locked."""

    pass


class CacheLockTimeout(CacheLockError):
    """Raised when the cache lock cannot be acquired within timeout."""

    pass


class BinaryMissingError(LauncherError):
    """Raised when the binary is still absent after the update sequence."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        super().__init__(f"Binary not found after update: {self.path}")


class SpawnError(LauncherError):
    """Raised when the binary cannot be started."""

    pass
