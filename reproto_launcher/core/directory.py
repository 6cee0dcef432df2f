"""
Directory structure management for the reproto launcher.

This module handles creation of the per-user cache directory. All launcher
state lives under a single root owned exclusively by this tool.

Directory Structure:
    Cache root (~/.reproto-cache/ or %USERPROFILE%\\.reproto-cache\\):
        - release                       : Currently cached release version
        - release.json                  : Explicit timestamp of the last update
        - .bin/                         : Unpacked reproto executable
        - .lock/                        : Advisory lock file
        - reproto-<ver>-<os>-<arch>.tar.gz : Downloaded archives (not pruned)
"""

import logging
import os
from pathlib import Path

from reproto_launcher.core.exceptions import DirectoryCreationError, LauncherError

logger = logging.getLogger(__name__)

CACHE_DIR_NAME = ".reproto-cache"
BINARY_DIR_NAME = ".bin"
LOCK_DIR_NAME = ".lock"


def get_cache_dir() -> Path:
    """
    Get the platform-specific cache directory path.

    Returns:
        Path: The cache root directory path.
            - Windows: %USERPROFILE%\\.reproto-cache
            - Linux/macOS: ~/.reproto-cache

    Raises:
        LauncherError: If USERPROFILE is not set on Windows, or the home
            directory cannot be determined.
    """
    if os.name == "nt":  # Windows
        user_profile = os.environ.get("USERPROFILE")
        if not user_profile:
            raise LauncherError(
                "USERPROFILE environment variable is not set. "
                "Cannot determine cache directory."
            )
        return Path(user_profile) / CACHE_DIR_NAME
    else:  # Linux/macOS
        try:
            return Path.home() / CACHE_DIR_NAME
        except RuntimeError as e:
            raise LauncherError(
                f"Cannot determine home directory for the cache: {e}"
            ) from e


def get_binary_dir(cache_root: Path) -> Path:
    """Get the directory holding the unpacked executable."""
    return Path(cache_root) / BINARY_DIR_NAME


def get_lock_dir(cache_root: Path) -> Path:
    """Get the directory holding the advisory lock file."""
    return Path(cache_root) / LOCK_DIR_NAME


def _ensure_dir(path: Path) -> None:
    if path.is_dir():
        return

    logger.debug(f"Creating directory: {path}")
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise DirectoryCreationError(
            f"Failed to create directory at {path}: {e}"
        ) from e


def ensure_cache_structure(cache_root: Path) -> Path:
    """
    Create the cache directory structure if it doesn't exist.

    Idempotent: calling it on an existing cache is a no-op.

    Creates:
        - Cache root directory
        - .bin/ subdirectory

    Args:
        cache_root: Cache root directory.

    Returns:
        Path: The cache root directory path.

    Raises:
        DirectoryCreationError: If directory creation fails.
    """
    cache_root = Path(cache_root)
    _ensure_dir(cache_root)
    _ensure_dir(get_binary_dir(cache_root))
    return cache_root
