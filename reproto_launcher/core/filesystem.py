"""
Filesystem utilities for the reproto launcher.

Provides:
- Safe release archive extraction (tar.gz) with traversal checks
- Atomic file writes (temp file + rename)
- Executable permission handling
"""

import logging
import os
import stat
import sys
import tarfile
import tempfile
from pathlib import Path
from typing import Union

from reproto_launcher.core.exceptions import (
    ExtractionError,
    InsecureArchiveError,
    UnsupportedArchiveFormat,
)

logger = logging.getLogger(__name__)

IS_WINDOWS = os.name == "nt"


# ============================================================================
# Path Utilities
# ============================================================================


def is_relative_to(path: Path, parent: Path) -> bool:
    """
    Check whether ``path`` is located under ``parent``.

    Args:
        path: Path to check (should be resolved)
        parent: Potential parent directory (should be resolved)

    Returns:
        True if path is parent or inside it
    """
    try:
        path.relative_to(parent)
        return True
    except ValueError:
        return False


def ensure_directory(path: Union[str, Path]) -> Path:
    """
    Ensure a directory exists (idempotent).

    Args:
        path: Directory path

    Returns:
        Path object (resolved)
    """
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path.resolve()


def make_executable(path: Union[str, Path]) -> None:
    """
    Add execute permission bits to a file.

    No-op on Windows, where executability is decided by the file extension.
    """
    if IS_WINDOWS:
        return

    path = Path(path)
    mode = path.stat().st_mode
    path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)


# ============================================================================
# Archive Extraction
# ============================================================================


def _validate_archive_path(path: str, destination: Path) -> None:
    """
    Validate that an archive member path is safe to extract.

    Prevents directory traversal attacks (e.g., paths containing '../').

    Raises:
        InsecureArchiveError: If path attempts directory traversal
    """
    member_path = (destination / path).resolve()

    if not is_relative_to(member_path, destination.resolve()):
        raise InsecureArchiveError(
            f"Archive member '{path}' attempts directory traversal. "
            "This is a security risk and extraction has been blocked."
        )


def extract_archive(archive_path: Union[str, Path], destination: Union[str, Path]) -> None:
    """
    Extract a release archive to a destination directory.

    Every member path is validated before anything is written. Release
    artifacts are gzip-compressed tarballs (``.tar.gz`` or ``.tgz``).

    Args:
        archive_path: Path to the archive file
        destination: Directory to extract to

    Raises:
        UnsupportedArchiveFormat: If the file is not a .tar.gz/.tgz archive
        InsecureArchiveError: If archive contains malicious paths
        ExtractionError: If the archive is missing, malformed, or I/O fails

    Example:
        >>> extract_archive('reproto-v1.2.0-linux-x86_64.tar.gz', '.bin')
    """
    archive_path = Path(archive_path)
    destination = Path(destination)

    if not archive_path.exists():
        raise ExtractionError(f"Archive not found: {archive_path}")

    if not archive_path.name.lower().endswith((".tar.gz", ".tgz")):
        raise UnsupportedArchiveFormat(
            f"Unsupported archive format: {archive_path.name}. "
            "Supported: .tar.gz, .tgz"
        )

    try:
        destination.mkdir(parents=True, exist_ok=True)

        with tarfile.open(archive_path, "r:gz") as tar:
            for member in tar.getmembers():
                _validate_archive_path(member.name, destination)

            # Paths are already validated above for interpreters without filters
            if sys.version_info >= (3, 12):
                tar.extractall(destination, filter="data")
            else:
                tar.extractall(destination)
    except ExtractionError:
        raise
    except (OSError, EOFError, tarfile.TarError) as e:
        raise ExtractionError(f"Failed to extract {archive_path}: {e}") from e

    logger.debug(f"Extracted {archive_path} into {destination}")


# ============================================================================
# Safe File Operations
# ============================================================================


def atomic_write(
    file_path: Union[str, Path], content: Union[str, bytes], encoding: str = "utf-8"
) -> None:
    """
    Write file atomically using temp file + rename.

    The file is never observed in a partially-written state. If the write
    fails, the original file (if any) remains unchanged.

    Args:
        file_path: Path to write to
        content: Content to write (string or bytes)
        encoding: Text encoding (used only for string content)

    Example:
        >>> atomic_write('release', 'v1.2.0\\n')
    """
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    # Temp file in the same directory keeps the rename on one filesystem
    temp_fd, temp_path_str = tempfile.mkstemp(
        dir=file_path.parent, prefix=f".{file_path.name}.", suffix=".tmp"
    )
    temp_path = Path(temp_path_str)

    try:
        if isinstance(content, str):
            with open(temp_fd, "w", encoding=encoding, newline="\n") as f:
                f.write(content)
        else:
            with open(temp_fd, "wb") as f:
                f.write(content)

        temp_path.replace(file_path)

    except Exception:
        try:
            temp_path.unlink(missing_ok=True)
        except OSError:
            pass
        raise
