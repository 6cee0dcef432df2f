"""
Concurrent access control for the reproto cache.

Two launcher processes started at the same time would otherwise race on the
downloaded archive, the unpacked binary and the release marker. The cache
lock serializes the whole check/download/extract/record sequence across
processes using the `filelock` library.

Usage:
    from reproto_launcher.core.locking import LockManager

    lock_manager = LockManager(cache_root / ".lock")
    with lock_manager.cache_lock(timeout=300):
        # Safely update the cache
        pass
"""

import logging
from contextlib import contextmanager
from pathlib import Path

from filelock import FileLock, Timeout as LockTimeout

from reproto_launcher.core.exceptions import CacheLockError, CacheLockTimeout

logger = logging.getLogger(__name__)

CACHE_LOCK_NAME = "cache.lock"


class LockManager:
    """
    Manages locks for the launcher cache.

    Attributes:
        lock_dir: Directory where lock files are stored
    """

    def __init__(self, lock_dir: Path):
        """
        Initialize lock manager.

        Args:
            lock_dir: Directory for lock files (created if missing)

        Raises:
            CacheLockError: If the lock directory cannot be created
        """
        self.lock_dir = Path(lock_dir)
        try:
            self.lock_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise CacheLockError(
                f"Failed to create lock directory {self.lock_dir}: {e}"
            ) from e

    @property
    def cache_lock_path(self) -> Path:
        return self.lock_dir / CACHE_LOCK_NAME

    @contextmanager
    def cache_lock(self, timeout: float = 300):
        """
        Acquire the cache lock for the duration of an update.

        The default timeout is generous because the holder may be in the
        middle of a download.

        Args:
            timeout: Maximum wait time in seconds

        Raises:
            CacheLockTimeout: If lock can't be acquired within timeout
            CacheLockError: If the lock file cannot be opened or locked

        Example:
            >>> with lock_manager.cache_lock(timeout=300):
            ...     manager.ensure_binary_available()
        """
        lock_path = self.cache_lock_path
        lock = FileLock(lock_path, timeout=timeout)

        try:
            lock.acquire()
        except LockTimeout as e:
            logger.error(
                f"Could not acquire cache lock after {timeout}s. "
                "Another reproto launcher may be updating the cache."
            )
            raise CacheLockTimeout(
                f"Could not acquire cache lock {lock_path} after {timeout}s. "
                "Another reproto launcher may be updating the cache."
            ) from e
        except OSError as e:
            raise CacheLockError(f"Failed to lock {lock_path}: {e}") from e

        logger.debug(f"Acquired cache lock: {lock_path}")
        try:
            yield
        finally:
            lock.release()
            logger.debug(f"Released cache lock: {lock_path}")
