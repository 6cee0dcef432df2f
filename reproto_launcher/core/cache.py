"""
Cache-and-update state machine for the reproto binary.

On every invocation the CacheManager decides whether an upstream check is
due, whether a new release must be downloaded and unpacked, and records the
result in the release store. The steps run strictly in order because each
decision depends on the previous one:

    resolve platform -> ensure cache dirs -> read cached version
      -> staleness decision -> (query latest release)
      -> (download archive) -> (extract archive) -> (record version)
      -> verify binary exists

The release store is written only after a successful extraction. A failed
check, download or extraction therefore leaves the previous version and
binary in place for the next run.

Example:
    >>> from reproto_launcher.core.cache import CacheManager
    >>> from reproto_launcher.core.config import load_config
    >>>
    >>> manager = CacheManager(load_config())
    >>> binary = manager.ensure_binary_available()
    >>> print(binary)
    /home/user/.reproto-cache/.bin/reproto
"""

import functools
import logging
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Callable, Optional

from reproto_launcher.core.config import LauncherConfig
from reproto_launcher.core.directory import (
    ensure_cache_structure,
    get_binary_dir,
    get_lock_dir,
)
from reproto_launcher.core.download import (
    DownloadProgress,
    download_file,
    format_progress,
)
from reproto_launcher.core.exceptions import BinaryMissingError, ExtractionError
from reproto_launcher.core.filesystem import extract_archive, make_executable
from reproto_launcher.core.locking import LockManager
from reproto_launcher.core.oracle import ReleaseOracle
from reproto_launcher.core.platform import PlatformInfo, resolve
from reproto_launcher.core.store import ReleaseStore

logger = logging.getLogger(__name__)

ARCHIVE_EXTENSION = ".tar.gz"

Downloader = Callable[[str, Path], Path]
Extractor = Callable[[Path, Path], None]


@dataclass(frozen=True)
class CachePaths:
    """
    Locations for one release of the binary on one platform.

    Attributes:
        cache_root: Cache root directory
        binary_dir: Directory the archive is unpacked into
        artifact_filename: Upstream artifact name
        url: Upstream download URL of the artifact
        archive: Local path of the downloaded archive
        binary: Local path of the unpacked executable
    """

    cache_root: Path
    binary_dir: Path
    artifact_filename: str
    url: str
    archive: Path
    binary: Path


def artifact_filename(base_name: str, version: str, platform: PlatformInfo) -> str:
    """
    Build the upstream artifact file name.

    Example:
        >>> artifact_filename('reproto', 'v1.2.0', PlatformInfo('linux', 'x86_64'))
        'reproto-v1.2.0-linux-x86_64.tar.gz'
    """
    return f"{base_name}-{version}-{platform.os}-{platform.arch}{ARCHIVE_EXTENSION}"


def artifact_url(download_url: str, repository: str, version: str, filename: str) -> str:
    """Build the upstream download URL of an artifact."""
    return f"{download_url.rstrip('/')}/{repository}/releases/download/{version}/{filename}"


def _log_progress(progress: DownloadProgress) -> None:
    logger.debug(f"Downloaded {format_progress(progress)}")


class CacheManager:
    """
    Ensures an up-to-date reproto binary is present in the cache.

    Every collaborator can be replaced, which lets tests drive the state
    machine without network access.

    Attributes:
        config: Launcher configuration
        store: Release metadata store
        oracle: Upstream release lookup
    """

    def __init__(
        self,
        config: LauncherConfig,
        store: Optional[ReleaseStore] = None,
        oracle: Optional[ReleaseOracle] = None,
        downloader: Optional[Downloader] = None,
        extractor: Extractor = extract_archive,
        platform_resolver: Callable[[], PlatformInfo] = resolve,
        lock_manager: Optional[LockManager] = None,
    ):
        self.config = config
        self.cache_root = Path(config.cache_dir)
        self.store = store or ReleaseStore(self.cache_root)
        self.oracle = oracle or ReleaseOracle(
            repository=config.repository,
            api_url=config.api_url,
            timeout=config.timeout,
        )
        self._download = downloader or functools.partial(
            download_file, timeout=config.timeout, progress_callback=_log_progress
        )
        self._extract = extractor
        self._resolve_platform = platform_resolver
        self._lock_manager = lock_manager

    def paths_for(self, version: str, platform: PlatformInfo) -> CachePaths:
        """
        Construct the cache locations for ``version`` on ``platform``.

        Pure path construction; nothing is touched on disk.
        """
        filename = artifact_filename(self.config.base_name, version, platform)
        binary_dir = get_binary_dir(self.cache_root)
        return CachePaths(
            cache_root=self.cache_root,
            binary_dir=binary_dir,
            artifact_filename=filename,
            url=artifact_url(
                self.config.download_url, self.config.repository, version, filename
            ),
            archive=self.cache_root / filename,
            binary=binary_dir / platform.executable_name(self.config.base_name),
        )

    def ensure_binary_available(self) -> Path:
        """
        Make sure the binary is present and reasonably current.

        Returns:
            Path to the executable inside the cache

        Raises:
            UnsupportedPlatformError: Before any cache work is attempted
            DirectoryCreationError: If the cache directories cannot be created
            CacheLockTimeout: If another launcher holds the cache lock too long
            CacheLockError: If the cache lock file cannot be created or locked
            StoreReadError: If the release marker cannot be read
            StoreWriteError: If the release marker cannot be written
            NetworkError: If the upstream check fails
            ProtocolError: If the upstream response is malformed
            DownloadError: If the artifact download fails
            ExtractionError: If the archive cannot be unpacked
            BinaryMissingError: If the binary is absent after all steps
        """
        platform = self._resolve_platform()
        logger.debug(f"Resolved platform: {platform}")

        ensure_cache_structure(self.cache_root)

        if not self.config.use_lock:
            return self._update(platform)

        if self._lock_manager is None:
            self._lock_manager = LockManager(get_lock_dir(self.cache_root))
        with self._lock_manager.cache_lock(timeout=self.config.lock_timeout):
            return self._update(platform)

    def _update(self, platform: PlatformInfo) -> Path:
        cached_version = self.store.read()

        download_required = False
        confirmed = False

        if cached_version is not None and not self._is_stale():
            logger.debug(
                f"Not checking for new version since {self.store.release_file} is fresh"
            )
            target_version = cached_version
        else:
            logger.info("Checking for new version")
            target_version = self.oracle.latest().strip()

            if target_version != cached_version:
                logger.info(
                    f"New version available: {target_version} "
                    f"(cached: {cached_version or 'none'})"
                )
                download_required = True
            else:
                logger.debug(f"Cached version {cached_version} is up to date")
                confirmed = True

        paths = self.paths_for(target_version, platform)

        if download_required or not paths.archive.exists():
            self._download(paths.url, paths.archive)

        if download_required or not paths.binary.exists():
            logger.debug(f"Extracting {paths.archive} into {paths.binary_dir}")
            self._extract(paths.archive, paths.binary_dir)
            self._mark_executable(paths.binary)

        if download_required:
            self.store.write(target_version)
        elif confirmed:
            self.store.touch()

        if not paths.binary.exists():
            raise BinaryMissingError(paths.binary)

        return paths.binary

    def _is_stale(self) -> bool:
        """Decide whether the recorded version is due for an upstream check."""
        threshold = self.config.staleness_threshold
        if threshold <= timedelta(0):
            return True

        age = self.store.age()
        if age < timedelta(0):
            logger.debug(f"Release marker is dated in the future ({age}), checking")
            return True

        return age >= threshold

    def _mark_executable(self, binary: Path) -> None:
        if not binary.exists():
            return
        try:
            make_executable(binary)
        except OSError as e:
            raise ExtractionError(f"Failed to mark {binary} executable: {e}") from e
