"""
Release metadata store for the reproto launcher.

Records which release version is currently unpacked in the cache, and when
that record was last confirmed. The version lives in the plain-text
``release`` marker (``v1.2.0\\n``). The confirmation time is stored explicitly
in the ``release.json`` sidecar so staleness does not depend on filesystem
modification times, which copies and backups rewrite.

Example:
    >>> from reproto_launcher.core.store import ReleaseStore
    >>>
    >>> store = ReleaseStore(Path('~/.reproto-cache').expanduser())
    >>> version = store.read()
    >>> if version is not None and store.age() < timedelta(hours=1):
    ...     print(f"{version} is fresh")
"""

import json
import logging
import time
from datetime import timedelta
from pathlib import Path
from typing import Callable, Optional

from reproto_launcher.core.exceptions import StoreReadError, StoreWriteError
from reproto_launcher.core.filesystem import atomic_write

logger = logging.getLogger(__name__)

RELEASE_FILE_NAME = "release"
STAMP_FILE_NAME = "release.json"


class ReleaseStore:
    """
    Persists the currently cached release version.

    Attributes:
        cache_root: Cache root directory
        release_file: Path to the plain-text version marker
        stamp_file: Path to the JSON sidecar holding the update timestamp
    """

    def __init__(self, cache_root: Path, clock: Callable[[], float] = time.time):
        """
        Initialize release store.

        Args:
            cache_root: Cache root directory (need not exist yet)
            clock: Returns the current wall-clock time in epoch seconds
        """
        self.cache_root = Path(cache_root)
        self.release_file = self.cache_root / RELEASE_FILE_NAME
        self.stamp_file = self.cache_root / STAMP_FILE_NAME
        self._clock = clock

    def read(self) -> Optional[str]:
        """
        Read the currently cached version.

        Returns:
            Trimmed version string, or None if no version has been recorded
            (a blank marker counts as none)

        Raises:
            StoreReadError: On any I/O error other than the marker being absent
        """
        try:
            content = self.release_file.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise StoreReadError(
                f"Failed to read release marker {self.release_file}: {e}"
            ) from e

        return content.strip() or None

    def age(self) -> timedelta:
        """
        Get time elapsed since the cached version was last recorded or confirmed.

        Uses the explicit timestamp from the sidecar when it belongs to the
        current marker, and the marker's modification time otherwise.

        Raises:
            StoreReadError: If the marker does not exist or cannot be inspected
        """
        version = self.read()
        if version is None:
            raise StoreReadError(
                f"No release version recorded in {self.release_file}"
            )

        updated_at = self._read_stamp(version)
        if updated_at is None:
            try:
                updated_at = self.release_file.stat().st_mtime
            except OSError as e:
                raise StoreReadError(
                    f"Failed to stat release marker {self.release_file}: {e}"
                ) from e

        return timedelta(seconds=self._clock() - updated_at)

    def write(self, version: str) -> None:
        """
        Record ``version`` as the currently cached version.

        Overwrites the marker with the trimmed version plus a trailing newline
        and resets the staleness clock.

        Raises:
            StoreWriteError: If the marker or sidecar cannot be written
        """
        version = version.strip()
        try:
            atomic_write(self.release_file, f"{version}\n")
        except OSError as e:
            raise StoreWriteError(
                f"Failed to write release marker {self.release_file}: {e}"
            ) from e

        self._write_stamp(version)
        logger.debug(f"Recorded cached release {version}")

    def touch(self) -> None:
        """
        Reset the staleness clock without rewriting the version marker.

        Raises:
            StoreReadError: If the marker does not exist
            StoreWriteError: If the sidecar cannot be written
        """
        version = self.read()
        if version is None:
            raise StoreReadError(
                f"No release version recorded in {self.release_file}"
            )

        self._write_stamp(version)
        logger.debug(f"Confirmed cached release {version}")

    def _read_stamp(self, version: str) -> Optional[float]:
        try:
            with open(self.stamp_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable stamp file {self.stamp_file}: {e}")
            return None

        if not isinstance(data, dict) or data.get("version") != version:
            logger.debug(f"Stamp file does not match release {version}, using mtime")
            return None

        updated_at = data.get("updated_at")
        if isinstance(updated_at, bool) or not isinstance(updated_at, (int, float)):
            logger.warning(f"Ignoring stamp file without timestamp: {self.stamp_file}")
            return None

        return float(updated_at)

    def _write_stamp(self, version: str) -> None:
        content = json.dumps({"version": version, "updated_at": self._clock()}, indent=2)
        try:
            atomic_write(self.stamp_file, content)
        except OSError as e:
            raise StoreWriteError(
                f"Failed to write stamp file {self.stamp_file}: {e}"
            ) from e
