"""
Artifact download with progress tracking.

Downloads are streamed into ``<destination>.part`` and renamed onto the
destination only once the body has been fully received. A failed download
therefore never leaves a truncated archive where the cache expects a
complete one.
"""

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import requests
from requests.exceptions import RequestException

from reproto_launcher.core.exceptions import DownloadError
from reproto_launcher.core.filesystem import ensure_directory

logger = logging.getLogger(__name__)

CHUNK_SIZE = 8192
PROGRESS_INTERVAL = 0.5


@dataclass
class DownloadProgress:
    """Progress information for a download."""

    bytes_downloaded: int
    total_bytes: int
    percentage: float
    speed_bps: float  # bytes per second
    eta_seconds: float  # estimated time remaining

    def __str__(self) -> str:
        return format_progress(self)


def _partial_path(destination: Path) -> Path:
    return destination.with_name(destination.name + ".part")


def download_file(
    url: str,
    destination: Path,
    timeout: float = 30.0,
    progress_callback: Optional[Callable[[DownloadProgress], None]] = None,
    session: Optional[requests.Session] = None,
) -> Path:
    """
    Download file from URL to destination.

    Args:
        url: URL to download from
        destination: Local path to save file
        timeout: Connect/read timeout in seconds
        progress_callback: Optional callback for progress updates
        session: Optional requests session to issue the request with

    Returns:
        Path to downloaded file

    Raises:
        DownloadError: On transport failure, timeout, non-success status,
            or failure to write the file
        ValueError: If URL or destination is empty

    Example:
        >>> url = "https://github.com/reproto/reproto/releases/download/v1.2.0/reproto-v1.2.0-linux-x86_64.tar.gz"
        >>> download_file(url, Path("reproto-v1.2.0-linux-x86_64.tar.gz"))
    """
    if not url:
        raise ValueError("URL cannot be empty")

    if not destination:
        raise ValueError("Destination path cannot be empty")

    destination = Path(destination)
    partial = _partial_path(destination)
    http = session or requests

    logger.info(f"Downloading {url}")

    try:
        ensure_directory(destination.parent)
        with http.get(
            url, stream=True, timeout=timeout, allow_redirects=True
        ) as response:
            response.raise_for_status()
            _stream_to_file(response, partial, progress_callback)
        partial.replace(destination)
    except (RequestException, OSError) as e:
        raise DownloadError(f"Failed to download {url}: {e}") from e
    finally:
        # No-op after a successful rename
        partial.unlink(missing_ok=True)

    logger.debug(f"Download complete: {destination}")
    return destination


def _stream_to_file(
    response: requests.Response,
    path: Path,
    progress_callback: Optional[Callable[[DownloadProgress], None]],
) -> None:
    """Write a streamed response body to ``path``, reporting progress."""
    content_length = response.headers.get("content-length")
    total_size = int(content_length) if content_length and content_length.isdigit() else 0

    downloaded = 0
    start_time = time.time()
    last_progress_time = start_time

    with open(path, "wb") as f:
        for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
            if not chunk:
                continue

            f.write(chunk)
            downloaded += len(chunk)

            current_time = time.time()
            if progress_callback and (
                current_time - last_progress_time >= PROGRESS_INTERVAL
                or downloaded == total_size
            ):
                progress_callback(
                    _progress(downloaded, total_size, current_time - start_time)
                )
                last_progress_time = current_time

    # Unknown length never hits downloaded == total_size inside the loop
    if progress_callback and total_size == 0:
        progress_callback(_progress(downloaded, 0, time.time() - start_time))


def _progress(downloaded: int, total_size: int, elapsed: float) -> DownloadProgress:
    speed = downloaded / elapsed if elapsed > 0 else 0
    remaining = total_size - downloaded if total_size > 0 else 0
    return DownloadProgress(
        bytes_downloaded=downloaded,
        total_bytes=total_size if total_size > 0 else downloaded,
        percentage=(downloaded / total_size * 100) if total_size > 0 else 0,
        speed_bps=speed,
        eta_seconds=remaining / speed if speed > 0 else 0,
    )


def format_progress(progress: DownloadProgress) -> str:
    """
    Format progress for display.

    Example:
        >>> progress = DownloadProgress(52428800, 104857600, 50.0, 1048576, 50)
        >>> print(format_progress(progress))
        50.0/100.0 MB (50.0%) at 1.0 MB/s ETA: 50s
    """
    mb_downloaded = progress.bytes_downloaded / 1024 / 1024
    mb_total = progress.total_bytes / 1024 / 1024
    speed_mbps = progress.speed_bps / 1024 / 1024

    if progress.percentage > 0:
        return (
            f"{mb_downloaded:.1f}/{mb_total:.1f} MB "
            f"({progress.percentage:.1f}%) "
            f"at {speed_mbps:.1f} MB/s "
            f"ETA: {progress.eta_seconds:.0f}s"
        )
    else:
        # Unknown total size
        return f"{mb_downloaded:.1f} MB at {speed_mbps:.1f} MB/s"
