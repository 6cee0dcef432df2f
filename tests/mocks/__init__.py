"""
Mock implementations for testing reproto launcher components.

This package provides stand-ins for the release index, the artifact download
and release archives so the cache state machine can be exercised without
network access.
"""

from .archives import build_malicious_tar, build_release_archive
from .network import FrozenClock, MockDownloader, MockReleaseOracle

__all__ = [
    "FrozenClock",
    "MockDownloader",
    "MockReleaseOracle",
    "build_malicious_tar",
    "build_release_archive",
]
