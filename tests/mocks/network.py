"""
Mock network operations for testing.

This module provides a mock release oracle and a mock downloader to enable
testing of the cache manager without actual network access.
"""

from pathlib import Path
from typing import Dict, List, Optional


class MockReleaseOracle:
    """Mock release oracle returning a fixed tag."""

    def __init__(self, version: Optional[str] = None, error: Optional[Exception] = None):
        """
        Initialize mock oracle.

        Args:
            version: Tag returned by latest()
            error: Exception raised by latest() instead of returning
        """
        self.version = version
        self.error = error
        self.calls = 0

    def latest(self) -> str:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.version


class MockDownloader:
    """Mock artifact downloader writing canned archives to disk."""

    def __init__(self):
        """Initialize mock downloader with empty response map."""
        self.mock_responses: Dict[str, bytes] = {}
        self.request_history: List[Dict] = []
        self.error: Optional[Exception] = None

    def add_mock_response(self, url: str, content: bytes):
        """
        Add mock response for URL.

        Args:
            url: URL to mock
            content: Archive bytes written to the destination
        """
        self.mock_responses[url] = content

    def __call__(self, url: str, destination: Path) -> Path:
        # Record request for verification
        self.request_history.append({"url": url, "destination": Path(destination)})

        if self.error is not None:
            raise self.error
        if url not in self.mock_responses:
            raise AssertionError(f"Unexpected download: {url}")

        Path(destination).write_bytes(self.mock_responses[url])
        return Path(destination)

    @property
    def urls(self) -> List[str]:
        return [request["url"] for request in self.request_history]

    def clear_history(self):
        """Clear request history."""
        self.request_history.clear()


class FrozenClock:
    """Controllable wall clock in epoch seconds."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds
