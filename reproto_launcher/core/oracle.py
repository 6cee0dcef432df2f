"""
Upstream release lookup.

Queries the GitHub releases API for the most recently published reproto
release. A single request is made per lookup; callers that need resilience
retry at a higher level.
"""

import logging
from typing import Optional

import requests
from requests.exceptions import RequestException

from reproto_launcher.core.exceptions import NetworkError, ProtocolError

logger = logging.getLogger(__name__)

DEFAULT_REPOSITORY = "reproto/reproto"
DEFAULT_API_URL = "https://api.github.com"
USER_AGENT = "Reproto-CLI"


class ReleaseOracle:
    """
    Resolves the latest published release tag of a repository.

    Attributes:
        repository: Repository identifier ('owner/name')
        api_url: Base URL of the releases API
        timeout: Request timeout in seconds
    """

    def __init__(
        self,
        repository: str = DEFAULT_REPOSITORY,
        api_url: str = DEFAULT_API_URL,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        self.repository = repository
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()

    @property
    def releases_url(self) -> str:
        return f"{self.api_url}/repos/{self.repository}/releases"

    def latest(self) -> str:
        """
        Get the tag of the most recent release.

        Returns:
            Trimmed tag name of the first entry in the releases list

        Raises:
            NetworkError: On transport failure, timeout, or non-success status
            ProtocolError: If the response is not a list of release objects
                with a tag name

        Example:
            >>> ReleaseOracle().latest()
            '0.3.36'
        """
        url = self.releases_url
        logger.debug(f"Querying latest release from {url}")

        try:
            response = self._session.get(
                url,
                headers={
                    "User-Agent": USER_AGENT,
                    "Accept": "application/vnd.github+json",
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
        except RequestException as e:
            raise NetworkError(f"Failed to query releases of {self.repository}: {e}") from e

        try:
            releases = response.json()
        except ValueError as e:
            raise ProtocolError(f"Release index at {url} is not valid JSON: {e}") from e

        if not isinstance(releases, list) or not releases:
            raise ProtocolError(f"Release index at {url} returned no releases")

        first = releases[0]
        if not isinstance(first, dict):
            raise ProtocolError(f"Unexpected release entry at {url}: {first!r}")

        tag = first.get("tag_name")
        if not isinstance(tag, str) or not tag.strip():
            raise ProtocolError(f"Latest release at {url} has no tag_name")

        tag = tag.strip()
        logger.debug(f"Latest upstream release: {tag}")
        return tag
