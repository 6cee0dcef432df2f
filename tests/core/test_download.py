"""
Unit tests for download module.

Tests download functionality with mocked network requests.
"""

import pytest
import requests
import responses
from unittest.mock import patch

from reproto_launcher.core.download import (
    DownloadProgress,
    download_file,
    format_progress,
)
from reproto_launcher.core.exceptions import DownloadError

ARTIFACT_URL = (
    "https://github.com/reproto/reproto/releases/download/v1.2.0/"
    "reproto-v1.2.0-linux-x86_64.tar.gz"
)


class TestDownloadFile:
    """Test download_file function."""

    @responses.activate
    def test_download_simple_file(self, tmp_path):
        """Test downloading a file."""
        content = b"archive content"
        responses.add(responses.GET, ARTIFACT_URL, body=content, status=200)

        dest = tmp_path / "reproto.tar.gz"
        result = download_file(ARTIFACT_URL, dest)

        assert result == dest
        assert dest.read_bytes() == content
        assert not (tmp_path / "reproto.tar.gz.part").exists()

    @responses.activate
    def test_creates_parent_directory(self, tmp_path):
        responses.add(responses.GET, ARTIFACT_URL, body=b"data")

        dest = tmp_path / "nested" / "dir" / "reproto.tar.gz"
        download_file(ARTIFACT_URL, dest)

        assert dest.exists()

    @responses.activate
    def test_follows_redirect(self, tmp_path):
        """Test the release asset redirect is followed."""
        asset_url = "https://objects.example.com/asset"
        responses.add(
            responses.GET, ARTIFACT_URL, status=302, headers={"Location": asset_url}
        )
        responses.add(responses.GET, asset_url, body=b"redirected")

        dest = tmp_path / "reproto.tar.gz"
        download_file(ARTIFACT_URL, dest)

        assert dest.read_bytes() == b"redirected"

    @responses.activate
    def test_download_with_progress(self, tmp_path):
        """Test download with progress callback."""
        content = b"x" * 10000
        responses.add(
            responses.GET,
            ARTIFACT_URL,
            body=content,
            headers={"content-length": str(len(content))},
        )

        progress_updates = []
        download_file(
            ARTIFACT_URL, tmp_path / "out.tar.gz", progress_callback=progress_updates.append
        )

        assert progress_updates
        assert progress_updates[-1].bytes_downloaded == len(content)
        assert progress_updates[-1].percentage == 100

    @responses.activate
    def test_http_error_leaves_no_file(self, tmp_path):
        """Test a 404 raises DownloadError and leaves nothing behind."""
        responses.add(responses.GET, ARTIFACT_URL, status=404)

        dest = tmp_path / "reproto.tar.gz"
        with pytest.raises(DownloadError, match="Failed to download"):
            download_file(ARTIFACT_URL, dest)

        assert not dest.exists()
        assert not (tmp_path / "reproto.tar.gz.part").exists()

    @responses.activate
    def test_connection_error(self, tmp_path):
        responses.add(
            responses.GET,
            ARTIFACT_URL,
            body=requests.exceptions.ConnectionError("reset"),
        )

        with pytest.raises(DownloadError, match="reset"):
            download_file(ARTIFACT_URL, tmp_path / "reproto.tar.gz")

    @responses.activate
    def test_interrupted_stream_keeps_previous_file(self, tmp_path):
        """Test a failure mid-body never replaces an existing archive."""
        responses.add(responses.GET, ARTIFACT_URL, body=b"new content")
        dest = tmp_path / "reproto.tar.gz"
        dest.write_bytes(b"old content")

        with patch(
            "reproto_launcher.core.download._stream_to_file",
            side_effect=requests.exceptions.ChunkedEncodingError("truncated"),
        ):
            with pytest.raises(DownloadError):
                download_file(ARTIFACT_URL, dest)

        assert dest.read_bytes() == b"old content"
        assert not (tmp_path / "reproto.tar.gz.part").exists()

    def test_empty_url(self, tmp_path):
        with pytest.raises(ValueError, match="URL cannot be empty"):
            download_file("", tmp_path / "out")


class TestFormatProgress:
    """Test format_progress function."""

    def test_known_size(self):
        progress = DownloadProgress(52428800, 104857600, 50.0, 1048576, 50)
        assert format_progress(progress) == "50.0/100.0 MB (50.0%) at 1.0 MB/s ETA: 50s"

    def test_unknown_size(self):
        progress = DownloadProgress(1048576, 1048576, 0, 1048576, 0)
        assert format_progress(progress) == "1.0 MB at 1.0 MB/s"

    def test_str(self):
        progress = DownloadProgress(1048576, 1048576, 0, 1048576, 0)
        assert str(progress) == format_progress(progress)
