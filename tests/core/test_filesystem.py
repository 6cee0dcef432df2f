"""
Unit tests for filesystem utilities.

Tests cover:
- Archive extraction and traversal protection
- Atomic writes
- Executable permission handling
"""

import os
import stat
from pathlib import Path
from unittest.mock import patch

import pytest

from reproto_launcher.core.exceptions import (
    ExtractionError,
    InsecureArchiveError,
    UnsupportedArchiveFormat,
)
from reproto_launcher.core.filesystem import (
    IS_WINDOWS,
    atomic_write,
    ensure_directory,
    extract_archive,
    is_relative_to,
    make_executable,
)
from tests.mocks import build_malicious_tar, build_release_archive


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def release_archive(tmp_path):
    """Create a release tar.gz archive holding the reproto executable."""
    archive_path = tmp_path / "reproto-v1.2.0-linux-x86_64.tar.gz"
    archive_path.write_bytes(build_release_archive("reproto", b"binary"))
    return archive_path


@pytest.fixture
def malicious_tar_archive(tmp_path):
    """Create a tar.gz archive with directory traversal attempt."""
    archive_path = tmp_path / "malicious.tar.gz"
    archive_path.write_bytes(build_malicious_tar())
    return archive_path


# ============================================================================
# Path Utilities Tests
# ============================================================================


class TestPathUtilities:
    """Tests for path utility functions."""

    def test_is_relative_to(self, tmp_path):
        assert is_relative_to(tmp_path / "a" / "b", tmp_path)
        assert is_relative_to(tmp_path, tmp_path)
        assert not is_relative_to(tmp_path.parent, tmp_path)

    def test_ensure_directory_idempotent(self, tmp_path):
        target = tmp_path / "x" / "y"

        assert ensure_directory(target) == target.resolve()
        assert ensure_directory(target) == target.resolve()
        assert target.is_dir()


# ============================================================================
# Archive Extraction Tests
# ============================================================================


class TestExtractArchive:
    """Tests for extract_archive."""

    def test_extract_tar_gz(self, release_archive, tmp_path):
        dest = tmp_path / ".bin"

        extract_archive(release_archive, dest)

        assert (dest / "reproto").read_bytes() == b"binary"

    def test_extract_overwrites_existing_binary(self, release_archive, tmp_path):
        """Test re-extraction replaces an older binary."""
        dest = tmp_path / ".bin"
        dest.mkdir()
        (dest / "reproto").write_bytes(b"old")

        extract_archive(release_archive, dest)

        assert (dest / "reproto").read_bytes() == b"binary"

    def test_missing_archive(self, tmp_path):
        with pytest.raises(ExtractionError, match="Archive not found"):
            extract_archive(tmp_path / "missing.tar.gz", tmp_path / "out")

    @pytest.mark.parametrize("name", ["reproto.rar", "reproto.zip", "reproto.tar.xz"])
    def test_unsupported_format(self, tmp_path, name):
        """Test only gzip tarballs are accepted."""
        archive_path = tmp_path / name
        archive_path.write_bytes(b"not a tarball")

        with pytest.raises(UnsupportedArchiveFormat):
            extract_archive(archive_path, tmp_path / "out")

    def test_corrupt_archive(self, tmp_path):
        """Test a truncated download surfaces as ExtractionError."""
        archive_path = tmp_path / "reproto.tar.gz"
        archive_path.write_bytes(build_release_archive()[:20])

        with pytest.raises(ExtractionError):
            extract_archive(archive_path, tmp_path / "out")

    def test_not_an_archive(self, tmp_path):
        archive_path = tmp_path / "reproto.tar.gz"
        archive_path.write_bytes(b"<html>Not Found</html>")

        with pytest.raises(ExtractionError):
            extract_archive(archive_path, tmp_path / "out")

    def test_traversal_blocked(self, malicious_tar_archive, tmp_path):
        dest = tmp_path / "a" / "b" / "out"

        with pytest.raises(InsecureArchiveError, match="directory traversal"):
            extract_archive(malicious_tar_archive, dest)

        assert not (tmp_path / "a" / "escape.txt").exists()

    def test_tgz_extension(self, tmp_path):
        archive_path = tmp_path / "reproto.tgz"
        archive_path.write_bytes(build_release_archive("reproto", b"binary"))

        extract_archive(archive_path, tmp_path / "out")

        assert (tmp_path / "out" / "reproto").read_bytes() == b"binary"

    def test_insecure_is_extraction_error(self):
        assert issubclass(InsecureArchiveError, ExtractionError)
        assert issubclass(UnsupportedArchiveFormat, ExtractionError)


# ============================================================================
# Safe File Operations Tests
# ============================================================================


class TestAtomicWrite:
    """Tests for atomic_write."""

    def test_write_text(self, tmp_path):
        target = tmp_path / "release"
        atomic_write(target, "v1.2.0\n")

        assert target.read_bytes() == b"v1.2.0\n"

    def test_write_bytes(self, tmp_path):
        target = tmp_path / "blob"
        atomic_write(target, b"\x00\x01")

        assert target.read_bytes() == b"\x00\x01"

    def test_replace_existing(self, tmp_path):
        target = tmp_path / "release"
        target.write_text("v1.0.0\n")

        atomic_write(target, "v2.0.0\n")

        assert target.read_text() == "v2.0.0\n"

    def test_failure_keeps_original_and_cleans_temp(self, tmp_path):
        target = tmp_path / "release"
        target.write_text("v1.0.0\n")

        with patch.object(Path, "replace", side_effect=OSError("disk full")):
            with pytest.raises(OSError, match="disk full"):
                atomic_write(target, "v2.0.0\n")

        assert target.read_text() == "v1.0.0\n"
        assert [p.name for p in tmp_path.iterdir()] == ["release"]


@pytest.mark.unix_only
@pytest.mark.skipif(IS_WINDOWS, reason="POSIX permission bits")
class TestMakeExecutable:
    def test_adds_execute_bits(self, tmp_path):
        target = tmp_path / "reproto"
        target.write_bytes(b"binary")
        os.chmod(target, 0o644)

        make_executable(target)

        mode = target.stat().st_mode
        assert mode & stat.S_IXUSR
        assert mode & stat.S_IXGRP
        assert mode & stat.S_IXOTH
        assert mode & stat.S_IRUSR

    def test_missing_file(self, tmp_path):
        with pytest.raises(OSError):
            make_executable(tmp_path / "missing")
