"""
Pytest configuration and shared fixtures for reproto launcher tests.
"""

from datetime import timedelta
from pathlib import Path

import pytest

from reproto_launcher.core.config import LauncherConfig


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "unix_only: marks tests that rely on POSIX file permissions"
    )


# ============================================================================
# Shared Test Fixtures
# ============================================================================


@pytest.fixture
def cache_root(tmp_path: Path) -> Path:
    """Cache root that does not exist yet."""
    return tmp_path / ".reproto-cache"


@pytest.fixture
def launcher_config(cache_root: Path) -> LauncherConfig:
    """Configuration pointing at a temporary cache, without locking."""
    return LauncherConfig(
        cache_dir=cache_root,
        staleness_threshold=timedelta(hours=1),
        use_lock=False,
    )


@pytest.fixture
def isolated_home(tmp_path: Path, monkeypatch) -> Path:
    """Create isolated home directory for tests."""
    fake_home = tmp_path / "home"
    fake_home.mkdir()

    monkeypatch.setenv("HOME", str(fake_home))
    monkeypatch.setenv("USERPROFILE", str(fake_home))

    return fake_home
