"""Configuration for the reproto launcher.

Settings come from three layers, later layers overriding earlier ones:

1. Built-in defaults
2. ``config.yaml`` in the cache directory (optional)
3. ``REPROTO_*`` environment variables

The launcher forwards every command-line argument to reproto, so it has no
flags of its own; environment variables are the per-invocation override.

Example ``config.yaml``::

    check_interval: 3600   # seconds between upstream checks, 0 = always
    timeout: 15
    repository: reproto/reproto
"""

import logging
import os
from dataclasses import dataclass, field, replace
from datetime import timedelta
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from reproto_launcher.core.directory import get_cache_dir
from reproto_launcher.core.exceptions import ConfigError
from reproto_launcher.core.oracle import DEFAULT_API_URL, DEFAULT_REPOSITORY

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "config.yaml"
DEFAULT_DOWNLOAD_URL = "https://github.com"
DEFAULT_BASE_NAME = "reproto"
DEFAULT_STALENESS_THRESHOLD = timedelta(days=1)
DEFAULT_TIMEOUT = 30.0
DEFAULT_LOCK_TIMEOUT = 300.0

ENV_CACHE_DIR = "REPROTO_CACHE_DIR"
ENV_REPOSITORY = "REPROTO_REPOSITORY"
ENV_API_URL = "REPROTO_API_URL"
ENV_DOWNLOAD_URL = "REPROTO_DOWNLOAD_URL"
ENV_CHECK_INTERVAL = "REPROTO_CHECK_INTERVAL"
ENV_TIMEOUT = "REPROTO_TIMEOUT"
ENV_NO_LOCK = "REPROTO_NO_LOCK"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class LauncherConfig:
    """Complete launcher configuration."""

    cache_dir: Path = field(default_factory=get_cache_dir)
    repository: str = DEFAULT_REPOSITORY
    base_name: str = DEFAULT_BASE_NAME
    api_url: str = DEFAULT_API_URL
    download_url: str = DEFAULT_DOWNLOAD_URL
    # Zero means every invocation checks upstream
    staleness_threshold: timedelta = DEFAULT_STALENESS_THRESHOLD
    timeout: float = DEFAULT_TIMEOUT
    use_lock: bool = True
    lock_timeout: float = DEFAULT_LOCK_TIMEOUT


def load_config(
    environ: Optional[Mapping[str, str]] = None,
    config_file: Optional[Path] = None,
) -> LauncherConfig:
    """
    Load launcher configuration from defaults, YAML file and environment.

    Args:
        environ: Environment mapping (defaults to ``os.environ``)
        config_file: YAML file to read (defaults to ``<cache_dir>/config.yaml``)

    Returns:
        Resolved configuration

    Raises:
        ConfigError: If the YAML file or any value is invalid
    """
    if environ is None:
        environ = os.environ

    config = LauncherConfig()
    if environ.get(ENV_CACHE_DIR):
        config.cache_dir = Path(environ[ENV_CACHE_DIR]).expanduser()

    if config_file is None:
        config_file = config.cache_dir / CONFIG_FILE_NAME

    config = _apply_file(config, _load_yaml(Path(config_file)))
    return _apply_environment(config, environ)


def _load_yaml(config_file: Path) -> Dict[str, Any]:
    """Read the YAML config file; a missing file yields an empty mapping."""
    if not config_file.exists():
        logger.debug(f"Config file not found (optional): {config_file}")
        return {}

    logger.debug(f"Loading configuration from {config_file}")
    try:
        with open(config_file, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_file}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read {config_file}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{config_file} must contain a mapping at the top level")
    return data


def _apply_file(config: LauncherConfig, data: Dict[str, Any]) -> LauncherConfig:
    """Apply values from the parsed YAML file."""
    known = {
        "cache_dir",
        "repository",
        "base_name",
        "api_url",
        "download_url",
        "check_interval",
        "timeout",
        "lock",
        "lock_timeout",
    }
    for key in sorted(set(data) - known):
        logger.warning(f"Ignoring unknown configuration key: {key}")

    changes: Dict[str, Any] = {}
    if "cache_dir" in data:
        changes["cache_dir"] = Path(str(data["cache_dir"])).expanduser()
    for key in ("repository", "base_name", "api_url", "download_url"):
        if key in data:
            changes[key] = _parse_text(key, data[key])
    if "check_interval" in data:
        changes["staleness_threshold"] = timedelta(
            seconds=_parse_seconds("check_interval", data["check_interval"])
        )
    if "timeout" in data:
        changes["timeout"] = _parse_seconds("timeout", data["timeout"], positive=True)
    if "lock" in data:
        if not isinstance(data["lock"], bool):
            raise ConfigError(f"lock must be true or false, got {data['lock']!r}")
        changes["use_lock"] = data["lock"]
    if "lock_timeout" in data:
        changes["lock_timeout"] = _parse_seconds("lock_timeout", data["lock_timeout"])

    return replace(config, **changes)


def _apply_environment(
    config: LauncherConfig, environ: Mapping[str, str]
) -> LauncherConfig:
    """Apply ``REPROTO_*`` environment overrides."""
    changes: Dict[str, Any] = {}
    if environ.get(ENV_CACHE_DIR):
        changes["cache_dir"] = Path(environ[ENV_CACHE_DIR]).expanduser()
    if environ.get(ENV_REPOSITORY):
        changes["repository"] = environ[ENV_REPOSITORY].strip()
    if environ.get(ENV_API_URL):
        changes["api_url"] = environ[ENV_API_URL].strip()
    if environ.get(ENV_DOWNLOAD_URL):
        changes["download_url"] = environ[ENV_DOWNLOAD_URL].strip()
    if environ.get(ENV_CHECK_INTERVAL):
        changes["staleness_threshold"] = timedelta(
            seconds=_parse_seconds(ENV_CHECK_INTERVAL, environ[ENV_CHECK_INTERVAL])
        )
    if environ.get(ENV_TIMEOUT):
        changes["timeout"] = _parse_seconds(
            ENV_TIMEOUT, environ[ENV_TIMEOUT], positive=True
        )
    if environ.get(ENV_NO_LOCK, "").strip().lower() in _TRUTHY:
        changes["use_lock"] = False

    return replace(config, **changes)


def _parse_text(name: str, value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"{name} must be a non-empty string, got {value!r}")
    return value.strip()


def _parse_seconds(name: str, value: Any, positive: bool = False) -> float:
    """Parse a duration in seconds from a number or numeric string."""
    if isinstance(value, bool):
        raise ConfigError(f"{name} must be a number of seconds, got {value!r}")
    try:
        seconds = float(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{name} must be a number of seconds, got {value!r}") from e

    if seconds != seconds or seconds in (float("inf"), float("-inf")):
        raise ConfigError(f"{name} must be finite, got {value!r}")
    if seconds < 0 or (positive and seconds == 0):
        qualifier = "positive" if positive else "non-negative"
        raise ConfigError(f"{name} must be {qualifier}, got {value!r}")
    return seconds
