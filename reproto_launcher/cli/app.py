"""
Command-line entry point of the reproto launcher.

The launcher owns no flags: every argument after the program name belongs to
reproto. Diagnostic output of the launcher itself is controlled with the
``REPROTO_LOG`` environment variable.

Usage:
    reproto [reproto arguments...]
    REPROTO_LOG=debug reproto build
"""

import logging
import os
import sys
from typing import List, Mapping, Optional

from reproto_launcher.core.cache import CacheManager
from reproto_launcher.core.config import load_config
from reproto_launcher.core.exceptions import LauncherError
from reproto_launcher.launcher import run

logger = logging.getLogger(__name__)

ENV_LOG = "REPROTO_LOG"
DEFAULT_LOG_LEVEL = logging.WARNING

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


def _configure_logging(environ: Mapping[str, str]) -> None:
    """
    Configure logging from ``REPROTO_LOG``.

    Unknown values fall back to the default level so a typo never prevents
    reproto from running.
    """
    name = environ.get(ENV_LOG, "").strip().lower()
    level = LOG_LEVELS.get(name, DEFAULT_LOG_LEVEL)

    if level == logging.DEBUG:
        format_str = "%(levelname)s [%(name)s] %(message)s"
    else:
        format_str = "reproto: %(message)s"

    logging.basicConfig(
        level=level,
        format=format_str,
        stream=sys.stderr,
        force=True,  # Reconfigure if already configured
    )

    if name and name not in LOG_LEVELS:
        logger.warning(f"Ignoring unknown {ENV_LOG} level: {name}")


def main(argv: Optional[List[str]] = None) -> int:
    """
    Ensure the reproto binary is available and run it.

    Args:
        argv: Arguments to forward (uses ``sys.argv[1:]`` if None)

    Returns:
        Exit code of reproto, 1 on launcher errors, 130 on interrupt
    """
    if argv is None:
        argv = sys.argv[1:]

    _configure_logging(os.environ)

    try:
        config = load_config()
        binary = CacheManager(config).ensure_binary_available()
    except KeyboardInterrupt:
        logger.info("Operation cancelled by user")
        return 130  # Standard exit code for SIGINT
    except LauncherError as e:
        print(f"reproto: error: {e}", file=sys.stderr)
        return 1

    try:
        return run(binary, argv)
    except LauncherError as e:
        print(f"reproto: error: {e}", file=sys.stderr)
        return 1


def entry_point() -> None:
    """Console script entry point."""
    sys.exit(main())
