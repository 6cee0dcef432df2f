"""
Process launcher for the cached reproto binary.

The child inherits the launcher's standard streams, working directory and
environment, so output is streamed through unbuffered and reproto behaves
exactly as if it had been started directly.
"""

import logging
import os
import subprocess
from pathlib import Path
from typing import Mapping, Optional, Sequence

from reproto_launcher.core.exceptions import SpawnError

logger = logging.getLogger(__name__)


def run(
    binary_path: Path,
    args: Sequence[str],
    cwd: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> int:
    """
    Run the binary with the given arguments and wait for it to exit.

    Args:
        binary_path: Executable to start
        args: Arguments forwarded verbatim
        cwd: Working directory (defaults to the current one)
        env: Environment (defaults to the current one)

    Returns:
        Exit code of the child process

    Raises:
        SpawnError: If the process cannot be started

    Example:
        >>> run(Path("~/.reproto-cache/.bin/reproto").expanduser(), ["--help"])
        0
    """
    command = [os.fspath(binary_path), *args]
    logger.debug(f"Running: {command}")

    try:
        process = subprocess.Popen(
            command,
            cwd=cwd,
            env=dict(env) if env is not None else None,
        )
    except OSError as e:
        raise SpawnError(f"Failed to start {binary_path}: {e}") from e

    try:
        return process.wait()
    except KeyboardInterrupt:
        # The terminal already delivered SIGINT to the child as well
        logger.debug("Interrupted, waiting for child to exit")
        return process.wait()
