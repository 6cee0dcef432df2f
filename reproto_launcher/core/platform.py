"""
Platform detection for the reproto launcher.

This module maps the running operating system and CPU architecture to the
tags used in upstream reproto release artifact names
(e.g. ``reproto-v1.2.0-linux-x86_64.tar.gz``).

Usage:
    from reproto_launcher.core.platform import resolve

    info = resolve()
    print(f"OS: {info.os}")
    print(f"Architecture: {info.arch}")
    print(f"Platform string: {info.platform_string()}")
"""

import platform
from dataclasses import dataclass

from reproto_launcher.core.exceptions import UnsupportedPlatformError

# platform.system() (lowercased) -> upstream OS tag
OS_TAGS = {
    "linux": "linux",
    "darwin": "osx",
    "windows": "windows",
}

# platform.machine() (lowercased) -> upstream architecture tag
ARCH_TAGS = {
    "x86_64": "x86_64",
    "amd64": "x86_64",
    "x64": "x86_64",
    "aarch64": "aarch64",
    "arm64": "aarch64",
}


@dataclass(frozen=True)
class PlatformInfo:
    """
    Platform identifier used to select release artifacts.

    Attributes:
        os: Upstream OS tag ('linux', 'osx', 'windows')
        arch: Upstream architecture tag ('x86_64', 'aarch64')
    """

    os: str
    arch: str

    def platform_string(self) -> str:
        """
        Get canonical platform string (e.g., 'linux-x86_64').

        Example:
            >>> PlatformInfo('linux', 'x86_64').platform_string()
            'linux-x86_64'
        """
        return f"{self.os}-{self.arch}"

    def executable_name(self, base_name: str) -> str:
        """
        Get the file name of an executable on this platform.

        Args:
            base_name: Executable name without extension (e.g., 'reproto')

        Returns:
            ``base_name`` with ``.exe`` appended on Windows
        """
        if self.os == "windows":
            return f"{base_name}.exe"
        return base_name

    def __str__(self) -> str:
        return self.platform_string()


def resolve_os(system: str) -> str:
    """
    Map a raw operating system name to its upstream tag.

    Args:
        system: Value as reported by ``platform.system()``

    Raises:
        UnsupportedPlatformError: If the OS has no published artifact
    """
    tag = OS_TAGS.get(system.lower())
    if tag is None:
        raise UnsupportedPlatformError("operating system", system)
    return tag


def resolve_arch(machine: str) -> str:
    """
    Map a raw CPU architecture name to its upstream tag.

    Args:
        machine: Value as reported by ``platform.machine()``

    Raises:
        UnsupportedPlatformError: If the architecture has no published artifact
    """
    tag = ARCH_TAGS.get(machine.lower())
    if tag is None:
        raise UnsupportedPlatformError("architecture", machine)
    return tag


def resolve() -> PlatformInfo:
    """
    Resolve the current platform.

    Pure function of the execution environment; no side effects.

    Returns:
        PlatformInfo with upstream OS and architecture tags

    Raises:
        UnsupportedPlatformError: If the OS or architecture is not supported

    Example:
        >>> info = resolve()
        >>> print(f"Running on {info.platform_string()}")
        Running on linux-x86_64
    """
    arch = resolve_arch(platform.machine())
    os_tag = resolve_os(platform.system())
    return PlatformInfo(os=os_tag, arch=arch)


def get_supported_platforms() -> list[str]:
    """
    Get list of all supported platform strings.

    Example:
        >>> 'linux-x86_64' in get_supported_platforms()
        True
    """
    return [
        f"{os_tag}-{arch_tag}"
        for os_tag in sorted(set(OS_TAGS.values()))
        for arch_tag in sorted(set(ARCH_TAGS.values()))
    ]


__all__ = [
    "PlatformInfo",
    "resolve",
    "resolve_os",
    "resolve_arch",
    "get_supported_platforms",
]
