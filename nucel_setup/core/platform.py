"""
Platform detection for nucel-setup.

Maps the host operating system and CPU architecture onto the release naming
used by the Nucel CLI: archive format and executable file name.

Usage:
    from nucel_setup.core.platform import detect_platform

    platform_info = detect_platform()
    print(f"Archive: {platform_info.archive_extension}")
    print(f"Platform string: {platform_info.platform_string()}")
"""

import functools
import platform
from dataclasses import dataclass
from typing import Tuple

from nucel_setup.core.exceptions import UnsupportedPlatformError

# Release archive naming per operating system
_OS_LAYOUT = {
    "linux": (".tar.gz", ""),
    "darwin": (".tar.gz", ""),
    "windows": (".zip", ".exe"),
}

_OS_ALIASES = {
    "linux": "linux",
    "darwin": "darwin",
    "macos": "darwin",
    "windows": "windows",
    "win32": "windows",
}

_ARCH_ALIASES = {
    "x86_64": "x64",
    "amd64": "x64",
    "x64": "x64",
    "aarch64": "arm64",
    "arm64": "arm64",
}

# Release assets and cache keys name Windows after its Node.js platform id
_RELEASE_OS = {"windows": "win32"}


@dataclass(frozen=True)
class PlatformInfo:
    """
    Platform facts needed to download and locate the CLI.

    Attributes:
        os: Operating system ('linux', 'darwin', 'windows')
        arch: CPU architecture ('x64', 'arm64')
        archive_extension: Release archive suffix ('.tar.gz', '.zip')
        executable_name: Canonical executable file name ('nucel', 'nucel.exe')
    """

    os: str
    arch: str
    archive_extension: str
    executable_name: str

    @property
    def is_windows(self) -> bool:
        return self.os == "windows"

    @property
    def executable_names(self) -> Tuple[str, ...]:
        """
        All file names the executable may carry on this platform.

        npm installs a ``.cmd`` shim on Windows instead of an ``.exe``.

        Example:
            >>> describe_platform("Windows", "AMD64").executable_names
            ('nucel.exe', 'nucel.cmd')
        """
        if self.is_windows:
            stem = self.executable_name[: -len(".exe")]
            return (self.executable_name, f"{stem}.cmd")
        return (self.executable_name,)

    @property
    def release_os(self) -> str:
        """
        OS token used in release asset names and cache keys.

        Example:
            >>> describe_platform("Windows", "AMD64").release_os
            'win32'
        """
        return _RELEASE_OS.get(self.os, self.os)

    def platform_string(self) -> str:
        """
        Get canonical platform string (e.g., 'linux-x64', 'darwin-arm64').

        Example:
            >>> describe_platform("Linux", "x86_64").platform_string()
            'linux-x64'
        """
        return f"{self.os}-{self.arch}"

    def __str__(self) -> str:
        return self.platform_string()


def describe_platform(system: str, machine: str, tool: str = "nucel") -> PlatformInfo:
    """
    Build PlatformInfo from an OS/architecture pair.

    Pure function: the same inputs always give the same result.

    Args:
        system: OS name as reported by platform.system() or sys.platform
        machine: Machine name as reported by platform.machine()
        tool: Tool name used as executable stem

    Returns:
        PlatformInfo for the pair

    Raises:
        UnsupportedPlatformError: If the OS or architecture is not supported

    Example:
        >>> describe_platform("Linux", "x86_64")
        PlatformInfo(os='linux', arch='x64', archive_extension='.tar.gz', executable_name='nucel')
    """
    os_name = _OS_ALIASES.get((system or "").lower())
    if os_name is None:
        raise UnsupportedPlatformError("operating system", system)

    arch = _ARCH_ALIASES.get((machine or "").lower())
    if arch is None:
        raise UnsupportedPlatformError("architecture", machine)

    archive_extension, exe_suffix = _OS_LAYOUT[os_name]
    return PlatformInfo(
        os=os_name,
        arch=arch,
        archive_extension=archive_extension,
        executable_name=f"{tool}{exe_suffix}",
    )


@functools.lru_cache(maxsize=None)
def detect_platform(tool: str = "nucel") -> PlatformInfo:
    """
    Detect current platform information.

    This function is cached - it only runs detection once per process.

    Raises:
        UnsupportedPlatformError: If the host is not supported
    """
    return describe_platform(platform.system(), platform.machine(), tool)


def get_supported_platforms() -> list[str]:
    """
    Get list of all supported platform strings.

    Example:
        >>> get_supported_platforms()[:2]
        ['linux-x64', 'linux-arm64']
    """
    return [
        f"{os_name}-{arch}"
        for os_name in _OS_LAYOUT
        for arch in ("x64", "arm64")
    ]


def clear_platform_cache():
    """
    Clear the platform detection cache.

    Forces the next call to detect_platform() to re-detect.
    """
    detect_platform.cache_clear()


__all__ = [
    "PlatformInfo",
    "describe_platform",
    "detect_platform",
    "get_supported_platforms",
    "clear_platform_cache",
]
