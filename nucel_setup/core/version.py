"""
Version spec validation and cache key computation.
"""

import re
from typing import Any

from nucel_setup.core.exceptions import InputError
from nucel_setup.core.platform import PlatformInfo

LATEST = "latest"

SEMVER_PATTERN = re.compile(r"^\d+\.\d+\.\d+(-[\w.\-]+)?$")


def validate_version_spec(value: Any) -> str:
    """
    Validate a requested version.

    Accepts the literal 'latest' or MAJOR.MINOR.PATCH[-PRERELEASE].
    No I/O is performed.

    Args:
        value: Raw input value

    Returns:
        The validated version spec

    Raises:
        InputError: If value is missing or malformed

    Example:
        >>> validate_version_spec("1.2.3-beta.1")
        '1.2.3-beta.1'
    """
    if not value or not isinstance(value, str):
        raise InputError("version input is required and must be a string")

    if value != LATEST and not SEMVER_PATTERN.match(value):
        raise InputError(
            'version must be "latest" or a valid semantic version (e.g., "1.0.0")'
        )

    return value


def cache_key(tool: str, version: str, platform: PlatformInfo) -> str:
    """
    Compute the cache key for an installation.

    Example:
        >>> cache_key("nucel", "1.2.3", describe_platform("Linux", "x86_64"))
        'nucel-cli-1.2.3-linux-x64'
    """
    return f"{tool}-cli-{version}-{platform.release_os}-{platform.arch}"


__all__ = ["LATEST", "SEMVER_PATTERN", "validate_version_spec", "cache_key"]
