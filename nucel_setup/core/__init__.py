"""
Core functionality for nucel-setup.

This package contains the foundational modules that other components depend on.
"""

from .exceptions import (
    NucelSetupError,
    ConfigError,
    InputError,
    UnsupportedPlatformError,
    CacheError,
    AcquisitionError,
    VerificationError,
    ReportingError,
)

from .platform import (
    PlatformInfo,
    describe_platform,
    detect_platform,
    get_supported_platforms,
    clear_platform_cache,
)

from .version import (
    LATEST,
    validate_version_spec,
    cache_key,
)

from .config import (
    SetupInputs,
    SetupSettings,
    HostPaths,
    load_settings,
)

__all__ = [
    "NucelSetupError",
    "ConfigError",
    "InputError",
    "UnsupportedPlatformError",
    "CacheError",
    "AcquisitionError",
    "VerificationError",
    "ReportingError",
    "PlatformInfo",
    "describe_platform",
    "detect_platform",
    "get_supported_platforms",
    "clear_platform_cache",
    "LATEST",
    "validate_version_spec",
    "cache_key",
    "SetupInputs",
    "SetupSettings",
    "HostPaths",
    "load_settings",
]
