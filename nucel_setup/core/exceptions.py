"""
Centralized exception hierarchy for nucel-setup.

Only InputError, UnsupportedPlatformError, AcquisitionError and
VerificationError abort a run. CacheError and ReportingError are recovered
where they occur.
"""

from pathlib import Path
from typing import Optional, Union


# ============================================================================
# Base Exceptions
# ============================================================================


class NucelSetupError(Exception):
    """Base exception for all nucel-setup errors."""

    pass


class ConfigError(NucelSetupError):
    """Settings file could not be parsed or contains unknown keys."""

    pass


# ============================================================================
# Input and Platform Exceptions
# ============================================================================


class InputError(NucelSetupError):
    """Malformed or missing action input (e.g. version spec)."""

    pass


class UnsupportedPlatformError(NucelSetupError):
    """Host operating system or architecture has no release mapping."""

    def __init__(self, kind: str, value: str):
        self.kind = kind
        self.value = value
        super().__init__(f"Unsupported {kind}: {value}")


# ============================================================================
# Cache Exceptions
# ============================================================================


class CacheError(NucelSetupError):
    """Cache transport failure during restore or save."""

    pass


# ============================================================================
# Installation Exceptions
# ============================================================================


class AcquisitionError(NucelSetupError):
    """
    Download, extraction or package install failed, or the executable could
    not be found afterwards.

    The message always starts with "Failed to install <tool> CLI:" so that
    downstream tooling can match on it.
    """

    def __init__(self, tool: str, detail: str, target: Optional[str] = None):
        self.tool = tool
        self.detail = detail
        self.target = target
        super().__init__(f"Failed to install {tool} CLI: {detail}")


class VerificationError(NucelSetupError):
    """Executable exists but does not pass the version probe."""

    def __init__(self, tool: str, path: Union[str, Path]):
        self.tool = tool
        self.path = Path(path)
        super().__init__(
            f"{tool} CLI installation verification failed: "
            f"'{self.path} --version' did not exit with status 0"
        )


class ReportingError(NucelSetupError):
    """Version string could not be extracted from the probe output."""

    pass


__all__ = [
    "NucelSetupError",
    "ConfigError",
    "InputError",
    "UnsupportedPlatformError",
    "CacheError",
    "AcquisitionError",
    "VerificationError",
    "ReportingError",
]
