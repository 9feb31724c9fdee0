"""
CLI acquisition, resolution and verification.
"""

from nucel_setup.install.direct import DirectDownloadStrategy
from nucel_setup.install.npm import PackageManagerStrategy
from nucel_setup.install.reporter import UNKNOWN_VERSION, extract_version
from nucel_setup.install.resolver import locate, search_directories
from nucel_setup.install.runner import SetupResult, SetupRunner, cleanup, run_setup
from nucel_setup.install.strategies import (
    AcquisitionResult,
    AcquisitionStrategy,
    acquire_with_fallback,
    build_strategies,
)
from nucel_setup.install.verifier import verify_installation

__all__ = [
    "DirectDownloadStrategy",
    "PackageManagerStrategy",
    "AcquisitionResult",
    "AcquisitionStrategy",
    "acquire_with_fallback",
    "build_strategies",
    "locate",
    "search_directories",
    "verify_installation",
    "UNKNOWN_VERSION",
    "extract_version",
    "SetupResult",
    "SetupRunner",
    "run_setup",
    "cleanup",
]
