"""
CLI setup pipeline.

Validating -> CacheProbe -> (hit: Verifying | miss: Acquiring) -> Verifying
-> Reporting -> Done. Every step runs sequentially; the cache probe finishes
before acquisition starts and verification happens before anything is cached.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from nucel_setup.cache.adapter import CacheAdapter, teardown_staging
from nucel_setup.cache.store import LocalCacheStore
from nucel_setup.core.config import (
    HostPaths,
    SetupInputs,
    SetupSettings,
    cache_root,
    staging_dir,
)
from nucel_setup.core.platform import PlatformInfo, detect_platform
from nucel_setup.core.version import cache_key, validate_version_spec
from nucel_setup.install.reporter import extract_version
from nucel_setup.install.resolver import locate
from nucel_setup.install.strategies import (
    AcquisitionResult,
    AcquisitionStrategy,
    acquire_with_fallback,
    build_strategies,
)
from nucel_setup.install.verifier import verify_installation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SetupResult:
    """Outcome handed to the output layer."""

    version: str
    path: Path
    was_from_cache: bool

    @property
    def outputs(self) -> dict:
        """Action outputs keyed by output name."""
        return {"cli-version": self.version, "cli-path": str(self.path)}


class SetupRunner:
    """
    Obtain, verify, cache and report the CLI for one run.

    Example:
        >>> runner = SetupRunner(SetupSettings(), detect_platform(), HostPaths.capture())
        >>> result = runner.run(SetupInputs(version="latest"))
        >>> print(result.version, result.path)
    """

    def __init__(
        self,
        settings: SetupSettings,
        platform: PlatformInfo,
        host: HostPaths,
        strategies: Optional[Sequence[AcquisitionStrategy]] = None,
        cache: Optional[CacheAdapter] = None,
    ):
        """
        Initialize runner.

        Args:
            settings: Tool settings
            platform: Platform description, captured once per run
            host: Host paths, captured once per run
            strategies: Acquisition strategies in priority order
                (default: built from settings.strategies)
            cache: Cache adapter (default: LocalCacheStore under cache_root)
        """
        self.settings = settings
        self.platform = platform
        self.host = host
        self.strategies = strategies
        self.cache = cache or CacheAdapter(
            LocalCacheStore(cache_root(settings, host)),
            staging_dir(settings, host),
            platform,
        )

    def verify(self, executable: Path) -> bool:
        return verify_installation(executable, self.settings.probe_timeout)

    def run(self, inputs: SetupInputs) -> SetupResult:
        """
        Run the setup pipeline.

        Raises:
            InputError: If the version spec is invalid (before any I/O)
            ConfigError: If the configured strategies are invalid
            AcquisitionError: If no strategy produced an executable
            VerificationError: If the produced executable does not run
        """
        version = validate_version_spec(inputs.version)
        key = cache_key(self.settings.tool, version, self.platform)

        logger.info(
            f"Setting up {self.settings.display_name} {version} on {self.platform.platform_string()}"
        )
        if inputs.install_path:
            logger.info(f"Install prefix: {inputs.install_path}")

        acquired = self._restore_from_cache(key)
        if acquired is not None:
            logger.info(f"{self.settings.display_name} restored from cache")
            return self._report(acquired)

        strategies = self.strategies
        if strategies is None:
            strategies = build_strategies(self.settings, self.host, inputs)

        logger.info(f"Installing {self.settings.display_name} {version}...")
        acquired = acquire_with_fallback(
            strategies, version, self.platform, self.verify, self.settings.tool
        )
        logger.info(
            f"{self.settings.display_name} installed successfully at {acquired.executable_path}"
        )

        self.cache.save(key, acquired.executable_path)
        return self._report(acquired)

    def _restore_from_cache(self, key: str) -> Optional[AcquisitionResult]:
        """Restore, locate and verify a cached executable; None on miss or rejection."""
        staged = self.cache.restore(key)
        if staged is None:
            return None

        executable = locate(
            staged,
            self.platform.executable_names,
            tool_name=self.settings.tool,
            max_depth=self.settings.max_search_depth,
            max_entries=self.settings.max_search_entries,
        )
        if executable is None:
            logger.warning(f"Cache entry {key} holds no {self.platform.executable_name}")
            return None

        if not self.verify(executable):
            logger.warning(f"Cached binary failed verification, reinstalling: {executable}")
            return None

        return AcquisitionResult(executable_path=executable, was_from_cache=True)

    def _report(self, acquired: AcquisitionResult) -> SetupResult:
        path = acquired.executable_path.resolve()
        version = extract_version(path, self.settings.probe_timeout)

        logger.info(f"{self.settings.display_name} setup complete:")
        logger.info(f"  Version: {version}")
        logger.info(f"  Path: {path}")

        return SetupResult(version=version, path=path, was_from_cache=acquired.was_from_cache)


def run_setup(
    inputs: SetupInputs,
    settings: Optional[SetupSettings] = None,
    host: Optional[HostPaths] = None,
    platform: Optional[PlatformInfo] = None,
) -> SetupResult:
    """
    Run the pipeline with host detection.

    Raises:
        InputError: If the version spec is invalid
        UnsupportedPlatformError: If the host is not supported
        AcquisitionError: If installation fails
        VerificationError: If the installed executable does not run
    """
    settings = settings or SetupSettings()
    validate_version_spec(inputs.version)

    host = host or HostPaths.capture()
    platform = platform or detect_platform(settings.tool)
    return SetupRunner(settings, platform, host).run(inputs)


def cleanup(settings: Optional[SetupSettings] = None, host: Optional[HostPaths] = None) -> None:
    """
    Post-run teardown: remove the cache staging directory.

    Never raises; failures are logged as warnings.
    """
    settings = settings or SetupSettings()
    host = host or HostPaths.capture()

    logger.info("Running post-step cleanup...")
    teardown_staging(staging_dir(settings, host))


__all__ = ["SetupResult", "SetupRunner", "run_setup", "cleanup"]
