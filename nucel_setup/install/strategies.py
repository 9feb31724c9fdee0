"""
Acquisition strategy selection and fallback.

Strategies form a closed set: DirectDownloadStrategy and
PackageManagerStrategy. Both expose ``name`` and
``acquire(version, platform) -> Path``; they share no base class and no
state.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Union

from nucel_setup.core.config import HostPaths, SetupInputs, SetupSettings
from nucel_setup.core.exceptions import AcquisitionError, ConfigError, VerificationError
from nucel_setup.core.platform import PlatformInfo
from nucel_setup.install.direct import DirectDownloadStrategy
from nucel_setup.install.npm import PackageManagerStrategy

logger = logging.getLogger(__name__)

AcquisitionStrategy = Union[DirectDownloadStrategy, PackageManagerStrategy]

STRATEGY_NAMES = (DirectDownloadStrategy.name, PackageManagerStrategy.name)


@dataclass(frozen=True)
class AcquisitionResult:
    """Executable produced by the cache or a strategy."""

    executable_path: Path
    was_from_cache: bool
    strategy: Optional[str] = None


def build_strategies(
    settings: SetupSettings, host: HostPaths, inputs: SetupInputs
) -> List[AcquisitionStrategy]:
    """
    Instantiate strategies in the order named by settings.strategies.

    Raises:
        ConfigError: If a strategy name is unknown or none is configured
    """
    if not settings.strategies:
        raise ConfigError("At least one acquisition strategy must be configured")

    strategies: List[AcquisitionStrategy] = []
    for name in settings.strategies:
        if name == DirectDownloadStrategy.name:
            strategies.append(
                DirectDownloadStrategy(settings, host.temp_dir / "nucel-setup")
            )
        elif name == PackageManagerStrategy.name:
            strategies.append(
                PackageManagerStrategy(
                    settings,
                    host,
                    token=inputs.token,
                    install_prefix=inputs.install_path,
                )
            )
        else:
            raise ConfigError(
                f"Unknown acquisition strategy '{name}'. "
                f"Available: {', '.join(STRATEGY_NAMES)}"
            )
    return strategies


def acquire_with_fallback(
    strategies: Sequence[AcquisitionStrategy],
    version: str,
    platform: PlatformInfo,
    verify: Callable[[Path], bool],
    tool: str = "nucel",
) -> AcquisitionResult:
    """
    Try strategies in order until one yields a verified executable.

    Each attempt starts from scratch; nothing produced by a failed attempt is
    reused by the next one.

    Raises:
        VerificationError: If every strategy failed and at least one of them
            produced an executable that failed the version probe
        AcquisitionError: If every strategy failed to produce an executable
    """
    if not strategies:
        raise AcquisitionError(tool, "no acquisition strategy configured")

    failures: List[AcquisitionError] = []
    unverified: Optional[Path] = None

    for strategy in strategies:
        logger.info(f"Acquiring {tool} CLI {version} via {strategy.name}")
        try:
            executable = strategy.acquire(version, platform)
        except AcquisitionError as e:
            logger.warning(f"{strategy.name} strategy failed: {e.detail}")
            failures.append(e)
            continue

        if verify(executable):
            return AcquisitionResult(
                executable_path=executable, was_from_cache=False, strategy=strategy.name
            )

        logger.warning(f"{strategy.name} strategy produced a non-functional binary: {executable}")
        unverified = executable

    if unverified is not None:
        raise VerificationError(tool, unverified)

    if len(failures) == 1:
        raise failures[0]

    detail = "; ".join(
        f"{strategy.name}: {failure.detail}" for strategy, failure in zip(strategies, failures)
    )
    raise AcquisitionError(tool, detail, failures[-1].target)


__all__ = [
    "AcquisitionStrategy",
    "AcquisitionResult",
    "STRATEGY_NAMES",
    "build_strategies",
    "acquire_with_fallback",
]
