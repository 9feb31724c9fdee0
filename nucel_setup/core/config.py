"""
Settings and host environment capture for nucel-setup.

All tool constants live in SetupSettings so the engine never hard-codes the
tool it installs. Process environment is read exactly once, into HostPaths,
and threaded explicitly through every component.
"""

import logging
import os
import tempfile
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml

from nucel_setup.core.exceptions import ConfigError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SetupInputs:
    """Inputs handed over by the CI entry point."""

    version: str = "latest"
    token: Optional[str] = field(default=None, repr=False)
    install_path: Optional[str] = None


@dataclass(frozen=True)
class SetupSettings:
    """Tool constants and tuning knobs."""

    tool: str = "nucel"
    npm_package: str = "@nucel.cloud/cli"
    release_base_url: str = "https://github.com/nucel-cloud/nucel/releases/download"
    # "latest" is pinned to a known release for reproducible runs
    latest_tag: str = "cli-v0.1.9"
    staging_dir_name: str = "nucel-cache"
    strategies: Tuple[str, ...] = ("download", "npm")
    probe_timeout: int = 30
    install_timeout: int = 600
    download_timeout: int = 60
    download_retries: int = 3
    max_search_depth: int = 8
    max_search_entries: int = 10000
    cache_dir: Optional[Path] = None

    @property
    def display_name(self) -> str:
        """Human readable tool name, e.g. 'nucel CLI'."""
        return f"{self.tool} CLI"


@dataclass(frozen=True)
class HostPaths:
    """
    Snapshot of host environment paths.

    Attributes:
        home: User home directory
        work_dir: Job working directory (staging directory parent)
        temp_dir: Scratch directory for downloads (RUNNER_TEMP when set)
        app_data: Windows roaming app-data directory, if any
        program_files: Windows Program Files directory, if any
        tool_cache: CI tool cache directory (RUNNER_TOOL_CACHE), if any
        cache_override: Explicit cache root (NUCEL_SETUP_CACHE_DIR), if any
    """

    home: Path
    work_dir: Path
    temp_dir: Path
    app_data: Optional[Path] = None
    program_files: Optional[Path] = None
    tool_cache: Optional[Path] = None
    cache_override: Optional[Path] = None

    @classmethod
    def capture(
        cls, environ: Optional[Mapping[str, str]] = None, work_dir: Optional[Path] = None
    ) -> "HostPaths":
        """
        Capture host paths from an environment mapping.

        Args:
            environ: Environment mapping (default: os.environ)
            work_dir: Working directory (default: current directory)
        """
        env = os.environ if environ is None else environ

        def optional_path(name: str) -> Optional[Path]:
            value = env.get(name)
            return Path(value) if value else None

        home = optional_path("HOME") or optional_path("USERPROFILE") or Path.home()
        temp_dir = optional_path("RUNNER_TEMP") or Path(tempfile.gettempdir())

        return cls(
            home=home,
            work_dir=Path(work_dir) if work_dir else Path.cwd(),
            temp_dir=temp_dir,
            app_data=optional_path("APPDATA"),
            program_files=optional_path("PROGRAMFILES") or optional_path("ProgramFiles"),
            tool_cache=optional_path("RUNNER_TOOL_CACHE"),
            cache_override=optional_path("NUCEL_SETUP_CACHE_DIR"),
        )


def staging_dir(settings: SetupSettings, host: HostPaths) -> Path:
    """Get the cache staging directory for this run."""
    return host.work_dir / settings.staging_dir_name


def cache_root(settings: SetupSettings, host: HostPaths) -> Path:
    """
    Get the root directory of the local cache store.

    Priority: settings.cache_dir, NUCEL_SETUP_CACHE_DIR, RUNNER_TOOL_CACHE,
    then ~/.nucel-setup/cache.
    """
    if settings.cache_dir:
        return Path(settings.cache_dir)
    if host.cache_override:
        return host.cache_override
    if host.tool_cache:
        return host.tool_cache / "nucel-setup"
    return host.home / ".nucel-setup" / "cache"


def load_yaml_config(config_file: Path, required: bool = False) -> Dict[str, Any]:
    """
    Load and parse a YAML configuration file.

    Args:
        config_file: Path to YAML configuration file
        required: If True, raise error if file doesn't exist

    Returns:
        Configuration dictionary (empty dict if file doesn't exist and not required)

    Raises:
        ConfigError: If the file is required and missing, or YAML parsing fails
    """
    config_file = Path(config_file)
    if not config_file.exists():
        if required:
            raise ConfigError(f"Configuration file not found: {config_file}")
        logger.debug(f"Config file not found: {config_file}")
        return {}

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_file}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration root must be a mapping: {config_file}")
    return data


def settings_from_dict(data: Mapping[str, Any], base: Optional[SetupSettings] = None) -> SetupSettings:
    """
    Overlay a mapping onto SetupSettings.

    Raises:
        ConfigError: If the mapping contains unknown keys
    """
    base = base or SetupSettings()
    known = {f.name for f in fields(SetupSettings)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown setup settings: {', '.join(unknown)}")

    overrides: Dict[str, Any] = dict(data)
    if "strategies" in overrides:
        strategies = overrides["strategies"]
        if isinstance(strategies, str):
            strategies = [strategies]
        overrides["strategies"] = tuple(strategies)
    if overrides.get("cache_dir"):
        overrides["cache_dir"] = Path(overrides["cache_dir"]).expanduser()

    return replace(base, **overrides)


def load_settings(config_file: Optional[Path] = None) -> SetupSettings:
    """
    Load settings, overlaying the 'setup' section of a YAML file if given.

    Example YAML:
        setup:
          strategies: [npm]
          probe_timeout: 60
    """
    if config_file is None:
        return SetupSettings()

    config = load_yaml_config(config_file, required=True)
    section = config.get("setup", {})
    if not isinstance(section, dict):
        raise ConfigError("'setup' section must be a mapping")

    settings = settings_from_dict(section)
    logger.debug(f"Loaded settings from {config_file}")
    return settings


__all__ = [
    "SetupInputs",
    "SetupSettings",
    "HostPaths",
    "staging_dir",
    "cache_root",
    "load_yaml_config",
    "settings_from_dict",
    "load_settings",
]
