"""
Package manager acquisition.

Installs the CLI globally with npm and looks for the installed executable in
the usual global bin directories.
"""

import logging
import os
import subprocess
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from nucel_setup.core.config import HostPaths, SetupSettings
from nucel_setup.core.exceptions import AcquisitionError
from nucel_setup.core.platform import PlatformInfo
from nucel_setup.core.version import LATEST
from nucel_setup.install.resolver import search_directories

logger = logging.getLogger(__name__)

POSIX_BIN_DIRS = ("/usr/local/bin", "/usr/bin", "/opt/homebrew/bin")


class PackageManagerStrategy:
    """
    Install the CLI from the npm registry.

    The token, when given, reaches npm only through the child process
    environment (NPM_TOKEN) and is never logged.
    """

    name = "npm"

    def __init__(
        self,
        settings: SetupSettings,
        host: HostPaths,
        token: Optional[str] = None,
        install_prefix: Optional[str] = None,
        base_env: Optional[Mapping[str, str]] = None,
        npm_executable: str = "npm",
    ):
        """
        Initialize package manager strategy.

        Args:
            settings: Tool settings
            host: Captured host paths
            token: Registry token passed as NPM_TOKEN
            install_prefix: npm --prefix for the global install
            base_env: Environment for the npm process (default: os.environ)
            npm_executable: npm command name or path
        """
        self.settings = settings
        self.host = host
        self.token = token or None
        self.install_prefix = install_prefix or None
        self.base_env = base_env
        self.npm_executable = npm_executable

    def package_spec(self, version: str) -> str:
        """
        npm package argument.

        Example:
            >>> strategy.package_spec("1.2.3")
            '@nucel.cloud/cli@1.2.3'
        """
        if version == LATEST:
            return self.settings.npm_package
        return f"{self.settings.npm_package}@{version}"

    def install_command(self, version: str) -> List[str]:
        """Build the npm install command line."""
        command = [self.npm_executable, "install", "-g", self.package_spec(version)]
        if self.install_prefix:
            command += ["--prefix", str(self.install_prefix)]
        return command

    def candidate_directories(self, platform: PlatformInfo) -> List[Path]:
        """
        Global bin directories to search, in priority order.

        An explicit install prefix is searched first.
        """
        candidates: List[Path] = []

        if self.install_prefix:
            prefix = Path(self.install_prefix)
            candidates += [prefix] if platform.is_windows else [prefix / "bin"]

        if platform.is_windows:
            if self.host.app_data:
                candidates.append(self.host.app_data / "npm")
            if self.host.program_files:
                candidates.append(self.host.program_files / "nodejs")
        else:
            candidates += [Path(d) for d in POSIX_BIN_DIRS]
            candidates.append(self.host.home / ".npm-global" / "bin")
            candidates.append(self.host.home / "node_modules" / ".bin")

        return candidates

    def _environment(self) -> Dict[str, str]:
        env = dict(os.environ if self.base_env is None else self.base_env)
        if self.token:
            env["NPM_TOKEN"] = self.token
        return env

    def acquire(self, version: str, platform: PlatformInfo) -> Path:
        """
        Install with npm and locate the executable.

        Returns:
            Path to the installed executable

        Raises:
            AcquisitionError: If npm fails or the executable cannot be found
        """
        tool = self.settings.tool
        command = self.install_command(version)
        command_str = " ".join(command)
        logger.info(f"Installing {self.settings.display_name} {version} with: {command_str}")

        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                env=self._environment(),
                timeout=self.settings.install_timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise AcquisitionError(
                tool,
                f"'{command_str}' timed out after {self.settings.install_timeout} seconds",
                command_str,
            ) from e
        except (OSError, subprocess.SubprocessError) as e:
            raise AcquisitionError(tool, f"could not run '{command_str}': {e}", command_str) from e

        if result.stdout:
            logger.debug(result.stdout.strip())

        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            raise AcquisitionError(
                tool,
                f"'{command_str}' exited with code {result.returncode}"
                + (f": {stderr}" if stderr else ""),
                command_str,
            )

        directories = self.candidate_directories(platform)
        executable = search_directories(directories, platform.executable_names)
        if executable is None:
            searched = ", ".join(str(d) for d in directories)
            raise AcquisitionError(
                tool,
                f"{self.settings.display_name} executable not found after installation "
                f"(searched: {searched})",
                searched,
            )

        return executable


__all__ = ["PackageManagerStrategy", "POSIX_BIN_DIRS"]
