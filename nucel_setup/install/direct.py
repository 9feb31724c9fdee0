"""
Direct download acquisition.

Downloads a pre-built CLI archive from GitHub releases, extracts it and
locates the executable inside.
"""

import logging
import tempfile
from pathlib import Path
from typing import Optional

import requests

from nucel_setup.core.config import SetupSettings
from nucel_setup.core.download import DownloadError, download_file
from nucel_setup.core.exceptions import AcquisitionError
from nucel_setup.core.filesystem import (
    FilesystemError,
    extract_archive,
    make_executable,
)
from nucel_setup.core.platform import PlatformInfo
from nucel_setup.core.version import LATEST
from nucel_setup.install.resolver import locate

logger = logging.getLogger(__name__)


class DirectDownloadStrategy:
    """
    Download and extract release archives.

    Release assets are named ``<tool>-cli-<os>-<arch><ext>`` (Windows assets
    use ``win32`` as the OS token) and published under ``cli-v<version>`` tags.

    Example:
        >>> strategy = DirectDownloadStrategy(SetupSettings(), Path("/tmp/work"))
        >>> strategy.download_url("latest", describe_platform("Linux", "x86_64"))
        'https://github.com/nucel-cloud/nucel/releases/download/cli-v0.1.9/nucel-cli-linux-x64.tar.gz'
    """

    name = "download"

    def __init__(
        self,
        settings: SetupSettings,
        work_dir: Path,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize direct download strategy.

        Args:
            settings: Tool settings
            work_dir: Scratch directory for archives and extraction
            session: Optional requests session
        """
        self.settings = settings
        self.work_dir = Path(work_dir)
        self.session = session

    def version_tag(self, version: str) -> str:
        """Map a version spec to a release tag; 'latest' is pinned."""
        if version == LATEST:
            return self.settings.latest_tag
        return f"cli-v{version}"

    def qualified_name(self, platform: PlatformInfo) -> str:
        """Release asset stem, e.g. 'nucel-cli-linux-x64'."""
        return f"{self.settings.tool}-cli-{platform.release_os}-{platform.arch}"

    def download_url(self, version: str, platform: PlatformInfo) -> str:
        """Compute the release asset URL."""
        base_url = self.settings.release_base_url.rstrip("/")
        file_name = f"{self.qualified_name(platform)}{platform.archive_extension}"
        return f"{base_url}/{self.version_tag(version)}/{file_name}"

    def acquire(self, version: str, platform: PlatformInfo) -> Path:
        """
        Download, extract and locate the executable.

        Returns:
            Path to the executable (made executable on POSIX)

        Raises:
            AcquisitionError: If download, extraction or resolution fails
        """
        tool = self.settings.tool
        url = self.download_url(version, platform)
        logger.info(f"Downloading from: {url}")

        try:
            self.work_dir.mkdir(parents=True, exist_ok=True)
            job_dir = Path(tempfile.mkdtemp(prefix=f"{tool}-download-", dir=self.work_dir))
        except OSError as e:
            raise AcquisitionError(tool, f"cannot create work directory: {e}", url) from e

        archive_path = job_dir / url.rsplit("/", 1)[-1]
        extract_dir = job_dir / "extracted"

        try:
            download_file(
                url,
                archive_path,
                timeout=self.settings.download_timeout,
                max_retries=self.settings.download_retries,
                session=self.session,
            )
            logger.info(f"Downloaded to: {archive_path}")

            extract_archive(archive_path, extract_dir, platform.archive_extension)
            logger.info(f"Extracted to: {extract_dir}")
        except DownloadError as e:
            raise AcquisitionError(tool, str(e), url) from e
        except FilesystemError as e:
            raise AcquisitionError(tool, f"{e} (downloaded from {url})", url) from e

        try:
            archive_path.unlink()
        except OSError as e:
            logger.warning(f"Could not remove downloaded archive {archive_path}: {e}")

        executable = locate(
            extract_dir,
            platform.executable_names,
            tool_name=tool,
            qualified_name=self.qualified_name(platform),
            fuzzy=True,
            max_depth=self.settings.max_search_depth,
            max_entries=self.settings.max_search_entries,
        )
        if executable is None:
            raise AcquisitionError(
                tool,
                f"{self.settings.display_name} binary not found in extracted directory: {extract_dir}",
                str(extract_dir),
            )

        if not platform.is_windows:
            try:
                make_executable(executable)
            except FilesystemError as e:
                raise AcquisitionError(tool, str(e), str(executable)) from e
            logger.info(f"Made binary executable: {executable}")

        return executable


__all__ = ["DirectDownloadStrategy"]
