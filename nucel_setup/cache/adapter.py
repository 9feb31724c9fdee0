"""
Cache adapter for CLI installations.

Wraps a CacheTransport around the run's staging directory. Caching only
saves time: every failure here is logged as a warning and the run carries on
as if the cache were empty.
"""

import logging
import shutil
from pathlib import Path
from typing import Optional

from nucel_setup.cache.store import CacheTransport
from nucel_setup.core.exceptions import CacheError
from nucel_setup.core.filesystem import FilesystemError, make_executable, safe_rmtree
from nucel_setup.core.platform import PlatformInfo

logger = logging.getLogger(__name__)


class CacheAdapter:
    """
    Restore and save a single executable through a staging directory.

    Example:
        >>> adapter = CacheAdapter(LocalCacheStore(root), Path("nucel-cache"), platform)
        >>> staged = adapter.restore("nucel-cli-latest-linux-x64")
        >>> if staged is None:
        ...     adapter.save("nucel-cli-latest-linux-x64", installed_binary)
    """

    def __init__(self, transport: CacheTransport, staging_dir: Path, platform: PlatformInfo):
        self.transport = transport
        self.staging_dir = Path(staging_dir)
        self.platform = platform

    def restore(self, key: str) -> Optional[Path]:
        """
        Populate the staging directory from the cache.

        Returns:
            The staging directory on a hit, None on a miss or transport failure
        """
        try:
            self.staging_dir.mkdir(parents=True, exist_ok=True)
            hit = self.transport.restore(key, self.staging_dir)
        except (CacheError, OSError) as e:
            logger.warning(f"Cache restore failed: {e}")
            return None

        if not hit:
            logger.info(f"No cached installation for {key}")
            return None

        logger.info(f"Cache hit for {key}")
        return self.staging_dir

    def save(self, key: str, source_path: Path) -> bool:
        """
        Copy the executable into the staging directory and store it under key.

        The copy always carries the canonical executable name so that a later
        restore finds it directly under the staging root.

        Returns:
            True if the entry was stored
        """
        try:
            self.staging_dir.mkdir(parents=True, exist_ok=True)
            cached_path = self.staging_dir / self._cached_name(Path(source_path))
            if Path(source_path).resolve() != cached_path.resolve():
                shutil.copy2(source_path, cached_path)
            make_executable(cached_path)

            self.transport.save(key, self.staging_dir)
        except (CacheError, OSError, FilesystemError) as e:
            logger.warning(f"Failed to cache {self.platform.executable_name}: {e}")
            return False

        logger.info(f"Cached {cached_path.name} under {key}")
        return True

    def teardown(self) -> None:
        """Remove the staging directory."""
        teardown_staging(self.staging_dir)

    def _cached_name(self, source_path: Path) -> str:
        # Windows npm shims keep their .cmd suffix
        if source_path.name in self.platform.executable_names:
            return source_path.name
        return self.platform.executable_name


def teardown_staging(staging_dir: Path) -> bool:
    """
    Remove a cache staging directory.

    Safe to call when nothing was staged, and safe to call twice.

    Returns:
        True if the directory is gone afterwards
    """
    try:
        safe_rmtree(staging_dir)
    except (FilesystemError, OSError, ValueError) as e:
        logger.warning(f"Cleanup failed: {e}")
        return False
    logger.info("Temporary files cleaned up")
    return True


__all__ = ["CacheAdapter", "teardown_staging"]
