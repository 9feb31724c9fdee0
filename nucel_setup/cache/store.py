"""
Keyed directory store used as the shared cache transport.

Entries live at ``<root>/<key>/``. A save is published by renaming a fully
written temporary sibling into place, so a concurrent restore either sees the
whole entry or nothing. Entries are immutable once written.
"""

import logging
import os
import re
import tempfile
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path

from filelock import FileLock, Timeout

from nucel_setup.core.exceptions import CacheError
from nucel_setup.core.filesystem import FilesystemError, copy_tree, safe_rmtree

logger = logging.getLogger(__name__)

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._\-]*$")


class CacheTransport(ABC):
    """
    Shared cache keyed by string.

    Implementations raise CacheError for transport failures and must never
    expose a partially written entry to restore().
    """

    @abstractmethod
    def restore(self, key: str, destination: Path) -> bool:
        """Copy the entry for key into destination; False on a miss."""
        pass

    @abstractmethod
    def save(self, key: str, source: Path) -> None:
        """Store a copy of the source directory under key."""
        pass


class LocalCacheStore(CacheTransport):
    """
    Cache transport backed by a local (or mounted) directory.

    Example:
        >>> store = LocalCacheStore(Path("/var/cache/nucel-setup"))
        >>> store.save("nucel-cli-1.2.3-linux-x64", Path("nucel-cache"))
        >>> store.restore("nucel-cli-1.2.3-linux-x64", Path("nucel-cache"))
        True
    """

    def __init__(self, root: Path, lock_timeout: int = 30):
        """
        Initialize the store.

        Args:
            root: Directory holding cache entries
            lock_timeout: Timeout in seconds for acquiring a per-key lock
        """
        self.root = Path(root)
        self.lock_dir = self.root / "lock"
        self.lock_timeout = lock_timeout

    def entry_path(self, key: str) -> Path:
        """Get the directory of an entry."""
        if not _KEY_PATTERN.match(key):
            raise CacheError(f"Invalid cache key: {key!r}")
        return self.root / key

    @contextmanager
    def _lock(self, key: str):
        """
        Hold the per-key lock.

        Raises:
            CacheError: If the lock cannot be acquired within timeout
        """
        try:
            self.lock_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise CacheError(f"Cannot create lock directory {self.lock_dir}: {e}") from e

        lock = FileLock(self.lock_dir / f"{key}.lock", timeout=self.lock_timeout)
        try:
            with lock:
                logger.debug(f"Acquired cache lock for {key}")
                yield
        except Timeout as e:
            raise CacheError(
                f"Could not acquire cache lock for {key} within {self.lock_timeout} seconds"
            ) from e

    def restore(self, key: str, destination: Path) -> bool:
        """
        Copy an entry into destination.

        Returns:
            True on a hit, False if no entry exists for key

        Raises:
            CacheError: If the entry exists but cannot be copied
        """
        entry = self.entry_path(key)
        with self._lock(key):
            if not entry.is_dir():
                logger.debug(f"No cache entry for {key}")
                return False

            try:
                copy_tree(entry, destination)
            except (OSError, FilesystemError) as e:
                raise CacheError(f"Failed to restore cache entry {key}: {e}") from e

        logger.debug(f"Restored cache entry {key} into {destination}")
        return True

    def save(self, key: str, source: Path) -> None:
        """
        Store a copy of source under key.

        Saving an existing key is a no-op.

        Raises:
            CacheError: If the entry cannot be written
        """
        entry = self.entry_path(key)
        with self._lock(key):
            if entry.exists():
                logger.info(f"Cache entry {key} already exists, not overwriting")
                return

            try:
                self.root.mkdir(parents=True, exist_ok=True)
                staging = Path(tempfile.mkdtemp(prefix=f".{key}.", dir=self.root))
            except OSError as e:
                raise CacheError(f"Cannot prepare cache entry {key}: {e}") from e

            try:
                copy_tree(source, staging)
                os.replace(staging, entry)
            except (OSError, FilesystemError) as e:
                try:
                    safe_rmtree(staging, require_prefix=self.root)
                except FilesystemError as cleanup_error:
                    logger.debug(f"Could not remove {staging}: {cleanup_error}")
                raise CacheError(f"Failed to save cache entry {key}: {e}") from e

        logger.debug(f"Saved cache entry {key}")


__all__ = ["CacheTransport", "LocalCacheStore"]
