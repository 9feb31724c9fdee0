"""
Cross-platform file system utilities for nucel-setup.

This module provides:
- Archive extraction (.tar.gz, .zip) with directory traversal protection
- Safe file operations (safe deletion, atomic directory publish)
- Executable permission handling
"""

import os
import shutil
import stat
import sys
import tarfile
import zipfile
from pathlib import Path
from typing import Optional, Union

IS_WINDOWS = os.name == "nt"


# ============================================================================
# Errors
# ============================================================================


class FilesystemError(Exception):
    """Base exception for filesystem operations."""

    pass


class ArchiveExtractionError(FilesystemError):
    """Failed to extract an archive."""

    pass


class UnsupportedArchiveFormat(ArchiveExtractionError):
    """Archive format is not supported."""

    pass


class InsecureArchiveError(ArchiveExtractionError):
    """Archive contains insecure paths (directory traversal attempt)."""

    pass


# ============================================================================
# Path Utilities
# ============================================================================


def is_relative_to(path: Path, parent: Path) -> bool:
    """
    Check if path is relative to (under) parent directory.

    Example:
        >>> is_relative_to(Path("/home/user/project/file.txt"), Path("/home/user"))
        True
    """
    try:
        path.relative_to(parent)
        return True
    except ValueError:
        return False


def make_executable(path: Union[str, Path]) -> None:
    """
    Add execute permission bits to a file (no-op on Windows).

    Raises:
        FilesystemError: If permissions cannot be changed
    """
    if IS_WINDOWS:
        return

    path = Path(path)
    try:
        mode = path.stat().st_mode
        path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    except OSError as e:
        raise FilesystemError(f"Failed to make '{path}' executable: {e}") from e


# ============================================================================
# Archive Extraction
# ============================================================================


def _validate_archive_path(path: str, destination: Path) -> None:
    """
    Validate that an archive member path is safe to extract.

    Raises:
        InsecureArchiveError: If path attempts directory traversal
    """
    member_path = (destination / path).resolve()

    if not is_relative_to(member_path, destination.resolve()):
        raise InsecureArchiveError(
            f"Archive member '{path}' attempts directory traversal. "
            "This is a security risk and extraction has been blocked."
        )


def _detect_format(archive_path: Path) -> str:
    name = archive_path.name.lower()
    if name.endswith(".zip"):
        return ".zip"
    if name.endswith((".tar.gz", ".tgz")):
        return ".tar.gz"
    if name.endswith(".tar.xz"):
        return ".tar.xz"
    raise UnsupportedArchiveFormat(
        f"Unsupported archive format: {archive_path.suffix}. "
        "Supported: .zip, .tar.gz, .tar.xz"
    )


def extract_archive(
    archive_path: Union[str, Path],
    destination: Union[str, Path],
    archive_format: Optional[str] = None,
) -> Path:
    """
    Extract an archive to a destination directory.

    Validates all member paths to prevent directory traversal attacks.

    Args:
        archive_path: Path to the archive file
        destination: Directory to extract to
        archive_format: '.zip', '.tar.gz' or '.tar.xz' (detected from the
            file name if omitted)

    Returns:
        The destination directory

    Raises:
        UnsupportedArchiveFormat: If archive format is not recognized
        ArchiveExtractionError: If extraction fails
        InsecureArchiveError: If archive contains malicious paths

    Example:
        >>> extract_archive('nucel-cli-linux-x64.tar.gz', '/tmp/nucel')
    """
    archive_path = Path(archive_path)
    destination = Path(destination)

    if not archive_path.exists():
        raise ArchiveExtractionError(f"Archive not found: {archive_path}")

    fmt = (archive_format or _detect_format(archive_path)).lower()

    try:
        destination.mkdir(parents=True, exist_ok=True)
        if fmt == ".zip":
            _extract_zip(archive_path, destination)
        elif fmt in (".tar.gz", ".tgz"):
            _extract_tar(archive_path, destination, "r:gz")
        elif fmt == ".tar.xz":
            _extract_tar(archive_path, destination, "r:xz")
        else:
            raise UnsupportedArchiveFormat(f"Unsupported archive format: {fmt}")
    except (InsecureArchiveError, UnsupportedArchiveFormat):
        raise
    except (OSError, tarfile.TarError, zipfile.BadZipFile) as e:
        raise ArchiveExtractionError(f"Failed to extract {archive_path}: {e}") from e

    return destination


def _extract_zip(archive_path: Path, destination: Path) -> None:
    """Extract a ZIP archive."""
    with zipfile.ZipFile(archive_path, "r") as zf:
        members = zf.namelist()

        for member in members:
            _validate_archive_path(member, destination)

        zf.extractall(destination)


def _extract_tar(archive_path: Path, destination: Path, mode: str) -> None:
    """Extract a tar archive with specified compression."""
    with tarfile.open(archive_path, mode) as tar:
        for member in tar.getmembers():
            _validate_archive_path(member.name, destination)

        # Paths are validated above for interpreters without extraction filters
        if sys.version_info >= (3, 12):
            tar.extractall(destination, filter="data")
        else:
            tar.extractall(destination)


# ============================================================================
# Safe File Operations
# ============================================================================


def safe_rmtree(
    path: Union[str, Path], require_prefix: Optional[Union[str, Path]] = None
) -> None:
    """
    Safely remove a directory tree with safeguards.

    Missing paths are ignored, so calling this twice is harmless.

    Args:
        path: Directory to remove
        require_prefix: If specified, path must be under this directory

    Raises:
        ValueError: If path is not under require_prefix
        FilesystemError: If deletion fails
    """
    path = Path(path).resolve()

    if require_prefix is not None:
        require_prefix = Path(require_prefix).resolve()
        if not is_relative_to(path, require_prefix):
            raise ValueError(
                f"Refusing to delete '{path}': not under required prefix '{require_prefix}'"
            )

    if not path.exists():
        return

    if not path.is_dir():
        raise FilesystemError(f"Path is not a directory: {path}")

    try:
        if IS_WINDOWS:

            def handle_remove_readonly(func, path, error):
                """Error handler for Windows read-only files."""
                if not os.access(path, os.W_OK):
                    os.chmod(path, 0o777)
                    func(path)
                else:
                    raise error

            if sys.version_info >= (3, 12):
                shutil.rmtree(path, onexc=handle_remove_readonly)
            else:
                shutil.rmtree(
                    path,
                    onerror=lambda func, p, exc_info: handle_remove_readonly(
                        func, p, exc_info[1]
                    ),
                )
        else:
            shutil.rmtree(path)

    except OSError as e:
        raise FilesystemError(f"Failed to remove directory '{path}': {e}") from e


def copy_tree(source: Union[str, Path], destination: Union[str, Path]) -> None:
    """
    Copy a directory tree, preserving file modes.

    Symlinks are copied as links, never followed.

    Raises:
        FilesystemError: If source is not a directory
    """
    source = Path(source)
    destination = Path(destination)

    if not source.is_dir():
        raise FilesystemError(f"Source is not a directory: {source}")

    shutil.copytree(source, destination, symlinks=True, dirs_exist_ok=True)


__all__ = [
    "FilesystemError",
    "ArchiveExtractionError",
    "UnsupportedArchiveFormat",
    "InsecureArchiveError",
    "is_relative_to",
    "make_executable",
    "extract_archive",
    "safe_rmtree",
    "copy_tree",
]
