"""
Executable resolution.

Finds the CLI executable inside an extracted archive, a restored cache entry,
or a list of package-manager bin directories. Resolution never raises: a
missing executable is reported as None and the caller decides if that is
fatal.
"""

import logging
import os
from collections import deque
from pathlib import Path
from typing import Iterable, Iterator, Optional, Sequence, Tuple, Union

logger = logging.getLogger(__name__)

Names = Union[str, Sequence[str]]


def _as_names(names: Names) -> Tuple[str, ...]:
    if isinstance(names, str):
        return (names,)
    return tuple(names)


def _is_file(path: Path) -> bool:
    try:
        return path.is_file()
    except OSError:
        return False


def conventional_subdirectories(tool_name: Optional[str]) -> list[str]:
    """
    Subdirectories release archives commonly put executables in.

    Example:
        >>> conventional_subdirectories("nucel")
        ['bin', 'cli', 'nucel', 'nucel-cli']
    """
    subdirs = ["bin", "cli"]
    if tool_name:
        subdirs += [tool_name, f"{tool_name}-cli"]
    return subdirs


def walk_files(root: Path, max_depth: int = 8, max_entries: int = 10000) -> Iterator[Path]:
    """
    Breadth-first walk yielding regular files under root.

    Symlinked directories are not followed and each real directory is
    visited once. The walk stops after max_entries directory entries or
    below max_depth levels.
    """
    visited = set()
    scanned = 0
    queue = deque([(root, 0)])

    while queue:
        directory, depth = queue.popleft()
        try:
            real = os.path.realpath(directory)
            if real in visited:
                continue
            visited.add(real)
            entries = sorted(os.scandir(directory), key=lambda e: e.name)
        except OSError as e:
            logger.debug(f"Skipping unreadable directory {directory}: {e}")
            continue

        for entry in entries:
            scanned += 1
            if scanned > max_entries:
                logger.warning(
                    f"Stopped searching {root} after {max_entries} entries"
                )
                return
            try:
                if entry.is_dir(follow_symlinks=False):
                    if depth + 1 <= max_depth:
                        queue.append((Path(entry.path), depth + 1))
                elif entry.is_file():
                    yield Path(entry.path)
            except OSError:
                continue


def locate(
    root: Union[str, Path],
    expected_names: Names,
    tool_name: Optional[str] = None,
    qualified_name: Optional[str] = None,
    fuzzy: bool = False,
    max_depth: int = 8,
    max_entries: int = 10000,
) -> Optional[Path]:
    """
    Locate an executable under root.

    Layouts are tried in priority order, first match wins:

    1. an expected name directly under root
    2. an expected name under bin/, cli/, <tool>/ or <tool>-cli/
    3. an expected name anywhere below root (bounded walk)
    4. with fuzzy=True only: the qualified name anywhere, then any file whose
       name contains the tool name

    Args:
        root: Directory to search
        expected_names: Exact executable file name(s)
        tool_name: Short tool name, used for subdirectories and fuzzy matching
        qualified_name: Release-specific name, e.g. 'nucel-cli-linux-x64'
        fuzzy: Enable step 4
        max_depth: Maximum directory depth for steps 3 and 4
        max_entries: Maximum directory entries scanned per walk

    Returns:
        Path to the executable, or None if not found

    Example:
        >>> locate(Path("/tmp/extract"), "nucel", tool_name="nucel",
        ...        qualified_name="nucel-cli-linux-x64", fuzzy=True)
        PosixPath('/tmp/extract/nucel-cli-linux-x64')
    """
    root = Path(root)
    names = _as_names(expected_names)

    if not root.is_dir():
        logger.debug(f"Search root is not a directory: {root}")
        return None

    logger.info(f"Searching for {', '.join(names)} in {root}")

    for name in names:
        candidate = root / name
        if _is_file(candidate):
            logger.info(f"Found executable at: {candidate}")
            return candidate

    for subdir in conventional_subdirectories(tool_name):
        for name in names:
            candidate = root / subdir / name
            if _is_file(candidate):
                logger.info(f"Found executable at: {candidate}")
                return candidate

    for path in walk_files(root, max_depth, max_entries):
        if path.name in names:
            logger.info(f"Found executable at: {path}")
            return path

    if fuzzy:
        found = _fuzzy_match(root, tool_name, qualified_name, max_depth, max_entries)
        if found:
            return found

    logger.info(f"No executable named {', '.join(names)} under {root}")
    return None


def _fuzzy_match(
    root: Path,
    tool_name: Optional[str],
    qualified_name: Optional[str],
    max_depth: int,
    max_entries: int,
) -> Optional[Path]:
    """Match release-qualified or tool-named files."""
    if qualified_name:
        candidate = root / qualified_name
        if _is_file(candidate):
            logger.info(f"Found release binary at: {candidate}")
            return candidate
        for path in walk_files(root, max_depth, max_entries):
            if path.name == qualified_name:
                logger.info(f"Found release binary at: {path}")
                return path

    if tool_name:
        needle = tool_name.lower()
        for path in walk_files(root, max_depth, max_entries):
            if needle in path.name.lower():
                logger.info(f"Found {tool_name}-related file at: {path}")
                return path

    return None


def search_directories(
    directories: Iterable[Union[str, Path]], expected_names: Names
) -> Optional[Path]:
    """
    Check a flat list of directories for an executable.

    Args:
        directories: Directories in priority order
        expected_names: Exact executable file name(s)

    Returns:
        First match, or None
    """
    names = _as_names(expected_names)
    for directory in directories:
        for name in names:
            candidate = Path(directory) / name
            if _is_file(candidate):
                logger.info(f"Found executable at: {candidate}")
                return candidate
    return None


__all__ = [
    "conventional_subdirectories",
    "walk_files",
    "locate",
    "search_directories",
]
