"""
Installation verification.

The version probe is the single gate deciding whether a cached or freshly
acquired executable can be trusted. File presence, size or checksums are not
substitutes for it.
"""

import logging
import subprocess
from pathlib import Path
from typing import Sequence, Union

logger = logging.getLogger(__name__)

VERSION_PROBE: Sequence[str] = ("--version",)


def run_version_probe(
    executable: Union[str, Path], timeout: int = 30
) -> subprocess.CompletedProcess:
    """
    Run the executable with the version probe argument.

    Raises:
        OSError: If the process cannot be spawned
        subprocess.SubprocessError: If the probe times out
    """
    return subprocess.run(
        [str(executable), *VERSION_PROBE],
        capture_output=True,
        text=True,
        timeout=timeout,
    )


def verify_installation(executable: Union[str, Path], timeout: int = 30) -> bool:
    """
    Check that an executable runs and reports its version.

    Args:
        executable: Path to the executable
        timeout: Probe timeout in seconds

    Returns:
        True iff the probe exits with status 0. Spawn failures (missing file,
        no execute permission, corrupt binary) and timeouts return False.
    """
    try:
        result = run_version_probe(executable, timeout)
    except subprocess.TimeoutExpired:
        logger.warning(f"Version probe of {executable} timed out after {timeout} seconds")
        return False
    except (OSError, subprocess.SubprocessError) as e:
        logger.warning(f"Could not execute {executable}: {e}")
        return False

    stdout = (result.stdout or "").strip()
    stderr = (result.stderr or "").strip()
    if stdout:
        logger.info(f"CLI version: {stdout}")
    if stderr:
        logger.warning(stderr)

    if result.returncode != 0:
        logger.warning(f"{executable} --version exited with code {result.returncode}")
        return False

    return True


__all__ = ["VERSION_PROBE", "run_version_probe", "verify_installation"]
