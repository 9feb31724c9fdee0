"""
Installed version reporting.
"""

import logging
import subprocess
from pathlib import Path
from typing import Union

from nucel_setup.core.exceptions import ReportingError
from nucel_setup.install.verifier import run_version_probe

logger = logging.getLogger(__name__)

UNKNOWN_VERSION = "unknown"


def parse_version_output(output: str) -> str:
    """
    Take the last whitespace-delimited token of probe output.

    Raises:
        ReportingError: If the output is empty

    Example:
        >>> parse_version_output("nucel-cli 1.0.0\\n")
        '1.0.0'
    """
    tokens = (output or "").split()
    if not tokens:
        raise ReportingError("version probe produced no output")
    return tokens[-1]


def extract_version(executable: Union[str, Path], timeout: int = 30) -> str:
    """
    Report the version of an installed executable.

    Never raises; returns 'unknown' when the version cannot be determined.
    """
    try:
        result = run_version_probe(executable, timeout)
        if result.returncode != 0:
            raise ReportingError(f"version probe exited with code {result.returncode}")
        return parse_version_output(result.stdout)
    except (OSError, subprocess.SubprocessError, ReportingError) as e:
        logger.warning(f"Could not determine CLI version: {e}")
        return UNKNOWN_VERSION


__all__ = ["UNKNOWN_VERSION", "parse_version_output", "extract_version"]
