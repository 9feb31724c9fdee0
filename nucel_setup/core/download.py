"""
HTTP download with retry logic.

Downloads release archives with:
- HTTPS downloads with TLS verification and redirects (GitHub release assets)
- Streaming writes to disk
- Retry logic with exponential backoff
- Timeout handling
"""

import logging
import time
from pathlib import Path
from typing import Optional

import requests
from requests.exceptions import RequestException

logger = logging.getLogger(__name__)

CHUNK_SIZE = 8192


class DownloadError(Exception):
    """Exception raised when download fails."""

    def __init__(self, url: str, message: str, status_code: Optional[int] = None):
        self.url = url
        self.status_code = status_code
        super().__init__(message)


def download_file(
    url: str,
    destination: Path,
    timeout: int = 60,
    max_retries: int = 3,
    session: Optional[requests.Session] = None,
) -> Path:
    """
    Download file from URL to destination with retry logic.

    Client errors (4xx) are not retried: a missing release asset will not
    appear on a second attempt.

    Args:
        url: URL to download from
        destination: Local path to save file
        timeout: Request timeout in seconds
        max_retries: Maximum number of attempts
        session: Optional requests session

    Returns:
        Path to downloaded file

    Raises:
        DownloadError: If download fails after retries
        ValueError: If URL or destination is invalid

    Example:
        >>> url = "https://github.com/nucel-cloud/nucel/releases/download/cli-v0.1.9/nucel-cli-linux-x64.tar.gz"
        >>> download_file(url, Path("downloads/nucel-cli-linux-x64.tar.gz"))
    """
    if not url:
        raise ValueError("URL cannot be empty")

    if not destination:
        raise ValueError("Destination path cannot be empty")

    destination = Path(destination)
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise DownloadError(url, f"Cannot create download directory {destination.parent}: {e}") from e

    http = session or requests

    for attempt in range(max_retries):
        try:
            return _download(http, url, destination, timeout)
        except RequestException as e:
            status = getattr(e.response, "status_code", None)
            _remove_partial(destination)

            if status is not None and 400 <= status < 500:
                raise DownloadError(
                    url, f"Download of {url} failed with HTTP {status}", status
                ) from e

            if attempt == max_retries - 1:
                raise DownloadError(
                    url, f"Download of {url} failed after {max_retries} attempts: {e}"
                ) from e

            backoff_seconds = 2**attempt
            logger.warning(
                f"Download attempt {attempt + 1} failed: {e}. "
                f"Retrying in {backoff_seconds}s..."
            )
            time.sleep(backoff_seconds)
        except OSError as e:
            # Local write failures (disk full, permissions) are not retried
            _remove_partial(destination)
            raise DownloadError(url, f"Cannot write download of {url} to {destination}: {e}") from e

    raise DownloadError(url, f"Download of {url} was not attempted")


def _remove_partial(destination: Path) -> None:
    try:
        destination.unlink(missing_ok=True)
    except OSError as e:
        logger.debug(f"Could not remove partial download {destination}: {e}")


def _download(http, url: str, destination: Path, timeout: int) -> Path:
    """Stream one download attempt to disk."""
    logger.info(f"Downloading from {url}")

    response = http.get(url, stream=True, timeout=timeout, allow_redirects=True)
    response.raise_for_status()

    downloaded = 0
    with open(destination, "wb") as f:
        for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
            if chunk:
                f.write(chunk)
                downloaded += len(chunk)

    logger.info(f"Downloaded {downloaded / 1024 / 1024:.1f} MB to {destination}")
    return destination


__all__ = ["DownloadError", "download_file"]
