"""
Unit tests for download module.

Tests download functionality with mocked network requests.
"""

import errno
from unittest.mock import patch

import pytest
import requests
import responses

from nucel_setup.core.download import DownloadError, download_file

URL = "https://github.com/nucel-cloud/nucel/releases/download/cli-v1.0.0/nucel-cli-linux-x64.tar.gz"


class TestDownloadFile:
    """Test download_file function."""

    @responses.activate
    def test_successful_download(self, temp_dir):
        """Test body is streamed to the destination."""
        responses.add(responses.GET, URL, body=b"archive bytes", status=200)
        destination = temp_dir / "downloads" / "nucel-cli-linux-x64.tar.gz"

        result = download_file(URL, destination)

        assert result == destination
        assert destination.read_bytes() == b"archive bytes"

    @responses.activate
    def test_follows_redirect(self, temp_dir):
        """Test GitHub-style redirect to the asset host is followed."""
        asset_url = "https://objects.githubusercontent.com/asset"
        responses.add(responses.GET, URL, status=302, headers={"Location": asset_url})
        responses.add(responses.GET, asset_url, body=b"redirected", status=200)

        destination = download_file(URL, temp_dir / "file.tar.gz")

        assert destination.read_bytes() == b"redirected"

    @responses.activate
    def test_not_found_is_not_retried(self, temp_dir):
        """Test 4xx fails immediately."""
        responses.add(responses.GET, URL, status=404)

        with pytest.raises(DownloadError, match="HTTP 404") as exc_info:
            download_file(URL, temp_dir / "file.tar.gz", max_retries=3)

        assert exc_info.value.status_code == 404
        assert exc_info.value.url == URL
        assert len(responses.calls) == 1
        assert not (temp_dir / "file.tar.gz").exists()

    @responses.activate
    @patch("nucel_setup.core.download.time.sleep")
    def test_server_error_retried(self, mock_sleep, temp_dir):
        """Test 5xx is retried with exponential backoff."""
        responses.add(responses.GET, URL, status=503)
        responses.add(responses.GET, URL, status=503)
        responses.add(responses.GET, URL, body=b"ok", status=200)

        destination = download_file(URL, temp_dir / "file.tar.gz", max_retries=3)

        assert destination.read_bytes() == b"ok"
        assert len(responses.calls) == 3
        assert [c.args[0] for c in mock_sleep.call_args_list] == [1, 2]

    @responses.activate
    @patch("nucel_setup.core.download.time.sleep")
    def test_gives_up_after_max_retries(self, mock_sleep, temp_dir):
        responses.add(
            responses.GET, URL, body=requests.exceptions.ConnectionError("connection reset")
        )

        with pytest.raises(DownloadError, match="failed after 2 attempts"):
            download_file(URL, temp_dir / "file.tar.gz", max_retries=2)

        assert len(responses.calls) == 2
        assert not (temp_dir / "file.tar.gz").exists()

    @responses.activate
    def test_uses_session(self, temp_dir):
        responses.add(responses.GET, URL, body=b"via session", status=200)

        with requests.Session() as session:
            destination = download_file(URL, temp_dir / "file.tar.gz", session=session)

        assert destination.read_bytes() == b"via session"

    def test_empty_url(self, temp_dir):
        with pytest.raises(ValueError, match="URL cannot be empty"):
            download_file("", temp_dir / "file")

    @responses.activate
    @patch("nucel_setup.core.download.time.sleep")
    def test_local_write_failure_not_retried(self, mock_sleep, temp_dir):
        """Test a full disk surfaces as DownloadError and the partial file is removed."""
        responses.add(responses.GET, URL, body=b"archive bytes", status=200)
        destination = temp_dir / "file.tar.gz"

        def disk_full(path, mode="r", *args, **kwargs):
            with open(path, mode, *args, **kwargs) as f:
                f.write(b"partial")
            raise OSError(errno.ENOSPC, "No space left on device")

        with patch("nucel_setup.core.download.open", side_effect=disk_full, create=True):
            with pytest.raises(DownloadError, match="No space left on device") as exc_info:
                download_file(URL, destination, max_retries=3)

        assert exc_info.value.url == URL
        assert len(responses.calls) == 1
        mock_sleep.assert_not_called()
        assert not destination.exists()

    def test_unwritable_destination_directory(self, temp_dir):
        blocker = temp_dir / "blocker"
        blocker.write_text("not a directory")

        with pytest.raises(DownloadError, match="Cannot create download directory"):
            download_file(URL, blocker / "nested" / "file.tar.gz")
