"""
Unit tests for the npm package manager strategy.
"""

import logging
import subprocess
from pathlib import Path
from unittest.mock import Mock, patch

import pytest

from nucel_setup.core.exceptions import AcquisitionError
from nucel_setup.install.npm import POSIX_BIN_DIRS, PackageManagerStrategy


@pytest.fixture
def npm_ok():
    return Mock(returncode=0, stdout="added 1 package", stderr="")


class TestCommand:
    """Test npm command construction."""

    def test_latest(self, settings, host):
        strategy = PackageManagerStrategy(settings, host)
        assert strategy.install_command("latest") == ["npm", "install", "-g", "@nucel.cloud/cli"]

    def test_pinned(self, settings, host):
        strategy = PackageManagerStrategy(settings, host)
        assert strategy.install_command("1.2.3") == [
            "npm", "install", "-g", "@nucel.cloud/cli@1.2.3"
        ]

    def test_prefix(self, settings, host, temp_dir):
        strategy = PackageManagerStrategy(settings, host, install_prefix=str(temp_dir / "prefix"))
        assert strategy.install_command("latest")[-2:] == ["--prefix", str(temp_dir / "prefix")]


class TestCandidateDirectories:
    def test_posix(self, settings, host, linux_x64):
        strategy = PackageManagerStrategy(settings, host)
        directories = strategy.candidate_directories(linux_x64)
        assert directories[: len(POSIX_BIN_DIRS)] == [Path(d) for d in POSIX_BIN_DIRS]
        assert directories[-2:] == [
            host.home / ".npm-global" / "bin",
            host.home / "node_modules" / ".bin",
        ]

    def test_prefix_first(self, settings, host, linux_x64, temp_dir):
        strategy = PackageManagerStrategy(settings, host, install_prefix=str(temp_dir / "p"))
        assert strategy.candidate_directories(linux_x64)[0] == temp_dir / "p" / "bin"

    def test_windows(self, settings, temp_dir, windows_x64):
        from nucel_setup.core.config import HostPaths

        host = HostPaths(
            home=temp_dir,
            work_dir=temp_dir,
            temp_dir=temp_dir,
            app_data=temp_dir / "AppData",
            program_files=temp_dir / "Program Files",
        )
        strategy = PackageManagerStrategy(settings, host, install_prefix=str(temp_dir / "p"))
        assert strategy.candidate_directories(windows_x64) == [
            temp_dir / "p",
            temp_dir / "AppData" / "npm",
            temp_dir / "Program Files" / "nodejs",
        ]


class TestAcquire:
    """Test npm installation."""

    @patch("subprocess.run")
    def test_installs_into_prefix(self, mock_run, settings, host, linux_x64, temp_dir, write_executable, npm_ok):
        prefix = temp_dir / "prefix"
        installed = write_executable(prefix / "bin" / "nucel")
        mock_run.return_value = npm_ok
        strategy = PackageManagerStrategy(settings, host, install_prefix=str(prefix))

        assert strategy.acquire("1.0.0", linux_x64) == installed
        assert mock_run.call_args.args[0] == [
            "npm", "install", "-g", "@nucel.cloud/cli@1.0.0", "--prefix", str(prefix)
        ]
        assert mock_run.call_args.kwargs["timeout"] == settings.install_timeout

    @patch("subprocess.run")
    def test_token_only_in_child_env(self, mock_run, settings, host, linux_x64, temp_dir, write_executable, npm_ok, caplog):
        """Test the token reaches npm via NPM_TOKEN and is never logged."""
        prefix = temp_dir / "prefix"
        write_executable(prefix / "bin" / "nucel")
        mock_run.return_value = npm_ok
        strategy = PackageManagerStrategy(
            settings, host, token="npm_s3cret", install_prefix=str(prefix), base_env={"PATH": "/usr/bin"}
        )

        with caplog.at_level(logging.DEBUG):
            strategy.acquire("latest", linux_x64)

        env = mock_run.call_args.kwargs["env"]
        assert env == {"PATH": "/usr/bin", "NPM_TOKEN": "npm_s3cret"}
        assert "npm_s3cret" not in " ".join(mock_run.call_args.args[0])
        assert "npm_s3cret" not in caplog.text

    @patch("subprocess.run")
    def test_no_token_no_env_var(self, mock_run, settings, host, linux_x64, temp_dir, write_executable, npm_ok):
        prefix = temp_dir / "prefix"
        write_executable(prefix / "bin" / "nucel")
        mock_run.return_value = npm_ok
        strategy = PackageManagerStrategy(settings, host, install_prefix=str(prefix), base_env={})

        strategy.acquire("latest", linux_x64)

        assert "NPM_TOKEN" not in mock_run.call_args.kwargs["env"]

    @patch("subprocess.run")
    def test_npm_failure(self, mock_run, settings, host, linux_x64):
        mock_run.return_value = Mock(returncode=1, stdout="", stderr="npm ERR! 404 Not Found")
        strategy = PackageManagerStrategy(settings, host)

        with pytest.raises(AcquisitionError, match="exited with code 1: npm ERR! 404") as exc_info:
            strategy.acquire("9.9.9", linux_x64)

        assert str(exc_info.value).startswith("Failed to install nucel CLI:")
        assert exc_info.value.target == "npm install -g @nucel.cloud/cli@9.9.9"

    @patch("subprocess.run", side_effect=FileNotFoundError("npm"))
    def test_npm_missing(self, mock_run, settings, host, linux_x64):
        strategy = PackageManagerStrategy(settings, host)
        with pytest.raises(AcquisitionError, match="could not run"):
            strategy.acquire("latest", linux_x64)

    @patch("subprocess.run", side_effect=subprocess.TimeoutExpired(["npm"], 600))
    def test_npm_timeout(self, mock_run, settings, host, linux_x64):
        strategy = PackageManagerStrategy(settings, host)
        with pytest.raises(AcquisitionError, match="timed out"):
            strategy.acquire("latest", linux_x64)

    @patch("nucel_setup.install.npm.POSIX_BIN_DIRS", ())
    @patch("subprocess.run")
    def test_executable_not_found(self, mock_run, settings, host, linux_x64, npm_ok):
        mock_run.return_value = npm_ok
        strategy = PackageManagerStrategy(settings, host)

        with pytest.raises(AcquisitionError, match="executable not found after installation"):
            strategy.acquire("latest", linux_x64)

    @patch("subprocess.run")
    def test_windows_cmd_shim(self, mock_run, settings, temp_dir, windows_x64, npm_ok):
        from nucel_setup.core.config import HostPaths

        app_data = temp_dir / "AppData"
        shim = app_data / "npm" / "nucel.cmd"
        shim.parent.mkdir(parents=True)
        shim.write_text("@echo off")
        host = HostPaths(home=temp_dir, work_dir=temp_dir, temp_dir=temp_dir, app_data=app_data)
        mock_run.return_value = npm_ok

        strategy = PackageManagerStrategy(settings, host)

        assert strategy.acquire("latest", windows_x64) == shim
