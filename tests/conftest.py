"""
Pytest configuration and shared fixtures for nucel-setup tests.
"""

import io
import os
import stat
import tarfile
import tempfile
import zipfile
from pathlib import Path
from typing import Generator
from unittest.mock import Mock

import pytest

from nucel_setup.core.config import HostPaths, SetupSettings
from nucel_setup.core.platform import clear_platform_cache, describe_platform


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--integration",
        action="store_true",
        default=False,
        help="run integration tests that spawn real processes",
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --integration flag is provided."""
    if not config.getoption("--integration"):
        skip_integration = pytest.mark.skip(reason="need --integration option to run")
        for item in items:
            if "integration" in item.keywords:
                item.add_marker(skip_integration)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests (requires --integration)",
    )


# ============================================================================
# Shared Test Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def reset_platform_cache():
    """Platform detection is cached per process; start every test fresh."""
    clear_platform_cache()
    yield
    clear_platform_cache()


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create temporary directory for test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def linux_x64():
    return describe_platform("Linux", "x86_64")


@pytest.fixture
def windows_x64():
    return describe_platform("Windows", "AMD64")


@pytest.fixture
def settings() -> SetupSettings:
    return SetupSettings(download_retries=1)


@pytest.fixture
def host(temp_dir: Path) -> HostPaths:
    """Host paths rooted in a temporary directory."""
    home = temp_dir / "home"
    work = temp_dir / "work"
    runner_temp = temp_dir / "runner-temp"
    for directory in (home, work, runner_temp):
        directory.mkdir()

    return HostPaths(
        home=home,
        work_dir=work,
        temp_dir=runner_temp,
        cache_override=temp_dir / "cache",
    )


@pytest.fixture
def probe_ok():
    """Completed version probe that succeeds."""
    return Mock(returncode=0, stdout="nucel-cli 1.0.0\n", stderr="")


@pytest.fixture
def probe_failed():
    """Completed version probe that fails."""
    return Mock(returncode=1, stdout="", stderr="segmentation fault")


def _write_executable(path: Path, content: str = "#!/bin/sh\necho nucel-cli 1.0.0\n") -> Path:
    """Write a file and mark it executable."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    if os.name != "nt":
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


def _make_tar_gz(members: dict) -> bytes:
    """Build an in-memory .tar.gz from {member name: content}."""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
        for name, content in members.items():
            data = content.encode() if isinstance(content, str) else content
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = 0o755
            tar.addfile(info, io.BytesIO(data))
    return buffer.getvalue()


def _make_zip(members: dict) -> bytes:
    """Build an in-memory .zip from {member name: content}."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        for name, content in members.items():
            zf.writestr(name, content)
    return buffer.getvalue()


@pytest.fixture
def write_executable():
    """Factory writing an executable script: write_executable(path, content=...)."""
    return _write_executable


@pytest.fixture
def tar_gz():
    """Factory building .tar.gz bytes: tar_gz({"bin/nucel": "..."})."""
    return _make_tar_gz


@pytest.fixture
def zip_bytes():
    """Factory building .zip bytes: zip_bytes({"nucel.exe": "..."})."""
    return _make_zip
