"""
Pytest configuration and shared fixtures for ctagskit tests.
"""

import io
import tarfile
import zipfile
from pathlib import Path
from typing import Callable, Dict

import pytest

from ctagskit.core.config import InstallerConfig
from ctagskit.core.platform import PlatformInfo, clear_platform_cache


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--integration",
        action="store_true",
        default=False,
        help="run integration tests that require network access",
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --integration flag is provided."""
    if not config.getoption("--integration"):
        skip_integration = pytest.mark.skip(reason="need --integration option to run")
        for item in items:
            if "integration" in item.keywords:
                item.add_marker(skip_integration)


# ============================================================================
# Platforms
# ============================================================================


@pytest.fixture(autouse=True)
def _reset_platform_cache():
    """Make sure no test sees another test's platform detection."""
    clear_platform_cache()
    yield
    clear_platform_cache()


@pytest.fixture
def linux_platform() -> PlatformInfo:
    return PlatformInfo("linux", "x86_64", "x86_64")


@pytest.fixture
def mac_platform() -> PlatformInfo:
    return PlatformInfo("macos", "aarch64", "arm64")


@pytest.fixture
def windows_platform() -> PlatformInfo:
    return PlatformInfo("windows", "x86_64", "AMD64")


# ============================================================================
# Configuration
# ============================================================================


@pytest.fixture
def install_root(tmp_path: Path) -> Path:
    """Install root that does not exist yet."""
    return tmp_path / "bin"


@pytest.fixture
def config(install_root: Path) -> InstallerConfig:
    """Installer configuration with fast retries and no credentials."""
    return InstallerConfig(install_root=install_root, retry_delay=0.0)


# ============================================================================
# Archives
# ============================================================================


def build_tar_gz(members: Dict[str, bytes]) -> bytes:
    """Build a .tar.gz archive in memory."""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
        for name, data in members.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = 0o644
            tar.addfile(info, io.BytesIO(data))
    return buffer.getvalue()


def build_zip(members: Dict[str, bytes]) -> bytes:
    """Build a .zip archive in memory."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        for name, data in members.items():
            zf.writestr(name, data)
    return buffer.getvalue()


UNIX_RELEASE_MEMBERS = {
    "uctags-v6.1.0-linux-x86_64/bin/ctags": b"\x7fELF fake ctags",
    "uctags-v6.1.0-linux-x86_64/bin/readtags": b"\x7fELF fake readtags",
    "uctags-v6.1.0-linux-x86_64/man/man1/ctags.1": b".TH CTAGS 1",
    "uctags-v6.1.0-linux-x86_64/README.md": b"Universal Ctags",
}

WINDOWS_RELEASE_MEMBERS = {
    "ctags.exe": b"MZ fake ctags",
    "readtags.exe": b"MZ fake readtags",
    "docs/README.md": b"Universal Ctags",
    "license/COPYING": b"GPL",
}


@pytest.fixture
def unix_archive_bytes() -> bytes:
    return build_tar_gz(UNIX_RELEASE_MEMBERS)


@pytest.fixture
def windows_archive_bytes() -> bytes:
    return build_zip(WINDOWS_RELEASE_MEMBERS)


@pytest.fixture
def write_archive(tmp_path: Path) -> Callable[[str, bytes], Path]:
    """Factory writing archive bytes to <tmp>/bin/<name>."""

    def _write(name: str, data: bytes) -> Path:
        target = tmp_path / "bin" / name
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        return target

    return _write


@pytest.fixture
def make_tar_gz() -> Callable[[Dict[str, bytes]], bytes]:
    return build_tar_gz


@pytest.fixture
def make_zip() -> Callable[[Dict[str, bytes]], bytes]:
    return build_zip
