"""
Universal Ctags installer.

Downloads the latest prebuilt ctags release for the running platform and
installs it as a single executable in the install root. The install runs as a
linear sequence of states:

    START -> RESOLVE_PLATFORM -> LOCATE_RELEASE -> BUILD_DOWNLOAD_INFO
          -> DOWNLOAD -> EXTRACT -> SET_PERMISSIONS -> DELETE_ARCHIVE
          -> VERIFY_BINARY -> DONE

Any failure ends in FAILED; a configured skip ends in SKIPPED before any
network or filesystem access.

The install root is owned by a single installer run. Running two installers
against the same root at the same time is not supported.
"""

import logging
import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

import requests

from ctagskit.core.archive import extractor_for_archive, get_extractor
from ctagskit.core.config import InstallerConfig
from ctagskit.core.download import DownloadProgress, download_file
from ctagskit.core.exceptions import (
    CtagsKitError,
    FilesystemError,
    UnsupportedPlatformError,
)
from ctagskit.core.filesystem import remove_path, set_executable
from ctagskit.core.github import get_latest_release, release_repo_for
from ctagskit.core.platform import KNOWN_ARCHITECTURES, PlatformInfo, detect_platform

logger = logging.getLogger(__name__)

GITHUB_URL = "https://github.com"

MANUAL_INSTALL_HELP = """
You may need to install universal-ctags manually:
  - macOS: brew install universal-ctags
  - Linux: apt install universal-ctags or snap install universal-ctags
  - Windows: Download from https://github.com/universal-ctags/ctags-win32/releases

Alternatively, set SKIP_POSTINSTALL=1 to skip automatic installation."""


class InstallState(Enum):
    """States of an installer run."""

    START = "start"
    RESOLVE_PLATFORM = "resolve-platform"
    LOCATE_RELEASE = "locate-release"
    BUILD_DOWNLOAD_INFO = "build-download-info"
    DOWNLOAD = "download"
    EXTRACT = "extract"
    SET_PERMISSIONS = "set-permissions"
    DELETE_ARCHIVE = "delete-archive"
    VERIFY_BINARY = "verify-binary"
    DONE = "done"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class DownloadInfo:
    """Where to fetch a release archive from and what to call it locally."""

    url: str
    archive_name: str
    repo: str = ""
    version: str = ""


def get_download_info(platform: PlatformInfo, version: str) -> DownloadInfo:
    """
    Compute the release archive URL for a platform and release tag.

    Args:
        platform: Platform information
        version: Release tag

    Returns:
        DownloadInfo for the archive

    Raises:
        UnsupportedPlatformError: If no release is published for the OS

    Example:
        >>> info = get_download_info(PlatformInfo("linux", "x86_64"), "v6.1.0")
        >>> info.url
        'https://github.com/universal-ctags/ctags-nightly-build/releases/download/v6.1.0/uctags-v6.1.0-linux-x86_64.tar.gz'
    """
    repo = release_repo_for(platform)
    extractor = get_extractor(platform)

    if platform.is_windows:
        win_arch = "x64" if platform.arch == "x86_64" else "x86"
        return DownloadInfo(
            url=(
                f"{GITHUB_URL}/{repo}/releases/download/{version}/"
                f"ctags-{version}-{win_arch}.zip"
            ),
            archive_name=extractor.archive_name,
            repo=repo,
            version=version,
        )

    if platform.is_mac:
        platform_name = "darwin"
    elif platform.is_linux:
        platform_name = "linux"
    else:
        raise UnsupportedPlatformError(platform.os, platform.arch)

    return DownloadInfo(
        url=(
            f"{GITHUB_URL}/{repo}/releases/download/{version}/"
            f"uctags-{version}-{platform_name}-{platform.arch}.tar.gz"
        ),
        archive_name=extractor.archive_name,
        repo=repo,
        version=version,
    )


class CtagsInstaller:
    """
    Download and install the Universal Ctags binary.

    Attributes:
        config: Installer configuration
        platform: Platform information (detected on first use if None)
        state: Current InstallState
    """

    def __init__(
        self,
        config: InstallerConfig,
        platform: Optional[PlatformInfo] = None,
        session: Optional[requests.Session] = None,
        progress_callback: Optional[Callable[[DownloadProgress], None]] = None,
    ):
        """
        Initialize installer.

        Args:
            config: Installer configuration
            platform: Platform information (auto-detected if None)
            session: Optional requests session used for every HTTP call
            progress_callback: Optional callback for download progress
        """
        self.config = config
        self.platform = platform
        self.session = session
        self.progress_callback = progress_callback
        self.state = InstallState.START

    @property
    def install_root(self) -> Path:
        return self.config.install_root

    def install(self) -> Path:
        """
        Run the install sequence.

        Returns:
            Canonical path of the installed binary

        Raises:
            CtagsKitError: If any step fails
        """
        archive_path: Optional[Path] = None

        try:
            self._enter(InstallState.RESOLVE_PLATFORM)
            if self.platform is None:
                self.platform = detect_platform()
            platform = self.platform
            logger.info(f"Installing universal-ctags for {platform}...")
            if platform.arch not in KNOWN_ARCHITECTURES:
                logger.warning(
                    f"No prebuilt release is known for architecture {platform.arch}; "
                    "trying anyway"
                )

            self._enter(InstallState.LOCATE_RELEASE)
            repo = release_repo_for(platform)
            logger.info(f"Fetching latest release of {repo}...")
            version = get_latest_release(
                repo,
                token=self.config.github_token,
                api_url=self.config.api_url,
                timeout=self.config.api_timeout,
                session=self.session,
            )
            logger.info(f"Latest version: {version}")

            self._enter(InstallState.BUILD_DOWNLOAD_INFO)
            info = get_download_info(platform, version)

            self._enter(InstallState.DOWNLOAD)
            self.install_root.mkdir(parents=True, exist_ok=True)
            archive_path = self.install_root / info.archive_name
            logger.info(f"Downloading from: {info.url}")
            download_file(
                info.url,
                archive_path,
                max_retries=self.config.retries,
                retry_delay=self.config.retry_delay,
                timeout=self.config.download_timeout,
                max_redirects=self.config.max_redirects,
                progress_callback=self.progress_callback,
                session=self.session,
            )

            self._enter(InstallState.EXTRACT)
            logger.info("Extracting archive...")
            binary_path = extractor_for_archive(archive_path).extract(
                archive_path, self.install_root
            )

            if not platform.is_windows:
                self._enter(InstallState.SET_PERMISSIONS)
                set_executable(binary_path)
                logger.info("Set executable permissions")

            self._enter(InstallState.DELETE_ARCHIVE)
            remove_path(archive_path)

            self._enter(InstallState.VERIFY_BINARY)
            if not binary_path.is_file():
                raise FilesystemError(
                    f"Binary not found at {binary_path} after extraction"
                )

        except Exception:
            failed_in = self.state
            self.state = InstallState.FAILED
            logger.debug(f"Install failed during {failed_in.value}")
            if archive_path is not None:
                self._discard_archive(archive_path)
            raise

        self._enter(InstallState.DONE)
        logger.info("Installation complete")
        logger.info(f"Binary location: {binary_path}")
        return binary_path

    def run(self) -> int:
        """
        Run the installer as a postinstall step.

        Returns:
            Exit code: 0 on success or skip, 1 on failure
        """
        if self.config.skip_install:
            self.state = InstallState.SKIPPED
            logger.info("Skipping postinstall (SKIP_POSTINSTALL is set)")
            return 0

        try:
            self.install()
        except (CtagsKitError, OSError) as e:
            logger.error(f"Failed to install universal-ctags: {e}")
            print(MANUAL_INSTALL_HELP, file=sys.stderr)
            return 1

        return 0

    def _enter(self, state: InstallState) -> None:
        logger.debug(f"Installer state: {self.state.value} -> {state.value}")
        self.state = state

    def _discard_archive(self, archive_path: Path) -> None:
        try:
            remove_path(archive_path)
        except FilesystemError as e:
            logger.warning(f"Failed to cleanup after error: {e}")
