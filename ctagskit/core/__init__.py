"""
Core functionality for ctagskit.

This package contains the building blocks the installer is assembled from:
platform detection, release lookup, downloading, archive normalization,
configuration and the exception hierarchy.
"""

from .archive import (
    ArchiveExtractor,
    TarGzExtractor,
    ZipExtractor,
    get_extractor,
    extractor_for_archive,
)

from .config import (
    InstallerConfig,
    load_config_file,
    default_install_root,
)

from .download import (
    DownloadProgress,
    download_file,
    format_progress,
)

from .github import (
    get_latest_release,
    release_repo_for,
)

from .platform import (
    PlatformInfo,
    detect_platform,
    normalize_architecture,
    clear_platform_cache,
)

from .exceptions import (
    CtagsKitError,
    NetworkError,
    APIError,
    DownloadError,
    ExtractionError,
    InsecureArchiveError,
    FilesystemError,
    ConfigurationError,
    UnsupportedPlatformError,
    VerificationError,
)

__all__ = [
    "ArchiveExtractor",
    "TarGzExtractor",
    "ZipExtractor",
    "get_extractor",
    "extractor_for_archive",
    "InstallerConfig",
    "load_config_file",
    "default_install_root",
    "DownloadProgress",
    "download_file",
    "format_progress",
    "get_latest_release",
    "release_repo_for",
    "PlatformInfo",
    "detect_platform",
    "normalize_architecture",
    "clear_platform_cache",
    "CtagsKitError",
    "NetworkError",
    "APIError",
    "DownloadError",
    "ExtractionError",
    "InsecureArchiveError",
    "FilesystemError",
    "ConfigurationError",
    "UnsupportedPlatformError",
    "VerificationError",
]
