"""
ctagskit: installs a prebuilt Universal Ctags binary and exposes its path.

Usage:
    from ctagskit import get_ctags_path

    subprocess.run([str(get_ctags_path()), "-R", "."])
"""

__version__ = "0.1.0"

from .core.exceptions import (
    CtagsKitError,
    NetworkError,
    APIError,
    DownloadError,
    ExtractionError,
    FilesystemError,
    ConfigurationError,
)
from .core.config import InstallerConfig
from .installer import CtagsInstaller
from .paths import get_ctags_path, ctags_path

__all__ = [
    "CtagsKitError",
    "NetworkError",
    "APIError",
    "DownloadError",
    "ExtractionError",
    "FilesystemError",
    "ConfigurationError",
    "InstallerConfig",
    "CtagsInstaller",
    "get_ctags_path",
    "ctags_path",
]
