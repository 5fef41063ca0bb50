"""
Lookup of the installed ctags binary.

This module never installs anything: if the binary is missing the caller gets
a ConfigurationError telling them to run the installer.
"""

from pathlib import Path
from typing import Optional

from ctagskit.core.config import InstallerConfig
from ctagskit.core.exceptions import ConfigurationError
from ctagskit.core.platform import PlatformInfo, detect_platform


def get_ctags_path(
    install_root: Optional[Path] = None,
    platform: Optional[PlatformInfo] = None,
) -> Path:
    """
    Get the absolute path of the installed ctags binary.

    Args:
        install_root: Directory the installer wrote to (default: from
            InstallerConfig.from_environment())
        platform: Platform information (auto-detected if None)

    Returns:
        Absolute path to the ctags executable

    Raises:
        ConfigurationError: If the binary does not exist

    Example:
        >>> import subprocess
        >>> subprocess.run([str(get_ctags_path()), "--version"])
    """
    if install_root is None:
        install_root = InstallerConfig.from_environment().install_root
    platform = platform or detect_platform()

    binary_path = (Path(install_root) / platform.binary_name).absolute()

    if not binary_path.is_file():
        raise ConfigurationError(
            f"ctags binary not found at {binary_path}. "
            "Please ensure the package was installed correctly and "
            "'ctagskit install' ran successfully."
        )

    return binary_path


def ctags_path() -> str:
    """Return the installed ctags path as a string, for subprocess calls."""
    return str(get_ctags_path())
