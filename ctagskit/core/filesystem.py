"""
Cross-platform file system utilities for ctagskit.

This module provides:
- Archive unpacking (tar.gz, zip) with directory traversal protection
- Safe removal of files and directory trees
- Executable permission handling

Failures are reported as ExtractionError or FilesystemError so the installer
can report them uniformly.
"""

import logging
import os
import shutil
import stat
import sys
import tarfile
import zipfile
from pathlib import Path
from typing import Union

from ctagskit.core.exceptions import (
    ExtractionError,
    FilesystemError,
    InsecureArchiveError,
)

logger = logging.getLogger(__name__)

# Platform detection
IS_WINDOWS = os.name == "nt"

EXECUTABLE_PERMISSIONS = 0o755


# ============================================================================
# Path Utilities
# ============================================================================


def is_relative_to(path: Path, parent: Path) -> bool:
    """
    Check if path is relative to parent.

    Example:
        >>> is_relative_to(Path('/a/b/c'), Path('/a'))
        True
        >>> is_relative_to(Path('/a/b'), Path('/c'))
        False
    """
    try:
        path.relative_to(parent)
        return True
    except ValueError:
        return False


def _validate_archive_path(path: str, destination: Path) -> None:
    """
    Validate that an archive member path is safe to extract.

    Raises:
        InsecureArchiveError: If path attempts directory traversal
    """
    member_path = (destination / path).resolve()

    if not is_relative_to(member_path, destination.resolve()):
        raise InsecureArchiveError(
            f"Archive member '{path}' attempts directory traversal. "
            "This is a security risk and extraction has been blocked."
        )


# ============================================================================
# Archive Unpacking
# ============================================================================


def unpack_tar_gz(archive_path: Union[str, Path], destination: Union[str, Path]) -> None:
    """
    Unpack a .tar.gz archive into destination, keeping member paths as is.

    Raises:
        InsecureArchiveError: If the archive contains malicious paths
        ExtractionError: If the archive is missing or corrupt
    """
    archive_path = Path(archive_path)
    destination = Path(destination)
    _check_archive(archive_path)
    destination.mkdir(parents=True, exist_ok=True)

    try:
        with tarfile.open(archive_path, "r:gz") as tar:
            members = tar.getmembers()

            # Validate all paths first
            for member in members:
                _validate_archive_path(member.name, destination)

            # Extract with filter for security (Python 3.12+)
            # For older Python, we've already validated paths above
            if sys.version_info >= (3, 12):
                tar.extractall(destination, filter="data")
            else:
                tar.extractall(destination)
    except InsecureArchiveError:
        raise
    except (tarfile.TarError, EOFError, OSError) as e:
        raise ExtractionError(f"Failed to extract {archive_path}: {e}") from e


def unpack_zip(archive_path: Union[str, Path], destination: Union[str, Path]) -> None:
    """
    Unpack a .zip archive into destination.

    Raises:
        InsecureArchiveError: If the archive contains malicious paths
        ExtractionError: If the archive is missing or corrupt
    """
    archive_path = Path(archive_path)
    destination = Path(destination)
    _check_archive(archive_path)
    destination.mkdir(parents=True, exist_ok=True)

    try:
        with zipfile.ZipFile(archive_path, "r") as zf:
            members = zf.namelist()

            # Validate all paths first
            for member in members:
                _validate_archive_path(member, destination)

            zf.extractall(destination)
    except InsecureArchiveError:
        raise
    except (zipfile.BadZipFile, OSError) as e:
        raise ExtractionError(f"Failed to extract {archive_path}: {e}") from e


def _check_archive(archive_path: Path) -> None:
    if not archive_path.is_file():
        raise ExtractionError(f"Archive not found: {archive_path}")


# ============================================================================
# Safe File Operations
# ============================================================================


def remove_path(path: Union[str, Path]) -> None:
    """
    Remove a file, symlink or directory tree. Missing paths are ignored.

    Raises:
        FilesystemError: If deletion fails
    """
    path = Path(path)

    try:
        if path.is_symlink() or path.is_file():
            path.unlink()
        elif path.is_dir():
            safe_rmtree(path)
    except FilesystemError:
        raise
    except OSError as e:
        raise FilesystemError(f"Failed to remove '{path}': {e}") from e


def safe_rmtree(path: Union[str, Path]) -> None:
    """
    Remove a directory tree, clearing read-only flags on Windows.

    Raises:
        FilesystemError: If deletion fails

    Example:
        >>> safe_rmtree('/tmp/build')
    """
    path = Path(path)

    if not path.exists():
        return  # Already gone, nothing to do

    if not path.is_dir():
        raise FilesystemError(f"Path is not a directory: {path}")

    try:
        # Handle read-only files on Windows
        if IS_WINDOWS:

            def handle_remove_readonly(func, path, exc):
                """Error handler for Windows read-only files."""
                if not os.access(path, os.W_OK):
                    os.chmod(path, stat.S_IWRITE)
                    func(path)
                else:
                    raise

            if sys.version_info >= (3, 12):
                shutil.rmtree(path, onexc=handle_remove_readonly)
            else:
                shutil.rmtree(path, onerror=handle_remove_readonly)
        else:
            shutil.rmtree(path)

    except Exception as e:
        raise FilesystemError(f"Failed to remove directory '{path}': {e}") from e


def move_file(source: Union[str, Path], target: Union[str, Path]) -> Path:
    """
    Move a file, replacing an existing target file.

    Raises:
        FilesystemError: If the target is a directory or the move fails
    """
    source = Path(source)
    target = Path(target)

    if target.is_dir() and not target.is_symlink():
        raise FilesystemError(f"Cannot replace directory with file: {target}")

    try:
        os.replace(source, target)
    except OSError:
        # Cross-device moves need a copy
        try:
            shutil.move(str(source), str(target))
        except (OSError, shutil.Error) as e:
            raise FilesystemError(
                f"Failed to move '{source}' to '{target}': {e}"
            ) from e

    return target


def set_executable(path: Union[str, Path], mode: int = EXECUTABLE_PERMISSIONS) -> None:
    """
    Set permission bits on a file (0755 by default).

    Raises:
        FilesystemError: If the file is missing or chmod fails
    """
    path = Path(path)

    try:
        os.chmod(path, mode)
    except OSError as e:
        raise FilesystemError(f"Failed to set permissions on '{path}': {e}") from e

    logger.debug(f"Set permissions {oct(mode)} on {path}")
