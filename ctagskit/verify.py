"""
Smoke checks for an installed ctags binary.
"""

import logging
import subprocess
from pathlib import Path
from typing import Union

from ctagskit.core.exceptions import VerificationError
from ctagskit.core.filesystem import IS_WINDOWS

logger = logging.getLogger(__name__)

EXPECTED_BANNERS = ("universal ctags", "universal-ctags")


def is_executable(path: Union[str, Path]) -> bool:
    """Check the owner execute bit (always True on Windows)."""
    path = Path(path)
    if not path.is_file():
        return False
    if IS_WINDOWS:
        return True
    return bool(path.stat().st_mode & 0o100)


def verify_binary(path: Union[str, Path], timeout: float = 10) -> str:
    """
    Run '<path> --version' and check that it is Universal Ctags.

    Args:
        path: Path to the ctags executable
        timeout: Seconds to wait for the process

    Returns:
        First line of the version output

    Raises:
        VerificationError: If the binary cannot run or is not Universal Ctags
    """
    path = Path(path)

    if not is_executable(path):
        raise VerificationError(f"Not an executable file: {path}")

    try:
        result = subprocess.run(
            [str(path), "--version"],
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        raise VerificationError(f"{path} --version timed out after {timeout}s") from e
    except OSError as e:
        raise VerificationError(f"Failed to run {path}: {e}") from e

    if result.returncode != 0:
        raise VerificationError(
            f"{path} --version exited with code {result.returncode}: "
            f"{result.stderr.strip()}"
        )

    output = result.stdout.strip()
    if not any(banner in output.lower() for banner in EXPECTED_BANNERS):
        raise VerificationError(
            f"{path} does not look like Universal Ctags: {output[:200]!r}"
        )

    first_line = output.splitlines()[0]
    logger.debug(f"Verified {path}: {first_line}")
    return first_line
