"""
Centralized exception hierarchy for ctagskit.

Every error raised by the installer pipeline derives from CtagsKitError so the
CLI can turn any failure into a diagnostic and a non-zero exit status.
"""

from typing import Optional


# ============================================================================
# Base Exceptions
# ============================================================================


class CtagsKitError(Exception):
    """Base exception for all ctagskit errors."""

    pass


# ============================================================================
# Network Exceptions
# ============================================================================


class NetworkError(CtagsKitError):
    """Connection failure, timeout or redirect loop."""

    pass


class APIError(CtagsKitError):
    """Release API returned a non-success status or an unparsable body."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class DownloadError(CtagsKitError):
    """Archive fetch returned a non-success status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


# ============================================================================
# Filesystem Exceptions
# ============================================================================


class ExtractionError(CtagsKitError):
    """Archive is corrupt or does not contain the expected binary."""

    pass


class InsecureArchiveError(ExtractionError):
    """Archive contains insecure paths (directory traversal attempt)."""

    pass


class FilesystemError(CtagsKitError):
    """Move, delete or permission change failed."""

    pass


# ============================================================================
# Configuration Exceptions
# ============================================================================


class ConfigurationError(CtagsKitError):
    """Invalid configuration, or the binary was requested before installation."""

    pass


class UnsupportedPlatformError(CtagsKitError):
    """No prebuilt ctags release exists for the running platform."""

    def __init__(self, os_name: str, arch: str = ""):
        self.os_name = os_name
        self.arch = arch
        msg = f"Unsupported platform: {os_name}"
        if arch:
            msg += f"-{arch}"
        super().__init__(msg)


class VerificationError(CtagsKitError):
    """Installed binary failed its smoke check."""

    pass
