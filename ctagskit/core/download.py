"""
Network download manager with redirect handling, retry logic and progress tracking.

This module provides:
- HTTP/HTTPS streaming downloads with TLS verification
- Explicit, bounded redirect following with loop detection
- Retry with linear backoff (1s, 2s, 3s, ...)
- Progress reporting (bytes, percentage, speed, ETA)
- Timeout handling
"""

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional
from urllib.parse import urljoin

import requests
from requests.exceptions import RequestException, Timeout

from ctagskit.core.exceptions import DownloadError, NetworkError

logger = logging.getLogger(__name__)

REDIRECT_STATUSES = (301, 302, 303, 307, 308)
CHUNK_SIZE = 8192


@dataclass
class DownloadProgress:
    """Progress information for a download."""

    bytes_downloaded: int
    total_bytes: int
    percentage: float
    speed_bps: float  # bytes per second
    eta_seconds: float  # estimated time remaining

    def __str__(self) -> str:
        """Format progress for display."""
        return format_progress(self)


def download_file(
    url: str,
    destination: Path,
    max_retries: int = 3,
    retry_delay: float = 1.0,
    timeout: float = 60,
    max_redirects: int = 5,
    progress_callback: Optional[Callable[[DownloadProgress], None]] = None,
    session: Optional[requests.Session] = None,
) -> Path:
    """
    Download file from URL to destination, retrying transient failures.

    Makes up to max_retries + 1 attempts. After failed attempt n the call
    sleeps retry_delay * n seconds. The error of the last attempt is
    re-raised as is.

    Args:
        url: URL to download from
        destination: Local path to save file
        max_retries: Number of retries after the first attempt
        retry_delay: Base delay in seconds for linear backoff
        timeout: Connect/read timeout in seconds per attempt
        max_redirects: Maximum number of redirect hops per attempt
        progress_callback: Optional callback for progress updates
        session: Optional requests session

    Returns:
        Path to downloaded file

    Raises:
        NetworkError: Connection failure, timeout or redirect problem
        DownloadError: Non-success HTTP status
        ValueError: If URL or destination is invalid

    Example:
        >>> from ctagskit.core.download import download_file
        >>> url = "https://example.com/uctags.tar.gz"
        >>> download_file(url, Path("bin/ctags.tar.gz"))
    """
    if not url:
        raise ValueError("URL cannot be empty")

    if not destination:
        raise ValueError("Destination path cannot be empty")

    if max_retries < 0:
        raise ValueError("max_retries cannot be negative")

    destination = Path(destination)
    total_attempts = max_retries + 1

    for attempt in range(1, total_attempts + 1):
        try:
            return _download_once(
                url=url,
                destination=destination,
                timeout=timeout,
                max_redirects=max_redirects,
                progress_callback=progress_callback,
                session=session,
            )
        except (NetworkError, DownloadError) as e:
            if attempt == total_attempts:
                raise

            backoff_seconds = retry_delay * attempt
            logger.warning(
                f"Download failed ({e}), retrying ({attempt}/{max_retries}) "
                f"in {backoff_seconds:g}s..."
            )
            time.sleep(backoff_seconds)

    # Should never reach here, but just in case
    raise DownloadError("Download failed for unknown reason")


def _download_once(
    url: str,
    destination: Path,
    timeout: float,
    max_redirects: int,
    progress_callback: Optional[Callable[[DownloadProgress], None]],
    session: Optional[requests.Session],
) -> Path:
    """
    Perform a single download attempt.

    This is an internal function called by download_file().

    Raises:
        NetworkError: Transport error, timeout, or redirect loop/limit
        DownloadError: Non-success, non-redirect status
    """
    response = _open_following_redirects(url, timeout, max_redirects, session)

    try:
        content_length = response.headers.get("content-length")
        total_size = int(content_length) if content_length else 0
        _stream_to_file(response, destination, total_size, progress_callback)
    except Timeout as e:
        _remove_partial(destination)
        raise NetworkError(f"Download timeout: {e}") from e
    except RequestException as e:
        _remove_partial(destination)
        raise NetworkError(f"Download interrupted: {e}") from e
    except Exception:
        _remove_partial(destination)
        raise
    finally:
        response.close()

    logger.info(f"Download complete: {destination}")
    return destination


def _open_following_redirects(
    url: str,
    timeout: float,
    max_redirects: int,
    session: Optional[requests.Session],
) -> requests.Response:
    """Issue the GET, following redirects by hand up to max_redirects hops."""
    http = session or requests
    visited = {url}
    current = url
    hops = 0

    while True:
        logger.debug(f"Requesting {current}")
        try:
            response = http.get(
                current, stream=True, timeout=timeout, allow_redirects=False
            )
        except Timeout as e:
            raise NetworkError(f"Download timeout: {e}") from e
        except RequestException as e:
            raise NetworkError(f"Download request failed: {e}") from e

        if response.status_code in REDIRECT_STATUSES:
            location = response.headers.get("location")
            response.close()
            if not location:
                raise NetworkError(
                    f"Redirect ({response.status_code}) without Location header"
                )

            hops += 1
            if hops > max_redirects:
                raise NetworkError(f"Too many redirects (more than {max_redirects})")

            current = urljoin(current, location)
            if current in visited:
                raise NetworkError(f"Redirect loop detected at {current}")
            visited.add(current)
            continue

        if response.status_code != 200:
            response.close()
            raise DownloadError(
                f"Download failed with status {response.status_code}",
                status_code=response.status_code,
            )

        return response


def _stream_to_file(
    response: requests.Response,
    destination: Path,
    total_size: int,
    progress_callback: Optional[Callable[[DownloadProgress], None]],
) -> None:
    destination.parent.mkdir(parents=True, exist_ok=True)

    downloaded = 0
    start_time = time.time()
    last_progress_time = start_time

    with open(destination, "wb") as f:
        for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
            if not chunk:
                continue
            f.write(chunk)
            downloaded += len(chunk)

            # Report progress (max once per 0.5 seconds to avoid spam)
            current_time = time.time()
            if progress_callback and (
                current_time - last_progress_time >= 0.5 or downloaded == total_size
            ):
                progress_callback(
                    _make_progress(downloaded, total_size, current_time - start_time)
                )
                last_progress_time = current_time

    if progress_callback and downloaded != total_size:
        progress_callback(
            _make_progress(downloaded, total_size, time.time() - start_time)
        )


def _make_progress(downloaded: int, total_size: int, elapsed: float) -> DownloadProgress:
    speed = downloaded / elapsed if elapsed > 0 else 0
    remaining = total_size - downloaded if total_size > 0 else 0
    eta = remaining / speed if speed > 0 else 0
    return DownloadProgress(
        bytes_downloaded=downloaded,
        total_bytes=total_size if total_size > 0 else downloaded,
        percentage=(downloaded / total_size * 100) if total_size > 0 else 0,
        speed_bps=speed,
        eta_seconds=eta,
    )


def _remove_partial(destination: Path) -> None:
    try:
        destination.unlink(missing_ok=True)
    except OSError as e:
        logger.warning(f"Could not remove partial download {destination}: {e}")


def format_progress(progress: DownloadProgress) -> str:
    """
    Format progress for display.

    Example:
        >>> progress = DownloadProgress(52428800, 104857600, 50.0, 1048576, 50)
        >>> print(format_progress(progress))
        50.0/100.0 MB (50.0%) at 1.0 MB/s ETA: 50s
    """
    mb_downloaded = progress.bytes_downloaded / 1024 / 1024
    mb_total = progress.total_bytes / 1024 / 1024
    speed_mbps = progress.speed_bps / 1024 / 1024

    if progress.total_bytes > 0 and progress.percentage > 0:
        return (
            f"{mb_downloaded:.1f}/{mb_total:.1f} MB "
            f"({progress.percentage:.1f}%) "
            f"at {speed_mbps:.1f} MB/s "
            f"ETA: {progress.eta_seconds:.0f}s"
        )
    else:
        # Unknown total size
        return f"{mb_downloaded:.1f} MB at {speed_mbps:.1f} MB/s"
