"""
GitHub release lookup.

Resolves the latest published release tag of a repository with one
read-only call to the releases API. There is no retry at this layer.
"""

import logging
from typing import Optional

import requests
from requests.exceptions import RequestException

from ctagskit.core.config import GITHUB_API_URL
from ctagskit.core.exceptions import APIError, NetworkError
from ctagskit.core.platform import PlatformInfo

logger = logging.getLogger(__name__)

USER_AGENT = "ctagskit-universal-ctags"

WINDOWS_REPO = "universal-ctags/ctags-win32"
UNIX_REPO = "universal-ctags/ctags-nightly-build"


def release_repo_for(platform: PlatformInfo) -> str:
    """Return the repository that publishes binaries for a platform."""
    return WINDOWS_REPO if platform.is_windows else UNIX_REPO


def get_latest_release(
    repo: str,
    token: Optional[str] = None,
    api_url: str = GITHUB_API_URL,
    timeout: float = 30,
    session: Optional[requests.Session] = None,
) -> str:
    """
    Fetch the latest release tag of a GitHub repository.

    Args:
        repo: Repository in 'owner/repo' form
        token: Optional GitHub token sent as 'Authorization: token <value>'
        api_url: Base URL of the releases API
        timeout: Request timeout in seconds
        session: Optional requests session to issue the call with

    Returns:
        Release tag (e.g., 'v6.1.0' or 'p6.1.20240915.0')

    Raises:
        NetworkError: If the request could not be completed
        APIError: If the status is not 200 or the body is not a release

    Example:
        >>> get_latest_release("universal-ctags/ctags-nightly-build")
        'v6.1.0'
    """
    if not repo:
        raise ValueError("Repository cannot be empty")

    url = f"{api_url.rstrip('/')}/repos/{repo}/releases/latest"
    headers = {
        "User-Agent": USER_AGENT,
        "Accept": "application/vnd.github+json",
    }
    if token:
        headers["Authorization"] = f"token {token}"

    logger.debug(f"Querying latest release: {url}")
    http = session or requests

    try:
        response = http.get(url, headers=headers, timeout=timeout)
    except RequestException as e:
        raise NetworkError(f"Failed to reach GitHub API: {e}") from e

    if response.status_code != 200:
        raise APIError(
            f"GitHub API returned status {response.status_code}",
            status_code=response.status_code,
        )

    try:
        release = response.json()
    except ValueError as e:
        raise APIError(f"Failed to parse release data: {e}") from e

    tag = release.get("tag_name") if isinstance(release, dict) else None
    if not isinstance(tag, str) or not tag:
        raise APIError("Failed to parse release data: missing 'tag_name'")

    logger.debug(f"Latest release of {repo}: {tag}")
    return tag
