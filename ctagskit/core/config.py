"""Installer configuration for ctagskit.

All environment lookups happen here, once, when the configuration is built.
Nothing downstream of InstallerConfig reads os.environ.
"""

import logging
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from ctagskit.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

SKIP_ENV_VAR = "SKIP_POSTINSTALL"
TOKEN_ENV_VAR = "GITHUB_TOKEN"
INSTALL_DIR_ENV_VAR = "CTAGSKIT_INSTALL_DIR"

GITHUB_API_URL = "https://api.github.com"

# Values of SKIP_POSTINSTALL that do not request a skip
FALSE_VALUES = ("", "0", "false", "no", "off")

INT_FIELDS = ("retries", "max_redirects")
NUMBER_FIELDS = ("retry_delay", "download_timeout", "api_timeout")


def default_install_root() -> Path:
    """Directory the binary is installed into when nothing else is configured."""
    return Path(__file__).resolve().parent.parent / "bin"


def is_truthy(value: Optional[str]) -> bool:
    """Interpret a boolean-like environment value."""
    if value is None:
        return False
    return value.strip().lower() not in FALSE_VALUES


@dataclass
class InstallerConfig:
    """Configuration for a single installer run."""

    install_root: Path = field(default_factory=default_install_root)
    skip_install: bool = False
    github_token: Optional[str] = None
    retries: int = 3
    retry_delay: float = 1.0  # seconds, multiplied by the attempt number
    download_timeout: float = 60.0
    api_timeout: float = 30.0
    max_redirects: int = 5
    api_url: str = GITHUB_API_URL

    def __post_init__(self):
        if not isinstance(self.install_root, (str, os.PathLike)):
            raise ConfigurationError(
                f"install_root must be a path, got {self.install_root!r}"
            )
        self.install_root = Path(self.install_root)
        self._check_types()
        if self.retries < 0:
            raise ConfigurationError(f"retries must be >= 0, got {self.retries}")
        if self.max_redirects < 0:
            raise ConfigurationError(
                f"max_redirects must be >= 0, got {self.max_redirects}"
            )
        if self.retry_delay < 0:
            raise ConfigurationError(
                f"retry_delay must be >= 0, got {self.retry_delay}"
            )
        if self.download_timeout <= 0 or self.api_timeout <= 0:
            raise ConfigurationError("Timeouts must be positive")

    def _check_types(self) -> None:
        """Reject values of the wrong type, e.g. strings read from YAML."""
        # bool is an int subclass but never a valid count or duration
        for name in INT_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigurationError(f"{name} must be an integer, got {value!r}")

        for name in NUMBER_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigurationError(f"{name} must be a number, got {value!r}")

        if not isinstance(self.skip_install, bool):
            raise ConfigurationError(
                f"skip_install must be true or false, got {self.skip_install!r}"
            )
        if self.github_token is not None and not isinstance(self.github_token, str):
            raise ConfigurationError("github_token must be a string")
        if not isinstance(self.api_url, str) or not self.api_url:
            raise ConfigurationError(f"api_url must be a URL, got {self.api_url!r}")

    @classmethod
    def from_environment(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        install_root: Optional[Path] = None,
    ) -> "InstallerConfig":
        """
        Build configuration from environment variables.

        Args:
            environ: Environment mapping (defaults to os.environ)
            install_root: Explicit install root, takes precedence over
                CTAGSKIT_INSTALL_DIR

        Returns:
            InstallerConfig instance
        """
        if environ is None:
            environ = os.environ

        kwargs: Dict[str, Any] = {
            "skip_install": is_truthy(environ.get(SKIP_ENV_VAR)),
            "github_token": environ.get(TOKEN_ENV_VAR) or None,
        }
        if install_root is not None:
            kwargs["install_root"] = Path(install_root)
        elif environ.get(INSTALL_DIR_ENV_VAR):
            kwargs["install_root"] = Path(environ[INSTALL_DIR_ENV_VAR])

        return cls(**kwargs)

    def with_overrides(self, overrides: Mapping[str, Any]) -> "InstallerConfig":
        """
        Return a copy with the given fields replaced.

        Raises:
            ConfigurationError: If a key does not name a configuration field
        """
        known = {f.name for f in fields(self)}
        unknown = sorted(str(key) for key in set(overrides) - known)
        if unknown:
            raise ConfigurationError(
                f"Unknown configuration keys: {', '.join(unknown)}"
            )
        return replace(self, **overrides)


def load_config_file(config_path: Path) -> Dict[str, Any]:
    """
    Load installer overrides from a YAML file.

    Args:
        config_path: Path to YAML file

    Returns:
        Mapping of configuration field names to values

    Raises:
        ConfigurationError: If the file is missing, unparsable or not a mapping
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    logger.debug(f"Loading configuration from {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Configuration file must contain a mapping: {config_path}"
        )

    if isinstance(data.get("install_root"), str):
        data["install_root"] = Path(data["install_root"]).expanduser()

    return data
