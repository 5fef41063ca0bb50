"""
Shared utilities for CLI commands.
"""

import logging

from ctagskit.core.config import InstallerConfig, load_config_file

logger = logging.getLogger(__name__)


def build_config(args) -> InstallerConfig:
    """
    Build installer configuration from the environment and CLI arguments.

    Precedence (lowest to highest): environment, --config file, --install-dir.

    Args:
        args: Parsed arguments with config and install_dir fields

    Returns:
        InstallerConfig instance

    Raises:
        ConfigurationError: If the configuration file is invalid
    """
    config = InstallerConfig.from_environment()

    config_file = getattr(args, "config", None)
    if config_file:
        config = config.with_overrides(load_config_file(config_file))

    install_dir = getattr(args, "install_dir", None)
    if install_dir:
        config = config.with_overrides({"install_root": install_dir})

    logger.debug(f"Install root: {config.install_root}")
    return config
