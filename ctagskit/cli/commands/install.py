"""
Install command implementation.

Downloads and installs the Universal Ctags binary.
"""

import logging

from ctagskit.cli.utils import build_config
from ctagskit.installer import CtagsInstaller

logger = logging.getLogger(__name__)


def _log_progress(progress) -> None:
    logger.debug(f"  {progress}")


def run(args) -> int:
    """
    Run the install command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success or skip, 1 for failure)
    """
    config = build_config(args)
    if getattr(args, "no_skip", False):
        config = config.with_overrides({"skip_install": False})

    installer = CtagsInstaller(config, progress_callback=_log_progress)
    return installer.run()
