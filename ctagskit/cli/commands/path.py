"""
Path command implementation.

Prints the location of the installed ctags binary.
"""

import logging

from ctagskit.cli.utils import build_config
from ctagskit.core.exceptions import ConfigurationError
from ctagskit.paths import get_ctags_path

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the path command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 if the binary exists, 1 otherwise)
    """
    config = build_config(args)

    try:
        binary_path = get_ctags_path(config.install_root)
    except ConfigurationError as e:
        logger.error(str(e))
        return 1

    print(binary_path)
    return 0
