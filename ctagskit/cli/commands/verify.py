"""
Verify command implementation.

Checks that the installed binary runs and reports itself as Universal Ctags.
"""

import logging

from ctagskit.cli.utils import build_config
from ctagskit.core.exceptions import ConfigurationError, VerificationError
from ctagskit.paths import get_ctags_path
from ctagskit.verify import verify_binary

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the verify command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    config = build_config(args)

    try:
        binary_path = get_ctags_path(config.install_root)
        version_line = verify_binary(binary_path, timeout=args.timeout)
    except (ConfigurationError, VerificationError) as e:
        logger.error(f"Verification failed: {e}")
        return 1

    print(f"{binary_path}: {version_line}")
    return 0
