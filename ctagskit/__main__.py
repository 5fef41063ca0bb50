"""
Entry point for running ctagskit as a module.

Usage: python -m ctagskit [command] [options]
"""

from ctagskit.cli.parser import main

if __name__ == "__main__":
    main()
