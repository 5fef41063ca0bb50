"""
Entry point for running ctagskit CLI as a module.

Usage: python -m ctagskit.cli [command] [options]
"""

from .parser import main

if __name__ == "__main__":
    main()
