"""
CLI entry point for exportgen package.

Usage:
    python -m exportgen <command> [options]
"""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
