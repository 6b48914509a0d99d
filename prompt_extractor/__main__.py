"""
Package entry point.

Allows running: python -m prompt_extractor request.sh
"""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
