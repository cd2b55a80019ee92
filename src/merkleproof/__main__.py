"""
Module execution entry point.

Allows running with: python -m merkleproof
"""

import sys

from merkleproof.cli import main

if __name__ == "__main__":
    sys.exit(main())
