"""
Module execution entry point.

Allows running with: python -m apcd_cli
"""

import sys
from apcd_cli.main import main

if __name__ == "__main__":
    sys.exit(main())
