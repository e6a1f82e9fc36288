"""
ProjectDesk - Main entry point.
"""

import sys

from projectdesk.cli import main

if __name__ == "__main__":
    sys.exit(main())
