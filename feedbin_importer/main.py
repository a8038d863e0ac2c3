#!/usr/bin/env python3
"""
Main entry point for the Feedbin Importer.

This module serves as the entry point for the console script and for
running the tool straight from a source checkout.
"""

import sys
from feedbin_importer.cli import main


if __name__ == "__main__":
    sys.exit(main())
