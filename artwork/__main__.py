"""
Main entry point for running the package as a module.

Usage:
    python -m artwork build --catalog catalog.json --nrn NRN --nsn NSN
    python -m artwork batch --catalog catalog.json
    python -m artwork config
"""

import sys
from .cli import main

if __name__ == '__main__':
    sys.exit(main())
