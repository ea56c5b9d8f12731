#!/usr/bin/env python3
"""Finance ledger command-line entry point.

Wraps the package CLI so it can run from a checkout without installing.

Usage:
    python ledger.py add Chase1234_Activity.csv
    python ledger.py summary

For full documentation and options:
    python ledger.py --help
"""

import sys
from pathlib import Path

# Add src to path for development installs
src_path = Path(__file__).parent / "src"
if src_path.exists():
    sys.path.insert(0, str(src_path))

from finance_ledger.cli import main

if __name__ == "__main__":
    sys.exit(main())
