#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Queue KOC files as pending offline operations and apply them.

Called nightly once the branch uploads have landed:
    15 3 * * * /opt/offline_circ/scripts/bulk_import_koc.py -d /srv/koc --import --process

Usage:
    python3 scripts/bulk_import_koc.py -d /path/to/dirs [--confirm] [--verbose] [--process] [--import]
"""

import os
import sys

# Ensure the repository root is on the import path
sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), os.pardir))

from src.cli.bulk_import import main


if __name__ == "__main__":
    sys.exit(main())
