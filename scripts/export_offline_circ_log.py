#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Split a combined offline circulation log into per-branch KOC files.

Usage:
    python3 scripts/export_offline_circ_log.py --file /path/to/offlinecirc.log \
        --output_dir /path/to/dir [-v]
"""

import os
import sys

# Ensure the repository root is on the import path
sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), os.pardir))

from src.cli.export_log import main


if __name__ == "__main__":
    sys.exit(main())
