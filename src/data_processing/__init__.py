# -*- coding: utf-8 -*-
"""
Data processing for offline circulation.

Reading and writing KOC files (the tab-separated offline circulation
format produced by the offline clients) and splitting a combined
circulation log into per-branch KOC files for export.
"""

from .koc_format import (
    KocParser, KocFile, encode_header, decode_header, encode_command, decode_command,
)
from .export_grouper import OfflineCircExporter, group_by_branch, finalize
