# -*- coding: utf-8 -*-
"""
Storage subsystem for the offline circulation tools.

An SQLite database holds the branches, patrons, items, checkouts,
account lines and the pending offline operation queue; per-branch KOC
export files live on the local filesystem.
"""

from .database import DatabaseManager, QueryBuilder, TransactionContext
from .file_store import KocFileStore
