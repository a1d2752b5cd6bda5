# -*- coding: utf-8 -*-
"""
Offline circulation: queueing KOC commands and applying them.
"""

from .processor import (
    OfflineOperationProcessor, PendingOperationStore, SqliteBranchRegistry,
)
from .importer import ImportDriver, ProcessDriver, ImportSummary, ProcessSummary
