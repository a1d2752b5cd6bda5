# -*- coding: utf-8 -*-
"""
Core data types and utilities for the offline circulation tools.
"""

from .types import (
    Timestamp, CommandRecord, IssueCommand, ReturnCommand, PaymentCommand,
    PendingOperation, UserEnv, ARGUMENT_SHAPES, COMMAND_TYPES,
)
from .exceptions import CirculationError, DataError, ParseError, StorageError
from .config_loader import load_circ_config
