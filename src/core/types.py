# -*- coding: utf-8 -*-
"""
Core data types for the offline circulation tools.

Defines the value objects shared by the KOC codec, the storage layer
and the drivers: the timestamp carried on every command line, the
three command record variants (issue, return, payment), a stored
pending operation, and the acting-user context an operation is applied
under.
"""

import types
from collections import OrderedDict


# ---------------------------------------------------------------------------
# Timestamp -- first field of every KOC command line
# ---------------------------------------------------------------------------

class Timestamp(object):
    """``<date> <time> <id>`` as written by the offline client."""

    __slots__ = ("date", "time", "id")

    def __init__(self, date, time, id):
        self.date = date
        self.time = time
        self.id = id

    def sql_timestamp(self):
        """Date and time only; the id is a per-client sequence number."""
        return "%s %s" % (self.date, self.time)

    def _key(self):
        return (self.date, self.time, self.id)

    def __eq__(self, other):
        if not isinstance(other, Timestamp):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self):
        return hash(self._key())

    def __str__(self):
        return "%s %s %s" % self._key()

    def __repr__(self):
        return "Timestamp(%r, %r, %r)" % self._key()


# ---------------------------------------------------------------------------
# Command records -- one variant per command token
# ---------------------------------------------------------------------------

def _is_field_value(value):
    return (isinstance(value, str) and value != ""
            and not any(c in value for c in "\t\r\n"))


class CommandRecord(object):
    """Base class for a parsed KOC command line.

    Subclasses set ``command`` and ``ARGUMENTS``; the argument values
    are kept in ``ARGUMENTS`` order so that encoding never depends on
    mapping iteration order.  Every value must be a non-empty string
    with no tab or line break, or it would not survive a KOC line.
    """

    __slots__ = ("timestamp", "_values")

    command = None
    ARGUMENTS = ()

    def __init__(self, timestamp, *values):
        if len(values) != len(self.ARGUMENTS):
            raise TypeError("%s takes %d arguments (%d given)" % (
                type(self).__name__, len(self.ARGUMENTS), len(values)))
        for name, value in zip(self.ARGUMENTS, values):
            if not _is_field_value(value):
                raise ValueError("%s: bad %s %r" % (type(self).__name__, name, value))
        self.timestamp = timestamp
        self._values = tuple(values)

    @classmethod
    def from_arguments(cls, timestamp, args):
        """Build a record from positional *args*; extras are ignored."""
        return cls(timestamp, *args[:len(cls.ARGUMENTS)])

    def arguments(self):
        return OrderedDict(zip(self.ARGUMENTS, self._values))

    def values(self):
        return self._values

    def get(self, name, default=None):
        """Argument value by name, or *default* if this command has no
        such argument."""
        if name in self.ARGUMENTS:
            return self._values[self.ARGUMENTS.index(name)]
        return default

    def __eq__(self, other):
        if not isinstance(other, CommandRecord):
            return NotImplemented
        return (self.command == other.command
                and self.timestamp == other.timestamp
                and self._values == other._values)

    def __hash__(self):
        return hash((self.command, self.timestamp, self._values))

    def __repr__(self):
        args = ", ".join("%s=%r" % item for item in self.arguments().items())
        return "%s(%s, %s)" % (type(self).__name__, str(self.timestamp), args)


class IssueCommand(CommandRecord):
    __slots__ = ()
    command = "issue"
    ARGUMENTS = ("cardnumber", "barcode")

    def __init__(self, timestamp, cardnumber, barcode):
        CommandRecord.__init__(self, timestamp, cardnumber, barcode)

    @property
    def cardnumber(self):
        return self._values[0]

    @property
    def barcode(self):
        return self._values[1]


class ReturnCommand(CommandRecord):
    __slots__ = ()
    command = "return"
    ARGUMENTS = ("barcode",)

    def __init__(self, timestamp, barcode):
        CommandRecord.__init__(self, timestamp, barcode)

    @property
    def barcode(self):
        return self._values[0]


class PaymentCommand(CommandRecord):
    __slots__ = ()
    command = "payment"
    ARGUMENTS = ("cardnumber", "amount")

    def __init__(self, timestamp, cardnumber, amount):
        CommandRecord.__init__(self, timestamp, cardnumber, amount)

    @property
    def cardnumber(self):
        return self._values[0]

    @property
    def amount(self):
        return self._values[1]


# Lookup tables are built once and are read-only afterwards.
COMMAND_TYPES = types.MappingProxyType(OrderedDict(
    (cls.command, cls) for cls in (IssueCommand, ReturnCommand, PaymentCommand)
))

ARGUMENT_SHAPES = types.MappingProxyType(OrderedDict(
    (command, cls.ARGUMENTS) for command, cls in COMMAND_TYPES.items()
))


def get_command_class(command):
    """Look up the CommandRecord subclass for *command*, or None."""
    return COMMAND_TYPES.get(command)


# ---------------------------------------------------------------------------
# PendingOperation -- a row of the pending_offline_operations table
# ---------------------------------------------------------------------------

class PendingOperation(object):
    """A recorded circulation intent awaiting application."""

    __slots__ = (
        "operationid", "userid", "branchcode", "timestamp", "action",
        "barcode", "cardnumber", "amount",
    )

    def __init__(self, operationid, userid, branchcode, timestamp, action,
                 barcode=None, cardnumber=None, amount=None):
        self.operationid = operationid
        self.userid = userid
        self.branchcode = branchcode
        self.timestamp = timestamp
        self.action = action
        self.barcode = barcode
        self.cardnumber = cardnumber
        self.amount = amount

    @classmethod
    def from_row(cls, row):
        return cls(*row)

    def as_dict(self):
        return OrderedDict((name, getattr(self, name)) for name in self.__slots__)

    def __eq__(self, other):
        if not isinstance(other, PendingOperation):
            return NotImplemented
        return self.as_dict() == other.as_dict()

    def __repr__(self):
        return "PendingOperation(#%s %s %s @%s card=%r barcode=%r amount=%r)" % (
            self.operationid, self.action, self.branchcode, self.timestamp,
            self.cardnumber, self.barcode, self.amount,
        )


# ---------------------------------------------------------------------------
# UserEnv -- who is applying an operation, and at which branch
# ---------------------------------------------------------------------------

class UserEnv(object):

    __slots__ = ("userid", "branchcode", "borrowernumber", "flags")

    def __init__(self, userid, branchcode, borrowernumber=0, flags=1):
        self.userid = userid
        self.branchcode = branchcode
        self.borrowernumber = borrowernumber
        self.flags = flags

    def __repr__(self):
        return "UserEnv(userid=%r, branch=%r)" % (self.userid, self.branchcode)
