# -*- coding: utf-8 -*-
"""
Exception hierarchy for the offline circulation tools.

All tool-specific exceptions descend from ``CirculationError``.  The
hierarchy allows callers to catch broad categories (e.g. anything wrong
with a KOC file) or specific conditions (e.g. an unknown command token
on one line).
"""


# ---------------------------------------------------------------------------
# Base exception
# ---------------------------------------------------------------------------

class CirculationError(Exception):
    """Root of the offline circulation exception hierarchy."""

    def __init__(self, message=None, code=None):
        Exception.__init__(self, message)
        self.code = code


# ---------------------------------------------------------------------------
# Data layer -- KOC file content
# ---------------------------------------------------------------------------

class DataError(CirculationError):
    """Raised when incoming data fails validation or parsing."""
    pass


class ParseError(DataError):
    """Structural parse failure in a KOC file or raw circulation log.

    *line_number* is 1-based and *source* is the file the line came
    from; both are filled in by the parser when known.
    """

    def __init__(self, message, line_number=None, source=None):
        DataError.__init__(self, message)
        self.line_number = line_number
        self.source = source

    def __str__(self):
        message = Exception.__str__(self)
        if self.line_number is None:
            return message
        if self.source:
            return "%s (%s line %d)" % (message, self.source, self.line_number)
        return "%s (line %d)" % (message, self.line_number)


class MalformedHeader(ParseError):
    """The first line of a KOC file is not a list of Key=Value fields."""
    pass


class MalformedTimestamp(ParseError):
    """A command line's first field is not ``<date> <time> <id>``."""
    pass


class UnknownCommand(ParseError):
    """A command line names a command with no known argument shape."""
    pass


class ArgumentCountMismatch(ParseError):
    """A command line carries fewer arguments than its command needs."""
    pass


class ValidationError(DataError):
    """Semantic validation failure on otherwise well-formed input."""
    pass


class VersionMismatch(ValidationError):
    """KOC header announces a file version we do not read."""

    def __init__(self, expected, found):
        ValidationError.__init__(
            self, "file is not KOC version %s (found %r)" % (expected, found))
        self.expected = expected
        self.found = found


class InvalidBranchCode(ValidationError):
    """Branch code is unknown to the branch registry or unusable as a
    file name."""

    def __init__(self, branchcode):
        ValidationError.__init__(self, "invalid branch code %r" % (branchcode,))
        self.branchcode = branchcode


# ---------------------------------------------------------------------------
# Storage layer
# ---------------------------------------------------------------------------

class StorageError(CirculationError):
    """Raised when a storage backend fails."""
    pass


class DatabaseError(StorageError):
    """Database connection or query errors."""
    pass


class FileNotFound(StorageError):
    """A required input file does not exist or cannot be read."""

    def __init__(self, path):
        StorageError.__init__(self, "file not found: %s" % path)
        self.path = path
