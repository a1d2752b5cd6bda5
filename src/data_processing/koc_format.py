# -*- coding: utf-8 -*-
"""
Reader and writer for KOC offline circulation files.

A KOC file is UTF-8 text with tab-separated fields.  The first line is
a header of ``Key=Value`` pairs; every following line is one command:

    Version=1.0<TAB>Generator=<name><TAB>GeneratorVersion=<ver>
    <date> <time> <id><TAB>issue<TAB><cardnumber><TAB><barcode>
    <date> <time> <id><TAB>return<TAB><barcode>
    <date> <time> <id><TAB>payment<TAB><cardnumber><TAB><amount>

Line endings may be LF or CRLF.
"""

import os

from src.core.exceptions import (
    ParseError, MalformedHeader, MalformedTimestamp, UnknownCommand,
    ArgumentCountMismatch, VersionMismatch, FileNotFound,
)
from src.core.types import Timestamp, get_command_class


FILE_VERSION = "1.0"

FIELD_SEPARATOR = "\t"

HEADER_VERSION = "Version"
HEADER_GENERATOR = "Generator"
HEADER_GENERATOR_VERSION = "GeneratorVersion"


def strip_terminator(line):
    return line.rstrip("\r\n")


# ---------------------------------------------------------------------------
# Header codec
# ---------------------------------------------------------------------------

def encode_header(version, generator, generator_version):
    """Header line without its line terminator."""
    return FIELD_SEPARATOR.join((
        "%s=%s" % (HEADER_VERSION, version),
        "%s=%s" % (HEADER_GENERATOR, generator),
        "%s=%s" % (HEADER_GENERATOR_VERSION, generator_version),
    ))


def decode_header(line):
    """Parse a header line into a dict.

    Each field is split on its first ``=``.  A key that appears twice
    keeps the last value.
    """
    line = strip_terminator(line)
    if not line:
        raise MalformedHeader("empty header line")

    header = {}
    for field in line.split(FIELD_SEPARATOR):
        key, sep, value = field.partition("=")
        if not sep:
            raise MalformedHeader("header field %r has no '='" % field)
        header[key] = value
    return header


def is_header_line(line):
    """True if *line* decodes as a header carrying a Version key."""
    try:
        return HEADER_VERSION in decode_header(line)
    except MalformedHeader:
        return False


def check_version(header, expected=FILE_VERSION):
    found = header.get(HEADER_VERSION)
    if found != expected:
        raise VersionMismatch(expected, found)


# ---------------------------------------------------------------------------
# Command-line codec
# ---------------------------------------------------------------------------

def decode_command(line):
    """Parse one command line into an IssueCommand, ReturnCommand or
    PaymentCommand."""
    fields = strip_terminator(line).split(FIELD_SEPARATOR)
    while len(fields) > 1 and fields[-1] == "":
        fields.pop()

    timestamp_field = fields[0]
    parts = timestamp_field.split()
    if len(parts) != 3:
        raise MalformedTimestamp(
            "expected '<date> <time> <id>', got %r" % timestamp_field)
    timestamp = Timestamp(*parts)

    if len(fields) < 2:
        raise UnknownCommand("line has no command field")
    command = fields[1]
    record_class = get_command_class(command)
    if record_class is None:
        raise UnknownCommand("unknown command %r" % command)

    args = fields[2:]
    if len(args) < len(record_class.ARGUMENTS):
        raise ArgumentCountMismatch("%s needs %s, got %d argument(s)" % (
            command, ", ".join(record_class.ARGUMENTS), len(args)))
    for name, value in zip(record_class.ARGUMENTS, args):
        if not value:
            raise ArgumentCountMismatch("%s has an empty %s" % (command, name))
        if "\r" in value or "\n" in value:
            raise ParseError("%s %s contains a line break" % (command, name))
    return record_class.from_arguments(timestamp, args)


def encode_command(record):
    """Command line without its line terminator."""
    fields = [str(record.timestamp), record.command]
    fields.extend(record.values())
    return FIELD_SEPARATOR.join(fields)


# ---------------------------------------------------------------------------
# KocFile / KocParser
# ---------------------------------------------------------------------------

class KocFile(object):
    """A parsed KOC file: its path, header dict and command records."""

    __slots__ = ("path", "header", "records")

    def __init__(self, path, header, records):
        self.path = path
        self.header = header
        self.records = records

    def __len__(self):
        return len(self.records)

    def __iter__(self):
        return iter(self.records)

    def __repr__(self):
        return "KocFile(%r, version=%r, %d records)" % (
            self.path, self.header.get(HEADER_VERSION), len(self.records))


class KocParser(object):
    """Parse KOC files into KocFile objects.

    The header is checked against *expected_version* before any
    command line is decoded.  The first bad line aborts the file with a
    ParseError carrying its line number.  *on_header* is called with
    ``(raw_line, header)`` once the header decodes, before the version
    check; *on_line* is called with ``(line_number, raw_line, record)``
    for every decoded command.  The import driver uses both for its
    verbose echo.
    """

    def __init__(self, expected_version=FILE_VERSION, on_line=None, on_header=None):
        self._expected_version = expected_version
        self._on_line = on_line
        self._on_header = on_header
        self._lines_processed = 0

    def parse_file(self, path, encoding="utf-8"):
        if not os.path.isfile(path):
            raise FileNotFound(path)
        try:
            with open(path, "r", encoding=encoding, newline="") as f:
                return self.parse_lines(f, source=path)
        except UnicodeDecodeError as e:
            raise ParseError("not %s text: %s" % (encoding, e), source=path)

    def parse_lines(self, lines, source=None):
        lines = iter(lines)
        try:
            header_line = next(lines)
        except StopIteration:
            raise MalformedHeader("empty file", line_number=1, source=source)

        self._lines_processed += 1
        try:
            header = decode_header(header_line)
        except ParseError as e:
            e.line_number, e.source = 1, source
            raise
        if self._on_header is not None:
            self._on_header(strip_terminator(header_line), header)
        check_version(header, self._expected_version)

        records = []
        for line_number, line in enumerate(lines, start=2):
            self._lines_processed += 1
            if not strip_terminator(line).strip():
                continue
            try:
                record = decode_command(line)
            except ParseError as e:
                e.line_number, e.source = line_number, source
                raise
            if self._on_line is not None:
                self._on_line(line_number, strip_terminator(line), record)
            records.append(record)

        return KocFile(source, header, records)

    def lines_processed(self):
        return self._lines_processed

