# -*- coding: utf-8 -*-
"""
Split a combined offline circulation log into per-branch KOC files.

Every raw log line ends with the branch code it was recorded at:

    <payload field><TAB>...<TAB><branchcode>

The branch code is cut off and the remaining payload is appended to
``<output_dir>/<branchcode>.koc``.  Once the whole run is done each file
that received lines gets the KOC header on its first line.  Writes are
append-only: running the export again adds to existing files.
"""

import os
from collections import OrderedDict

from src.core.config_loader import DEFAULT_GENERATOR, DEFAULT_GENERATOR_VERSION
from src.core.exceptions import ParseError, FileNotFound
from src.data_processing.koc_format import (
    FILE_VERSION, FIELD_SEPARATOR, encode_header, is_header_line, strip_terminator,
)
from src.storage.file_store import KocFileStore, is_safe_branchcode


def default_header():
    return encode_header(FILE_VERSION, DEFAULT_GENERATOR, DEFAULT_GENERATOR_VERSION)


def split_raw_line(line):
    """Return ``(branchcode, payload)`` for one raw log line."""
    line = strip_terminator(line)
    payload, sep, branchcode = line.rpartition(FIELD_SEPARATOR)
    if not sep:
        raise ParseError("no branch code field in %r" % line)
    return branchcode, payload


def group_by_branch(lines):
    """Group raw log lines by their trailing branch code.

    Blank lines are skipped.  Payload order within a branch follows
    input order; branches are ordered by first appearance.
    """
    buckets = OrderedDict()
    for line in lines:
        if not strip_terminator(line).strip():
            continue
        branchcode, payload = split_raw_line(line)
        buckets.setdefault(branchcode, []).append(payload)
    return buckets


def finalize(branchcode, payload_lines, output_dir, header=None):
    """Append *payload_lines* to the branch file and put the header on
    top.  Returns the file path, or None when there was nothing to
    write."""
    if not payload_lines:
        return None
    store = KocFileStore(output_dir)
    store.ensure_directory()
    store.append_lines(branchcode, payload_lines)
    return store.write_header(branchcode, header or default_header(), is_header_line)


class OfflineCircExporter(object):
    """One export run.

    ``add_lines`` may be called for several input batches; ``finish``
    then writes the header to each touched branch file exactly once.
    """

    def __init__(self, output_dir=".", header=None, verbose=False):
        self._store = KocFileStore(output_dir)
        self._header = header or default_header()
        self._verbose = verbose
        self._seen = OrderedDict()
        self._skipped = 0

    @property
    def output_dir(self):
        return self._store.root

    def export_file(self, path, encoding="utf-8"):
        if not os.path.isfile(path):
            raise FileNotFound(path)
        try:
            with open(path, "r", encoding=encoding, newline="") as f:
                lines = f.readlines()
        except UnicodeDecodeError as e:
            raise ParseError("not %s text: %s" % (encoding, e), source=path)
        except IOError:
            raise FileNotFound(path)
        return self.add_lines(lines)

    def add_lines(self, lines):
        """Append one batch of raw lines; returns the number written."""
        self._store.ensure_directory()
        written = 0
        for line in lines:
            if not strip_terminator(line).strip():
                continue
            try:
                branchcode, payload = split_raw_line(line)
            except ParseError as e:
                print("WARNING: skipping line: %s" % e)
                self._skipped += 1
                continue
            if not is_safe_branchcode(branchcode):
                print("WARNING: skipping line with unusable branch code %r" % branchcode)
                self._skipped += 1
                continue

            filename = self._store.append_lines(branchcode, [payload])
            if self._verbose:
                print("Writing line '%s' to file %s" % (payload, filename))
            self._seen[branchcode] = self._seen.get(branchcode, 0) + 1
            written += 1
        return written

    def finish(self):
        """Write headers and return ``{branchcode: lines written}``."""
        for branchcode in self._seen:
            filename = self._store.write_header(branchcode, self._header, is_header_line)
            if self._verbose:
                print("Writing header to file %s" % filename)
        return OrderedDict(self._seen)

    def skipped(self):
        return self._skipped

    def branches(self):
        return list(self._seen)
