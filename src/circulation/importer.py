# -*- coding: utf-8 -*-
"""
Import and process drivers for offline circulation.

``ImportDriver`` walks a directory laid out as ``<root>/<branchcode>/*``
and queues every command in every KOC file as a pending operation.
``ProcessDriver`` drains that queue through an operation applier.

The collaborators are duck-typed:

    registry.lookup(branchcode) -> bool
    store.record(userid, branchcode, timestamp, action,
                 barcode, cardnumber, amount)
    store.list_pending() -> [PendingOperation]
    applier.apply(operation, user_env) -> report string

Verbosity: 0 prints only final results and errors, 1 adds per-branch,
per-file and per-operation progress, 2 echoes raw lines, 3 dumps the
parsed structures and apply reports.
"""

import os
import pprint
from collections import Counter

from src.core.exceptions import ParseError, VersionMismatch
from src.core.types import UserEnv
from src.data_processing.koc_format import FILE_VERSION, KocParser

DEFAULT_USERID = 0


class ImportSummary(object):

    def __init__(self):
        self.branches = 0
        self.skipped_branches = 0
        self.files = 0
        self.skipped_files = 0
        self.failed_files = 0
        self.lines = 0
        self.records = 0

    def __repr__(self):
        return ("ImportSummary(branches=%d, skipped_branches=%d, files=%d, "
                "skipped_files=%d, failed_files=%d, lines=%d, records=%d)" % (
                    self.branches, self.skipped_branches, self.files,
                    self.skipped_files, self.failed_files, self.lines, self.records))


class ProcessSummary(object):

    def __init__(self):
        self.seen = 0
        self.applied = 0
        self.reports = Counter()

    def __repr__(self):
        return "ProcessSummary(seen=%d, applied=%d, reports=%r)" % (
            self.seen, self.applied, dict(self.reports))


class ImportDriver(object):
    """Queue the contents of a KOC directory tree as pending operations.

    With *confirm* set the files are parsed and reported on but nothing
    is recorded.  Every record is queued under the same *userid*; KOC
    files do not say which operator produced them.
    """

    def __init__(self, registry, store, userid=DEFAULT_USERID,
                 expected_version=FILE_VERSION, confirm=False, verbose=0):
        self._registry = registry
        self._store = store
        self._userid = userid
        self._expected_version = expected_version
        self._confirm = confirm
        self._verbose = verbose

    def _say(self, level, message):
        if self._verbose >= level:
            print(message)

    def import_directory(self, root):
        summary = ImportSummary()
        for branchcode in sorted(os.listdir(root)):
            path = os.path.join(root, branchcode)
            if not os.path.isdir(path):
                continue

            self._say(1, "WORKING ON BRANCHCODE %s" % branchcode)
            if not self._registry.lookup(branchcode):
                self._say(1, 'BRANCHCODE "%s" IS INVALID, SKIPPING.' % branchcode)
                summary.skipped_branches += 1
                continue
            summary.branches += 1

            for filename in sorted(os.listdir(path)):
                file_path = os.path.join(path, filename)
                if os.path.isfile(file_path):
                    self.import_file(file_path, branchcode, summary)
        return summary

    def import_file(self, file_path, branchcode, summary=None):
        """Parse one KOC file and queue its records; returns the number
        of records queued (or that would be, in confirm mode)."""
        if summary is None:
            summary = ImportSummary()
        summary.files += 1
        self._say(1, 'PROCESSING FILE "%s"' % file_path)

        parser = KocParser(self._expected_version, on_line=self._echo_line,
                           on_header=self._echo_header)
        try:
            koc_file = parser.parse_file(file_path)
        except VersionMismatch as e:
            self._say(1, "ERROR: FILE IS NOT KOC VERSION %s, SKIPPING (found %r)" % (
                e.expected, e.found))
            summary.skipped_files += 1
            return 0
        except ParseError as e:
            print("ERROR: %s, SKIPPING FILE" % e)
            summary.failed_files += 1
            return 0
        finally:
            summary.lines += parser.lines_processed()

        for record in koc_file:
            if not self._confirm:
                self._store.record(
                    self._userid, branchcode, record.timestamp.sql_timestamp(),
                    record.command, record.get("barcode"),
                    record.get("cardnumber"), record.get("amount"))
        summary.records += len(koc_file)
        return len(koc_file)

    def _echo_header(self, line, header):
        self._say(2, "HEADER LINE: %s" % line)
        self._say(3, "PARSED HEADER: %s" % pprint.pformat(header))

    def _echo_line(self, line_number, line, record):
        self._say(2, "LINE: %s" % line)
        self._say(3, "PARSED LINE: %s" % pprint.pformat(
            dict(record.arguments(), command=record.command,
                 date=record.timestamp.date, time=record.timestamp.time,
                 id=record.timestamp.id)))


class ProcessDriver(object):
    """Apply every pending operation, each under a user context at the
    operation's own branch."""

    def __init__(self, store, applier, confirm=False, verbose=0):
        self._store = store
        self._applier = applier
        self._confirm = confirm
        self._verbose = verbose

    def process_pending(self):
        summary = ProcessSummary()
        for operation in self._store.list_pending():
            summary.seen += 1
            if self._verbose >= 1:
                print("PROCESSING OFFLINE CIRC: %s" % operation.operationid)
            if self._confirm:
                continue

            user_env = UserEnv(userid=DEFAULT_USERID, branchcode=operation.branchcode,
                               borrowernumber=0, flags=1)
            report = self._applier.apply(operation, user_env)
            summary.applied += 1
            summary.reports[report] += 1
            if self._verbose >= 3:
                print("REPORT: %s" % report)
        return summary
