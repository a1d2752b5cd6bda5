# -*- coding: utf-8 -*-
"""
bulk_import_koc -- queue KOC files as pending offline operations and
apply the queue.

Usage:
    bulk_import_koc.py -d /path/to/dirs [--confirm] [--verbose] [--process] [--import]

--import ingests files, --process converts *all* pending offline
operations into actual checkins, checkouts and payments.  The directory
is a set of subdirectories named after branch codes, each holding KOC
files.  --confirm parses and reports but queues and applies nothing; the
database is still opened (and its tables created if missing) for the
branch lookups and the pending queue.
"""

import argparse
import os
import sys

from src.circulation.importer import ImportDriver, ProcessDriver
from src.circulation.processor import (
    OfflineOperationProcessor, PendingOperationStore, SqliteBranchRegistry,
)
from src.core.config_loader import load_circ_config
from src.core.exceptions import DatabaseError
from src.storage.database import DatabaseManager

USAGE = """bulk_import_koc.py -d /path/to/dirs [--confirm] [--verbose] [--process] [--import]
Import ingests files, Process converts *all* pending offline ops into actual checkins and checkouts.
Directory is assumed to be a set of subdirectories named after the branchcodes, containing nothing but .koc files.
"""


def build_parser():
    parser = argparse.ArgumentParser(prog="bulk_import_koc.py", usage=USAGE)
    parser.add_argument("-c", "--confirm", action="store_true",
                        help="dry run: parse and report, queue and apply nothing")
    parser.add_argument("-i", "--import", dest="do_import", action="store_true",
                        help="queue the KOC files under --dir")
    parser.add_argument("-p", "--process", action="store_true",
                        help="apply all pending offline operations")
    parser.add_argument("-d", "--dir", help="root of the <branchcode>/ directories")
    parser.add_argument("-v", "--verbose", action="count", default=0)
    parser.add_argument("--database", help="SQLite database path (overrides config)")
    parser.add_argument("--config", help="path to offline_circ.ini")
    return parser


def main(argv=None):
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit:
        return 1

    if not (args.dir or args.confirm or args.process or args.do_import):
        print(USAGE)
        return 1
    if args.do_import and not args.dir:
        print("--import needs --dir\n")
        print(USAGE)
        return 1
    if args.do_import and not os.path.isdir(args.dir):
        print("Directory not found: %s" % args.dir)
        return 2

    config = load_circ_config(args.config)
    db = DatabaseManager(args.database or config.database_path())
    try:
        db.connect()
        db.ensure_schema()
        store = PendingOperationStore(db)

        if args.do_import:
            driver = ImportDriver(
                SqliteBranchRegistry(db), store,
                userid=config.import_userid(),
                expected_version=config.file_version(),
                confirm=args.confirm, verbose=args.verbose)
            summary = driver.import_directory(args.dir)
            print("Imported %d record(s) from %d file(s) in %d branch(es), "
                  "%d line(s) read%s" % (
                summary.records, summary.files - summary.skipped_files - summary.failed_files,
                summary.branches, summary.lines, " [dry run]" if args.confirm else ""))
            if summary.skipped_branches or summary.skipped_files or summary.failed_files:
                print("Skipped %d branch(es), %d file(s) with the wrong version, "
                      "%d malformed file(s)" % (
                          summary.skipped_branches, summary.skipped_files,
                          summary.failed_files))

        if args.process:
            driver = ProcessDriver(
                store, OfflineOperationProcessor(db),
                confirm=args.confirm, verbose=args.verbose)
            summary = driver.process_pending()
            print("Processed %d of %d pending operation(s)%s" % (
                summary.applied, summary.seen, " [dry run]" if args.confirm else ""))
            for report, count in sorted(summary.reports.items()):
                print("  %-22s %6d" % (report, count))
    except DatabaseError as e:
        print("DATABASE ERROR: %s" % e)
        return 2
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
