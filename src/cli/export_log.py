# -*- coding: utf-8 -*-
"""
export_offline_circ_log -- split a combined offline circulation log
into one KOC file per branch.

Usage:
    export_offline_circ_log.py --file /path/to/offlinecirc.log \\
        [--output_dir /path/to/dir] [--verbose] [--config PATH]

Exit status: 0 on success, 1 for a usage error or --help, 2 when the
input file is missing or is not UTF-8 text.
"""

import argparse
import sys

from src.core.config_loader import load_circ_config
from src.core.exceptions import FileNotFound, ParseError, StorageError
from src.data_processing.export_grouper import OfflineCircExporter
from src.data_processing.koc_format import FILE_VERSION, encode_header

USAGE = ("export_offline_circ_log.py --file /path/to/offlinecirc.log "
         "--output_dir /path/to/dir -v")


def build_parser():
    parser = argparse.ArgumentParser(
        prog="export_offline_circ_log.py", usage=USAGE, add_help=False,
        description="Split an offline circulation log into per-branch KOC files.")
    parser.add_argument("-f", "--file", help="combined offline circulation log")
    parser.add_argument("-o", "--output_dir", help="directory for the <branchcode>.koc files")
    parser.add_argument("-v", "--verbose", action="store_true")
    parser.add_argument("-c", "--config", help="path to offline_circ.ini")
    parser.add_argument("-h", "--help", action="store_true")
    return parser


def main(argv=None):
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit:
        return 1

    if args.help or not args.file:
        print(USAGE)
        return 1

    config = load_circ_config(args.config)
    output_dir = args.output_dir or config.output_dir()
    generator, generator_version = config.generator()
    header = encode_header(FILE_VERSION, generator, generator_version)

    exporter = OfflineCircExporter(output_dir, header=header, verbose=args.verbose)
    try:
        exporter.export_file(args.file)
        written = exporter.finish()
    except FileNotFound:
        print("File not found!")
        return 2
    except ParseError as e:
        print("EXPORT ERROR: %s: %s" % (args.file, e))
        return 2
    except StorageError as e:
        print("EXPORT ERROR: %s" % e)
        return 2

    print("Wrote %d line(s) to %d branch file(s) in %s" % (
        sum(written.values()), len(written), exporter.output_dir))
    for branchcode, count in written.items():
        print("  %-12s %6d" % (branchcode, count))
    if exporter.skipped():
        print("Skipped %d malformed line(s)" % exporter.skipped())
    return 0


if __name__ == "__main__":
    sys.exit(main())
